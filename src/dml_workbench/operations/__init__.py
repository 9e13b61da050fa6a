"""One handler per DML statement type."""

from dml_workbench.operations.base import OperationHandler
from dml_workbench.operations.create_list import CreateListHandler
from dml_workbench.operations.create_record import CreateRecordHandler
from dml_workbench.operations.delete import DeleteHandler
from dml_workbench.operations.insert import InsertHandler
from dml_workbench.operations.update import UpdateHandler

__all__ = [
    "CreateListHandler",
    "CreateRecordHandler",
    "DeleteHandler",
    "InsertHandler",
    "OperationHandler",
    "UpdateHandler",
]
