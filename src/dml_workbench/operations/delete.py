"""DELETE FROM: remove every record the WHERE condition selects."""

from __future__ import annotations

import logging

from dml_workbench.catalog import resolve_record_type
from dml_workbench.collaborators import QueryEngine, RecordStore
from dml_workbench.operations.base import OperationHandler, find_record_ids
from dml_workbench.parsing.dml_parser import DeleteStatement
from dml_workbench.results import ExecutionResult

logger = logging.getLogger(__name__)


class DeleteHandler(OperationHandler):
    def __init__(self, query_engine: QueryEngine, record_store: RecordStore) -> None:
        self.query_engine = query_engine
        self.record_store = record_store

    def execute(self, statement: DeleteStatement) -> ExecutionResult:
        record_type = resolve_record_type(statement.table_name)
        if record_type.is_custom_list:
            return ExecutionResult.failure(
                "DELETE operations on custom lists are not supported. Mark list values inactive instead.",
                "UNSUPPORTED_OPERATION",
                operation="DELETE",
                table_name=statement.table_name,
            )

        record_ids = find_record_ids(self.query_engine, record_type, statement.where_condition)

        if not statement.committed:
            return ExecutionResult.preview(
                {"record_type": record_type.type_id, "matched_ids": record_ids},
                f"PREVIEW ONLY - NO RECORDS DELETED. Would delete {len(record_ids)} record(s) from "
                f"{statement.table_name}. Add COMMIT to actually delete.",
                operation="DELETE_PREVIEW",
                table_name=statement.table_name,
                record_type=record_type.type_id,
                records_to_delete=len(record_ids),
                matched_ids=record_ids,
            )

        deleted: list[int] = []
        errors: list[dict] = []
        for record_id in record_ids:
            try:
                self.record_store.delete_entity(record_type.type_id, record_id)
                deleted.append(record_id)
            except Exception as e:
                logger.warning("Error deleting %s record %s: %s", record_type.type_id, record_id, e)
                errors.append({"record_id": record_id, "error": str(e)})

        if errors and not deleted:
            return ExecutionResult.failure(
                f"Failed to delete any records. First error: {errors[0]['error']}",
                "DELETE_FAILED",
                operation="DELETE",
                table_name=statement.table_name,
                deleted_ids=[],
                errors=errors,
            )

        logger.info("Deleted %d record(s) from %s", len(deleted), record_type.type_id)
        message = f"Deleted {len(deleted)} record(s) from {statement.table_name}"
        if errors:
            message += f"; {len(errors)} record(s) failed"
        return ExecutionResult.ok(
            {"record_type": record_type.type_id, "deleted_ids": deleted, "errors": errors},
            message,
            operation="DELETE",
            table_name=statement.table_name,
            record_type=record_type.type_id,
            records_deleted=len(deleted),
        )
