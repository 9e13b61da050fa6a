"""DML Workbench - CREATE RECORD/LIST, INSERT, UPDATE and DELETE for a read-only query box."""

from dml_workbench.collaborators import HistoryEntry, JsonlHistoryLog, NullHistoryLog
from dml_workbench.config import WorkbenchSettings
from dml_workbench.engine import DMLExecutionEngine
from dml_workbench.errors import DMLError, ExecutionError, HistoryLogError, InvalidResultError, UnsupportedOperationError
from dml_workbench.parsing import DMLAnalysis, DMLParseError, DMLParser, DMLType, StatementClassifier
from dml_workbench.processor import DMLProcessor
from dml_workbench.results import ExecutionResult, ProcessResult
from dml_workbench.validator import ValidationResult, validate
from dml_workbench.workspace import SqliteWorkspace

__all__ = [
    # Main API
    "DMLProcessor",
    "DMLExecutionEngine",
    "StatementClassifier",
    "DMLParser",
    "validate",
    # Results
    "DMLAnalysis",
    "DMLType",
    "ExecutionResult",
    "ProcessResult",
    "ValidationResult",
    # Collaborators and settings
    "HistoryEntry",
    "JsonlHistoryLog",
    "NullHistoryLog",
    "SqliteWorkspace",
    "WorkbenchSettings",
    # Errors
    "DMLError",
    "DMLParseError",
    "ExecutionError",
    "HistoryLogError",
    "InvalidResultError",
    "UnsupportedOperationError",
]

__version__ = "0.1.0"
