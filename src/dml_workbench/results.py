"""Result envelopes returned by the handlers, the engine and the processor."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from dml_workbench.parsing.classifier import DMLAnalysis
    from dml_workbench.parsing.dml_parser import DMLType

# Python attribute -> JSON key, for keys that differ
_JSON_KEYS = {
    "execution_time": "executionTime",
    "dml_type": "dmlType",
    "was_dml": "wasDML",
    "is_preview_only": "isPreviewOnly",
    "records_to_insert": "recordsToInsert",
    "records_to_update": "recordsToUpdate",
    "records_to_delete": "recordsToDelete",
    "error_type": "errorType",
    "record_type": "recordType",
    "table_name": "tableName",
    "preview_data": "previewData",
    "matched_ids": "matchedIds",
    "full_entity_id": "fullEntityId",
    "full_enum_id": "fullEnumId",
    "internal_id": "internalId",
    "script_id": "scriptId",
    "list_reference": "listReference",
    "updated_ids": "updatedIds",
    "deleted_ids": "deletedIds",
    "inserted_ids": "insertedIds",
    "records_inserted": "recordsInserted",
    "records_updated": "recordsUpdated",
    "records_deleted": "recordsDeleted",
    "record_id": "recordId",
    "set_fields": "setFields",
    "instructions_only": "instructionsOnly",
    "entity_id": "entityId",
    "display_name": "displayName",
    "platform_type": "platformType",
    "is_ordered": "isOrdered",
    "ordering_mode": "orderingMode",
    "is_matrix": "isMatrix",
    "is_inactive": "isInactive",
}


def to_json_value(value: Any) -> Any:
    """Render a result payload with camelCase keys and JSON-friendly values."""
    if isinstance(value, dict):
        return {_JSON_KEYS.get(k, k) if isinstance(k, str) else k: to_json_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json_value(v) for v in value]
    if isinstance(value, Enum):
        return value.value
    return value


@dataclass
class ExecutionResult:
    """Uniform outcome of executing one DML statement.

    ``success=False`` always comes with ``result=None``; use the ``ok``,
    ``preview`` and ``failure`` constructors rather than building one by hand.
    """

    success: bool
    result: Any = None
    error: str | None = None
    execution_time: float = 0.0  # milliseconds
    message: str | None = None
    dml_type: DMLType | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.success:
            self.result = None

    @classmethod
    def ok(cls, result: Any, message: str | None = None, **metadata: Any) -> ExecutionResult:
        return cls(success=True, result=result, message=message, metadata=dict(metadata))

    @classmethod
    def preview(cls, result: Any, message: str, **metadata: Any) -> ExecutionResult:
        """A successful dry run: nothing was changed."""
        return cls(success=True, result=result, message=message, metadata={"is_preview_only": True, **metadata})

    @classmethod
    def failure(cls, error: str, error_type: str = "EXECUTION_ERROR", **metadata: Any) -> ExecutionResult:
        return cls(success=False, error=error, metadata={"error_type": error_type, **metadata})

    @property
    def is_preview_only(self) -> bool:
        return bool(self.metadata.get("is_preview_only", False))

    @property
    def error_type(self) -> str | None:
        return self.metadata.get("error_type")

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "result": to_json_value(self.result),
            "error": self.error,
            "executionTime": self.execution_time,
            "message": self.message,
            "dmlType": self.dml_type.value if self.dml_type is not None else None,
            "metadata": to_json_value(self.metadata),
        }


@dataclass
class ProcessResult(ExecutionResult):
    """What the processor hands back to the caller.

    ``was_dml=False`` means the text was not DML and must be run as an
    ordinary query; nothing was executed in that case.
    """

    was_dml: bool = False
    analysis: DMLAnalysis | None = None

    @classmethod
    def from_execution(cls, execution: ExecutionResult, analysis: DMLAnalysis | None) -> ProcessResult:
        values = {f.name: getattr(execution, f.name) for f in fields(ExecutionResult)}
        return cls(**values, was_dml=True, analysis=analysis)

    @property
    def should_fall_back(self) -> bool:
        return not self.was_dml

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["wasDML"] = self.was_dml
        data["analysis"] = self.analysis.to_dict() if self.analysis is not None else None
        return data
