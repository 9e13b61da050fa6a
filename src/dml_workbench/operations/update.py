"""UPDATE: apply SET fields to every record the WHERE condition selects."""

from __future__ import annotations

import logging

from dml_workbench.catalog import resolve_record_type
from dml_workbench.collaborators import QueryEngine, RecordStore
from dml_workbench.operations.base import OperationHandler, find_record_ids
from dml_workbench.operations.insert import map_row
from dml_workbench.parsing.dml_parser import UpdateStatement
from dml_workbench.results import ExecutionResult

logger = logging.getLogger(__name__)


class UpdateHandler(OperationHandler):
    def __init__(self, query_engine: QueryEngine, record_store: RecordStore) -> None:
        self.query_engine = query_engine
        self.record_store = record_store

    def execute(self, statement: UpdateStatement) -> ExecutionResult:
        record_type = resolve_record_type(statement.table_name)
        set_fields = map_row(record_type, statement.set_fields)
        record_ids = find_record_ids(self.query_engine, record_type, statement.where_condition)

        if not statement.committed:
            return ExecutionResult.preview(
                {"record_type": record_type.type_id, "matched_ids": record_ids, "set_fields": set_fields},
                f"PREVIEW ONLY - NO RECORDS UPDATED. Would update {len(record_ids)} record(s) in "
                f"{statement.table_name}. Add COMMIT to actually update.",
                operation="UPDATE_PREVIEW",
                table_name=statement.table_name,
                record_type=record_type.type_id,
                records_to_update=len(record_ids),
                matched_ids=record_ids,
            )

        if not record_ids:
            return ExecutionResult.ok(
                {"record_type": record_type.type_id, "updated_ids": [], "errors": []},
                "No records found matching the WHERE condition",
                operation="UPDATE",
                table_name=statement.table_name,
                record_type=record_type.type_id,
                records_updated=0,
            )

        updated: list[int] = []
        errors: list[dict] = []
        for record_id in record_ids:
            try:
                self.record_store.update_entity(record_type.type_id, record_id, set_fields)
                updated.append(record_id)
            except Exception as e:
                logger.warning("Error updating %s record %s: %s", record_type.type_id, record_id, e)
                errors.append({"record_id": record_id, "error": str(e)})

        if not updated:
            return ExecutionResult.failure(
                f"Failed to update any records. First error: {errors[0]['error']}",
                "UPDATE_FAILED",
                operation="UPDATE",
                table_name=statement.table_name,
                updated_ids=[],
                errors=errors,
            )

        logger.info("Updated %d record(s) in %s", len(updated), record_type.type_id)
        message = f"Updated {len(updated)} record(s) in {statement.table_name}"
        if errors:
            message += f"; {len(errors)} record(s) failed"
        return ExecutionResult.ok(
            {"record_type": record_type.type_id, "updated_ids": updated, "errors": errors},
            message,
            operation="UPDATE",
            table_name=statement.table_name,
            record_type=record_type.type_id,
            records_updated=len(updated),
        )
