"""INSERT INTO: create records, or preview them without COMMIT."""

from __future__ import annotations

import logging
from typing import Any

from dml_workbench.catalog import RecordTypeInfo, map_list_value_field, resolve_record_type
from dml_workbench.collaborators import RecordStore
from dml_workbench.operations.base import OperationHandler, plural
from dml_workbench.parsing.dml_parser import InsertStatement
from dml_workbench.results import ExecutionResult

logger = logging.getLogger(__name__)


def map_row(record_type: RecordTypeInfo, row: dict[str, Any]) -> dict[str, Any]:
    """Translate column names to the target's field ids."""
    if record_type.is_custom_list:
        return {map_list_value_field(column): value for column, value in row.items()}
    return {column.lower(): value for column, value in row.items()}


class InsertHandler(OperationHandler):
    def __init__(self, record_store: RecordStore) -> None:
        self.record_store = record_store

    def execute(self, statement: InsertStatement) -> ExecutionResult:
        record_type = resolve_record_type(statement.table_name)
        rows = [map_row(record_type, row) for row in statement.rows]

        if not statement.committed:
            logger.debug("INSERT preview: %d row(s) into %s", len(rows), record_type.type_id)
            return ExecutionResult.preview(
                {"record_type": record_type.type_id, "preview_data": rows},
                f"PREVIEW ONLY - NO RECORDS INSERTED. Would insert {plural(len(rows))} into "
                f"{statement.table_name}. Add COMMIT to actually insert.",
                operation="INSERT_PREVIEW",
                table_name=statement.table_name,
                record_type=record_type.type_id,
                records_to_insert=len(rows),
                preview_data=rows,
            )

        inserted_ids: list[int] = []
        errors: list[dict] = []
        for number, row in enumerate(rows, start=1):
            try:
                inserted_ids.append(self.record_store.create_entity(record_type.type_id, row))
            except Exception as e:
                logger.warning("Error inserting row %d into %s: %s", number, record_type.type_id, e)
                errors.append({"row": number, "error": str(e)})

        if not inserted_ids:
            return ExecutionResult.failure(
                f"Failed to insert any records. First error: {errors[0]['error']}",
                "INSERT_FAILED",
                operation="INSERT",
                table_name=statement.table_name,
                inserted_ids=[],
                errors=errors,
            )

        logger.info("Inserted %d record(s) into %s", len(inserted_ids), record_type.type_id)
        result: dict[str, Any] = {"record_type": record_type.type_id, "inserted_ids": inserted_ids, "errors": errors}
        if len(inserted_ids) == 1:
            result["internal_id"] = inserted_ids[0]
        message = f"Inserted {plural(len(inserted_ids))} into {statement.table_name}"
        if errors:
            message += f"; {len(errors)} row(s) failed"
        return ExecutionResult.ok(
            result,
            message,
            operation="INSERT",
            table_name=statement.table_name,
            record_type=record_type.type_id,
            records_inserted=len(inserted_ids),
        )
