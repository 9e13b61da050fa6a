"""CREATE RECORD: describe a custom record type, or create it in live mode.

The platform this workbench targets cannot create record type definitions
from a script, so by default the handler renders manual creation steps and
reports ``success`` for "instructions produced". Nothing is persisted in that
case.
"""

from __future__ import annotations

import logging
from typing import Any

from dml_workbench.collaborators import RecordStore
from dml_workbench.operations.base import OperationHandler
from dml_workbench.parsing.dml_parser import CreateRecordStatement, FieldDef
from dml_workbench.results import ExecutionResult
from dml_workbench.script_ids import FIELD_PREFIX, RECORD_PREFIX

logger = logging.getLogger(__name__)


def field_definition(field: FieldDef) -> dict[str, Any]:
    return {
        "name": field.name,
        "type": field.type,
        "platform_type": field.platform_type,
        "script_id": field.script_id,
        "list_reference": field.list_reference,
    }


def record_definition(statement: CreateRecordStatement) -> dict[str, Any]:
    """Everything needed to create the record type, as plain data."""
    return {
        "entity_id": statement.entity_id,
        "full_entity_id": statement.full_entity_id,
        "display_name": statement.display_name,
        "prefix": statement.prefix,
        "options": dict(statement.config_options),
        "fields": [field_definition(f) for f in statement.fields],
    }


def _format_option(value: Any) -> str:
    if isinstance(value, bool):
        return "Yes" if value else "No"
    return str(value)


def render_record_instructions(statement: CreateRecordStatement) -> str:
    """Step-by-step manual creation instructions for a custom record type."""
    lines = [
        f"Custom record type: {statement.display_name}",
        f"Script ID: {statement.full_entity_id}",
        "",
        "1. Open Customization > Lists, Records, & Fields > Record Types > New.",
        f'2. Set Name to "{statement.display_name}" and ID to '
        f'"{statement.full_entity_id[len(RECORD_PREFIX):]}" '
        f"(the platform adds {RECORD_PREFIX}).",
    ]

    step = 3
    options = {k: v for k, v in statement.config_options.items() if k != "name"}
    if options:
        lines.append(f"{step}. Set these options:")
        for name in sorted(options):
            lines.append(f"     {name}: {_format_option(options[name])}")
        step += 1

    lines.append(f"{step}. Save the record type.")
    step += 1

    if statement.fields:
        lines.append(f"{step}. On the Fields subtab add {len(statement.fields)} field(s):")
        for field in statement.fields:
            entry = (
                f'     - Label "{field.name}", ID "{field.script_id[len(FIELD_PREFIX):]}" '
                f"({field.script_id}), Type {field.platform_type}"
            )
            if field.list_reference:
                entry += f", List/Record {field.list_reference}"
            lines.append(entry)
        step += 1

    lines.append(f"{step}. Save. Query the new type with: SELECT * FROM {statement.full_entity_id}")
    return "\n".join(lines)


class CreateRecordHandler(OperationHandler):
    def __init__(self, record_store: RecordStore | None = None, live: bool = False) -> None:
        self.record_store = record_store
        self.live = live

    def execute(self, statement: CreateRecordStatement) -> ExecutionResult:
        definition = record_definition(statement)
        metadata = {
            "operation": "CREATE_RECORD",
            "full_entity_id": statement.full_entity_id,
            "display_name": statement.display_name,
        }

        if self.live and self.record_store is not None:
            internal_id = self.record_store.create_entity_type(definition)
            logger.info("Created record type %s (%s)", statement.full_entity_id, internal_id)
            return ExecutionResult.ok(
                {**definition, "internal_id": internal_id},
                f"Custom record {statement.full_entity_id} created with {len(statement.fields)} field(s)",
                instructions_only=False,
                **metadata,
            )

        instructions = render_record_instructions(statement)
        logger.debug("Rendered creation instructions for %s", statement.full_entity_id)
        return ExecutionResult.ok(
            {**definition, "instructions": instructions},
            instructions,
            instructions_only=True,
            **metadata,
        )
