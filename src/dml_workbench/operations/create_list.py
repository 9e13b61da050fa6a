"""CREATE LIST: describe a custom list, or create it in live mode."""

from __future__ import annotations

import logging
from typing import Any

from dml_workbench.collaborators import RecordStore
from dml_workbench.operations.base import OperationHandler
from dml_workbench.parsing.dml_parser import CreateListStatement, ListValue
from dml_workbench.results import ExecutionResult
from dml_workbench.script_ids import LIST_PREFIX

logger = logging.getLogger(__name__)


def list_value_data(value: ListValue) -> dict[str, Any]:
    return {
        "value": value.value,
        "abbreviation": value.abbreviation,
        "inactive": value.inactive,
        "translations": [{"language": t.language, "value": t.value} for t in value.translations],
    }


def list_options_data(statement: CreateListStatement) -> dict[str, Any]:
    """The list definition passed to create_enumeration."""
    options = statement.options
    return {
        "name": statement.display_name,
        "description": options.description,
        "is_ordered": options.ordering_mode == "ORDER_ENTERED",
        "ordering_mode": options.ordering_mode,
        "is_matrix": options.is_matrix,
        "is_inactive": options.is_inactive,
        "values": [list_value_data(v) for v in options.values],
    }


def render_list_instructions(statement: CreateListStatement) -> str:
    options = statement.options
    lines = [
        f"Custom list: {statement.display_name}",
        f"Script ID: {statement.full_enum_id}",
        "",
        "1. Open Customization > Lists, Records, & Fields > Lists > New.",
        f'2. Set Name to "{statement.display_name}" and ID to '
        f'"{statement.full_enum_id[len(LIST_PREFIX):]}" (the platform adds {LIST_PREFIX}).',
        f'3. Description: "{options.description}". '
        f"Order: {'as entered' if options.ordering_mode == 'ORDER_ENTERED' else 'alphabetical'}. "
        f"Matrix option: {'Yes' if options.is_matrix else 'No'}. "
        f"Inactive: {'Yes' if options.is_inactive else 'No'}.",
    ]
    if options.values:
        lines.append(f"4. Add {len(options.values)} value(s):")
        for value in options.values:
            entry = f'     - "{value.value}"'
            if value.abbreviation:
                entry += f', abbreviation "{value.abbreviation}"'
            if value.inactive:
                entry += ", inactive"
            lines.append(entry)
            for translation in value.translations:
                lines.append(f'         {translation.language}: "{translation.value}"')
        lines.append("5. Save the list.")
    else:
        lines.append("4. Save the list.")
    return "\n".join(lines)


class CreateListHandler(OperationHandler):
    def __init__(self, record_store: RecordStore | None = None, live: bool = False) -> None:
        self.record_store = record_store
        self.live = live

    def execute(self, statement: CreateListStatement) -> ExecutionResult:
        options = list_options_data(statement)
        result: dict[str, Any] = {
            "full_enum_id": statement.full_enum_id,
            "display_name": statement.display_name,
            "values": options["values"],
        }
        metadata = {"operation": "CREATE_LIST", "full_enum_id": statement.full_enum_id}

        if self.live and self.record_store is not None:
            result["internal_id"] = self.record_store.create_enumeration(statement.full_enum_id, options)
            logger.info("Created list %s with %d value(s)", statement.full_enum_id, len(options["values"]))
            return ExecutionResult.ok(
                result,
                f"Custom list {statement.full_enum_id} created with {len(options['values'])} value(s)",
                instructions_only=False,
                **metadata,
            )

        instructions = render_list_instructions(statement)
        result["instructions"] = instructions
        return ExecutionResult.ok(result, instructions, instructions_only=True, **metadata)
