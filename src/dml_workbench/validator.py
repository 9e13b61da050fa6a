"""Shape checks run on a parsed statement before it is executed."""

from __future__ import annotations

from dataclasses import dataclass, field

from dml_workbench.catalog import is_language_supported
from dml_workbench.parsing.dml_parser import (
    CreateListStatement,
    CreateRecordStatement,
    DeleteStatement,
    DMLType,
    InsertStatement,
    UpdateStatement,
)


@dataclass
class ValidationResult:
    """Verdict of validate(); errors accumulate, they never short-circuit."""

    is_valid: bool
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"isValid": self.is_valid, "errors": list(self.errors)}


def _check_create_record(statement: CreateRecordStatement, errors: list[str]) -> None:
    if not statement.entity_id:
        errors.append("Record ID is required")
    if not statement.fields:
        errors.append("At least one field is required")
    seen: set[str] = set()
    for field_def in statement.fields:
        name = field_def.name.lower()
        if name in seen:
            errors.append(f"Duplicate field name '{field_def.name}'")
        seen.add(name)


def _check_create_list(statement: CreateListStatement, errors: list[str]) -> None:
    if not statement.enum_id:
        errors.append("List ID is required")
    if statement.options is None:
        errors.append("Options object is required")
        return
    for index, value in enumerate(statement.options.values, start=1):
        if not isinstance(value.value, str) or not value.value.strip():
            errors.append(f"List value {index} must have a non-empty value")
        for translation in value.translations:
            if not is_language_supported(translation.language):
                errors.append(f"Unsupported translation language '{translation.language}' for value '{value.value}'")
            if not translation.value:
                errors.append(f"Translation '{translation.language}' for value '{value.value}' is empty")


def _check_insert(statement: InsertStatement, errors: list[str]) -> None:
    if not statement.table_name:
        errors.append("Table name is required")
    if not statement.fields:
        errors.append("Fields object is required")
        return
    columns = set(statement.fields)
    for number, row in enumerate(statement.extra_rows, start=2):
        if set(row) != columns:
            errors.append(f"Row {number} does not have the same columns as row 1")


def _check_update(statement: UpdateStatement, errors: list[str]) -> None:
    if not statement.table_name:
        errors.append("Table name is required")
    if not statement.set_fields:
        errors.append("SET fields are required")
    if statement.where_condition is None:
        errors.append("WHERE condition is required for UPDATE statements")


def _check_delete(statement: DeleteStatement, errors: list[str]) -> None:
    if not statement.table_name:
        errors.append("Table name is required")
    if statement.where_condition is None:
        errors.append("WHERE condition is required for DELETE statements")


_CHECKS = {
    DMLType.CREATE_RECORD: (CreateRecordStatement, _check_create_record),
    DMLType.CREATE_LIST: (CreateListStatement, _check_create_list),
    DMLType.INSERT: (InsertStatement, _check_insert),
    DMLType.UPDATE: (UpdateStatement, _check_update),
    DMLType.DELETE: (DeleteStatement, _check_delete),
}


def validate(dml_type: DMLType | str, statement: object) -> ValidationResult:
    """Check that a parsed statement carries everything its handler needs.

    UPDATE and DELETE without a WHERE condition are always rejected.
    """
    errors: list[str] = []

    try:
        kind = DMLType(dml_type.value if isinstance(dml_type, DMLType) else dml_type)
    except ValueError:
        return ValidationResult(False, [f"Unsupported DML operation: {dml_type}"])

    expected, check = _CHECKS[kind]
    if not isinstance(statement, expected):
        return ValidationResult(False, [f"Expected a {kind.value} statement, got {type(statement).__name__}"])

    check(statement, errors)
    return ValidationResult(is_valid=not errors, errors=errors)
