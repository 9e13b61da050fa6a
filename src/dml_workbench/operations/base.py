"""Pieces shared by the INSERT/UPDATE/DELETE handlers."""

from __future__ import annotations

import logging
from typing import Any

from dml_workbench.catalog import ID_FIELDS, RecordTypeInfo
from dml_workbench.collaborators import QueryEngine
from dml_workbench.errors import ExecutionError
from dml_workbench.parsing.dml_parser import CompoundCondition, Condition, WhereCondition
from dml_workbench.results import ExecutionResult

logger = logging.getLogger(__name__)


class OperationHandler:
    """Executes one kind of statement and reports an ExecutionResult."""

    def execute(self, statement: Any) -> ExecutionResult:
        raise NotImplementedError


_SQL_COMPARISONS = {"eq": "=", "ne": "!=", "lt": "<", "le": "<=", "gt": ">", "ge": ">="}


def _quote_column(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def where_to_sql(condition: WhereCondition) -> tuple[str, list[Any]]:
    """Render a WHERE condition as SQL with ``?`` placeholders."""
    if isinstance(condition, CompoundCondition):
        left_sql, left_params = where_to_sql(condition.left)
        right_sql, right_params = where_to_sql(condition.right)
        return f"({left_sql}) {condition.operator.upper()} ({right_sql})", left_params + right_params

    column = _quote_column(condition.field)
    operator = condition.operator
    if operator in ("in", "not_in"):
        placeholders = ", ".join("?" for _ in condition.value)
        keyword = "IN" if operator == "in" else "NOT IN"
        return f"{column} {keyword} ({placeholders})", list(condition.value)
    if operator == "between":
        low, high = condition.value
        return f"{column} BETWEEN ? AND ?", [low, high]
    if operator == "not_null" or (operator == "ne" and condition.value is None):
        return f"{column} IS NOT NULL", []
    if operator == "is_null" or condition.value is None:
        return f"{column} IS NULL", []
    if operator not in _SQL_COMPARISONS:
        raise ExecutionError(f"Unsupported WHERE operator: {operator}", "INVALID_CONDITION")
    return f"{column} {_SQL_COMPARISONS[operator]} ?", [condition.value]


def coerce_record_id(value: Any) -> int:
    """Internal ids are integers; accept their string form too."""
    if isinstance(value, bool):
        raise ExecutionError(f"Invalid record id: {value!r}", "INVALID_RECORD_ID")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    raise ExecutionError(f"Invalid record id: {value!r}", "INVALID_RECORD_ID")


def direct_ids(condition: WhereCondition) -> list[int] | None:
    """Ids named outright by ``id = N`` or ``id IN (...)``; None when a lookup is needed."""
    if (
        isinstance(condition, Condition)
        and condition.field.lower() in ID_FIELDS
        and condition.operator in ("eq", "in")
    ):
        values = condition.value if condition.operator == "in" else [condition.value]
        return [coerce_record_id(v) for v in values]
    return None


def find_record_ids(query_engine: QueryEngine, record_type: RecordTypeInfo, condition: WhereCondition) -> list[int]:
    """Resolve a WHERE condition to the internal ids of the matching records."""
    ids = direct_ids(condition)
    if ids is not None:
        logger.debug("WHERE names %d id(s) directly", len(ids))
        return list(dict.fromkeys(ids))

    where_sql, params = where_to_sql(condition)
    sql = f"SELECT id FROM {record_type.type_id} WHERE {where_sql}"
    rows = query_engine.run_query(sql, params)
    ids = []
    for row in rows:
        value = row.get("id", row.get("internalid"))
        if value is not None:
            ids.append(coerce_record_id(value))
    logger.debug("WHERE lookup on %s matched %d record(s)", record_type.type_id, len(ids))
    return list(dict.fromkeys(ids))


def plural(count: int, noun: str = "record") -> str:
    return f"{count} {noun}" + ("" if count == 1 else "s")
