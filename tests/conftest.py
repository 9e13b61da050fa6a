"""Shared fixtures: in-memory fakes for the platform collaborators."""

from typing import Any

import pytest

from dml_workbench.errors import ExecutionError


class FakeQueryEngine:
    """Returns canned rows and records every query it was asked to run."""

    def __init__(self, rows: list[dict[str, Any]] | None = None) -> None:
        self.rows = rows if rows is not None else []
        self.queries: list[tuple[str, list[Any]]] = []

    def run_query(self, sql: str, params: list[Any] | None = None) -> list[dict[str, Any]]:
        self.queries.append((sql, list(params or [])))
        return list(self.rows)


class FakeRecordStore:
    """Records every mutation call.

    Ids in ``failing_ids`` raise ExecutionError, ids in ``denied_ids`` raise
    PermissionError, and rows holding a value from ``rejected_values`` fail to insert.
    """

    def __init__(
        self,
        failing_ids: set[int] | None = None,
        denied_ids: set[int] | None = None,
        rejected_values: set[Any] | None = None,
    ) -> None:
        self.failing_ids = failing_ids or set()
        self.denied_ids = denied_ids or set()
        self.rejected_values = rejected_values or set()
        self.calls: list[tuple] = []
        self.next_id = 100

    @property
    def mutation_count(self) -> int:
        return len(self.calls)

    def create_entity(self, type_id: str, fields: dict[str, Any]) -> int:
        if self.rejected_values.intersection(fields.values()):
            raise ValueError("duplicate")
        self.calls.append(("create_entity", type_id, dict(fields)))
        self.next_id += 1
        return self.next_id

    def update_entity(self, type_id: str, record_id: int, fields: dict[str, Any]) -> None:
        self._check(record_id)
        if record_id in self.failing_ids:
            raise ExecutionError(f"Record {record_id} is locked", "RECORD_LOCKED")
        self.calls.append(("update_entity", type_id, record_id, dict(fields)))

    def delete_entity(self, type_id: str, record_id: int) -> None:
        self._check(record_id)
        if record_id in self.failing_ids:
            raise ExecutionError(f"Record {record_id} is locked", "RECORD_LOCKED")
        self.calls.append(("delete_entity", type_id, record_id))

    def _check(self, record_id: int) -> None:
        if record_id in self.denied_ids:
            raise PermissionError(f"Permission denied for record {record_id}")

    def create_enumeration(self, enum_id: str, options: dict[str, Any]) -> int:
        self.calls.append(("create_enumeration", enum_id, options))
        return 7

    def create_entity_type(self, definition: dict[str, Any]) -> int:
        self.calls.append(("create_entity_type", definition))
        return 8


class FailingHistoryLog:
    def __init__(self) -> None:
        self.attempts = 0

    def log_attempt(self, entry) -> None:
        self.attempts += 1
        raise OSError("history store unavailable")


@pytest.fixture
def query_engine() -> FakeQueryEngine:
    return FakeQueryEngine(rows=[{"id": 1}, {"id": 2}, {"id": 3}])


@pytest.fixture
def record_store() -> FakeRecordStore:
    return FakeRecordStore()
