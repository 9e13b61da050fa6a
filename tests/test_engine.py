"""Tests for the execution dispatcher."""

import pytest

from dml_workbench.engine import DMLExecutionEngine
from dml_workbench.errors import ExecutionError
from dml_workbench.parsing.dml_parser import DMLParser, DMLType
from dml_workbench.results import ExecutionResult


class ExplodingHandler:
    def __init__(self, exc: Exception) -> None:
        self.exc = exc

    def execute(self, statement):
        raise self.exc


class BrokenHandler:
    def execute(self, statement):
        return {"success": True}


@pytest.fixture
def engine(query_engine, record_store) -> DMLExecutionEngine:
    return DMLExecutionEngine(query_engine, record_store)


class TestDMLExecutionEngine:
    """Tests for execute()."""

    def test_supported_operations(self, engine):
        """Test that all five statement types are routed."""
        assert engine.supported_operations() == [
            DMLType.CREATE_RECORD, DMLType.CREATE_LIST, DMLType.INSERT, DMLType.UPDATE, DMLType.DELETE,
        ]

    def test_stamps_time_and_type(self, engine):
        """Test that results carry the execution time and statement type."""
        stmt = DMLParser().parse("DELETE FROM customer WHERE id = 1")

        result = engine.execute(DMLType.DELETE, stmt)

        assert result.success is True
        assert result.dml_type is DMLType.DELETE
        assert result.execution_time >= 0

    def test_accepts_type_name(self, engine):
        """Test routing by type name."""
        stmt = DMLParser().parse("DELETE FROM customer WHERE id = 1")

        assert engine.execute("DELETE", stmt).dml_type is DMLType.DELETE

    def test_unsupported_type(self, engine):
        """Test an unknown type."""
        result = engine.execute("MERGE", object())

        assert result.success is False
        assert result.error_type == "UNSUPPORTED_DML_OPERATION"
        assert result.error == "Unsupported DML operation: MERGE"
        assert result.dml_type is None
        assert result.execution_time >= 0

    def test_invalid_handler_result(self, engine):
        """Test that a non-envelope return becomes a failure."""
        engine.handlers[DMLType.INSERT] = BrokenHandler()

        result = engine.execute(DMLType.INSERT, object())

        assert result.success is False
        assert result.error_type == "INVALID_OPERATION_RESULT"

    def test_error_type_from_exception(self, engine):
        """Test that a DMLError's code is preserved."""
        engine.handlers[DMLType.UPDATE] = ExplodingHandler(ExecutionError("Permission denied", "INSUFFICIENT_PERMISSION"))

        result = engine.execute(DMLType.UPDATE, object())

        assert result.success is False
        assert result.result is None
        assert result.error == "Permission denied"
        assert result.error_type == "INSUFFICIENT_PERMISSION"
        assert result.dml_type is DMLType.UPDATE

    def test_error_type_from_class_name(self, engine):
        """Test that other exceptions report their class name."""
        engine.handlers[DMLType.DELETE] = ExplodingHandler(KeyError("boom"))

        result = engine.execute(DMLType.DELETE, object())

        assert result.error_type == "KeyError"

    def test_collaborator_failure_is_contained(self, record_store):
        """Test that a failing query engine does not propagate."""

        class DownQueryEngine:
            def run_query(self, sql, params=None):
                raise ExecutionError("Search timed out", "SSS_SEARCH_TIMEOUT")

        engine = DMLExecutionEngine(DownQueryEngine(), record_store)
        stmt = DMLParser().parse("DELETE FROM customer WHERE email = 'x' COMMIT")

        result = engine.execute(DMLType.DELETE, stmt)

        assert isinstance(result, ExecutionResult)
        assert result.success is False
        assert result.error_type == "SSS_SEARCH_TIMEOUT"
        assert record_store.mutation_count == 0
