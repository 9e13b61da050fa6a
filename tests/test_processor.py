"""Tests for the DML processor entry point."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from conftest import FailingHistoryLog
from dml_workbench.collaborators import MemoryHistoryLog
from dml_workbench.parsing.dml_parser import DMLType
from dml_workbench.processor import DMLProcessor


@pytest.fixture
def history() -> MemoryHistoryLog:
    return MemoryHistoryLog()


@pytest.fixture
def processor(query_engine, record_store, history) -> DMLProcessor:
    return DMLProcessor(query_engine, record_store, history=history)


class TestProcessQuery:
    """Tests for process_query()."""

    def test_select_falls_back(self, processor, record_store, history):
        """Test that non-DML text is handed back untouched."""
        result = processor.process_query("SELECT * FROM customer")

        assert result.success is True
        assert result.was_dml is False
        assert result.should_fall_back is True
        assert result.result is None
        assert record_store.mutation_count == 0
        assert history.entries == []

    def test_delete_preview(self, processor, record_store):
        """Test a DELETE without COMMIT."""
        result = processor.process_query("DELETE FROM customrecord_employee WHERE active = false")

        assert result.success is True
        assert result.was_dml is True
        assert result.dml_type is DMLType.DELETE
        assert result.metadata["is_preview_only"] is True
        assert result.metadata["records_to_delete"] == 3
        assert record_store.mutation_count == 0

    def test_update_commit(self, processor, record_store):
        """Test an UPDATE with COMMIT."""
        result = processor.process_query("UPDATE customer SET companyname='Acme' WHERE id=123 COMMIT")

        assert result.success is True
        assert result.dml_type is DMLType.UPDATE
        assert record_store.calls == [("update_entity", "customer", 123, {"companyname": "Acme"})]

    def test_update_without_where(self, processor, record_store):
        """Test that UPDATE without WHERE never reaches a handler."""
        result = processor.process_query("UPDATE customer SET x=1")

        assert result.success is False
        assert result.was_dml is True
        assert "WHERE condition is required" in result.error
        assert result.error.startswith("DML validation failed: ")
        assert result.error_type == "VALIDATION_ERROR"
        assert record_store.mutation_count == 0

    def test_parse_error(self, processor):
        """Test malformed DML."""
        result = processor.process_query("INSERT INTO t (a, b) VALUES (1)")

        assert result.success is False
        assert result.was_dml is True
        assert result.error_type == "PARSE_ERROR"
        assert "does not match" in result.error
        assert result.analysis.error == result.error

    def test_create_list(self, processor):
        """Test CREATE LIST through the processor."""
        result = processor.process_query('CREATE LIST priority_levels (values [value "High" inactive FALSE])')

        assert result.success is True
        assert result.result["full_enum_id"].startswith("customlist_")

    @pytest.mark.parametrize("text", [
        "SELECT 1",
        "UPDATE customer SET x=1",
        "UPDATE customer SET",
        "INSERT INTO customer (a) VALUES (1)",
        "DELETE FROM t WHERE id = 'abc' COMMIT",
        "CREATE RECORD r ()",
    ])
    def test_uniform_envelope(self, processor, text):
        """Test that every outcome has a consistent envelope."""
        data = processor.process_query(text).to_dict()

        assert {"success", "wasDML", "executionTime", "result", "error"} <= data.keys()
        assert data["executionTime"] >= 0
        if data["success"]:
            assert data["error"] is None
        else:
            assert data["result"] is None
            assert data["error"]


class TestHistory:
    """Tests for history logging."""

    def test_success_entry(self, processor, history):
        """Test the entry written for a successful statement."""
        processor.process_query("INSERT INTO customer (a) VALUES (1) COMMIT")

        entry = history.entries[0]
        assert entry.status == "SUCCESS"
        assert entry.record_count == 1
        assert entry.query == "INSERT INTO customer (a) VALUES (1) COMMIT"
        assert entry.elapsed_time >= 0
        assert entry.result.startswith("Inserted 1 record")

    def test_preview_counts_nothing(self, processor, history):
        """Test that previews log zero affected records."""
        processor.process_query("INSERT INTO customer (a) VALUES (1)")

        assert history.entries[0].record_count == 0

    def test_error_entry(self, query_engine):
        """Test the entry written for a failed execution."""
        from conftest import FakeRecordStore

        history = MemoryHistoryLog()
        processor = DMLProcessor(query_engine, FakeRecordStore(failing_ids={5}), history=history)

        processor.process_query("DELETE FROM customer WHERE id = 5 COMMIT")

        entry = history.entries[0]
        assert entry.status == "ERROR"
        assert entry.record_count == 0
        assert "Record 5 is locked" in entry.error_message

    def test_validation_failures_not_logged(self, processor, history):
        """Test that statements rejected before execution are not logged."""
        processor.process_query("DELETE FROM customer")

        assert history.entries == []

    def test_failing_history_does_not_change_result(self, query_engine, record_store, processor):
        """Test that history errors are swallowed."""
        failing = FailingHistoryLog()
        broken = DMLProcessor(query_engine, record_store, history=failing)
        statement = "UPDATE customer SET companyname='Acme' WHERE id=123"

        expected = processor.process_query(statement)
        actual = broken.process_query(statement)

        assert failing.attempts == 1
        assert actual.success == expected.success
        assert actual.result == expected.result
        assert actual.error == expected.error

    def test_partial_insert_counts_inserted_rows(self, query_engine):
        """Test that history counts the rows actually inserted."""
        from conftest import FakeRecordStore

        history = MemoryHistoryLog()
        processor = DMLProcessor(query_engine, FakeRecordStore(rejected_values={"Bad"}), history=history)

        result = processor.process_query("INSERT INTO customer (companyname) VALUES ('A'), ('Bad'), ('C') COMMIT")

        assert result.success is True
        assert history.entries[0].status == "SUCCESS"
        assert history.entries[0].record_count == 2


class TestHelpers:
    """Tests for validate_query() and examples()."""

    def test_validate_query(self, processor):
        """Test validation without execution."""
        assert processor.validate_query("DELETE FROM t WHERE id = 1").is_valid is True
        assert processor.validate_query("DELETE FROM t").errors == [
            "WHERE condition is required for DELETE statements"
        ]
        assert processor.validate_query("SELECT 1").errors == ["Query is not a valid DML statement"]

    def test_examples_parse(self, processor):
        """Test that every shipped example is valid DML."""
        examples = processor.examples()

        assert set(examples) == set(DMLType)
        for kind, statements in examples.items():
            for statement in statements:
                analysis = processor.classifier.analyze(statement)
                assert analysis.error is None, statement
                assert analysis.dml_type is kind
                assert processor.validate_query(statement).is_valid, statement


class TestConcurrency:
    """Tests for one processor shared between threads."""

    def test_parallel_statements_parse_independently(self, query_engine, record_store):
        """Test that concurrent statements never see each other's tokens."""
        processor = DMLProcessor(query_engine, record_store)
        statements = {
            "UPDATE customer SET companyname = 'Acme' WHERE id = 123": DMLType.UPDATE,
            "DELETE FROM customrecord_employee WHERE active = false": DMLType.DELETE,
            "CREATE RECORD staff (hired DATE, badge FREEFORMTEXT, team LIST(customlist_teams))": DMLType.CREATE_RECORD,
            "INSERT INTO customer (companyname, email) VALUES ('Acme', 'a@x'), ('Globex', 'g@x')": DMLType.INSERT,
        }
        work = list(statements) * 100

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(processor.process_query, work))

        failures = [(text, r.error) for text, r in zip(work, results) if not r.success]
        assert failures == []
        assert [r.dml_type for r in results] == [statements[text] for text in work]
