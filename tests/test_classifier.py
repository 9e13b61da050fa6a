"""Tests for statement classification."""

import pytest

from dml_workbench.parsing.classifier import StatementClassifier, detect_dml_type
from dml_workbench.parsing.dml_parser import DMLType, InsertStatement


@pytest.fixture
def classifier() -> StatementClassifier:
    return StatementClassifier()


class TestDetectDMLType:
    """Tests for keyword prefix detection."""

    @pytest.mark.parametrize("text,expected", [
        ("CREATE RECORD foo (a CHECKBOX)", DMLType.CREATE_RECORD),
        ("  create   list bar(", DMLType.CREATE_LIST),
        ("insert into customer (a) values (1)", DMLType.INSERT),
        ("UPDATE customer SET a = 1", DMLType.UPDATE),
        ("DELETE FROM customer WHERE id = 1", DMLType.DELETE),
        ("SELECT * FROM customer", None),
        ("CREATE TABLE foo (a int)", None),
        ("DELETE customer", None),
        ("WITH x AS (SELECT 1) SELECT * FROM x", None),
    ])
    def test_prefixes(self, text, expected):
        """Test each prefix and some near misses."""
        assert detect_dml_type(text) is expected


class TestStatementClassifier:
    """Tests for analyze()."""

    def test_select_is_not_dml(self, classifier):
        """Test that ordinary queries pass through untouched."""
        analysis = classifier.analyze("SELECT * FROM customer")

        assert analysis.is_dml is False
        assert analysis.error is None
        assert analysis.statement is None
        assert analysis.original_query == "SELECT * FROM customer"

    @pytest.mark.parametrize("text", ["", "   ", None, 42])
    def test_empty_or_non_string_is_not_dml(self, classifier, text):
        """Test that empty and non-string input is never an error."""
        analysis = classifier.analyze(text)

        assert analysis.is_dml is False
        assert analysis.error is None

    def test_parsed_statement(self, classifier):
        """Test a well-formed INSERT."""
        analysis = classifier.analyze("  INSERT INTO customer (companyname) VALUES ('Acme')  ")

        assert analysis.is_dml is True
        assert analysis.dml_type is DMLType.INSERT
        assert isinstance(analysis.statement, InsertStatement)
        assert analysis.error is None

    def test_malformed_statement(self, classifier):
        """Test that a matched prefix with a bad body reports an error."""
        analysis = classifier.analyze("UPDATE customer SET")

        assert analysis.is_dml is True
        assert analysis.dml_type is DMLType.UPDATE
        assert analysis.statement is None
        assert "Syntax error" in analysis.error

    @pytest.mark.parametrize("text", [
        "SELECT 1",
        "CREATE RECORD r (a CHECKBOX)",
        "CREATE RECORD r (a NOPE)",
        "DELETE FROM t WHERE id = 1",
        "DELETE FROM t WHERE",
        "",
    ])
    def test_exactly_one_classification(self, classifier, text):
        """Test that every input lands in exactly one outcome."""
        analysis = classifier.analyze(text)

        outcomes = [
            not analysis.is_dml,
            analysis.is_dml and analysis.statement is not None,
            analysis.is_dml and analysis.error is not None,
        ]
        assert outcomes.count(True) == 1

    def test_to_dict(self, classifier):
        """Test the JSON shape of an analysis."""
        data = classifier.analyze("DELETE FROM t WHERE id = 1").to_dict()

        assert data == {"isDML": True, "type": "DELETE", "originalQuery": "DELETE FROM t WHERE id = 1", "error": None}
