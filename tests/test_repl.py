"""Tests for the command-line front end."""

import json

import pytest

from dml_workbench.repl import _split_statements, _strip_comments, format_value, main


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    for name in ("DMLW_DATABASE", "DMLW_HISTORY_PATH", "DMLW_LIVE_DEFINITIONS", "DMLW_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


class TestSplitStatements:
    """Tests for statement splitting."""

    def test_semicolons(self):
        """Test splitting on semicolons."""
        assert _split_statements("DELETE FROM a WHERE id = 1; DELETE FROM b WHERE id = 2;") == [
            "DELETE FROM a WHERE id = 1",
            "DELETE FROM b WHERE id = 2",
        ]

    def test_semicolon_in_string(self):
        """Test that quoted semicolons do not split."""
        assert _split_statements("INSERT INTO t SET a = 'x;y'; SELECT 1") == [
            "INSERT INTO t SET a = 'x;y'",
            "SELECT 1",
        ]

    def test_standalone_commit_joins_previous(self):
        """Test that COMMIT after a semicolon stays with its statement."""
        assert _split_statements("DELETE FROM t WHERE id = 1; COMMIT;") == ["DELETE FROM t WHERE id = 1 COMMIT"]

    def test_strip_comments(self):
        """Test that -- lines are dropped."""
        assert _strip_comments("-- note\nSELECT 1\n  -- more") == "SELECT 1"


class TestFormatValue:
    def test_values(self):
        """Test display formatting."""
        assert format_value(None) == "NULL"
        assert format_value(True) == "true"
        assert format_value("x" * 50, max_width=10) == "xxxxxxx..."


class TestMain:
    """Tests for main()."""

    def test_command_preview(self, capsys):
        """Test a single DML statement."""
        assert main(["-c", "INSERT INTO customer (companyname) VALUES ('Acme')"]) == 0

        out = capsys.readouterr().out
        assert "PREVIEW ONLY - NO RECORDS INSERTED" in out
        assert "Acme" in out

    def test_command_falls_back_to_query(self, capsys):
        """Test that non-DML text runs as a query."""
        assert main(["-c", "INSERT INTO customer SET companyname = 'Acme' COMMIT; SELECT companyname FROM customer"]) == 0

        out = capsys.readouterr().out
        assert "Inserted 1 record into customer" in out
        assert "(1 row)" in out

    def test_command_failure(self, capsys):
        """Test that a failing statement sets the exit code."""
        assert main(["-c", "DELETE FROM customer"]) == 1

        assert "WHERE condition is required" in capsys.readouterr().out

    def test_json_output(self, capsys):
        """Test --json."""
        assert main(["--json", "-c", "DELETE FROM customer WHERE id = 1"]) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["success"] is True
        assert data["wasDML"] is True
        assert data["metadata"]["isPreviewOnly"] is True

    def test_missing_file(self, tmp_path, capsys):
        """Test -f with a file that does not exist."""
        assert main(["-f", str(tmp_path / "nope.sql")]) == 1

        assert "File not found" in capsys.readouterr().err

    def test_file_verbose(self, tmp_path, capsys):
        """Test -f with -v echoes each statement."""
        script = tmp_path / "setup.sql"
        script.write_text(
            "-- seed data\n"
            "INSERT INTO customer (companyname) VALUES ('Acme') COMMIT;\n"
            "UPDATE customer SET companyname = 'Acme Corp' WHERE companyname = 'Acme';\n"
            "COMMIT;\n"
        )

        assert main(["-f", str(script), "-v"]) == 0

        out = capsys.readouterr().out
        assert ">>> INSERT INTO customer" in out
        assert ">>> UPDATE customer SET companyname = 'Acme Corp' WHERE companyname = 'Acme' COMMIT" in out
        assert "PREVIEW ONLY" not in out

    def test_live_flag(self, capsys):
        """Test --live creates the list."""
        assert main(["--live", "-c", 'CREATE LIST colors (values [value "Red"]); SELECT name FROM customlist_colors']) == 0

        out = capsys.readouterr().out
        assert "Red" in out
