"""Interactive REPL for the DML workbench."""

from __future__ import annotations

import argparse
import json
import logging
import readline  # noqa: F401 - enables line editing in input()
import sys
from pathlib import Path
from typing import Any

from dml_workbench.collaborators import HistoryLog, JsonlHistoryLog, MemoryHistoryLog
from dml_workbench.config import WorkbenchSettings
from dml_workbench.errors import DMLError
from dml_workbench.processor import DMLProcessor
from dml_workbench.results import ProcessResult
from dml_workbench.workspace import SqliteWorkspace

logger = logging.getLogger(__name__)


def _split_statements(content: str) -> list[str]:
    """Split content into statements on semicolons outside string literals.

    A ``COMMIT`` standing alone after a semicolon belongs to the statement
    before it.
    """
    statements: list[str] = []
    current: list[str] = []
    quote: str | None = None
    escape_next = False

    def flush() -> None:
        stmt = "".join(current).strip()
        current.clear()
        if not stmt:
            return
        if stmt.upper() == "COMMIT" and statements:
            statements[-1] = f"{statements[-1]} COMMIT"
        else:
            statements.append(stmt)

    for ch in content:
        if escape_next:
            current.append(ch)
            escape_next = False
            continue
        if quote:
            current.append(ch)
            if ch == "\\":
                escape_next = True
            elif ch == quote:
                quote = None
            continue
        if ch in ("'", '"'):
            quote = ch
            current.append(ch)
        elif ch == ";":
            flush()
        else:
            current.append(ch)

    flush()
    return statements


def _strip_comments(content: str) -> str:
    """Drop lines starting with --."""
    return "\n".join(line for line in content.split("\n") if not line.strip().startswith("--"))


def format_value(value: Any, max_width: int = 40) -> str:
    """Format a value for display."""
    if value is None:
        return "NULL"
    elif isinstance(value, bool):
        return "true" if value else "false"
    elif isinstance(value, float):
        return f"{value:.6g}"
    s = str(value)
    if len(s) > max_width:
        return s[: max_width - 3] + "..."
    return s


def print_rows(rows: list[dict[str, Any]]) -> None:
    """Print rows in a formatted table."""
    if not rows:
        print("(no results)")
        return

    columns: list[str] = []
    for row in rows:
        for col in row:
            if col not in columns:
                columns.append(col)

    col_widths = {col: len(col) for col in columns}
    for row in rows:
        for col in columns:
            col_widths[col] = max(col_widths[col], len(format_value(row.get(col))))

    header = " | ".join(col.ljust(col_widths[col]) for col in columns)
    print(header)
    print("-" * len(header))
    for row in rows:
        print(" | ".join(format_value(row.get(col)).ljust(col_widths[col]) for col in columns))

    print(f"\n({len(rows)} row{'s' if len(rows) != 1 else ''})")


def print_result(result: ProcessResult, as_json: bool = False) -> None:
    """Print a DML result."""
    if as_json:
        print(json.dumps(result.to_dict(), indent=2, default=str))
        return

    if not result.success:
        print(f"Error: {result.error}")
        return

    if result.message:
        print(result.message)
    preview = result.metadata.get("preview_data")
    if preview:
        print_rows(preview)
    print(f"({result.dml_type.value if result.dml_type else 'DML'}, {result.execution_time:.1f} ms)")


def run_statement(processor: DMLProcessor, workspace: SqliteWorkspace, text: str, as_json: bool = False) -> bool:
    """Run one statement, falling back to the query engine for non-DML text.

    Returns True on success.
    """
    result = processor.process_query(text)
    if result.was_dml:
        print_result(result, as_json)
        return result.success

    try:
        rows = workspace.run_query(text)
    except DMLError as e:
        print(f"Error: {e}")
        return False
    if as_json:
        print(json.dumps(rows, indent=2, default=str))
    else:
        print_rows(rows)
    return True


def print_examples(processor: DMLProcessor) -> None:
    for kind, statements in processor.examples().items():
        print(f"-- {kind.value}")
        for statement in statements:
            print(statement)
            print()


def print_help() -> None:
    print("""
DML statements (preview only unless followed by COMMIT):
  CREATE RECORD <id> (<option> = <value>, <field> <TYPE>[(<ref>)], ...)
  CREATE LIST <id> (description "..." values [value "V" abbreviation "A", ...])
  INSERT INTO <table> (<cols>) VALUES (<vals>)[, (<vals>)] [COMMIT]
  INSERT INTO <table> SET <col> = <val>, ... [COMMIT]
  UPDATE <table> SET <col> = <val>, ... WHERE <condition> [COMMIT]
  DELETE FROM <table> WHERE <condition> [COMMIT]

Conditions: <field> = <value>, <field> IN (<v1>, <v2>), combined with AND / OR.
Any other statement is run as an ordinary query against the workspace.

Commands:
  help       Show this help
  examples   Show example DML statements
  history    Show the DML attempts of this session
  exit       Leave the REPL
""")


def run_repl(processor: DMLProcessor, workspace: SqliteWorkspace, history: HistoryLog, as_json: bool = False) -> int:
    """Run the interactive REPL."""
    print("DML Workbench")
    print(f"Database: {workspace.database}")
    print("Type 'help' for commands, 'exit' to quit.\n")

    history_file = Path.home() / ".dmlw_history"
    try:
        readline.read_history_file(history_file)
    except (FileNotFoundError, OSError):
        pass

    buffer: list[str] = []
    try:
        while True:
            try:
                line = input("dmlw> " if not buffer else "  ... ")
            except EOFError:
                print()
                break

            stripped = line.strip()
            if not buffer:
                command = stripped.lower().rstrip(";")
                if not command:
                    continue
                if command in ("exit", "quit"):
                    break
                if command == "help":
                    print_help()
                    continue
                if command == "examples":
                    print_examples(processor)
                    continue
                if command == "history":
                    entries = getattr(history, "entries", None)
                    if entries is None:
                        print("History is written to a file; see DMLW_HISTORY_PATH.")
                    else:
                        print_rows([e.to_dict() for e in entries])
                    continue

            buffer.append(line)
            if not stripped.endswith(";") and not stripped.upper().endswith("COMMIT"):
                continue

            for statement in _split_statements("\n".join(buffer)):
                run_statement(processor, workspace, statement, as_json)
            buffer = []
    except KeyboardInterrupt:
        print()
    finally:
        try:
            readline.write_history_file(history_file)
        except OSError:
            pass

    return 0


def run_file(file_path: Path, processor: DMLProcessor, workspace: SqliteWorkspace, verbose: bool = False,
             as_json: bool = False) -> int:
    """Execute statements from a file.

    Returns:
        0 on success, 1 on the first failing statement
    """
    try:
        content = file_path.read_text()
    except OSError as e:
        print(f"Error reading file: {e}", file=sys.stderr)
        return 1

    statements = _split_statements(_strip_comments(content))
    if not statements:
        print("No statements found in file", file=sys.stderr)
        return 1

    for statement in statements:
        if verbose:
            for i, line in enumerate(statement.split("\n")):
                prefix = ">>> " if i == 0 else "... "
                print(f"{prefix}{line}")
        if not run_statement(processor, workspace, statement, as_json):
            return 1
    return 0


def build_processor(settings: WorkbenchSettings) -> tuple[DMLProcessor, SqliteWorkspace, HistoryLog]:
    """Wire a processor to a SQLite workspace as described by settings."""
    workspace = SqliteWorkspace(settings.database)
    history: HistoryLog
    if settings.history_path is not None:
        history = JsonlHistoryLog(settings.history_path)
    else:
        history = MemoryHistoryLog()
    processor = DMLProcessor(
        workspace,
        workspace,
        history=history,
        live_definitions=settings.live_definitions,
        default_prefix=settings.default_script_prefix,
    )
    return processor, workspace, history


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    arg_parser = argparse.ArgumentParser(description="Interactive workbench for DML statements")
    arg_parser.add_argument(
        "-c", "--command",
        type=str,
        help="Execute a single statement and exit",
    )
    arg_parser.add_argument(
        "-f", "--file",
        type=Path,
        help="Execute statements from a file and exit",
    )
    arg_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Print each statement before executing (for -f/--file)",
    )
    arg_parser.add_argument(
        "--json",
        action="store_true",
        help="Print results as JSON",
    )
    arg_parser.add_argument(
        "--database",
        type=str,
        help="SQLite database standing in for the platform (default: in-memory)",
    )
    arg_parser.add_argument(
        "--live",
        action="store_true",
        help="Create record types and lists instead of printing instructions",
    )
    arg_parser.add_argument(
        "--log-level",
        type=str,
        help="Logging level (DEBUG, INFO, WARNING, ...)",
    )

    args = arg_parser.parse_args(argv)

    settings = WorkbenchSettings()
    if args.database:
        settings.database = args.database
    if args.live:
        settings.live_definitions = True
    if args.log_level:
        settings.log_level = args.log_level

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        processor, workspace, history = build_processor(settings)
    except DMLError as e:
        print(f"Error opening workspace: {e}", file=sys.stderr)
        return 1

    try:
        if args.file:
            if not args.file.exists():
                print(f"Error: File not found: {args.file}", file=sys.stderr)
                return 1
            return run_file(args.file, processor, workspace, args.verbose, args.json)

        if args.command:
            ok = True
            for statement in _split_statements(args.command):
                ok = run_statement(processor, workspace, statement, args.json) and ok
            return 0 if ok else 1

        return run_repl(processor, workspace, history, args.json)
    finally:
        workspace.close()
