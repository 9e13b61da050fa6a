"""SQLite-backed stand-in for the platform's query engine and record primitives.

Each record type is a table with an ``id INTEGER PRIMARY KEY`` column; other
columns are added on first write. Standard record types exist up front so a
WHERE lookup against an empty workspace returns no rows instead of failing.
"""

from __future__ import annotations

import json
import logging
import re
import sqlite3
from typing import Any, Iterable

from dml_workbench.catalog import STANDARD_RECORD_TYPES
from dml_workbench.errors import ExecutionError

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Columns every custom list table carries
LIST_COLUMNS = ("name", "abbreviation", "description", "isinactive", "externalid")


def _quote(name: str) -> str:
    if not _IDENTIFIER.match(name):
        raise ExecutionError(f"Invalid identifier: {name!r}", "INVALID_IDENTIFIER")
    return f'"{name.lower()}"'


def _to_sql_value(value: Any) -> Any:
    if isinstance(value, (list, dict)):
        return json.dumps(value)
    return value


class SqliteWorkspace:
    """Implements QueryEngine and RecordStore over one sqlite3 connection."""

    def __init__(self, database: str = ":memory:") -> None:
        self.database = database
        try:
            self.conn = sqlite3.connect(database)
        except sqlite3.Error as e:
            raise ExecutionError(f"Cannot open {database}: {e}", "WORKSPACE_ERROR") from e
        self.conn.execute(
            "CREATE TABLE IF NOT EXISTS _definitions ("
            "id INTEGER PRIMARY KEY AUTOINCREMENT, script_id TEXT UNIQUE NOT NULL, "
            "kind TEXT NOT NULL, definition TEXT NOT NULL)"
        )
        for type_id in sorted(set(STANDARD_RECORD_TYPES.values())):
            self._ensure_table(type_id)
        self.conn.commit()

    def close(self) -> None:
        self.conn.close()

    def __enter__(self) -> SqliteWorkspace:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    # --- QueryEngine ---

    def run_query(self, sql: str, params: Iterable[Any] | None = None) -> list[dict[str, Any]]:
        """Execute a statement and return its rows as dictionaries keyed by column name."""
        logger.debug("run_query: %s %s", sql, params)
        try:
            cur = self.conn.execute(sql, tuple(_to_sql_value(p) for p in (params or ())))
        except sqlite3.Error as e:
            raise ExecutionError(str(e), "QUERY_ERROR") from e
        if cur.description is None:
            self.conn.commit()
            return []
        cols = [d[0] for d in cur.description]
        return [dict(zip(cols, row)) for row in cur.fetchall()]

    # --- RecordStore ---

    def create_entity(self, type_id: str, fields: dict[str, Any]) -> int:
        table = _quote(type_id)
        self._ensure_table(type_id)
        self._ensure_columns(type_id, fields)
        if fields:
            columns = ", ".join(_quote(name) for name in fields)
            placeholders = ", ".join("?" for _ in fields)
            sql = f"INSERT INTO {table} ({columns}) VALUES ({placeholders})"
        else:
            sql = f"INSERT INTO {table} DEFAULT VALUES"
        cur = self._write(sql, [_to_sql_value(v) for v in fields.values()])
        logger.info("Created %s record %d", type_id, cur.lastrowid)
        return cur.lastrowid

    def update_entity(self, type_id: str, record_id: int, fields: dict[str, Any]) -> None:
        self._require_record(type_id, record_id)
        self._ensure_columns(type_id, fields)
        assignments = ", ".join(f"{_quote(name)} = ?" for name in fields)
        values = [_to_sql_value(v) for v in fields.values()] + [record_id]
        self._write(f"UPDATE {_quote(type_id)} SET {assignments} WHERE id = ?", values)
        logger.info("Updated %s record %s", type_id, record_id)

    def delete_entity(self, type_id: str, record_id: int) -> None:
        self._require_record(type_id, record_id)
        self._write(f"DELETE FROM {_quote(type_id)} WHERE id = ?", [record_id])
        logger.info("Deleted %s record %s", type_id, record_id)

    def create_enumeration(self, enum_id: str, options: dict[str, Any]) -> int:
        definition_id = self._register_definition(enum_id, "list", options)
        self._ensure_table(enum_id)
        self._ensure_columns(enum_id, dict.fromkeys(LIST_COLUMNS))
        for value in options.get("values", []):
            self.create_entity(enum_id, {
                "name": value["value"],
                "abbreviation": value.get("abbreviation"),
                "isinactive": value.get("inactive", False),
            })
        return definition_id

    def create_entity_type(self, definition: dict[str, Any]) -> int:
        script_id = definition["full_entity_id"]
        definition_id = self._register_definition(script_id, "record", definition)
        self._ensure_table(script_id)
        self._ensure_columns(script_id, {"name": None})
        self._ensure_columns(script_id, {f["script_id"]: None for f in definition.get("fields", [])})
        return definition_id

    def definitions(self) -> list[dict[str, Any]]:
        rows = self.run_query("SELECT id, script_id, kind FROM _definitions ORDER BY id")
        return rows

    # --- Internals ---

    def _write(self, sql: str, params: list[Any]) -> sqlite3.Cursor:
        try:
            cur = self.conn.execute(sql, params)
        except sqlite3.Error as e:
            raise ExecutionError(str(e), "QUERY_ERROR") from e
        self.conn.commit()
        return cur

    def _register_definition(self, script_id: str, kind: str, definition: dict[str, Any]) -> int:
        existing = self.conn.execute("SELECT id FROM _definitions WHERE script_id = ?", (script_id,)).fetchone()
        if existing is not None or self._table_exists(script_id):
            raise ExecutionError(f"Script ID {script_id} is already in use", "DUPLICATE_SCRIPT_ID")
        cur = self._write(
            "INSERT INTO _definitions (script_id, kind, definition) VALUES (?, ?, ?)",
            [script_id, kind, json.dumps(definition, default=str)],
        )
        logger.info("Created %s definition %s", kind, script_id)
        return cur.lastrowid

    def _table_exists(self, type_id: str) -> bool:
        row = self.conn.execute(
            "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?", (type_id.lower(),)
        ).fetchone()
        return row is not None

    def _ensure_table(self, type_id: str) -> None:
        self.conn.execute(f"CREATE TABLE IF NOT EXISTS {_quote(type_id)} (id INTEGER PRIMARY KEY AUTOINCREMENT)")

    def _columns(self, type_id: str) -> set[str]:
        return {row[1] for row in self.conn.execute(f"PRAGMA table_info({_quote(type_id)})")}

    def _ensure_columns(self, type_id: str, fields: dict[str, Any]) -> None:
        existing = self._columns(type_id)
        for name in fields:
            if name.lower() not in existing:
                self.conn.execute(f"ALTER TABLE {_quote(type_id)} ADD COLUMN {_quote(name)}")
                existing.add(name.lower())

    def _require_record(self, type_id: str, record_id: int) -> None:
        if not self._table_exists(type_id):
            raise ExecutionError(f"Record type {type_id} does not exist", "RECORD_TYPE_NOT_FOUND")
        row = self.conn.execute(f"SELECT 1 FROM {_quote(type_id)} WHERE id = ?", (record_id,)).fetchone()
        if row is None:
            raise ExecutionError(f"Record {record_id} not found in {type_id}", "RECORD_NOT_FOUND")
