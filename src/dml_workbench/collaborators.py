"""Interfaces of the platform services the DML subsystem talks to.

The engine never touches storage directly. Reads go through a ``QueryEngine``,
writes through a ``RecordStore`` and every attempt is reported to a
``HistoryLog``. ``SqliteWorkspace`` in ``dml_workbench.workspace`` implements
the first two; the history logs live here.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from dml_workbench.errors import HistoryLogError

logger = logging.getLogger(__name__)


@runtime_checkable
class QueryEngine(Protocol):
    def run_query(self, sql: str, params: list[Any] | None = None) -> list[dict[str, Any]]:
        """Run a read statement with ``?`` placeholders and return its rows."""
        ...


@runtime_checkable
class RecordStore(Protocol):
    def create_entity(self, type_id: str, fields: dict[str, Any]) -> int:
        """Create one record and return its internal id."""
        ...

    def update_entity(self, type_id: str, record_id: int, fields: dict[str, Any]) -> None:
        ...

    def delete_entity(self, type_id: str, record_id: int) -> None:
        ...

    def create_enumeration(self, enum_id: str, options: dict[str, Any]) -> int:
        """Create a custom list and return its internal id."""
        ...

    def create_entity_type(self, definition: dict[str, Any]) -> int:
        """Create a custom record type and return its internal id."""
        ...


@dataclass
class HistoryEntry:
    """One DML attempt as written to the history log."""

    query: str
    status: str  # SUCCESS, ERROR
    execution_time: str  # ISO-8601 timestamp of the attempt
    elapsed_time: float  # milliseconds
    record_count: int = 0
    result: str | None = None
    error_message: str | None = None

    @classmethod
    def now(cls, query: str, elapsed_time: float, **kwargs: Any) -> HistoryEntry:
        timestamp = datetime.now(timezone.utc).isoformat()
        return cls(query=query, execution_time=timestamp, elapsed_time=elapsed_time, **kwargs)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        return {
            "query": data["query"],
            "status": data["status"],
            "executionTime": data["execution_time"],
            "elapsedTime": data["elapsed_time"],
            "recordCount": data["record_count"],
            "result": data["result"],
            "errorMessage": data["error_message"],
        }


@runtime_checkable
class HistoryLog(Protocol):
    def log_attempt(self, entry: HistoryEntry) -> None:
        ...


class NullHistoryLog:
    """Discards every entry."""

    def log_attempt(self, entry: HistoryEntry) -> None:
        pass


class MemoryHistoryLog:
    """Keeps entries in a list; used by the REPL's ``history`` command."""

    def __init__(self) -> None:
        self.entries: list[HistoryEntry] = []

    def log_attempt(self, entry: HistoryEntry) -> None:
        self.entries.append(entry)


class JsonlHistoryLog:
    """Appends one JSON object per attempt to a file."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def log_attempt(self, entry: HistoryEntry) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as f:
                f.write(json.dumps(entry.to_dict(), default=str) + "\n")
        except OSError as e:
            raise HistoryLogError(f"Cannot write history to {self.path}: {e}") from e

    def read_entries(self) -> list[dict[str, Any]]:
        if not self.path.exists():
            return []
        with self.path.open(encoding="utf-8") as f:
            return [json.loads(line) for line in f if line.strip()]
