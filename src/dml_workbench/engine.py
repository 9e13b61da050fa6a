"""Routes a parsed statement to its handler and normalizes the outcome."""

from __future__ import annotations

import logging
import time
from typing import Any

from dml_workbench.collaborators import QueryEngine, RecordStore
from dml_workbench.errors import InvalidResultError, UnsupportedOperationError
from dml_workbench.operations import (
    CreateListHandler,
    CreateRecordHandler,
    DeleteHandler,
    InsertHandler,
    OperationHandler,
    UpdateHandler,
)
from dml_workbench.parsing.dml_parser import DMLType
from dml_workbench.results import ExecutionResult

logger = logging.getLogger(__name__)


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 3)


def error_type_of(exc: BaseException) -> str:
    """The failure code reported for an exception."""
    return getattr(exc, "error_type", None) or type(exc).__name__ or "EXECUTION_ERROR"


class DMLExecutionEngine:
    """Dispatches statements to the five operation handlers.

    Whatever a handler does, ``execute`` returns an ``ExecutionResult`` with
    ``execution_time`` and ``dml_type`` filled in; exceptions raised by a
    handler or a collaborator are turned into failure envelopes here.
    """

    def __init__(
        self,
        query_engine: QueryEngine,
        record_store: RecordStore,
        live_definitions: bool = False,
    ) -> None:
        self.handlers: dict[DMLType, OperationHandler] = {
            DMLType.CREATE_RECORD: CreateRecordHandler(record_store, live=live_definitions),
            DMLType.CREATE_LIST: CreateListHandler(record_store, live=live_definitions),
            DMLType.INSERT: InsertHandler(record_store),
            DMLType.UPDATE: UpdateHandler(query_engine, record_store),
            DMLType.DELETE: DeleteHandler(query_engine, record_store),
        }

    def supported_operations(self) -> list[DMLType]:
        return list(self.handlers)

    def execute(self, dml_type: DMLType | str, statement: Any) -> ExecutionResult:
        """Run one statement; never raises."""
        start = time.perf_counter()
        kind: DMLType | None = None
        try:
            kind = self._resolve_type(dml_type)
            logger.debug("Dispatching %s", kind.value)
            result = self.handlers[kind].execute(statement)
            if not isinstance(result, ExecutionResult):
                raise InvalidResultError(
                    f"Handler for {kind.value} returned {type(result).__name__}, expected ExecutionResult"
                )
        except Exception as e:
            logger.debug("DML %s failed", dml_type, exc_info=True)
            result = ExecutionResult.failure(str(e) or type(e).__name__, error_type_of(e))

        result.execution_time = _elapsed_ms(start)
        result.dml_type = kind
        return result

    def _resolve_type(self, dml_type: DMLType | str) -> DMLType:
        try:
            kind = dml_type if isinstance(dml_type, DMLType) else DMLType(dml_type)
        except (ValueError, TypeError):
            kind = None
        if kind is None or kind not in self.handlers:
            raise UnsupportedOperationError(f"Unsupported DML operation: {dml_type}")
        return kind
