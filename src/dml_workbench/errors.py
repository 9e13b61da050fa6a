"""Error types raised by the DML workbench.

Parse failures are reported as ``DMLParseError`` (a ``SyntaxError``) from the
parsing package. Everything that can go wrong after a statement parsed is a
``DMLError`` carrying an ``error_type`` code, which the execution engine copies
into ``metadata.errorType`` of the failure envelope.
"""

from __future__ import annotations


class DMLError(Exception):
    """Base class for failures raised while validating or executing DML."""

    error_type = "EXECUTION_ERROR"

    def __init__(self, message: str, error_type: str | None = None) -> None:
        super().__init__(message)
        if error_type is not None:
            self.error_type = error_type

    @property
    def message(self) -> str:
        return str(self)


class UnsupportedOperationError(DMLError):
    """No handler is registered for the requested statement type."""

    error_type = "UNSUPPORTED_DML_OPERATION"


class InvalidResultError(DMLError):
    """A handler returned something other than an ExecutionResult."""

    error_type = "INVALID_OPERATION_RESULT"


class ExecutionError(DMLError):
    """A platform primitive failed (permission denied, duplicate script ID, ...)."""


class HistoryLogError(DMLError):
    """Writing the history entry failed."""

    error_type = "HISTORY_LOG_ERROR"
