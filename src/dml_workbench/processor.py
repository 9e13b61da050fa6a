"""Entry point for query box text: classify, validate, execute, log."""

from __future__ import annotations

import logging
import time

from dml_workbench.collaborators import HistoryEntry, HistoryLog, NullHistoryLog, QueryEngine, RecordStore
from dml_workbench.engine import DMLExecutionEngine, error_type_of
from dml_workbench.parsing.classifier import DMLAnalysis, StatementClassifier
from dml_workbench.parsing.dml_parser import DMLParser, DMLType
from dml_workbench.results import ExecutionResult, ProcessResult
from dml_workbench.validator import ValidationResult, validate

logger = logging.getLogger(__name__)

# Shown by the REPL's "examples" command
DML_EXAMPLES: dict[DMLType, list[str]] = {
    DMLType.CREATE_RECORD: [
        "CREATE RECORD my_custom_record (\n"
        "    name FREEFORMTEXT,\n"
        "    email EMAILADDRESS,\n"
        "    amount CURRENCY,\n"
        "    active CHECKBOX\n"
        ");",
        "CREATE RECORD employee_data (\n"
        '    name = "Employee Data",\n'
        "    allowAttachments = TRUE,\n"
        "    employee_name FREEFORMTEXT,\n"
        "    hire_date DATE,\n"
        "    department LIST(customlist_departments),\n"
        "    salary CURRENCY\n"
        ");",
    ],
    DMLType.CREATE_LIST: [
        "CREATE LIST priority_levels (\n"
        '    description "Priority levels for tasks"\n'
        '    optionsorder "ORDER_ENTERED"\n'
        "    matrixoption FALSE\n"
        "    isinactive FALSE\n"
        "    values [\n"
        '        value "High" abbreviation "H" inactive FALSE,\n'
        '        value "Medium" abbreviation "M" inactive FALSE,\n'
        '        value "Low" abbreviation "L" inactive FALSE\n'
        "    ]\n"
        ");",
        "CREATE LIST status_codes (\n"
        '    description "Status codes with translations"\n'
        "    values [\n"
        '        value "Active" inactive FALSE translations [\n'
        '            language "es_ES", value "Activo",\n'
        '            language "fr_FR", value "Actif"\n'
        "        ],\n"
        '        value "Inactive" inactive FALSE\n'
        "    ]\n"
        ");",
    ],
    DMLType.INSERT: [
        "INSERT INTO customer (companyname, email) VALUES ('Acme', 'info@acme.test');",
        "INSERT INTO customrecord_priority SET name = 'Urgent', level = 1 COMMIT;",
    ],
    DMLType.UPDATE: [
        "UPDATE customer SET companyname = 'Acme Corp' WHERE id = 123;",
        "UPDATE customer SET isinactive = true WHERE email = 'old@acme.test' COMMIT;",
    ],
    DMLType.DELETE: [
        "DELETE FROM customrecord_employee WHERE active = false;",
        "DELETE FROM customrecord_employee WHERE id IN (10, 11, 12) COMMIT;",
    ],
}

_COUNT_KEYS = ("records_inserted", "records_updated", "records_deleted")


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 3)


def affected_count(result: ExecutionResult) -> int:
    """How many records a result changed, for the history entry."""
    if not result.success or result.is_preview_only:
        return 0
    for key in _COUNT_KEYS:
        if key in result.metadata:
            return int(result.metadata[key])
    return 1


class DMLProcessor:
    """Turns raw query text into a ProcessResult.

    ``was_dml=False`` tells the caller to run the text as an ordinary query;
    nothing is executed or logged in that case.
    """

    def __init__(
        self,
        query_engine: QueryEngine,
        record_store: RecordStore,
        history: HistoryLog | None = None,
        live_definitions: bool = False,
        default_prefix: str = "",
    ) -> None:
        self.classifier = StatementClassifier(DMLParser(default_prefix=default_prefix))
        self.engine = DMLExecutionEngine(query_engine, record_store, live_definitions=live_definitions)
        self.history = history or NullHistoryLog()

    def process_query(self, query: str) -> ProcessResult:
        """Classify, validate and execute one statement; never raises."""
        start = time.perf_counter()
        analysis: DMLAnalysis | None = None
        try:
            analysis = self.classifier.analyze(query)
            if not analysis.is_dml:
                return ProcessResult(success=True, execution_time=_elapsed_ms(start), was_dml=False, analysis=analysis)

            if analysis.error:
                return self._error_result(analysis.error, "PARSE_ERROR", start, analysis)

            validation = validate(analysis.dml_type, analysis.statement)
            if not validation.is_valid:
                message = "DML validation failed: " + ", ".join(validation.errors)
                return self._error_result(message, "VALIDATION_ERROR", start, analysis)

            execution = self.engine.execute(analysis.dml_type, analysis.statement)
        except Exception as e:
            logger.exception("DML processing error")
            return self._error_result(str(e), error_type_of(e), start, analysis)

        self._log_to_history(query, execution, start)

        result = ProcessResult.from_execution(execution, analysis)
        result.execution_time = _elapsed_ms(start)
        return result

    def validate_query(self, query: str) -> ValidationResult:
        """Check a statement without executing it."""
        analysis = self.classifier.analyze(query)
        if not analysis.is_dml:
            return ValidationResult(False, ["Query is not a valid DML statement"])
        if analysis.error:
            return ValidationResult(False, [analysis.error])
        return validate(analysis.dml_type, analysis.statement)

    def supported_operations(self) -> list[DMLType]:
        return self.engine.supported_operations()

    @staticmethod
    def examples() -> dict[DMLType, list[str]]:
        return {kind: list(statements) for kind, statements in DML_EXAMPLES.items()}

    def _error_result(
        self, message: str, error_type: str, start: float, analysis: DMLAnalysis | None
    ) -> ProcessResult:
        failure = ExecutionResult.failure(message, error_type)
        failure.dml_type = analysis.dml_type if analysis is not None else None
        result = ProcessResult.from_execution(failure, analysis)
        result.execution_time = _elapsed_ms(start)
        return result

    def _log_to_history(self, query: str, execution: ExecutionResult, start: float) -> None:
        try:
            if execution.success:
                entry = HistoryEntry.now(
                    query,
                    _elapsed_ms(start),
                    status="SUCCESS",
                    result=execution.message or "DML operation completed successfully",
                    record_count=affected_count(execution),
                )
            else:
                entry = HistoryEntry.now(
                    query, _elapsed_ms(start), status="ERROR", error_message=execution.error, record_count=0
                )
            self.history.log_attempt(entry)
        except Exception:
            logger.exception("Error logging DML query to history")
