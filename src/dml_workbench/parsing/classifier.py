"""Decides whether query box text is a DML statement and parses it if so."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from dml_workbench.parsing.dml_lexer import DMLParseError
from dml_workbench.parsing.dml_parser import DMLParser, DMLType, Statement

logger = logging.getLogger(__name__)

# Checked in order; the first match decides the statement type
DML_PREFIXES: list[tuple[DMLType, re.Pattern[str]]] = [
    (DMLType.CREATE_RECORD, re.compile(r"^\s*CREATE\s+RECORD\s+\w+\s*\(", re.IGNORECASE)),
    (DMLType.CREATE_LIST, re.compile(r"^\s*CREATE\s+LIST\s+\w+\s*\(", re.IGNORECASE)),
    (DMLType.INSERT, re.compile(r"^\s*INSERT\s+INTO\s+", re.IGNORECASE)),
    (DMLType.UPDATE, re.compile(r"^\s*UPDATE\s+", re.IGNORECASE)),
    (DMLType.DELETE, re.compile(r"^\s*DELETE\s+FROM\s+", re.IGNORECASE)),
]


@dataclass
class DMLAnalysis:
    """Outcome of classifying one piece of query text.

    Exactly one of three shapes:
    - not DML: ``is_dml`` False, ``dml_type``/``statement``/``error`` None;
    - parsed: ``is_dml`` True with ``dml_type`` and ``statement``;
    - malformed: ``is_dml`` True with ``dml_type`` and ``error``.
    """

    is_dml: bool
    original_query: str
    dml_type: DMLType | None = None
    statement: Statement | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        return {
            "isDML": self.is_dml,
            "type": self.dml_type.value if self.dml_type else None,
            "originalQuery": self.original_query,
            "error": self.error,
        }


def detect_dml_type(text: str) -> DMLType | None:
    """Return the DML type whose keyword prefix matches text, or None."""
    for dml_type, pattern in DML_PREFIXES:
        if pattern.match(text):
            return dml_type
    return None


class StatementClassifier:
    """Classifies raw text and parses the DML statements it recognizes."""

    def __init__(self, parser: DMLParser | None = None) -> None:
        self.parser = parser or DMLParser()

    def analyze(self, raw_text: object) -> DMLAnalysis:
        """Classify raw_text; never raises."""
        if not isinstance(raw_text, str) or not raw_text.strip():
            return DMLAnalysis(is_dml=False, original_query=raw_text if isinstance(raw_text, str) else "")

        text = raw_text.strip()
        dml_type = detect_dml_type(text)
        if dml_type is None:
            return DMLAnalysis(is_dml=False, original_query=raw_text)

        try:
            statement = self.parser.parse(text)
        except DMLParseError as e:
            logger.debug("%s statement failed to parse: %s", dml_type.value, e)
            return DMLAnalysis(is_dml=True, original_query=raw_text, dml_type=dml_type, error=str(e))

        if statement.dml_type is not dml_type:
            # e.g. "UPDATE" followed by something the grammar reads differently
            return DMLAnalysis(
                is_dml=True,
                original_query=raw_text,
                dml_type=dml_type,
                error=f"Expected a {dml_type.value} statement",
            )

        logger.debug("Classified statement as %s", dml_type.value)
        return DMLAnalysis(is_dml=True, original_query=raw_text, dml_type=dml_type, statement=statement)
