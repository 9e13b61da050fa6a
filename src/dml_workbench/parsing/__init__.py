"""Parsing module for the DML mini-language."""

from dml_workbench.parsing.classifier import DMLAnalysis, StatementClassifier, detect_dml_type
from dml_workbench.parsing.dml_lexer import DMLLexer, DMLParseError
from dml_workbench.parsing.dml_parser import (
    CompoundCondition,
    Condition,
    CreateListStatement,
    CreateRecordStatement,
    DeleteStatement,
    DMLParser,
    DMLType,
    FieldDef,
    InsertStatement,
    ListOptions,
    ListValue,
    Statement,
    Translation,
    UpdateStatement,
    WhereCondition,
)

__all__ = [
    "CompoundCondition",
    "Condition",
    "CreateListStatement",
    "CreateRecordStatement",
    "DMLAnalysis",
    "DMLLexer",
    "DMLParseError",
    "DMLParser",
    "DMLType",
    "DeleteStatement",
    "FieldDef",
    "InsertStatement",
    "ListOptions",
    "ListValue",
    "Statement",
    "StatementClassifier",
    "Translation",
    "UpdateStatement",
    "WhereCondition",
    "detect_dml_type",
]
