"""Parser for the DML statements accepted by the query box."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar

import ply.yacc as yacc

from dml_workbench.catalog import (
    FIELD_TYPE_MAP,
    RECORD_OPTIONS,
    REFERENCE_FIELD_TYPES,
    OptionKind,
    canonical_record_option,
)
from dml_workbench.parsing.dml_lexer import DMLLexer, DMLParseError
from dml_workbench.script_ids import ScriptIdAllocator, list_script_id, record_script_id

logger = logging.getLogger(__name__)

# Comparison token -> Condition.operator
_COMPARISON_OPERATORS = {"EQ": "eq", "NE": "ne", "LT": "lt", "LE": "le", "GT": "gt", "GE": "ge"}


class InvalidStatement(Exception):
    """Raised from grammar actions; parse() reports it as a DMLParseError.

    ply treats a SyntaxError raised inside an action as a request for error
    recovery, so actions must not raise DMLParseError themselves.
    """


class DMLType(Enum):
    """The statement kinds recognized in the query box."""

    CREATE_RECORD = "CREATE_RECORD"
    CREATE_LIST = "CREATE_LIST"
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass
class FieldDef:
    """A field declaration in CREATE RECORD: ``name TYPE`` or ``name TYPE(ref)``."""

    name: str
    type: str  # Upper-cased type token, a key of FIELD_TYPE_MAP
    list_reference: str | None = None
    script_id: str = ""

    @property
    def platform_type(self) -> str:
        return FIELD_TYPE_MAP[self.type]


@dataclass
class CreateRecordStatement:
    """CREATE RECORD: definition of a custom record type."""

    dml_type: ClassVar[DMLType] = DMLType.CREATE_RECORD

    entity_id: str
    full_entity_id: str
    display_name: str
    fields: list[FieldDef] = field(default_factory=list)
    config_options: dict[str, Any] = field(default_factory=dict)
    prefix: str = ""


@dataclass
class Translation:
    """A translated label for a list value."""

    language: str
    value: str


@dataclass
class ListValue:
    """One value of a CREATE LIST statement."""

    value: str
    inactive: bool = False
    abbreviation: str | None = None
    translations: list[Translation] = field(default_factory=list)


@dataclass
class ListOptions:
    """Options block of a CREATE LIST statement."""

    description: str = ""
    ordering_mode: str = "ORDER_ENTERED"
    is_matrix: bool = False
    is_inactive: bool = False
    values: list[ListValue] = field(default_factory=list)


@dataclass
class CreateListStatement:
    """CREATE LIST: definition of a custom list."""

    dml_type: ClassVar[DMLType] = DMLType.CREATE_LIST

    enum_id: str
    full_enum_id: str
    display_name: str
    options: ListOptions = field(default_factory=ListOptions)


@dataclass
class Condition:
    """A WHERE condition: ``field = value`` or ``field IN (v1, v2, ...)``."""

    field: str
    operator: str  # eq, ne, lt, le, gt, ge, in, not_in, between, is_null, not_null
    value: Any  # list for in/not_in, [low, high] for between, None for is_null/not_null


@dataclass
class CompoundCondition:
    """A compound condition (AND/OR)."""

    left: Condition | CompoundCondition
    operator: str  # and, or
    right: Condition | CompoundCondition


WhereCondition = Condition | CompoundCondition


@dataclass
class InsertStatement:
    """INSERT INTO ... VALUES / INSERT INTO ... SET."""

    dml_type: ClassVar[DMLType] = DMLType.INSERT

    table_name: str
    fields: dict[str, Any] = field(default_factory=dict)
    extra_rows: list[dict[str, Any]] = field(default_factory=list)
    committed: bool = False

    @property
    def rows(self) -> list[dict[str, Any]]:
        """Every row the statement inserts, first row first."""
        return [self.fields] + self.extra_rows


@dataclass
class UpdateStatement:
    """UPDATE ... SET ... WHERE."""

    dml_type: ClassVar[DMLType] = DMLType.UPDATE

    table_name: str
    set_fields: dict[str, Any] = field(default_factory=dict)
    where_condition: WhereCondition | None = None
    committed: bool = False


@dataclass
class DeleteStatement:
    """DELETE FROM ... WHERE."""

    dml_type: ClassVar[DMLType] = DMLType.DELETE

    table_name: str
    where_condition: WhereCondition | None = None
    committed: bool = False


Statement = CreateRecordStatement | CreateListStatement | InsertStatement | UpdateStatement | DeleteStatement


def _build_create_record(entity_id: str, items: list[tuple], default_prefix: str) -> CreateRecordStatement:
    """Assemble a CREATE RECORD statement from its parsed body items."""
    prefix = default_prefix
    options: dict[str, Any] = {}
    declared: list[tuple[str, str, str | None]] = []

    for item in items:
        kind = item[0]
        if kind == "option":
            options[item[1]] = item[2]
        elif kind == "prefix":
            prefix = item[1]
        else:
            declared.append(item[1:])

    allocator = ScriptIdAllocator(entity_id, prefix)
    fields = [
        FieldDef(name=name, type=type_name, list_reference=reference, script_id=allocator.allocate(name))
        for name, type_name, reference in declared
    ]

    display_name = options.get("name") or f"{prefix}{entity_id}"
    statement = CreateRecordStatement(
        entity_id=entity_id,
        full_entity_id=record_script_id(entity_id, prefix),
        display_name=display_name,
        fields=fields,
        config_options=options,
        prefix=prefix,
    )
    logger.debug(
        "Parsed CREATE RECORD %s: %d field(s), prefix=%r, options=%s",
        statement.full_entity_id, len(fields), prefix, sorted(options),
    )
    return statement


def _build_list_value(attrs: list[tuple[str, Any]]) -> ListValue:
    """Assemble a list value from its attributes, which may come in any order."""
    value: str | None = None
    inactive = False
    abbreviation: str | None = None
    translations: list[Translation] = []

    for name, attr in attrs:
        key = name.lower()
        if key == "value" and isinstance(attr, str):
            if value is not None:
                raise InvalidStatement(f"List value declares 'value' twice ('{value}', '{attr}')")
            value = attr
        elif key == "abbreviation" and isinstance(attr, str):
            abbreviation = attr
        elif key == "inactive" and isinstance(attr, bool):
            inactive = attr
        elif key == "translations" and isinstance(attr, list):
            translations = _build_translations(attr)
        else:
            raise InvalidStatement(f"Unexpected list value attribute '{name}'")

    if value is None:
        raise InvalidStatement("List value is missing its 'value \"...\"' attribute")
    return ListValue(value=value, inactive=inactive, abbreviation=abbreviation, translations=translations)


def _build_translations(pairs: list[tuple[str, str]]) -> list[Translation]:
    """Group ``language "L", value "V"`` pairs into translations, keeping their order."""
    translations: list[Translation] = []
    language: str | None = None
    for name, text in pairs:
        key = name.lower()
        if key == "language" and language is None:
            language = text
        elif key == "value" and language is not None:
            translations.append(Translation(language=language, value=text))
            language = None
        else:
            raise InvalidStatement(f"Expected 'language \"...\", value \"...\"' in translations, got '{name}'")
    if language is not None:
        raise InvalidStatement(f"Translation for language '{language}' has no value")
    return translations


def _build_list_options(attrs: list[tuple[str, Any]]) -> ListOptions:
    """Assemble the options block of CREATE LIST."""
    options = ListOptions()
    for name, attr in attrs:
        key = name.lower()
        if key == "description" and isinstance(attr, str):
            options.description = attr
        elif key == "optionsorder" and isinstance(attr, str):
            options.ordering_mode = attr.upper()
        elif key == "matrixoption" and isinstance(attr, bool):
            options.is_matrix = attr
        elif key == "isinactive" and isinstance(attr, bool):
            options.is_inactive = attr
        elif key == "values" and isinstance(attr, list):
            options.values = attr
        else:
            raise InvalidStatement(f"Unexpected CREATE LIST option '{name}'")
    return options


class DMLParser:
    """Parser for DML statements."""

    tokens = DMLLexer.tokens

    # Operator precedence
    precedence = (
        ("left", "OR"),
        ("left", "AND"),
    )

    def __init__(self, default_prefix: str = "") -> None:
        self.default_prefix = default_prefix
        self.lexer = DMLLexer()
        self.lexer.build()
        self.parser: yacc.LRParser = None  # type: ignore
        self._lock = threading.Lock()

    # --- Statement and COMMIT marker ---

    def p_statement(self, p: yacc.YaccProduction) -> None:
        """statement : dml_statement
                     | dml_statement SEMICOLON"""
        p[0] = p[1]

    def p_statement_commit(self, p: yacc.YaccProduction) -> None:
        """statement : dml_statement COMMIT
                     | dml_statement COMMIT SEMICOLON
                     | dml_statement SEMICOLON COMMIT
                     | dml_statement SEMICOLON COMMIT SEMICOLON"""
        stmt = p[1]
        if isinstance(stmt, (InsertStatement, UpdateStatement, DeleteStatement)):
            stmt.committed = True
        p[0] = stmt

    def p_dml_statement(self, p: yacc.YaccProduction) -> None:
        """dml_statement : create_record
                         | create_list
                         | insert
                         | update
                         | delete"""
        p[0] = p[1]

    def p_ident(self, p: yacc.YaccProduction) -> None:
        """ident : IDENTIFIER
                 | CREATE
                 | RECORD
                 | LIST
                 | INSERT
                 | INTO
                 | VALUES
                 | UPDATE
                 | SET
                 | DELETE
                 | FROM
                 | WHERE
                 | IN
                 | COMMIT"""
        # Keywords double as table, column and field names
        p[0] = p[1]

    # --- CREATE RECORD ---

    def p_create_record(self, p: yacc.YaccProduction) -> None:
        """create_record : CREATE RECORD ident LPAREN record_body RPAREN"""
        p[0] = _build_create_record(p[3], p[5], self.default_prefix)

    def p_create_record_empty(self, p: yacc.YaccProduction) -> None:
        """create_record : CREATE RECORD ident LPAREN RPAREN"""
        p[0] = _build_create_record(p[3], [], self.default_prefix)

    def p_record_body(self, p: yacc.YaccProduction) -> None:
        """record_body : record_items
                       | record_items COMMA"""
        p[0] = p[1]

    def p_record_items_single(self, p: yacc.YaccProduction) -> None:
        """record_items : record_item"""
        p[0] = [p[1]]

    def p_record_items_multiple(self, p: yacc.YaccProduction) -> None:
        """record_items : record_items record_item
                        | record_items COMMA record_item"""
        p[0] = p[1] + [p[len(p) - 1]]

    def p_record_item_option(self, p: yacc.YaccProduction) -> None:
        """record_item : ident EQ option_value"""
        name = canonical_record_option(p[1])
        if name is None:
            raise InvalidStatement(f"Unknown CREATE RECORD option '{p[1]}'")
        kind = RECORD_OPTIONS[name]
        value = p[3]
        if kind is OptionKind.BOOLEAN and not isinstance(value, bool):
            raise InvalidStatement(f"Option '{name}' expects TRUE or FALSE, got {value!r}")
        if kind is OptionKind.INTEGER and (isinstance(value, bool) or not isinstance(value, int)):
            raise InvalidStatement(f"Option '{name}' expects an integer, got {value!r}")
        if kind is OptionKind.TEXT and not isinstance(value, str):
            value = str(value).lower() if isinstance(value, bool) else str(value)
        p[0] = ("option", name, value)

    def p_record_item_prefix(self, p: yacc.YaccProduction) -> None:
        """record_item : ident STRING"""
        if p[1].lower() != "prefix":
            raise InvalidStatement(f"Unexpected string after '{p[1]}'")
        p[0] = ("prefix", p[2])

    def p_record_item_field(self, p: yacc.YaccProduction) -> None:
        """record_item : ident field_type"""
        p[0] = ("field", p[1], p[2], None)

    def p_record_item_field_reference(self, p: yacc.YaccProduction) -> None:
        """record_item : ident field_type LPAREN ident RPAREN"""
        if p[2] not in REFERENCE_FIELD_TYPES:
            raise InvalidStatement(f"Field type {p[2]} does not take a reference (field '{p[1]}')")
        p[0] = ("field", p[1], p[2], p[4])

    def p_field_type(self, p: yacc.YaccProduction) -> None:
        """field_type : IDENTIFIER
                      | LIST"""
        type_name = p[1].upper()
        if type_name not in FIELD_TYPE_MAP:
            raise InvalidStatement(
                f"Unsupported field type '{p[1]}' (line {p.lineno(1)}). "
                f"Supported types: {', '.join(FIELD_TYPE_MAP)}"
            )
        p[0] = type_name

    def p_option_value(self, p: yacc.YaccProduction) -> None:
        """option_value : STRING
                        | IDENTIFIER
                        | INTEGER"""
        p[0] = p[1]

    def p_option_value_bool(self, p: yacc.YaccProduction) -> None:
        """option_value : TRUE
                        | FALSE"""
        p[0] = p[1].lower() == "true"

    # --- CREATE LIST ---

    def p_create_list(self, p: yacc.YaccProduction) -> None:
        """create_list : CREATE LIST ident LPAREN list_body RPAREN"""
        p[0] = self._make_create_list(p[3], p[5])

    def p_create_list_empty(self, p: yacc.YaccProduction) -> None:
        """create_list : CREATE LIST ident LPAREN RPAREN"""
        p[0] = self._make_create_list(p[3], [])

    def p_list_body(self, p: yacc.YaccProduction) -> None:
        """list_body : list_attrs
                     | list_attrs COMMA"""
        p[0] = p[1]

    def p_list_attrs_single(self, p: yacc.YaccProduction) -> None:
        """list_attrs : list_attr"""
        p[0] = [p[1]]

    def p_list_attrs_multiple(self, p: yacc.YaccProduction) -> None:
        """list_attrs : list_attrs list_attr
                      | list_attrs COMMA list_attr"""
        p[0] = p[1] + [p[len(p) - 1]]

    def p_list_attr_scalar(self, p: yacc.YaccProduction) -> None:
        """list_attr : IDENTIFIER STRING
                     | IDENTIFIER IDENTIFIER
                     | IDENTIFIER bool_value"""
        p[0] = (p[1], p[2])

    def p_list_attr_values(self, p: yacc.YaccProduction) -> None:
        """list_attr : VALUES LBRACKET list_value_list RBRACKET
                     | VALUES LBRACKET list_value_list COMMA RBRACKET"""
        p[0] = ("values", p[3])

    def p_list_attr_values_empty(self, p: yacc.YaccProduction) -> None:
        """list_attr : VALUES LBRACKET RBRACKET"""
        p[0] = ("values", [])

    def p_list_value_list_single(self, p: yacc.YaccProduction) -> None:
        """list_value_list : list_value"""
        p[0] = [p[1]]

    def p_list_value_list_multiple(self, p: yacc.YaccProduction) -> None:
        """list_value_list : list_value_list COMMA list_value"""
        p[0] = p[1] + [p[3]]

    def p_list_value(self, p: yacc.YaccProduction) -> None:
        """list_value : value_attr_list"""
        p[0] = _build_list_value(p[1])

    def p_value_attr_list_single(self, p: yacc.YaccProduction) -> None:
        """value_attr_list : value_attr"""
        p[0] = [p[1]]

    def p_value_attr_list_multiple(self, p: yacc.YaccProduction) -> None:
        """value_attr_list : value_attr_list value_attr"""
        p[0] = p[1] + [p[2]]

    def p_value_attr_scalar(self, p: yacc.YaccProduction) -> None:
        """value_attr : IDENTIFIER STRING
                      | IDENTIFIER bool_value"""
        p[0] = (p[1], p[2])

    def p_value_attr_translations(self, p: yacc.YaccProduction) -> None:
        """value_attr : IDENTIFIER LBRACKET translation_pairs RBRACKET
                      | IDENTIFIER LBRACKET translation_pairs COMMA RBRACKET"""
        p[0] = (p[1], p[3])

    def p_value_attr_translations_empty(self, p: yacc.YaccProduction) -> None:
        """value_attr : IDENTIFIER LBRACKET RBRACKET"""
        p[0] = (p[1], [])

    def p_translation_pairs_single(self, p: yacc.YaccProduction) -> None:
        """translation_pairs : IDENTIFIER STRING"""
        p[0] = [(p[1], p[2])]

    def p_translation_pairs_multiple(self, p: yacc.YaccProduction) -> None:
        """translation_pairs : translation_pairs COMMA IDENTIFIER STRING"""
        p[0] = p[1] + [(p[3], p[4])]

    def p_bool_value(self, p: yacc.YaccProduction) -> None:
        """bool_value : TRUE
                      | FALSE"""
        p[0] = p[1].lower() == "true"

    def _make_create_list(self, enum_id: str, attrs: list[tuple[str, Any]]) -> CreateListStatement:
        options = _build_list_options(attrs)
        statement = CreateListStatement(
            enum_id=enum_id,
            full_enum_id=list_script_id(enum_id),
            display_name=enum_id,
            options=options,
        )
        logger.debug("Parsed CREATE LIST %s: %d value(s)", statement.full_enum_id, len(options.values))
        return statement

    # --- INSERT ---

    def p_insert_values(self, p: yacc.YaccProduction) -> None:
        """insert : INSERT INTO ident LPAREN column_list RPAREN VALUES value_row_list"""
        columns = p[5]
        rows = []
        for values in p[8]:
            if len(columns) != len(values):
                raise InvalidStatement(
                    f"Number of fields ({len(columns)}) does not match number of values ({len(values)})"
                )
            rows.append(dict(zip(columns, values)))
        p[0] = InsertStatement(table_name=p[3], fields=rows[0], extra_rows=rows[1:])

    def p_insert_set(self, p: yacc.YaccProduction) -> None:
        """insert : INSERT INTO ident SET assignment_list"""
        p[0] = InsertStatement(table_name=p[3], fields=p[5])

    def p_column_list_single(self, p: yacc.YaccProduction) -> None:
        """column_list : ident"""
        p[0] = [p[1]]

    def p_column_list_multiple(self, p: yacc.YaccProduction) -> None:
        """column_list : column_list COMMA ident"""
        p[0] = p[1] + [p[3]]

    def p_value_row_list_single(self, p: yacc.YaccProduction) -> None:
        """value_row_list : LPAREN literal_list RPAREN"""
        p[0] = [p[2]]

    def p_value_row_list_multiple(self, p: yacc.YaccProduction) -> None:
        """value_row_list : value_row_list COMMA LPAREN literal_list RPAREN"""
        p[0] = p[1] + [p[4]]

    # --- UPDATE / DELETE ---

    def p_update(self, p: yacc.YaccProduction) -> None:
        """update : UPDATE ident SET assignment_list"""
        p[0] = UpdateStatement(table_name=p[2], set_fields=p[4])

    def p_update_where(self, p: yacc.YaccProduction) -> None:
        """update : UPDATE ident SET assignment_list WHERE condition"""
        p[0] = UpdateStatement(table_name=p[2], set_fields=p[4], where_condition=p[6])

    def p_delete(self, p: yacc.YaccProduction) -> None:
        """delete : DELETE FROM ident"""
        p[0] = DeleteStatement(table_name=p[3])

    def p_delete_where(self, p: yacc.YaccProduction) -> None:
        """delete : DELETE FROM ident WHERE condition"""
        p[0] = DeleteStatement(table_name=p[3], where_condition=p[5])

    # --- Assignments and literals ---

    def p_assignment_list_single(self, p: yacc.YaccProduction) -> None:
        """assignment_list : assignment"""
        p[0] = dict([p[1]])

    def p_assignment_list_multiple(self, p: yacc.YaccProduction) -> None:
        """assignment_list : assignment_list COMMA assignment"""
        name, value = p[3]
        p[1][name] = value
        p[0] = p[1]

    def p_assignment(self, p: yacc.YaccProduction) -> None:
        """assignment : ident EQ literal"""
        p[0] = (p[1], p[3])

    def p_literal_list_single(self, p: yacc.YaccProduction) -> None:
        """literal_list : literal"""
        p[0] = [p[1]]

    def p_literal_list_multiple(self, p: yacc.YaccProduction) -> None:
        """literal_list : literal_list COMMA literal"""
        p[0] = p[1] + [p[3]]

    def p_literal(self, p: yacc.YaccProduction) -> None:
        """literal : STRING
                   | INTEGER
                   | FLOAT
                   | IDENTIFIER"""
        p[0] = p[1]

    def p_literal_negative(self, p: yacc.YaccProduction) -> None:
        """literal : MINUS INTEGER
                   | MINUS FLOAT"""
        p[0] = -p[2]

    def p_literal_bool(self, p: yacc.YaccProduction) -> None:
        """literal : bool_value"""
        p[0] = p[1]

    def p_literal_null(self, p: yacc.YaccProduction) -> None:
        """literal : NULL"""
        p[0] = None

    # --- WHERE conditions ---

    def p_condition_compare(self, p: yacc.YaccProduction) -> None:
        """condition : ident EQ literal
                     | ident NE literal
                     | ident LT literal
                     | ident LE literal
                     | ident GT literal
                     | ident GE literal"""
        operator = _COMPARISON_OPERATORS[p.slice[2].type]
        if p[3] is None and operator in ("eq", "ne"):
            operator = "is_null" if operator == "eq" else "not_null"
        elif p[3] is None:
            raise InvalidStatement(f"Cannot compare '{p[1]}' with NULL using {p[2]}")
        p[0] = Condition(field=p[1], operator=operator, value=p[3])

    def p_condition_in(self, p: yacc.YaccProduction) -> None:
        """condition : ident IN LPAREN literal_list RPAREN"""
        p[0] = Condition(field=p[1], operator="in", value=p[4])

    def p_condition_not_in(self, p: yacc.YaccProduction) -> None:
        """condition : ident NOT IN LPAREN literal_list RPAREN"""
        p[0] = Condition(field=p[1], operator="not_in", value=p[5])

    def p_condition_is_null(self, p: yacc.YaccProduction) -> None:
        """condition : ident IS NULL"""
        p[0] = Condition(field=p[1], operator="is_null", value=None)

    def p_condition_is_not_null(self, p: yacc.YaccProduction) -> None:
        """condition : ident IS NOT NULL"""
        p[0] = Condition(field=p[1], operator="not_null", value=None)

    def p_condition_between(self, p: yacc.YaccProduction) -> None:
        """condition : ident BETWEEN literal AND literal"""
        p[0] = Condition(field=p[1], operator="between", value=[p[3], p[5]])

    def p_condition_and(self, p: yacc.YaccProduction) -> None:
        """condition : condition AND condition"""
        p[0] = CompoundCondition(left=p[1], operator="and", right=p[3])

    def p_condition_or(self, p: yacc.YaccProduction) -> None:
        """condition : condition OR condition"""
        p[0] = CompoundCondition(left=p[1], operator="or", right=p[3])

    def p_condition_paren(self, p: yacc.YaccProduction) -> None:
        """condition : LPAREN condition RPAREN"""
        p[0] = p[2]

    def p_error(self, p: yacc.YaccProduction) -> None:
        if p:
            raise DMLParseError(f"Syntax error at '{p.value}' (line {p.lineno}, position {p.lexpos})")
        else:
            raise DMLParseError("Syntax error at end of statement")

    def build(self, **kwargs: Any) -> None:
        """Build the parser."""
        self.parser = yacc.yacc(module=self, start="statement", **kwargs)

    def parse(self, data: str) -> Statement:
        """Parse a DML statement, raising DMLParseError on malformed input.

        Safe to call from several threads: the lexer and the LR parser keep
        their position and stacks on the instance, so one parse runs at a time.
        """
        with self._lock:
            if self.parser is None:
                self.build(debug=False, write_tables=False)

            self.lexer.input(data)
            try:
                return self.parser.parse(data, lexer=self.lexer.lexer)
            except InvalidStatement as e:
                raise DMLParseError(str(e)) from None
