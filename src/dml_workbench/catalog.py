"""Static platform vocabulary used by the parser and the operation handlers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class OptionKind(Enum):
    """Value kind accepted by a CREATE RECORD configuration option."""

    TEXT = "text"
    BOOLEAN = "boolean"
    INTEGER = "integer"


# Field type token in CREATE RECORD -> platform custom field type
FIELD_TYPE_MAP: dict[str, str] = {
    "CHECKBOX": "CHECKBOX",
    "CURRENCY": "CURRENCY",
    "DATE": "DATE",
    "DATETIME": "DATETIMETZ",
    "DECIMAL": "FLOAT",
    "DOCUMENT": "DOCUMENT",
    "EMAILADDRESS": "EMAIL",
    "ENTITY": "SELECT",
    "FREEFORMTEXT": "TEXT",
    "HELP": "HELP",
    "HYPERLINK": "URL",
    "IMAGE": "IMAGE",
    "INLINEHTML": "INLINEHTML",
    "INTEGER": "INTEGER",
    "LIST": "LIST",
    "LONGTEXT": "LONGTEXT",
    "MULTISELECT": "MULTISELECT",
    "PASSWORD": "PASSWORD",
    "PERCENT": "PERCENT",
    "PHONENUMBER": "PHONE",
    "RICHTEXT": "RICHTEXT",
    "TEXTAREA": "TEXTAREA",
    "TIMEOFDAY": "TIMEOFDAY",
}

# Field types that take a reference in parentheses: department LIST(customlist_departments)
REFERENCE_FIELD_TYPES = frozenset({"LIST", "MULTISELECT", "ENTITY"})

# CREATE RECORD configuration options, keyed by canonical (camelCase) name
RECORD_OPTIONS: dict[str, OptionKind] = {
    "name": OptionKind.TEXT,
    "description": OptionKind.TEXT,
    "owner": OptionKind.TEXT,
    "accessType": OptionKind.TEXT,
    "allowQuickAdd": OptionKind.BOOLEAN,
    "enableSystemNotes": OptionKind.BOOLEAN,
    "includeInGlobalSearch": OptionKind.BOOLEAN,
    "showInApplicationMenu": OptionKind.BOOLEAN,
    "enableOptimisticLocking": OptionKind.BOOLEAN,
    "enableOnlineForm": OptionKind.BOOLEAN,
    "enableNameTranslation": OptionKind.BOOLEAN,
    "allowAttachments": OptionKind.BOOLEAN,
    "showNotes": OptionKind.BOOLEAN,
    "enableMailMerge": OptionKind.BOOLEAN,
    "recordsAreOrdered": OptionKind.BOOLEAN,
    "showCreationDate": OptionKind.BOOLEAN,
    "showLastModified": OptionKind.BOOLEAN,
    "showOwner": OptionKind.BOOLEAN,
    "allowInlineEditing": OptionKind.BOOLEAN,
    "allowQuickSearch": OptionKind.BOOLEAN,
    "allowReports": OptionKind.BOOLEAN,
    "allowDuplicates": OptionKind.BOOLEAN,
    "numberingPrefix": OptionKind.TEXT,
    "numberingSuffix": OptionKind.TEXT,
    "initialNumber": OptionKind.INTEGER,
    "allowOverride": OptionKind.BOOLEAN,
    "iconType": OptionKind.TEXT,
    "builtInIcon": OptionKind.TEXT,
    "customIconFile": OptionKind.TEXT,
}

_RECORD_OPTIONS_LOWER = {name.lower(): name for name in RECORD_OPTIONS}

# Languages accepted in CREATE LIST value translations
SUPPORTED_LANGUAGES: tuple[str, ...] = (
    "zh_CN", "zh_TW", "cs_CZ", "da_DK", "nl_NL", "en_AU", "en_CA", "en_GB", "en_US",
    "fi_FI", "fr_FR", "fr_CA", "de_DE", "id_ID", "it_IT", "ja_JP", "ko_KR", "no_NO",
    "pl_PL", "pt_BR", "ru_RU", "es_ES", "es_419", "sv_SE", "th_TH", "tr_TR",
)

# Table name used in INSERT/UPDATE/DELETE -> platform record type id
STANDARD_RECORD_TYPES: dict[str, str] = {
    # Entities
    "customer": "customer",
    "vendor": "vendor",
    "employee": "employee",
    "contact": "contact",
    "lead": "lead",
    "prospect": "prospect",
    "partner": "partner",
    # Items
    "item": "inventoryitem",
    "inventoryitem": "inventoryitem",
    "noninventoryitem": "noninventoryitem",
    "serviceitem": "serviceitem",
    "kititem": "kititem",
    "assemblyitem": "assemblyitem",
    # Transactions
    "salesorder": "salesorder",
    "purchaseorder": "purchaseorder",
    "invoice": "invoice",
    "bill": "vendorbill",
    "vendorbill": "vendorbill",
    "estimate": "estimate",
    "quote": "estimate",
    "cashsale": "cashsale",
    "creditmemo": "creditmemo",
    "vendorcredit": "vendorcredit",
    "check": "check",
    "deposit": "deposit",
    # Activities
    "task": "task",
    "event": "calendarevent",
    "calendarevent": "calendarevent",
    "phonecall": "phonecall",
    "case": "supportcase",
    "supportcase": "supportcase",
    # Other
    "opportunity": "opportunity",
    "project": "job",
    "job": "job",
    "location": "location",
    "department": "department",
    "classification": "classification",
    "subsidiary": "subsidiary",
}

# Column aliases accepted when inserting into or updating a custom list
LIST_VALUE_FIELD_MAP: dict[str, str] = {
    "name": "name",
    "value": "name",
    "abbreviation": "abbreviation",
    "description": "description",
    "isinactive": "isinactive",
    "inactive": "isinactive",
    "externalid": "externalid",
}

# WHERE fields that name the record's internal id directly
ID_FIELDS = frozenset({"id", "internalid"})


@dataclass(frozen=True)
class RecordTypeInfo:
    """Resolved target of an INSERT/UPDATE/DELETE statement."""

    type_id: str
    is_custom_record: bool = False
    is_custom_list: bool = False


def resolve_record_type(table_name: str) -> RecordTypeInfo:
    """Map a table name from a DML statement to a platform record type."""
    lower = table_name.lower()
    if lower.startswith("customrecord_"):
        return RecordTypeInfo(lower, is_custom_record=True)
    if lower.startswith("customlist_"):
        return RecordTypeInfo(lower, is_custom_list=True)
    standard = STANDARD_RECORD_TYPES.get(lower)
    if standard is not None:
        return RecordTypeInfo(standard)
    # Unknown tables are assumed to be custom records
    return RecordTypeInfo(f"customrecord_{lower}", is_custom_record=True)


def canonical_record_option(name: str) -> str | None:
    """Return the canonical spelling of a record option, or None if unknown."""
    return _RECORD_OPTIONS_LOWER.get(name.lower())


def map_list_value_field(column: str) -> str:
    """Map a column name used against a custom list to the list-value field id."""
    return LIST_VALUE_FIELD_MAP.get(column.lower(), column)


def is_language_supported(language: str) -> bool:
    return language in SUPPORTED_LANGUAGES
