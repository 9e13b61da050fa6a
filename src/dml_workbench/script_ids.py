"""Script ID generation for custom record types, fields and lists.

The platform caps a script ID at 40 characters including the prefix it adds
itself (``customrecord_``, ``custrecord_``, ``customlist_``). IDs that fit are
used verbatim (lower-cased). Longer IDs are shortened in stages: common words
are abbreviated segment by segment, then the entity part is trimmed before
the field part, then the whole thing is cut. ``ScriptIdAllocator`` keeps the
IDs handed out for one statement unique.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

SCRIPT_ID_MAX_LENGTH = 40

RECORD_PREFIX = "customrecord_"
FIELD_PREFIX = "custrecord_"
LIST_PREFIX = "customlist_"

# Shortest entity stub kept in a field script ID once the field name has to be cut
MIN_ENTITY_LENGTH = 3

# Applied to whole underscore-separated segments, only when an ID is too long
ABBREVIATIONS: dict[str, str] = {
    "employee": "emp",
    "department": "dept",
    "customer": "cust",
    "transaction": "txn",
    "inventory": "inv",
    "purchase": "purch",
    "address": "addr",
    "telephone": "tel",
    "description": "desc",
    "quantity": "qty",
    "amount": "amt",
    "number": "num",
    "reference": "ref",
    "document": "doc",
    "information": "info",
    "management": "mgmt",
    "administration": "admin",
    "configuration": "config",
    "application": "app",
    "development": "dev",
    "production": "prod",
    "environment": "env",
}


def abbreviate(text: str) -> str:
    """Replace every underscore-separated segment found in ABBREVIATIONS."""
    return "_".join(ABBREVIATIONS.get(segment, segment) for segment in text.split("_"))


def shorten(text: str, max_length: int) -> str:
    """Fit a single identifier into max_length characters."""
    if len(text) <= max_length:
        return text
    result = abbreviate(text)
    if len(result) > max_length:
        result = result[:max_length].rstrip("_")
    logger.debug("Script ID shortened: %s -> %s", text, result)
    return result


def shorten_pair(entity: str, field_name: str, max_length: int) -> str:
    """Fit ``{entity}_{field_name}`` into max_length, keeping the underscore boundary."""
    joined = f"{entity}_{field_name}"
    if len(joined) <= max_length:
        return joined

    entity = abbreviate(entity)
    field_name = abbreviate(field_name)
    if len(entity) + 1 + len(field_name) <= max_length:
        result = f"{entity}_{field_name}"
    else:
        room = max_length - 1 - len(field_name)
        if room >= MIN_ENTITY_LENGTH:
            entity = entity[:room].rstrip("_") or entity[:room]
        else:
            entity = entity[:MIN_ENTITY_LENGTH]
            field_name = field_name[: max_length - 1 - len(entity)]
        result = f"{entity}_{field_name}"

    logger.debug("Field script ID shortened: %s -> %s", joined, result)
    return result


def record_script_id(entity_id: str, prefix: str = "") -> str:
    """Full script ID of a custom record type: customrecord_{prefix}{entity_id}."""
    body = shorten(f"{prefix}{entity_id}".lower(), SCRIPT_ID_MAX_LENGTH - len(RECORD_PREFIX))
    return RECORD_PREFIX + body


def list_script_id(enum_id: str) -> str:
    """Full script ID of a custom list: customlist_{enum_id}."""
    body = shorten(enum_id.lower(), SCRIPT_ID_MAX_LENGTH - len(LIST_PREFIX))
    return LIST_PREFIX + body


class ScriptIdAllocator:
    """Hands out unique field script IDs for one CREATE RECORD statement."""

    def __init__(self, entity_id: str, prefix: str = "") -> None:
        self.entity_part = f"{prefix}{entity_id}".lower()
        self.max_body = SCRIPT_ID_MAX_LENGTH - len(FIELD_PREFIX)
        self._issued: set[str] = set()

    def allocate(self, field_name: str) -> str:
        """Return custrecord_{prefix}{entity}_{field}, shortened and de-duplicated."""
        body = shorten_pair(self.entity_part, field_name.lower(), self.max_body)
        candidate = body
        counter = 2
        while candidate in self._issued:
            suffix = f"_{counter}"
            candidate = body[: self.max_body - len(suffix)].rstrip("_") + suffix
            counter += 1
        self._issued.add(candidate)
        return FIELD_PREFIX + candidate
