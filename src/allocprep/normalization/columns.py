"""
Column name resolution.

Raw uploads spell the same logical field in several ways ("ClientID",
"Client ID", "clientid", "client_id"). This module maps those spellings
back to canonical field names.
"""

import re
from collections.abc import Mapping
from typing import Any

from allocprep.models import ENTITY_FIELDS, FIELD_LABELS, EntityKind
from allocprep.normalization.values import is_missing
from allocprep.utils.logging import get_logger

log = get_logger(__name__)

_SEPARATORS = re.compile(r"[\s_\-]+")


def field_aliases(field: str) -> tuple[str, ...]:
    """
    Accepted raw spellings of a field, in lookup order.

    PascalCase, "Spaced Case", lowercase and snake_case.
    """
    label = FIELD_LABELS.get(field, field)
    spellings = (
        field,
        label,
        field.lower(),
        label.lower().replace(" ", "_"),
    )
    return tuple(dict.fromkeys(spellings))


def header_key(header: str) -> str:
    """Comparison key ignoring case, spaces, underscores and dashes."""
    return _SEPARATORS.sub("", str(header)).lower()


# Maps comparison keys to canonical field names, per entity kind
COLUMN_MAPPING: dict[EntityKind, dict[str, str]] = {
    kind: {header_key(alias): name for name in fields for alias in field_aliases(name)}
    for kind, fields in ENTITY_FIELDS.items()
}


def resolve_field(row: Mapping[str, Any], field: str) -> Any:
    """
    Look up a logical field in a raw row.

    The first alias that is present with a non-blank value wins. Returns
    None when no spelling is present.
    """
    for alias in field_aliases(field):
        if alias in row and not is_missing(row[alias]):
            return row[alias]
    return None


def canonical_field(header: str, kind: EntityKind) -> str | None:
    """Canonical field a raw header stands for, if any."""
    return COLUMN_MAPPING[kind].get(header_key(header))


def unmatched_columns(headers: list[str], kind: EntityKind) -> list[str]:
    """
    Headers that do not correspond to any field of the entity.

    Args:
        headers: Raw column headers.
        kind: Entity kind the table is loaded as.

    Returns:
        Headers left unresolved (in input order).
    """
    missing = [h for h in headers if canonical_field(h, kind) is None]
    if missing:
        log.debug("Unmatched columns", entity=kind.value, columns=missing)
    return missing
