"""
Header mapping ahead of row transformation.

Uploaded tables often carry headers that none of the built-in spellings
cover. A header mapper proposes a ``raw header -> field`` mapping which is
applied to the rows before they reach the transformer. The mapper may be an
external service; its answer is filtered to known fields and a failing
mapper only means the raw headers are used as they are.
"""

from collections.abc import Iterable, Mapping
from typing import Any, Protocol

import pandas as pd

from allocprep.models import EntityKind, Record
from allocprep.normalization.columns import field_aliases, header_key
from allocprep.normalization.values import is_missing
from allocprep.utils.logging import get_logger

log = get_logger(__name__)

HeaderMapping = dict[str, str | None]


class HeaderMapper(Protocol):
    """Maps raw headers onto expected field names (None when no match)."""

    def __call__(self, raw_headers: list[str], expected_headers: list[str]) -> HeaderMapping: ...


def alias_header_mapper(raw_headers: list[str], expected_headers: list[str]) -> HeaderMapping:
    """
    Deterministic header mapper based on field spellings.

    A raw header matches an expected field when both agree once case, spaces,
    underscores and dashes are ignored.
    """
    lookup: dict[str, str] = {}
    for expected in expected_headers:
        for alias in field_aliases(expected):
            lookup.setdefault(header_key(alias), expected)
    return {raw: lookup.get(header_key(raw)) for raw in raw_headers}


def map_headers(
    raw_headers: Iterable[str],
    kind: EntityKind | str,
    mapper: HeaderMapper = alias_header_mapper,
    extra_aliases: Mapping[str, str] | None = None,
) -> HeaderMapping:
    """
    Build the header mapping for one table.

    Args:
        raw_headers: Headers as found in the upload.
        kind: Entity kind the table is loaded as.
        mapper: Header mapper to consult.
        extra_aliases: Configured ``raw header -> field`` aliases; these take
            precedence over the mapper.

    Returns:
        Mapping for every raw header. Targets outside the entity's fields
        are discarded.
    """
    kind = EntityKind.parse(kind)
    headers = [str(h) for h in raw_headers]
    expected = list(kind.fields)

    try:
        proposed = mapper(headers, expected)
    except Exception as e:
        log.warning(
            "Header mapper failed, using raw headers",
            entity=kind.value,
            error=f"{type(e).__name__}: {e!s}",
        )
        proposed = {}
    if not isinstance(proposed, Mapping):
        log.warning("Header mapper returned no mapping", entity=kind.value)
        proposed = {}

    aliases = dict(extra_aliases or {})
    mapping: HeaderMapping = {}
    for header in headers:
        target = aliases.get(header, proposed.get(header))
        if target is not None and target not in expected:
            log.debug("Discarding unknown header target", header=header, target=target)
            target = None
        mapping[header] = target
    return mapping


def apply_header_mapping(
    rows: Iterable[Mapping[str, Any]] | pd.DataFrame,
    mapping: Mapping[str, str | None],
) -> list[Any]:
    """
    Rename the columns of raw rows according to a header mapping.

    Headers mapped to None, or absent from the mapping, are kept unchanged.
    When several headers land on the same field, the first non-blank cell
    wins.

    Args:
        rows: Raw rows or a DataFrame.
        mapping: ``raw header -> field`` mapping.

    Returns:
        New rows; the input is not modified.
    """
    if isinstance(rows, pd.DataFrame):
        rows = rows.to_dict(orient="records")

    renamed: list[Any] = []
    for row in rows:
        if not isinstance(row, Mapping):
            # Left for the transformer to reject
            renamed.append(row)
            continue
        new_row: Record = {}
        for header, value in row.items():
            target = mapping.get(header) or header
            if target in new_row and not is_missing(new_row[target]):
                continue
            new_row[target] = value
        renamed.append(new_row)
    return renamed
