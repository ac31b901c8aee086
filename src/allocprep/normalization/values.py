"""
Cell value normalizers.

Each function turns one raw spreadsheet cell into exactly one canonical
shape. They are total: any input yields a value of the documented type and
nothing is raised, because upload rows are untrusted.
"""

import json
import math
import re
from collections.abc import Mapping
from typing import Any

from allocprep.utils.logging import get_logger

log = get_logger(__name__)

_RANGE_PATTERN = re.compile(r"^(\d+)\s*-\s*(\d+)$")
_INT_PATTERN = re.compile(r"^[+-]?\d+$")
_LEADING_INT_PATTERN = re.compile(r"^\s*([+-]?\d+)")

# Widest range a single token may expand to; wider spans are treated as garbage
MAX_RANGE_SPAN = 10_000

# Text spreadsheet tools write for an empty cell
MISSING_TEXT = frozenset({"", "null", "undefined", "nan"})


def is_missing(value: Any) -> bool:
    """True for None, float NaN and blank/placeholder strings."""
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str) and value.strip().lower() in MISSING_TEXT:
        return True
    return False


def _is_null(value: Any) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def _is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _to_text(value: Any) -> str:
    """Stringify the way a JSON document would spell scalars."""
    if value is None or isinstance(value, (bool, int, float)):
        return json.dumps(value)
    return str(value)


def normalize_delimited_string_list(raw: Any) -> list[str]:
    """
    Normalize a comma-separated cell into a list of trimmed strings.

    Order and duplicates are preserved; empty parts are dropped.

    Args:
        raw: A string ("a, b ,c"), a JSON-looking string ('["a","b"]'), a
            list/tuple of values, or anything else.

    Returns:
        List of non-empty stripped strings. Unsupported input gives [].
    """
    if isinstance(raw, (list, tuple)):
        items = []
        for item in raw:
            if _is_null(item) or isinstance(item, (Mapping, list, tuple)):
                continue
            text = item.strip() if isinstance(item, str) else _to_text(item)
            if text:
                items.append(text)
        return items

    if isinstance(raw, str):
        text = raw.strip()
        if text.startswith("[") and text.endswith("]"):
            try:
                parsed = json.loads(text)
            except ValueError:
                text = text[1:-1]
            else:
                if isinstance(parsed, list):
                    return normalize_delimited_string_list(parsed)
                text = text[1:-1]
        return [part.strip() for part in text.split(",") if part.strip()]

    return []


def _reject_constant(name: str) -> Any:
    msg = f"Non-standard JSON constant {name}"
    raise ValueError(msg)


def _expand_token(token: str) -> list[int]:
    """Expand one comma-separated token: "3", "2-4" or garbage."""
    token = token.strip()
    match = _RANGE_PATTERN.match(token)
    if match:
        start, end = int(match.group(1)), int(match.group(2))
        if start <= end and end - start < MAX_RANGE_SPAN:
            return list(range(start, end + 1))
        log.debug("Dropping phase range", token=token, start=start, end=end)
        return []
    if _INT_PATTERN.match(token):
        return [int(token)]
    return []


def _collect_numbers(raw: Any) -> list[int]:
    if _is_integer(raw):
        return [raw]
    if isinstance(raw, float):
        if math.isfinite(raw) and raw.is_integer():
            return [int(raw)]
        return []
    if isinstance(raw, str):
        text = raw.strip()
        if text.startswith("[") and text.endswith("]"):
            text = text[1:-1]
        numbers: list[int] = []
        for token in text.split(","):
            numbers.extend(_expand_token(token))
        return numbers
    if isinstance(raw, (list, tuple, set, frozenset)):
        numbers = []
        for item in raw:
            numbers.extend(_collect_numbers(item))
        return numbers
    if isinstance(raw, Mapping) and isinstance(raw.get("message"), str):
        # Free-text fallback left behind by a failed upstream parse
        return _collect_numbers(raw["message"])
    return []


def normalize_numeric_range_list(raw: Any) -> list[int]:
    """
    Normalize a phase cell into a sorted list of distinct integers.

    Accepted shapes:
        - a number: 3 -> [3]
        - a string of comma-separated integers and inclusive ranges, with one
          optional pair of surrounding brackets: "[1-3, 5]" -> [1, 2, 3, 5]
        - a list whose elements are any of the above (flattened)
        - {"message": "<text>"}: the text is normalized instead

    Reversed or oversized ranges ("4-2") and tokens that are not integers are dropped.

    Args:
        raw: Raw cell value.

    Returns:
        Deduplicated, ascending list of integers; [] for anything else.
    """
    return sorted(set(_collect_numbers(raw)))


def normalize_json_object(raw: Any) -> dict[str, Any]:
    """
    Normalize a cell into a JSON object.

    Mappings pass through unchanged. Strings are parsed as strict JSON, so
    NaN and Infinity are rejected. When that fails or does not produce an
    object, the original text is kept as ``{"message": raw}``. Anything else
    becomes ``{"message": str(raw)}``.
    """
    if isinstance(raw, Mapping):
        return raw if isinstance(raw, dict) else dict(raw)
    if isinstance(raw, str):
        try:
            parsed = json.loads(raw, parse_constant=_reject_constant)
        except ValueError:
            return {"message": raw}
        if isinstance(parsed, dict):
            return parsed
        return {"message": raw}
    return {"message": _to_text(raw)}


def parse_int(raw: Any) -> int | None:
    """
    Parse an integer cell.

    Strings use their leading integer ("3 units" -> 3, "2.7" -> 2); floats
    are truncated. Blank cells, booleans and garbage give None.
    """
    if is_missing(raw) or isinstance(raw, bool):
        return None
    if _is_integer(raw):
        return raw
    if isinstance(raw, float):
        return int(raw) if math.isfinite(raw) else None
    if isinstance(raw, str):
        match = _LEADING_INT_PATTERN.match(raw)
        return int(match.group(1)) if match else None
    return None


def parse_int_or_default(raw: Any, default: int = 1) -> int:
    """Parse an integer cell, falling back to ``default`` when blank or garbage."""
    parsed = parse_int(raw)
    return default if parsed is None else parsed


def normalize_text(raw: Any) -> Any:
    """
    Normalize a text cell (IDs, names, labels).

    Strings are stripped, numbers are spelled out ("101.0" style floats lose
    the fraction), missing cells become None. Other shapes are returned
    as-is so that schema validation reports them.
    """
    if is_missing(raw):
        return None
    if isinstance(raw, str):
        return raw.strip()
    if _is_integer(raw):
        return str(raw)
    if isinstance(raw, float) and math.isfinite(raw):
        return str(int(raw)) if raw.is_integer() else str(raw)
    return raw
