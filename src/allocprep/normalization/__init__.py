"""
Cell and column normalization.

Turns heterogeneous raw cells (strings, bracketed ranges, comma lists,
JSON-looking text, typed arrays, blanks) into canonical Python values, and
raw header spellings into canonical field names.
"""

from allocprep.normalization.columns import canonical_field, field_aliases, resolve_field
from allocprep.normalization.values import (
    is_missing,
    normalize_delimited_string_list,
    normalize_json_object,
    normalize_numeric_range_list,
    normalize_text,
    parse_int,
    parse_int_or_default,
)

__all__ = [
    "canonical_field",
    "field_aliases",
    "is_missing",
    "normalize_delimited_string_list",
    "normalize_json_object",
    "normalize_numeric_range_list",
    "normalize_text",
    "parse_int",
    "parse_int_or_default",
    "resolve_field",
]
