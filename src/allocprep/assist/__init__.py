"""
Collaborator boundaries for header mapping and fix suggestions.

Both collaborators may be external services; their answers are filtered
and re-validated before they touch the data set.
"""

from allocprep.assist.fixes import FixOutcome, FixSuggester, request_fix
from allocprep.assist.headers import (
    HeaderMapper,
    alias_header_mapper,
    apply_header_mapping,
    map_headers,
)

__all__ = [
    "FixOutcome",
    "FixSuggester",
    "HeaderMapper",
    "alias_header_mapper",
    "apply_header_mapping",
    "map_headers",
    "request_fix",
]
