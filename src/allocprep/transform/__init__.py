"""Row transformation from raw uploads into canonical records."""

from allocprep.transform.core import (
    FIELD_NORMALIZERS,
    EditPreview,
    build_candidate,
    format_issues,
    preview_field_edit,
    transform_row,
    transform_rows,
    validate_and_clean,
)

__all__ = [
    "FIELD_NORMALIZERS",
    "EditPreview",
    "build_candidate",
    "format_issues",
    "preview_field_edit",
    "transform_row",
    "transform_rows",
    "validate_and_clean",
]
