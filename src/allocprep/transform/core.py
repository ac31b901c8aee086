"""
Row transformation into canonical records.

Maps raw upload rows (arbitrary header spelling, heterogeneous cell values)
onto canonical entity records. Rows that cannot be coerced are dropped with
a per-row diagnostic; every other row is processed independently.
"""

import json
import math
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

import pandas as pd
from pydantic import BaseModel

from allocprep.models import (
    ROW_IDENTITY_KEY,
    CleanResult,
    EntityKind,
    FieldIssue,
    Record,
    RowRejection,
    SchemaResult,
    TransformResult,
)
from allocprep.normalization.columns import resolve_field
from allocprep.normalization.values import (
    is_missing,
    normalize_delimited_string_list,
    normalize_json_object,
    normalize_numeric_range_list,
    normalize_text,
    parse_int,
    parse_int_or_default,
)
from allocprep.schemas.registry import SchemaRegistry, SchemaStage
from allocprep.utils.logging import get_logger, log_context

log = get_logger(__name__)


def _normalize_attributes(raw: Any) -> dict[str, Any]:
    return {} if is_missing(raw) else normalize_json_object(raw)


# Normalizer applied to each logical field before shape validation
FIELD_NORMALIZERS: dict[str, Callable[[Any], Any]] = {
    # Clients
    "ClientID": normalize_text,
    "ClientName": normalize_text,
    "PriorityLevel": parse_int_or_default,
    "RequestedTaskIDs": normalize_delimited_string_list,
    "GroupTag": normalize_text,
    "AttributesJSON": _normalize_attributes,
    # Workers
    "WorkerID": normalize_text,
    "WorkerName": normalize_text,
    "Skills": normalize_delimited_string_list,
    "AvailableSlots": normalize_numeric_range_list,
    "MaxLoadPerPh": parse_int_or_default,
    "WorkerGroup": normalize_text,
    "QualificationLevel": parse_int_or_default,
    # Tasks
    "TaskID": normalize_text,
    "TaskName": normalize_text,
    "Category": normalize_text,
    "Duration": parse_int_or_default,
    "RequiredSkills": normalize_delimited_string_list,
    "PreferredPhase": normalize_numeric_range_list,
    "MaxConcurrent": parse_int_or_default,
}

INTEGER_FIELDS = frozenset(
    name for name, fn in FIELD_NORMALIZERS.items() if fn is parse_int_or_default
)


def format_issues(issues: list[FieldIssue]) -> str:
    """Render field issues as one human-readable line."""
    return "; ".join(f"{issue.path}: {issue.message}" for issue in issues)


def build_candidate(row: Mapping[str, Any], kind: EntityKind) -> Record:
    """Resolve and normalize every field of an entity from a raw row."""
    return {name: FIELD_NORMALIZERS[name](resolve_field(row, name)) for name in kind.fields}


def transform_row(row: Any, kind: EntityKind | str, index: int) -> SchemaResult:
    """
    Transform one raw row into a canonical record.

    The candidate goes through the input shape and then the canonical shape;
    the first failing stage decides the issues.

    Args:
        row: Raw row (header -> cell value).
        kind: Entity kind of the table.
        index: Zero-based row position, used for the fallback identity.

    Returns:
        SchemaResult holding the canonical record (with its ``id`` identity
        key) or the issues that rejected the row.
    """
    kind = EntityKind.parse(kind)
    if not isinstance(row, Mapping):
        issue = FieldIssue(
            path="record",
            message=f"Row must map column names to values, got {type(row).__name__}",
        )
        return SchemaResult(ok=False, issues=[issue])

    candidate = build_candidate(row, kind)

    input_result = SchemaRegistry.validate_record(candidate, kind, SchemaStage.INPUT)
    if not input_result.ok or input_result.value is None:
        return input_result

    canonical_result = SchemaRegistry.validate_record(
        input_result.value, kind, SchemaStage.CANONICAL
    )
    if not canonical_result.ok or canonical_result.value is None:
        return canonical_result

    record = canonical_result.value
    record[ROW_IDENTITY_KEY] = record.get(kind.id_field) or f"{kind.value}_{index}"
    return SchemaResult(ok=True, value=record)


def _iter_rows(raw_rows: Any) -> Iterable[Any]:
    if raw_rows is None:
        return []
    if isinstance(raw_rows, pd.DataFrame):
        return raw_rows.to_dict(orient="records")
    if isinstance(raw_rows, (Mapping, str, bytes)) or not isinstance(raw_rows, Iterable):
        # A single row or a scalar is not a table
        return [raw_rows]
    return raw_rows


def transform_rows(
    raw_rows: Iterable[Any] | pd.DataFrame,
    kind: EntityKind | str,
) -> TransformResult:
    """
    Transform a raw table into canonical records.

    Never raises on row content. Each input row ends up either in
    ``accepted`` (as a canonical record) or in ``rejected`` (with its index
    and reason), never both.

    Args:
        raw_rows: Sequence of raw rows or a DataFrame with one row per record.
        kind: Entity kind of the table.

    Returns:
        TransformResult with accepted records and row rejections.
    """
    kind = EntityKind.parse(kind)
    result = TransformResult(entity=kind)

    with log_context(entity=kind.value):
        for index, row in enumerate(_iter_rows(raw_rows)):
            try:
                outcome = transform_row(row, kind, index)
            except Exception as e:
                error_msg = f"{type(e).__name__}: {e!s}"
                log.warning("Row transform failed", row=index, error=error_msg)
                result.rejected.append(RowRejection(index=index, error=error_msg))
                continue

            if outcome.ok and outcome.value is not None:
                result.accepted.append(outcome.value)
            else:
                error_msg = format_issues(outcome.issues)
                log.debug("Row rejected", row=index, error=error_msg)
                result.rejected.append(RowRejection(index=index, error=error_msg))

        log.info(
            "Transformed rows",
            rows=result.n_rows,
            accepted=len(result.accepted),
            rejected=len(result.rejected),
        )

    return result


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not (isinstance(value, float) and math.isnan(value))


def _clean_error(record: Mapping[str, Any], kind: EntityKind) -> str | None:
    """Coarse structural check of one programmatic record."""
    id_field, name_field = kind.id_field, kind.name_field
    if not record.get(id_field) or not record.get(name_field):
        return f"Missing required {id_field} or {name_field}"

    if kind is EntityKind.CLIENT:
        attributes = record.get("AttributesJSON")
        if isinstance(attributes, str) and attributes:
            try:
                json.loads(attributes)
            except ValueError:
                return "Invalid JSON format in AttributesJSON"
        requested = record.get("RequestedTaskIDs")
        if isinstance(requested, list) and not all(isinstance(v, str) for v in requested):
            return "RequestedTaskIDs must contain only strings"
        return None

    if kind is EntityKind.WORKER:
        list_field, skills_field = "AvailableSlots", "Skills"
    else:
        list_field, skills_field = "PreferredPhase", "RequiredSkills"

    phases = record.get(list_field)
    if phases:
        if not isinstance(phases, list):
            return f"{list_field} must be an array"
        if not all(_is_number(v) for v in phases):
            return f"{list_field} must contain only valid numbers"

    skills = record.get(skills_field)
    if isinstance(skills, list) and not all(isinstance(v, str) for v in skills):
        return f"{skills_field} must contain only strings"
    return None


def validate_and_clean(records: Iterable[Any], kind: EntityKind | str) -> CleanResult:
    """
    Partition programmatic records into valid and invalid ones.

    A coarser pass than ``transform_rows`` for record streams that did not
    come from an upload: only required ID/name presence and collection
    well-formedness are checked. Records may be mappings or record models;
    accepted records are passed through untouched.

    Args:
        records: Records to check.
        kind: Entity kind of the records.

    Returns:
        CleanResult with the valid records and ``(index, error)`` entries.
    """
    kind = EntityKind.parse(kind)
    result = CleanResult()

    for index, record in enumerate(records or []):
        data = record.model_dump() if isinstance(record, BaseModel) else record
        if not isinstance(data, Mapping):
            result.invalid.append(RowRejection(index=index, error="Record is not a mapping"))
            continue
        try:
            error = _clean_error(data, kind)
        except Exception as e:
            error = f"Validation error: {e!s}"
        if error is None:
            result.valid.append(record)
        else:
            result.invalid.append(RowRejection(index=index, error=error))

    log.debug(
        "Cleaned records",
        entity=kind.value,
        valid=len(result.valid),
        invalid=len(result.invalid),
    )
    return result


@dataclass
class EditPreview:
    """Result of previewing a single-field edit."""

    record: Record | None
    issues: list[FieldIssue] = field(default_factory=list)

    @property
    def accepted(self) -> bool:
        """True when the edit may be committed."""
        return self.record is not None


def preview_field_edit(
    record: Mapping[str, Any],
    field_name: str,
    raw_value: Any,
    kind: EntityKind | str,
) -> EditPreview:
    """
    Preview an inline edit of one field.

    The edited row goes through the same normalization and shape checks as
    an uploaded row. The original record is not modified.

    Args:
        record: Current canonical record.
        field_name: Field being edited.
        raw_value: New raw cell value as typed by the user.
        kind: Entity kind of the record.

    Returns:
        EditPreview with the new canonical record, or the issues that
        block the edit.

    Raises:
        ValueError: If the field does not belong to the entity kind.
    """
    kind = EntityKind.parse(kind)
    if field_name not in kind.fields:
        msg = f"Unknown {kind.value} field '{field_name}'. Valid: {', '.join(kind.fields)}"
        raise ValueError(msg)

    # Unparseable numbers would silently fall back to the default
    if field_name in INTEGER_FIELDS and not is_missing(raw_value) and parse_int(raw_value) is None:
        issue = FieldIssue(path=field_name, message="Input should be a valid integer")
        return EditPreview(record=None, issues=[issue])

    row = {name: record.get(name) for name in kind.fields}
    row[field_name] = raw_value

    outcome = transform_row(row, kind, index=0)
    if not outcome.ok or outcome.value is None:
        return EditPreview(record=None, issues=outcome.issues)

    edited = outcome.value
    if record.get(ROW_IDENTITY_KEY):
        edited[ROW_IDENTITY_KEY] = record[ROW_IDENTITY_KEY]
    return EditPreview(record=edited)
