"""
Cross-entity validation of the joint client/worker/task snapshot.

Runs the per-record shape checks, duplicate-key detection and the five
referential and feasibility rules over all three tables, then merges
findings that land on the same cell.
"""

from collections.abc import Hashable, Iterable, Mapping
from typing import Any

import pandas as pd
from pydantic import BaseModel

from allocprep.models import FIELD_LABELS, EntityKind, Record, ValidationFinding
from allocprep.normalization.values import (
    is_missing,
    normalize_delimited_string_list,
    normalize_numeric_range_list,
)
from allocprep.schemas.registry import SchemaRegistry, SchemaStage
from allocprep.utils.logging import get_logger

log = get_logger(__name__)


def _as_record(record: Any) -> Record:
    if isinstance(record, BaseModel):
        return record.model_dump()
    if isinstance(record, Mapping):
        return dict(record)
    return {}


def _frame(records: list[Record], kind: EntityKind) -> pd.DataFrame:
    """One object column per field, indexed by row position."""
    columns = {
        name: pd.Series([record.get(name) for record in records], dtype=object)
        for name in kind.fields
    }
    return pd.DataFrame(columns)


def _hashable(value: Any) -> Hashable:
    try:
        hash(value)
    except TypeError:
        return repr(value)
    return value


def _number(value: Any) -> float | None:
    """Numeric reading of a scalar cell, or None when it has none."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return None if pd.isna(value) else float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def _display(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def validate_entity(
    record: Any,
    kind: EntityKind | str,
    row_index: int,
) -> list[ValidationFinding]:
    """
    Re-validate one record against the canonical shape of its kind.

    Args:
        record: Canonical record (dict or pydantic model).
        kind: Entity kind of the record.
        row_index: Position of the record in its table.

    Returns:
        One finding per field issue, attributed to the top-level field.
    """
    kind = EntityKind.parse(kind)
    data = _as_record(record)
    result = SchemaRegistry.validate_record(data, kind, SchemaStage.CANONICAL)
    return [
        ValidationFinding(
            entity=kind.value,
            row_index=row_index,
            field=issue.field,
            message=issue.message,
            value=data.get(issue.field),
        )
        for issue in result.issues
    ]


def _schema_findings(records: list[Record], kind: EntityKind) -> list[ValidationFinding]:
    findings: list[ValidationFinding] = []
    for index, record in enumerate(records):
        findings.extend(validate_entity(record, kind, index))
    return findings


def _duplicate_findings(frame: pd.DataFrame, kind: EntityKind) -> list[ValidationFinding]:
    ids = frame[kind.id_field]
    present = ~ids.map(is_missing).astype(bool)
    keys = ids[present].map(_hashable)
    duplicated = keys[keys.duplicated(keep=False)]

    label = FIELD_LABELS[kind.id_field]
    return [
        ValidationFinding(
            entity=kind.value,
            row_index=int(index),
            field=kind.id_field,
            message=f"Duplicate {label}: {ids[index]}",
            value=ids[index],
        )
        for index in duplicated.index
    ]


def _missing_task_findings(
    clients: pd.DataFrame, tasks: pd.DataFrame
) -> list[ValidationFinding]:
    task_ids = set(tasks["TaskID"].map(_hashable))
    findings: list[ValidationFinding] = []
    requested = clients["RequestedTaskIDs"].map(normalize_delimited_string_list)
    for index, task_list in requested.items():
        for task_id in task_list:
            if task_id not in task_ids:
                findings.append(
                    ValidationFinding(
                        entity=EntityKind.CLIENT.value,
                        row_index=int(index),
                        field="RequestedTaskIDs",
                        message=f'Requested task ID "{task_id}" does not exist',
                        value=task_id,
                    )
                )
    return findings


def _skill_coverage_findings(
    tasks: pd.DataFrame, worker_skills: pd.Series
) -> list[ValidationFinding]:
    available = set(worker_skills.explode().dropna())
    findings: list[ValidationFinding] = []
    required = tasks["RequiredSkills"].map(normalize_delimited_string_list)
    for index, skills in required.items():
        for skill in skills:
            if skill not in available:
                findings.append(
                    ValidationFinding(
                        entity=EntityKind.TASK.value,
                        row_index=int(index),
                        field="RequiredSkills",
                        message=f'Required skill "{skill}" is not available in any worker',
                        value=skill,
                    )
                )
    return findings


def _capacity_findings(workers: pd.DataFrame, slots: pd.Series) -> list[ValidationFinding]:
    slot_counts = slots.map(len)
    max_load = workers["MaxLoadPerPh"].map(_number).astype(float)
    over = max_load.notna() & (slot_counts < max_load)
    return [
        ValidationFinding(
            entity=EntityKind.WORKER.value,
            row_index=int(index),
            field="MaxLoadPerPh",
            message=(
                f"Max load ({_display(workers.at[index, 'MaxLoadPerPh'])}) "
                f"exceeds available slots ({slot_counts[index]})"
            ),
            value=workers.at[index, "MaxLoadPerPh"],
        )
        for index in over[over].index
    ]


def _phase_saturation_findings(tasks: pd.DataFrame, slots: pd.Series) -> list[ValidationFinding]:
    total_phases = slots.explode().dropna().nunique()
    duration = tasks["Duration"].map(_number).astype(float)
    over = duration.notna() & (duration > total_phases)
    return [
        ValidationFinding(
            entity=EntityKind.TASK.value,
            row_index=int(index),
            field="Duration",
            message=(
                f"Duration ({_display(tasks.at[index, 'Duration'])}) "
                f"exceeds total available phases ({total_phases})"
            ),
            value=tasks.at[index, "Duration"],
        )
        for index in over[over].index
    ]


def _concurrency_findings(
    tasks: pd.DataFrame, worker_skills: pd.Series
) -> list[ValidationFinding]:
    skill_sets = [set(skills) for skills in worker_skills]
    required = tasks["RequiredSkills"].map(lambda raw: set(normalize_delimited_string_list(raw)))
    qualified = required.map(lambda need: sum(need <= have for have in skill_sets))
    max_concurrent = tasks["MaxConcurrent"].map(_number).astype(float)
    over = max_concurrent.notna() & (qualified < max_concurrent)
    return [
        ValidationFinding(
            entity=EntityKind.TASK.value,
            row_index=int(index),
            field="MaxConcurrent",
            message=(
                f"Max concurrent ({_display(tasks.at[index, 'MaxConcurrent'])}) "
                f"exceeds qualified workers ({qualified[index]})"
            ),
            value=tasks.at[index, "MaxConcurrent"],
        )
        for index in over[over].index
    ]


def merge_findings(findings: Iterable[ValidationFinding]) -> list[ValidationFinding]:
    """
    Merge findings that share an (entity, row, field) cell.

    The first occurrence fixes the position of the merged finding. Messages
    are joined with "; " and values collected into a list; a cell with a
    single finding keeps its scalar value.
    """
    grouped: dict[tuple[str, int, str], list[ValidationFinding]] = {}
    for finding in findings:
        grouped.setdefault(finding.key, []).append(finding)

    merged: list[ValidationFinding] = []
    for (entity, row_index, field_name), group in grouped.items():
        if len(group) == 1:
            merged.append(group[0])
            continue
        merged.append(
            ValidationFinding(
                entity=entity,
                row_index=row_index,
                field=field_name,
                message="; ".join(f.message for f in group),
                value=[f.value for f in group],
            )
        )
    return merged


def validate_all(
    clients: Iterable[Any] | None,
    workers: Iterable[Any] | None,
    tasks: Iterable[Any] | None,
) -> list[ValidationFinding]:
    """
    Validate the three tables against each other.

    All phases run on the same snapshot, in order: shape re-validation,
    duplicate keys, requested-task existence, skill coverage, slot capacity,
    phase saturation and concurrency feasibility. Findings are advisory;
    nothing is removed from the tables.

    Args:
        clients: Client records (dicts or pydantic models).
        workers: Worker records.
        tasks: Task records.

    Returns:
        Findings with at most one entry per (entity, row, field).
    """
    tables = {
        EntityKind.CLIENT: [_as_record(r) for r in clients or []],
        EntityKind.WORKER: [_as_record(r) for r in workers or []],
        EntityKind.TASK: [_as_record(r) for r in tasks or []],
    }
    frames = {kind: _frame(records, kind) for kind, records in tables.items()}
    client_frame = frames[EntityKind.CLIENT]
    worker_frame = frames[EntityKind.WORKER]
    task_frame = frames[EntityKind.TASK]

    # Aggregates over all workers, recomputed on every call
    worker_skills = worker_frame["Skills"].map(normalize_delimited_string_list)
    worker_slots = worker_frame["AvailableSlots"].map(normalize_numeric_range_list)

    phases: list[tuple[str, list[ValidationFinding]]] = [
        (
            "schema",
            [f for kind, records in tables.items() for f in _schema_findings(records, kind)],
        ),
        (
            "duplicates",
            [f for kind, frame in frames.items() for f in _duplicate_findings(frame, kind)],
        ),
        ("requested_tasks", _missing_task_findings(client_frame, task_frame)),
        ("skill_coverage", _skill_coverage_findings(task_frame, worker_skills)),
        ("slot_capacity", _capacity_findings(worker_frame, worker_slots)),
        ("phase_saturation", _phase_saturation_findings(task_frame, worker_slots)),
        ("concurrency", _concurrency_findings(task_frame, worker_skills)),
    ]

    findings: list[ValidationFinding] = []
    for phase, phase_findings in phases:
        log.debug("Validation phase complete", phase=phase, findings=len(phase_findings))
        findings.extend(phase_findings)

    merged = merge_findings(findings)
    log.info(
        "Validated data set",
        clients=len(client_frame),
        workers=len(worker_frame),
        tasks=len(task_frame),
        findings=len(merged),
    )
    return merged
