"""
End-to-end preparation of one project's data set.

Loads the three tables named in the configuration, maps their headers,
transforms them into canonical records and validates the joint snapshot.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pandas as pd

from allocprep.assist.headers import (
    HeaderMapper,
    alias_header_mapper,
    apply_header_mapping,
    map_headers,
)
from allocprep.config.settings import ProjectConfig
from allocprep.models import EntityKind, Record, TransformResult, ValidationFinding
from allocprep.normalization.columns import unmatched_columns
from allocprep.transform.core import transform_rows
from allocprep.utils.logging import get_logger
from allocprep.validation.core import validate_all

log = get_logger(__name__)

SUPPORTED_SUFFIXES = (".csv", ".json")


def load_rows(path: Path) -> list[Any]:
    """
    Load raw rows from a CSV or JSON file.

    CSV cells are read as text with blanks kept as empty strings, so that
    normalization sees what the spreadsheet held. JSON files must contain a
    list of row objects.

    Args:
        path: Table file.

    Returns:
        Raw rows in file order.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the format is unsupported or the JSON is not a list.
    """
    if not path.exists():
        msg = f"Data file not found: {path}"
        raise FileNotFoundError(msg)

    suffix = path.suffix.lower()
    if suffix == ".csv":
        try:
            df = pd.read_csv(path, dtype=str, keep_default_na=False)
        except pd.errors.EmptyDataError:
            log.warning("Empty data file", path=str(path))
            return []
        return df.to_dict(orient="records")

    if suffix == ".json":
        with path.open(encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, list):
            msg = f"JSON table must be a list of rows, got {type(data).__name__}: {path}"
            raise ValueError(msg)
        return data

    msg = f"Unsupported table format '{suffix}'. Supported: {', '.join(SUPPORTED_SUFFIXES)}"
    raise ValueError(msg)


def _headers(rows: list[Any]) -> list[str]:
    """Union of row keys in first-seen order."""
    seen: dict[str, None] = {}
    for row in rows:
        if isinstance(row, dict):
            seen.update(dict.fromkeys(str(key) for key in row))
    return list(seen)


@dataclass
class PipelineResult:
    """Outcome of preparing a project's data set."""

    transforms: dict[EntityKind, TransformResult] = field(default_factory=dict)
    findings: list[ValidationFinding] = field(default_factory=list)

    def records(self, kind: EntityKind) -> list[Record]:
        """Accepted records of one table."""
        result = self.transforms.get(kind)
        return result.accepted if result is not None else []

    @property
    def n_rejected(self) -> int:
        """Rows rejected across all tables."""
        return sum(len(result.rejected) for result in self.transforms.values())

    @property
    def has_problems(self) -> bool:
        """True when any row was rejected or any finding was reported."""
        return self.n_rejected > 0 or bool(self.findings)


def prepare_table(
    rows: list[Any],
    kind: EntityKind,
    config: ProjectConfig,
    mapper: HeaderMapper = alias_header_mapper,
) -> TransformResult:
    """
    Map headers of one raw table and transform it.

    Args:
        rows: Raw rows as loaded.
        kind: Entity kind of the table.
        config: Project configuration (header aliases).
        mapper: Header mapper to consult.

    Returns:
        TransformResult of the table.
    """
    headers = _headers(rows)
    mapping = map_headers(headers, kind, mapper, config.headers.for_kind(kind))
    mapped = apply_header_mapping(rows, mapping)
    unmatched_columns(_headers(mapped), kind)
    return transform_rows(mapped, kind)


def run_pipeline(
    config: ProjectConfig,
    mapper: HeaderMapper = alias_header_mapper,
) -> PipelineResult:
    """
    Load, transform and validate all configured tables.

    Tables without a configured path are treated as empty.

    Args:
        config: Project configuration.
        mapper: Header mapper to consult.

    Returns:
        PipelineResult with per-table transforms and the merged findings.
    """
    result = PipelineResult()

    for kind in EntityKind:
        path = config.data_paths.for_kind(kind)
        if path is None:
            log.info("No table configured", table=kind.table_name)
            rows: list[Any] = []
        else:
            rows = load_rows(path)
            log.info("Loaded table", table=kind.table_name, rows=len(rows), path=str(path))
        result.transforms[kind] = prepare_table(rows, kind, config, mapper)

    result.findings = validate_all(
        result.records(EntityKind.CLIENT),
        result.records(EntityKind.WORKER),
        result.records(EntityKind.TASK),
    )
    return result
