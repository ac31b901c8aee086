"""
Export of the cleaned data set.

Writes one flat CSV per entity table plus the rules document. Records are
exported exactly as accepted: advisory findings never filter or block an
export.
"""

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pandas as pd
import pandera.pandas as pa
from pydantic import BaseModel

from allocprep.models import EntityKind
from allocprep.rules.config import RulesDocument, save_rules
from allocprep.schemas.exports import ClientExportSchema, TaskExportSchema, WorkerExportSchema
from allocprep.utils.logging import get_logger

log = get_logger(__name__)

EXPORT_SCHEMAS: dict[EntityKind, type[pa.DataFrameModel]] = {
    EntityKind.CLIENT: ClientExportSchema,
    EntityKind.WORKER: WorkerExportSchema,
    EntityKind.TASK: TaskExportSchema,
}

RULES_FILENAME = "rules.json"


def flatten_value(value: Any) -> str:
    """
    Render one canonical cell as text.

    Lists are comma-joined, mappings become JSON, missing values become an
    empty cell.
    """
    if value is None:
        return ""
    if isinstance(value, Mapping):
        return json.dumps(value, ensure_ascii=False, default=str)
    if isinstance(value, (list, tuple)):
        return ",".join(flatten_value(item) for item in value)
    if isinstance(value, bool):
        return json.dumps(value)
    return str(value)


def to_table(records: Iterable[Any], kind: EntityKind | str) -> pd.DataFrame:
    """
    Flatten canonical records into an export table.

    Args:
        records: Canonical records (dicts or pydantic models).
        kind: Entity kind of the records.

    Returns:
        DataFrame with the entity's columns in canonical order, validated
        against its export contract.

    Raises:
        pandera.errors.SchemaErrors: If the table breaks the export contract.
    """
    kind = EntityKind.parse(kind)
    rows = []
    for record in records:
        data = record.model_dump() if isinstance(record, BaseModel) else record
        rows.append({name: flatten_value(data.get(name)) for name in kind.fields})

    df = pd.DataFrame(rows, columns=list(kind.fields), dtype=object)
    return EXPORT_SCHEMAS[kind].validate(df, lazy=True)


@dataclass
class ExportResult:
    """
    Files written by an export.

    Attributes:
        output_dir: Directory the files were written to.
        files: Written file per table name ("clients", ...) and "rules".
        counts: Exported record count per table name.
    """

    output_dir: Path
    files: dict[str, Path] = field(default_factory=dict)
    counts: dict[str, int] = field(default_factory=dict)


def export_data_set(
    clients: Iterable[Any],
    workers: Iterable[Any],
    tasks: Iterable[Any],
    output_dir: Path,
    rules: RulesDocument | None = None,
) -> ExportResult:
    """
    Write the cleaned tables and the rules document.

    Args:
        clients: Canonical client records.
        workers: Canonical worker records.
        tasks: Canonical task records.
        output_dir: Target directory (created if needed).
        rules: Rules document; defaults are used when omitted. Its metadata
            is refreshed with the exported record counts.

    Returns:
        ExportResult listing the written files.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    result = ExportResult(output_dir=output_dir)

    tables = {
        EntityKind.CLIENT: list(clients),
        EntityKind.WORKER: list(workers),
        EntityKind.TASK: list(tasks),
    }
    for kind, records in tables.items():
        df = to_table(records, kind)
        path = output_dir / f"{kind.table_name}.csv"
        df.to_csv(path, index=False)
        result.files[kind.table_name] = path
        result.counts[kind.table_name] = len(df)
        log.info("Exported table", table=kind.table_name, rows=len(df), path=str(path))

    document = (rules or RulesDocument()).with_counts(
        clients=result.counts["clients"],
        workers=result.counts["workers"],
        tasks=result.counts["tasks"],
    )
    result.files["rules"] = save_rules(document, output_dir / RULES_FILENAME)
    log.info("Exported rules", rules=len(document.business_rules), path=str(result.files["rules"]))

    return result
