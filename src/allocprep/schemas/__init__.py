"""
Schema definitions.

Record shapes (pydantic) for the input and canonical stage of every entity,
and pandera contracts for the flat export tables.
"""

from allocprep.schemas.exports import ClientExportSchema, TaskExportSchema, WorkerExportSchema
from allocprep.schemas.records import (
    ClientInput,
    ClientRecord,
    TaskInput,
    TaskRecord,
    WorkerInput,
    WorkerRecord,
)
from allocprep.schemas.registry import SchemaInfo, SchemaRegistry, SchemaStage

__all__ = [
    "ClientExportSchema",
    "ClientInput",
    "ClientRecord",
    "SchemaInfo",
    "SchemaRegistry",
    "SchemaStage",
    "TaskExportSchema",
    "TaskInput",
    "TaskRecord",
    "WorkerExportSchema",
    "WorkerInput",
    "WorkerRecord",
]
