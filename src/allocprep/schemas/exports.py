"""
Pandera contracts for exported tables.

Exports are flat: list fields are comma-joined and mapping fields are JSON
text, so every cell is a string. The contracts pin the column set and order
and the cell type; they do not re-check business constraints, since advisory
findings never block an export.
"""

import pandera.pandas as pa
from pandera.typing import Series


class ClientExportSchema(pa.DataFrameModel):
    """Flat clients table as written to clients.csv."""

    ClientID: Series[str] = pa.Field(description="Unique client key")
    ClientName: Series[str]
    PriorityLevel: Series[str] = pa.Field(description="Integer 1-5 as text")
    RequestedTaskIDs: Series[str] = pa.Field(description="Comma-joined task IDs")
    GroupTag: Series[str]
    AttributesJSON: Series[str] = pa.Field(description="JSON object text")

    class Config:
        """Schema configuration."""

        name = "ClientExportSchema"
        strict = True
        ordered = True
        coerce = True


class WorkerExportSchema(pa.DataFrameModel):
    """Flat workers table as written to workers.csv."""

    WorkerID: Series[str] = pa.Field(description="Unique worker key")
    WorkerName: Series[str]
    Skills: Series[str] = pa.Field(description="Comma-joined skill names")
    AvailableSlots: Series[str] = pa.Field(description="Comma-joined phase numbers")
    MaxLoadPerPh: Series[str]
    WorkerGroup: Series[str]
    QualificationLevel: Series[str]

    class Config:
        """Schema configuration."""

        name = "WorkerExportSchema"
        strict = True
        ordered = True
        coerce = True


class TaskExportSchema(pa.DataFrameModel):
    """Flat tasks table as written to tasks.csv."""

    TaskID: Series[str] = pa.Field(description="Unique task key")
    TaskName: Series[str]
    Category: Series[str]
    Duration: Series[str]
    RequiredSkills: Series[str] = pa.Field(description="Comma-joined skill names")
    PreferredPhase: Series[str] = pa.Field(description="Comma-joined phase numbers")
    MaxConcurrent: Series[str]

    class Config:
        """Schema configuration."""

        name = "TaskExportSchema"
        strict = True
        ordered = True
        coerce = True
