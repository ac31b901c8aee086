"""
Record shapes for the three entity tables.

Each entity has two pydantic models:

- ``<Entity>Input``: tolerant shape for freshly resolved upload rows.
  Collection fields may still be raw strings.
- ``<Entity>Record``: strict canonical shape. Collection fields must
  already be normalized lists/objects and numbers must be real integers.
"""

from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, StringConstraints

RequiredText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
Level = Annotated[int, Field(ge=1, le=5)]
PositiveCount = Annotated[int, Field(ge=1)]


def _check_phase_list(value: list[int]) -> list[int]:
    if value != sorted(set(value)):
        msg = "Phase numbers must be distinct and in ascending order"
        raise ValueError(msg)
    return value


PhaseList = Annotated[list[int], AfterValidator(_check_phase_list)]


class InputShape(BaseModel):
    """Base for tolerant input shapes."""

    model_config = ConfigDict(extra="ignore")


class CanonicalShape(BaseModel):
    """Base for strict canonical shapes."""

    model_config = ConfigDict(extra="ignore", strict=True)


class ClientInput(InputShape):
    ClientID: RequiredText = Field(description="Unique client key")
    ClientName: RequiredText
    PriorityLevel: Level = Field(description="1 (lowest) to 5 (highest)")
    RequestedTaskIDs: str | list[str]
    GroupTag: str | None = None
    AttributesJSON: str | dict[str, Any] | None = None


class ClientRecord(CanonicalShape):
    ClientID: RequiredText = Field(description="Unique client key")
    ClientName: RequiredText
    PriorityLevel: Level = Field(description="1 (lowest) to 5 (highest)")
    # Order and repeats are kept as uploaded
    RequestedTaskIDs: list[str]
    GroupTag: str | None = None
    AttributesJSON: dict[str, Any] = Field(default_factory=dict)


class WorkerInput(InputShape):
    WorkerID: RequiredText = Field(description="Unique worker key")
    WorkerName: RequiredText
    Skills: str | list[str]
    AvailableSlots: str | list[int]
    MaxLoadPerPh: PositiveCount = Field(description="Max tasks per phase")
    WorkerGroup: str | None = None
    QualificationLevel: Level


class WorkerRecord(CanonicalShape):
    WorkerID: RequiredText = Field(description="Unique worker key")
    WorkerName: RequiredText
    Skills: list[str]
    AvailableSlots: PhaseList = Field(description="Phases the worker can take work in")
    MaxLoadPerPh: PositiveCount = Field(description="Max tasks per phase")
    WorkerGroup: str | None = None
    QualificationLevel: Level


class TaskInput(InputShape):
    TaskID: RequiredText = Field(description="Unique task key")
    TaskName: RequiredText
    Category: RequiredText
    Duration: PositiveCount = Field(description="Length in phases")
    RequiredSkills: str | list[str]
    PreferredPhase: str | list[int]
    MaxConcurrent: PositiveCount


class TaskRecord(CanonicalShape):
    TaskID: RequiredText = Field(description="Unique task key")
    TaskName: RequiredText
    Category: RequiredText
    Duration: PositiveCount = Field(description="Length in phases")
    RequiredSkills: list[str]
    PreferredPhase: PhaseList
    MaxConcurrent: PositiveCount = Field(description="Parallel assignments allowed")
