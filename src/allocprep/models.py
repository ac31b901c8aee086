"""
Shared value types for the allocation data set.

Entity kinds, field layouts and the result containers returned by the
transformer and validator live here so every layer speaks the same types.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

Record = dict[str, Any]


class EntityKind(str, Enum):
    """The three related tables of an allocation data set."""

    CLIENT = "client"
    WORKER = "worker"
    TASK = "task"

    @classmethod
    def parse(cls, value: "EntityKind | str") -> "EntityKind":
        """
        Resolve an entity kind from its enum member or string value.

        Args:
            value: ``EntityKind`` member or one of "client", "worker", "task"
                (case-insensitive, plural accepted).

        Returns:
            Matching EntityKind.

        Raises:
            ValueError: If the value names no entity kind.
        """
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        if text.endswith("s"):
            text = text[:-1]
        try:
            return cls(text)
        except ValueError:
            valid = ", ".join(kind.value for kind in cls)
            msg = f"Unknown entity kind {value!r}. Valid: {valid}"
            raise ValueError(msg) from None

    @property
    def id_field(self) -> str:
        """Natural key column of the table."""
        return ENTITY_FIELDS[self][0]

    @property
    def name_field(self) -> str:
        """Display name column of the table."""
        return ENTITY_FIELDS[self][1]

    @property
    def fields(self) -> tuple[str, ...]:
        """Canonical field order of the table."""
        return ENTITY_FIELDS[self]

    @property
    def table_name(self) -> str:
        """Plural table name used for files and reports."""
        return f"{self.value}s"


ENTITY_FIELDS: dict[EntityKind, tuple[str, ...]] = {
    EntityKind.CLIENT: (
        "ClientID",
        "ClientName",
        "PriorityLevel",
        "RequestedTaskIDs",
        "GroupTag",
        "AttributesJSON",
    ),
    EntityKind.WORKER: (
        "WorkerID",
        "WorkerName",
        "Skills",
        "AvailableSlots",
        "MaxLoadPerPh",
        "WorkerGroup",
        "QualificationLevel",
    ),
    EntityKind.TASK: (
        "TaskID",
        "TaskName",
        "Category",
        "Duration",
        "RequiredSkills",
        "PreferredPhase",
        "MaxConcurrent",
    ),
}

# Human-readable spelling of each field, used for "Spaced Case" headers
# and for messages
FIELD_LABELS: dict[str, str] = {
    "ClientID": "Client ID",
    "ClientName": "Client Name",
    "PriorityLevel": "Priority Level",
    "RequestedTaskIDs": "Requested Task IDs",
    "GroupTag": "Group Tag",
    "AttributesJSON": "Attributes JSON",
    "WorkerID": "Worker ID",
    "WorkerName": "Worker Name",
    "Skills": "Skills",
    "AvailableSlots": "Available Slots",
    "MaxLoadPerPh": "Max Load Per Ph",
    "WorkerGroup": "Worker Group",
    "QualificationLevel": "Qualification Level",
    "TaskID": "Task ID",
    "TaskName": "Task Name",
    "Category": "Category",
    "Duration": "Duration",
    "RequiredSkills": "Required Skills",
    "PreferredPhase": "Preferred Phase",
    "MaxConcurrent": "Max Concurrent",
}

ROW_IDENTITY_KEY = "id"


@dataclass(frozen=True)
class FieldIssue:
    """A single field-level schema failure."""

    path: str
    message: str

    @property
    def field(self) -> str:
        """Top-level field the issue belongs to."""
        return self.path.split(".", 1)[0]


@dataclass
class ValidationFinding:
    """
    Advisory finding reported against one cell of one table.

    Attributes:
        entity: Entity kind value ("client", "worker", "task").
        row_index: Zero-based position of the record in its table.
        field: Field name the finding is attributed to.
        message: Human-readable description; merged findings join their
            messages with "; ".
        value: Offending value, or the list of offending values when several
            findings were merged into one.
    """

    entity: str
    row_index: int
    field: str
    message: str
    value: Any = None

    @property
    def key(self) -> tuple[str, int, str]:
        """Grouping key used to merge findings on the same cell."""
        return (self.entity, self.row_index, self.field)


@dataclass(frozen=True)
class RowRejection:
    """A row (or record) excluded from the canonical set."""

    index: int
    error: str


@dataclass
class TransformResult:
    """Outcome of transforming one raw table."""

    entity: EntityKind
    accepted: list[Record] = field(default_factory=list)
    rejected: list[RowRejection] = field(default_factory=list)

    @property
    def n_rows(self) -> int:
        """Number of input rows seen."""
        return len(self.accepted) + len(self.rejected)


@dataclass
class CleanResult:
    """Partition of a programmatic record stream into valid and invalid."""

    valid: list[Any] = field(default_factory=list)
    invalid: list[RowRejection] = field(default_factory=list)


@dataclass
class SchemaResult:
    """
    Outcome of validating one candidate record against a shape.

    ``value`` holds the validated record when ``ok`` is True; ``issues``
    lists the field failures otherwise.
    """

    ok: bool
    value: Record | None = None
    issues: list[FieldIssue] = field(default_factory=list)
