"""
Schema registry for record shapes.

Provides lookup of the input and canonical shape of every entity kind and
the ``validate_record`` contract used by the transformer and validator.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar

from pydantic import BaseModel, ValidationError

from allocprep.models import EntityKind, FieldIssue, SchemaResult
from allocprep.schemas.records import (
    ClientInput,
    ClientRecord,
    TaskInput,
    TaskRecord,
    WorkerInput,
    WorkerRecord,
)


class SchemaStage(str, Enum):
    """Stage of the transform a shape belongs to."""

    INPUT = "input"  # Tolerant, raw collections allowed
    CANONICAL = "canonical"  # Strict, normalized values only


@dataclass(frozen=True)
class SchemaInfo:
    """Metadata about a registered shape."""

    name: str
    model: type[BaseModel]
    entity: EntityKind
    stage: SchemaStage
    description: str


def issues_from_error(error: ValidationError) -> list[FieldIssue]:
    """
    Flatten a pydantic ValidationError into field issues.

    Union member tags in error locations are dropped so that the path only
    holds the field name and list positions ("Skills.2").
    """
    issues: list[FieldIssue] = []
    for detail in error.errors():
        loc = detail.get("loc", ())
        if loc:
            parts = [str(loc[0])] + [str(p) for p in loc[1:] if isinstance(p, int)]
            path = ".".join(parts)
        else:
            path = "record"
        issue = FieldIssue(path=path, message=detail.get("msg", "Invalid value"))
        if issue not in issues:
            issues.append(issue)
    return issues


class SchemaRegistry:
    """
    Centralized registry of record shapes.

    One input and one canonical shape per entity kind.
    """

    _schemas: ClassVar[dict[str, SchemaInfo]] = {
        "client_input": SchemaInfo(
            name="client_input",
            model=ClientInput,
            entity=EntityKind.CLIENT,
            stage=SchemaStage.INPUT,
            description="Client row as resolved from an upload",
        ),
        "client": SchemaInfo(
            name="client",
            model=ClientRecord,
            entity=EntityKind.CLIENT,
            stage=SchemaStage.CANONICAL,
            description="Canonical client record",
        ),
        "worker_input": SchemaInfo(
            name="worker_input",
            model=WorkerInput,
            entity=EntityKind.WORKER,
            stage=SchemaStage.INPUT,
            description="Worker row as resolved from an upload",
        ),
        "worker": SchemaInfo(
            name="worker",
            model=WorkerRecord,
            entity=EntityKind.WORKER,
            stage=SchemaStage.CANONICAL,
            description="Canonical worker record",
        ),
        "task_input": SchemaInfo(
            name="task_input",
            model=TaskInput,
            entity=EntityKind.TASK,
            stage=SchemaStage.INPUT,
            description="Task row as resolved from an upload",
        ),
        "task": SchemaInfo(
            name="task",
            model=TaskRecord,
            entity=EntityKind.TASK,
            stage=SchemaStage.CANONICAL,
            description="Canonical task record",
        ),
    }

    @staticmethod
    def schema_name(kind: EntityKind | str, stage: SchemaStage | str) -> str:
        """Registry name of the shape for an entity kind and stage."""
        kind = EntityKind.parse(kind)
        stage = SchemaStage(stage)
        return kind.value if stage is SchemaStage.CANONICAL else f"{kind.value}_input"

    @classmethod
    def get_info(cls, name: str) -> SchemaInfo:
        """
        Get full schema info by name.

        Raises:
            KeyError: If the name is not registered.
        """
        if name not in cls._schemas:
            available = ", ".join(cls._schemas.keys())
            msg = f"Unknown schema '{name}'. Available: {available}"
            raise KeyError(msg)
        return cls._schemas[name]

    @classmethod
    def get(
        cls,
        kind: EntityKind | str,
        stage: SchemaStage | str = SchemaStage.CANONICAL,
    ) -> type[BaseModel]:
        """Get the pydantic model of an entity kind at a stage."""
        return cls.get_info(cls.schema_name(kind, stage)).model

    @classmethod
    def list_schemas(cls) -> list[str]:
        """List all registered schema names."""
        return list(cls._schemas.keys())

    @classmethod
    def list_by_stage(cls, stage: SchemaStage) -> list[str]:
        """List schema names registered for one stage."""
        return [name for name, info in cls._schemas.items() if info.stage == stage]

    @classmethod
    def validate_record(
        cls,
        candidate: Mapping[str, Any],
        kind: EntityKind | str,
        stage: SchemaStage | str = SchemaStage.CANONICAL,
    ) -> SchemaResult:
        """
        Validate one candidate record against a registered shape.

        Never raises on bad data: failures come back as issues.

        Args:
            candidate: Field name -> value mapping.
            kind: Entity kind of the record.
            stage: Input or canonical shape.

        Returns:
            SchemaResult with the validated record (field order of the shape)
            or the list of field issues.
        """
        model = cls.get(kind, stage)
        try:
            validated = model.model_validate(candidate)
        except ValidationError as e:
            return SchemaResult(ok=False, issues=issues_from_error(e))
        return SchemaResult(ok=True, value=validated.model_dump())
