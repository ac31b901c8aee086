"""
Rules configuration document.

Typed models for the ``rules.json`` document exported next to the cleaned
tables: business rules from the rule builder, prioritization weights and
global settings, plus generation metadata. JSON keys are camelCase.
"""

import json
import re
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from allocprep import __version__
from allocprep.normalization.values import normalize_numeric_range_list


class RulesModel(BaseModel):
    """Base for all rules document models (frozen, camelCase JSON)."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class RuleType(str, Enum):
    """Business rule kinds offered by the rule builder."""

    CO_RUN = "coRun"
    SLOT_RESTRICTION = "slotRestriction"
    LOAD_LIMIT = "loadLimit"
    PHASE_WINDOW = "phaseWindow"
    PATTERN_MATCH = "patternMatch"


class CoRunConfig(RulesModel):
    """Tasks that must run together."""

    tasks: list[str] = Field(min_length=2, description="Task IDs that run together")

    @field_validator("tasks", mode="before")
    @classmethod
    def split_tasks(cls, v: Any) -> Any:
        """Accept a comma-separated string of task IDs."""
        if isinstance(v, str):
            return [part.strip() for part in v.split(",") if part.strip()]
        return v


class SlotRestrictionConfig(RulesModel):
    """Minimum number of common slots for a client or worker group."""

    group: str = Field(min_length=1)
    min_slots: int = Field(default=1, ge=1)


class LoadLimitConfig(RulesModel):
    """Maximum slots per phase for a worker group."""

    group: str = Field(min_length=1)
    max_load: int = Field(default=1, ge=1)


class PhaseWindowConfig(RulesModel):
    """Phases a task is allowed to run in."""

    task: str = Field(min_length=1)
    allowed_phases: list[int] = Field(default_factory=list)

    @field_validator("allowed_phases", mode="before")
    @classmethod
    def normalize_phases(cls, v: Any) -> list[int]:
        """Accept the same phase spellings as the data tables ("1-3,5")."""
        return normalize_numeric_range_list(v)


class PatternMatchConfig(RulesModel):
    """Regex-driven rule template."""

    regex: str = Field(min_length=1)
    template: str = ""

    @field_validator("regex")
    @classmethod
    def validate_regex(cls, v: str) -> str:
        """Ensure the pattern compiles."""
        try:
            re.compile(v)
        except re.error as e:
            msg = f"Invalid regex {v!r}: {e}"
            raise ValueError(msg) from e
        return v


RULE_CONFIGS: dict[RuleType, type[RulesModel]] = {
    RuleType.CO_RUN: CoRunConfig,
    RuleType.SLOT_RESTRICTION: SlotRestrictionConfig,
    RuleType.LOAD_LIMIT: LoadLimitConfig,
    RuleType.PHASE_WINDOW: PhaseWindowConfig,
    RuleType.PATTERN_MATCH: PatternMatchConfig,
}


class BusinessRule(RulesModel):
    """A single business rule; ``config`` is checked against the rule type."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    type: RuleType
    description: str = ""
    config: dict[str, Any] = Field(default_factory=dict)
    priority: int | None = Field(default=None, ge=0)

    @field_validator("config")
    @classmethod
    def validate_config(cls, v: dict[str, Any], info: Any) -> dict[str, Any]:
        """Validate and normalize the config for the rule type."""
        rule_type = info.data.get("type")
        if rule_type is None:
            return v
        parsed = RULE_CONFIGS[rule_type].model_validate(v)
        return parsed.model_dump(by_alias=True)


class PriorityWeights(RulesModel):
    """Relative importance of the allocation objectives (0-10)."""

    client_priority: float = Field(default=1, ge=0, le=10)
    worker_fairness: float = Field(default=1, ge=0, le=10)
    task_urgency: float = Field(default=1, ge=0, le=10)
    resource_utilization: float = Field(default=1, ge=0, le=10)


class OptimizationGoal(str, Enum):
    """What the allocator should optimize for."""

    BALANCED = "balanced"
    SPEED = "speed"
    QUALITY = "quality"
    FAIRNESS = "fairness"


class GlobalSettings(RulesModel):
    """Switches applying to the whole allocation run."""

    allow_overrides: bool = True
    strict_validation: bool = True
    optimization_goal: OptimizationGoal = OptimizationGoal.BALANCED


class RecordCounts(RulesModel):
    """Number of records exported per table."""

    clients: int = Field(default=0, ge=0)
    workers: int = Field(default=0, ge=0)
    tasks: int = Field(default=0, ge=0)


class RulesMetadata(RulesModel):
    """Generation details of a rules document."""

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    version: str = __version__
    counts: RecordCounts = Field(default_factory=RecordCounts)


class RulesDocument(RulesModel):
    """The complete ``rules.json`` document."""

    metadata: RulesMetadata = Field(default_factory=RulesMetadata)
    business_rules: list[BusinessRule] = Field(default_factory=list)
    prioritization_weights: PriorityWeights = Field(default_factory=PriorityWeights)
    global_settings: GlobalSettings = Field(default_factory=GlobalSettings)

    @model_validator(mode="after")
    def validate_unique_rule_ids(self) -> "RulesDocument":
        """Ensure rule IDs are unique."""
        seen: set[str] = set()
        duplicates = []
        for rule in self.business_rules:
            if rule.id in seen:
                duplicates.append(rule.id)
            seen.add(rule.id)
        if duplicates:
            msg = f"Duplicate business rule IDs: {', '.join(duplicates)}"
            raise ValueError(msg)
        return self

    def with_counts(self, clients: int, workers: int, tasks: int) -> "RulesDocument":
        """Copy of the document with fresh metadata for the given counts."""
        metadata = RulesMetadata(
            counts=RecordCounts(clients=clients, workers=workers, tasks=tasks)
        )
        return self.model_copy(update={"metadata": metadata})


def dump_rules(document: RulesDocument) -> str:
    """Serialize a rules document to camelCase JSON."""
    return json.dumps(document.model_dump(mode="json", by_alias=True), indent=2)


def parse_rules(text: str) -> RulesDocument:
    """
    Parse a rules document from JSON text.

    Raises:
        pydantic.ValidationError: If the document is malformed.
    """
    return RulesDocument.model_validate_json(text)


def load_rules(path: Path) -> RulesDocument:
    """
    Load a rules document from a JSON file.

    Args:
        path: Path to ``rules.json``.

    Returns:
        Validated RulesDocument.

    Raises:
        FileNotFoundError: If the file does not exist.
        pydantic.ValidationError: If the document is malformed.
    """
    if not path.exists():
        msg = f"Rules file not found: {path}"
        raise FileNotFoundError(msg)
    return parse_rules(path.read_text(encoding="utf-8"))


def save_rules(document: RulesDocument, path: Path) -> Path:
    """Write a rules document as JSON, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dump_rules(document) + "\n", encoding="utf-8")
    return path
