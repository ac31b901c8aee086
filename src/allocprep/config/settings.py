"""
Typed configuration models using Pydantic.

All configuration is defined here with explicit typing and validation.
"""

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from allocprep.models import EntityKind

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class DataPathsConfig(BaseModel):
    """Input table paths.

    All paths are relative to data_root. Use resolve() to get absolute paths.
    Each table is optional; a missing table is treated as empty.
    """

    model_config = ConfigDict(frozen=True)

    data_root: Path = Field(
        default=Path("./data"), description="Root directory for all data files"
    )
    clients: Path | None = Field(default=None, description="Clients CSV or JSON")
    workers: Path | None = Field(default=None, description="Workers CSV or JSON")
    tasks: Path | None = Field(default=None, description="Tasks CSV or JSON")

    def resolve(self, path_attr: str) -> Path:
        """Resolve a relative path against data_root."""
        rel_path = getattr(self, path_attr)
        if rel_path is None:
            msg = f"Path '{path_attr}' is not configured"
            raise ValueError(msg)
        return self.data_root / rel_path

    def for_kind(self, kind: EntityKind) -> Path | None:
        """Resolved path of an entity table, or None when not configured."""
        if getattr(self, kind.table_name) is None:
            return None
        return self.resolve(kind.table_name)


class HeaderAliasConfig(BaseModel):
    """Extra ``raw header -> field`` aliases per entity table."""

    model_config = ConfigDict(frozen=True)

    clients: dict[str, str] = Field(default_factory=dict)
    workers: dict[str, str] = Field(default_factory=dict)
    tasks: dict[str, str] = Field(default_factory=dict)

    @field_validator("clients", "workers", "tasks")
    @classmethod
    def validate_targets(cls, v: dict[str, str], info: Any) -> dict[str, str]:
        """Ensure every alias points at a field of its table."""
        kind = EntityKind.parse(info.field_name)
        unknown = sorted(target for target in v.values() if target not in kind.fields)
        if unknown:
            msg = (
                f"Unknown {kind.value} field(s) in header aliases: {', '.join(unknown)}. "
                f"Valid: {', '.join(kind.fields)}"
            )
            raise ValueError(msg)
        return v

    def for_kind(self, kind: EntityKind) -> dict[str, str]:
        """Aliases configured for an entity table."""
        return getattr(self, kind.table_name)


class OutputConfig(BaseModel):
    """Output paths configuration.

    Exports are written to ./output/{project}/.
    """

    model_config = ConfigDict(frozen=True)

    output_root: Path = Field(
        default=Path("./output"), description="Root directory for all outputs"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(frozen=True)

    level: str = Field(default="INFO", description="Log level name")
    json_output: bool = Field(default=False, description="Emit JSON log lines")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Ensure the level is a known logging level."""
        level = v.upper()
        if level not in LOG_LEVELS:
            msg = f"Unknown log level {v!r}. Valid: {', '.join(LOG_LEVELS)}"
            raise ValueError(msg)
        return level


class ProjectConfig(BaseModel):
    """Complete project configuration.

    The project name drives the output directory: ./output/{project}/
    """

    model_config = ConfigDict(frozen=True)

    project: str = Field(min_length=1, description="Project identifier (e.g., 'spring-intake')")

    data_paths: DataPathsConfig = Field(default_factory=DataPathsConfig)
    headers: HeaderAliasConfig = Field(default_factory=HeaderAliasConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def export_dir(self) -> Path:
        """Path to the export directory of the project."""
        return self.output.output_root / self.project
