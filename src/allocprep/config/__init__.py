"""
Configuration management with typed Pydantic models.

Provides environment-aware YAML configuration loading.
"""

from allocprep.config.loader import load_config
from allocprep.config.settings import (
    DataPathsConfig,
    HeaderAliasConfig,
    LoggingConfig,
    OutputConfig,
    ProjectConfig,
)

__all__ = [
    "DataPathsConfig",
    "HeaderAliasConfig",
    "LoggingConfig",
    "OutputConfig",
    "ProjectConfig",
    "load_config",
]
