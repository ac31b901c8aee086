"""
Configuration loading utilities.

Supports environment variable interpolation and config inheritance.
Minimal configs only need: project
"""

import os
import re
from pathlib import Path
from typing import Any

import yaml

from allocprep.config.settings import (
    DataPathsConfig,
    HeaderAliasConfig,
    LoggingConfig,
    OutputConfig,
    ProjectConfig,
)


def _interpolate_env_vars(value: str) -> str:
    """
    Interpolate environment variables in string values.

    Supports ${VAR} and ${VAR:default} syntax.
    """
    pattern = r"\$\{([^}:]+)(?::([^}]*))?\}"

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        default = match.group(2)
        return os.environ.get(var_name, default if default is not None else "")

    return re.sub(pattern, replacer, value)


def _process_config_values(obj: Any) -> Any:
    """Recursively process config values for env var interpolation."""
    if isinstance(obj, str):
        return _interpolate_env_vars(obj)
    if isinstance(obj, dict):
        return {k: _process_config_values(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_process_config_values(item) for item in obj]
    return obj


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _optional_path(value: Any) -> Path | None:
    return Path(value) if value else None


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML file and process environment variables."""
    with path.open(encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return _process_config_values(data) if data else {}


def load_config(
    config_path: Path,
    base_path: Path | None = None,
) -> ProjectConfig:
    """
    Load project configuration from YAML file(s).

    Minimal config requires only:
        - project: str

    Args:
        config_path: Path to the main configuration file.
        base_path: Optional path to base configuration for inheritance.

    Returns:
        Fully validated ProjectConfig instance.
    """
    # Load base config if provided
    if base_path is not None:
        base_data = load_yaml(base_path)
    else:
        # Try to find base.yaml in same directory
        potential_base = config_path.parent / "base.yaml"
        base_data = (
            load_yaml(potential_base)
            if potential_base.exists() and potential_base != config_path
            else {}
        )

    # Load main config
    main_data = load_yaml(config_path)

    # Merge configs (main overrides base)
    merged = _deep_merge(base_data, main_data)

    # Extract project name (required)
    project = merged.get("project")
    if not project:
        msg = "Config must specify 'project' name"
        raise ValueError(msg)

    # Data paths (each table optional)
    data_data = merged.get("data") or {}
    data_paths = DataPathsConfig(
        data_root=Path(data_data.get("root", "./data")),
        clients=_optional_path(data_data.get("clients")),
        workers=_optional_path(data_data.get("workers")),
        tasks=_optional_path(data_data.get("tasks")),
    )

    # Header aliases, keyed by table name
    headers_data = merged.get("headers") or {}
    headers = HeaderAliasConfig(
        clients=headers_data.get("clients") or {},
        workers=headers_data.get("workers") or {},
        tasks=headers_data.get("tasks") or {},
    )

    # Output config (paths derived from project name)
    output_data = merged.get("output") or {}
    output = OutputConfig(
        output_root=Path(output_data.get("root", "./output")),
    )

    logging_data = merged.get("logging") or {}
    logging = LoggingConfig(
        level=str(logging_data.get("level", "INFO")),
        json_output=bool(logging_data.get("json", False)),
    )

    return ProjectConfig(
        project=str(project),
        data_paths=data_paths,
        headers=headers,
        output=output,
        logging=logging,
    )
