"""Tests for configuration system."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from allocprep.config import (
    DataPathsConfig,
    HeaderAliasConfig,
    LoggingConfig,
    ProjectConfig,
    load_config,
)
from allocprep.models import EntityKind


class TestDataPathsConfig:
    """Tests for DataPathsConfig."""

    def test_resolve(self) -> None:
        """Test resolving table paths against the data root."""
        config = DataPathsConfig(data_root=Path("/data"), clients=Path("clients.csv"))
        assert config.resolve("clients") == Path("/data/clients.csv")
        assert config.for_kind(EntityKind.CLIENT) == Path("/data/clients.csv")

    def test_unconfigured_table(self) -> None:
        """Test that tables are optional."""
        config = DataPathsConfig()
        assert config.for_kind(EntityKind.TASK) is None
        with pytest.raises(ValueError, match="not configured"):
            config.resolve("tasks")


class TestHeaderAliasConfig:
    """Tests for configured header aliases."""

    def test_valid_aliases(self) -> None:
        """Test aliases onto known fields."""
        config = HeaderAliasConfig(workers={"Skill Set": "Skills"})
        assert config.for_kind(EntityKind.WORKER) == {"Skill Set": "Skills"}
        assert config.for_kind(EntityKind.CLIENT) == {}

    def test_unknown_target(self) -> None:
        """Test that aliases must point at a field of their own table."""
        with pytest.raises(ValidationError, match="Unknown worker field"):
            HeaderAliasConfig(workers={"Skill Set": "RequiredSkills"})


class TestLoggingConfig:
    """Tests for LoggingConfig."""

    def test_level_normalized(self) -> None:
        """Test that level names are upper-cased."""
        assert LoggingConfig(level="debug").level == "DEBUG"

    def test_unknown_level(self) -> None:
        """Test that unknown levels are rejected."""
        with pytest.raises(ValidationError, match="Unknown log level"):
            LoggingConfig(level="chatty")


class TestProjectConfig:
    """Tests for ProjectConfig."""

    def test_export_dir(self) -> None:
        """Test that the export directory derives from the project name."""
        config = ProjectConfig(project="spring-intake")
        assert config.export_dir == Path("./output/spring-intake")

    def test_empty_project_name(self) -> None:
        """Test that the project name is required."""
        with pytest.raises(ValidationError):
            ProjectConfig(project="")

    def test_frozen(self) -> None:
        """Test that configs cannot be modified."""
        config = ProjectConfig(project="demo")
        with pytest.raises(ValidationError):
            config.project = "other"


class TestLoadConfig:
    """Tests for config loading."""

    def test_minimal_config(self, tmp_path: Path) -> None:
        """Test that only the project name is required."""
        config_path = tmp_path / "project.yaml"
        config_path.write_text("project: demo\n")

        config = load_config(config_path)

        assert config.project == "demo"
        assert config.data_paths.clients is None
        assert config.logging.level == "INFO"
        assert config.output.output_root == Path("./output")

    def test_full_config(self, tmp_path: Path) -> None:
        """Test every section of a project file."""
        config_path = tmp_path / "project.yaml"
        config_path.write_text(
            """
project: spring
data:
  root: /srv/data
  clients: clients.csv
  tasks: tasks.json
headers:
  workers:
    Skill Set: Skills
output:
  root: /srv/out
logging:
  level: debug
  json: true
"""
        )

        config = load_config(config_path)

        assert config.data_paths.for_kind(EntityKind.CLIENT) == Path("/srv/data/clients.csv")
        assert config.data_paths.for_kind(EntityKind.WORKER) is None
        assert config.data_paths.for_kind(EntityKind.TASK) == Path("/srv/data/tasks.json")
        assert config.headers.workers == {"Skill Set": "Skills"}
        assert config.export_dir == Path("/srv/out/spring")
        assert config.logging.level == "DEBUG"
        assert config.logging.json_output is True

    def test_env_var_interpolation(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test ${VAR} and ${VAR:default} interpolation."""
        monkeypatch.setenv("ALLOCPREP_TEST_ROOT", "/mnt/uploads")
        monkeypatch.delenv("ALLOCPREP_TEST_LEVEL", raising=False)
        config_path = tmp_path / "project.yaml"
        config_path.write_text(
            """
project: demo
data:
  root: ${ALLOCPREP_TEST_ROOT}
logging:
  level: ${ALLOCPREP_TEST_LEVEL:warning}
"""
        )

        config = load_config(config_path)

        assert config.data_paths.data_root == Path("/mnt/uploads")
        assert config.logging.level == "WARNING"

    def test_base_inheritance(self, tmp_path: Path) -> None:
        """Test that base.yaml next to the config is merged in."""
        (tmp_path / "base.yaml").write_text(
            """
data:
  root: /shared
  workers: workers.csv
logging:
  level: ERROR
"""
        )
        config_path = tmp_path / "project.yaml"
        config_path.write_text(
            """
project: demo
data:
  clients: clients.csv
"""
        )

        config = load_config(config_path)

        assert config.data_paths.for_kind(EntityKind.WORKER) == Path("/shared/workers.csv")
        assert config.data_paths.for_kind(EntityKind.CLIENT) == Path("/shared/clients.csv")
        assert config.logging.level == "ERROR"

    def test_explicit_base_path(self, tmp_path: Path) -> None:
        """Test an explicit base file outside the config directory."""
        base_dir = tmp_path / "shared"
        base_dir.mkdir()
        base_path = base_dir / "defaults.yaml"
        base_path.write_text("project: from-base\n")
        config_path = tmp_path / "project.yaml"
        config_path.write_text("logging:\n  level: ERROR\n")

        config = load_config(config_path, base_path=base_path)

        assert config.project == "from-base"
        assert config.logging.level == "ERROR"

    def test_missing_project(self, tmp_path: Path) -> None:
        """Test that a config without project name fails."""
        config_path = tmp_path / "project.yaml"
        config_path.write_text("data:\n  root: /data\n")

        with pytest.raises(ValueError, match="project"):
            load_config(config_path)

    def test_invalid_alias_target(self, tmp_path: Path) -> None:
        """Test that alias targets are checked when loading."""
        config_path = tmp_path / "project.yaml"
        config_path.write_text("project: demo\nheaders:\n  clients:\n    Firm: Company\n")

        with pytest.raises(ValidationError):
            load_config(config_path)

    def test_example_config(self, project_root: Path) -> None:
        """Test that the shipped example config loads."""
        config = load_config(project_root / "configs" / "example.yaml")
        assert config.project == "example"
        assert config.data_paths.for_kind(EntityKind.CLIENT) is not None
