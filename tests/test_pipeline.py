"""Tests for loading and preparing a project's tables."""

import json
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

from allocprep.config import DataPathsConfig, HeaderAliasConfig, ProjectConfig, load_config
from allocprep.models import EntityKind
from allocprep.pipeline import load_rows, prepare_table, run_pipeline


class TestLoadRows:
    """Tests for reading raw table files."""

    def test_csv_keeps_blanks_as_text(self, tmp_path: Path) -> None:
        """Test that CSV cells are read as text."""
        path = tmp_path / "clients.csv"
        path.write_text("ClientID,PriorityLevel,GroupTag\nC1,3,\nC2,NA,x\n")

        rows = load_rows(path)

        assert rows == [
            {"ClientID": "C1", "PriorityLevel": "3", "GroupTag": ""},
            {"ClientID": "C2", "PriorityLevel": "NA", "GroupTag": "x"},
        ]

    def test_json_list(self, tmp_path: Path) -> None:
        """Test JSON tables."""
        path = tmp_path / "tasks.json"
        path.write_text(json.dumps([{"TaskID": "T1", "PreferredPhase": [1, 2]}]))
        assert load_rows(path) == [{"TaskID": "T1", "PreferredPhase": [1, 2]}]

    def test_json_not_a_list(self, tmp_path: Path) -> None:
        """Test that a JSON object is not a table."""
        path = tmp_path / "tasks.json"
        path.write_text('{"TaskID": "T1"}')
        with pytest.raises(ValueError, match="list of rows"):
            load_rows(path)

    def test_empty_csv(self, tmp_path: Path) -> None:
        """Test that an empty file is an empty table."""
        path = tmp_path / "workers.csv"
        path.write_text("")
        assert load_rows(path) == []

    def test_unsupported_format(self, tmp_path: Path) -> None:
        """Test unsupported file types."""
        path = tmp_path / "workers.xlsx"
        path.write_bytes(b"PK")
        with pytest.raises(ValueError, match="Unsupported table format"):
            load_rows(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test missing data files."""
        with pytest.raises(FileNotFoundError, match="Data file not found"):
            load_rows(tmp_path / "missing.csv")


class TestPrepareTable:
    """Tests for header mapping plus transform of one table."""

    def test_configured_alias(self) -> None:
        """Test that configured header aliases reach the transformer."""
        config = ProjectConfig(
            project="demo",
            headers=HeaderAliasConfig(workers={"Skill Set": "Skills", "Phases": "AvailableSlots"}),
        )
        rows = [
            {
                "WorkerID": "W1",
                "WorkerName": "Alice",
                "Skill Set": "python, sql",
                "Phases": "1-3",
                "MaxLoadPerPh": "2",
                "QualificationLevel": "4",
            }
        ]

        result = prepare_table(rows, EntityKind.WORKER, config)

        assert result.rejected == []
        assert result.accepted[0]["Skills"] == ["python", "sql"]
        assert result.accepted[0]["AvailableSlots"] == [1, 2, 3]

    def test_failing_mapper(self, raw_task_rows: list[dict[str, Any]]) -> None:
        """Test that a failing mapper leaves the built-in matching in place."""

        def offline(raw: list[str], expected: list[str]) -> dict[str, str | None]:
            raise ConnectionError("offline")

        result = prepare_table(raw_task_rows, EntityKind.TASK, ProjectConfig(project="x"), offline)

        assert len(result.accepted) == 2
        assert result.rejected == []


class TestRunPipeline:
    """Tests for the end-to-end preparation."""

    def test_clean_project(
        self,
        project_config_file: Path,
        clients: list[dict[str, Any]],
        workers: list[dict[str, Any]],
        tasks: list[dict[str, Any]],
    ) -> None:
        """Test that the fixture project comes through without problems."""
        result = run_pipeline(load_config(project_config_file))

        assert result.records(EntityKind.CLIENT) == clients
        assert result.records(EntityKind.WORKER) == workers
        assert result.records(EntityKind.TASK) == tasks
        assert result.findings == []
        assert result.n_rejected == 0
        assert not result.has_problems

    def test_problems_reported(self, tmp_path: Path) -> None:
        """Test that rejections and findings both count as problems."""
        pd.DataFrame(
            [
                {"TaskID": "T1", "TaskName": "Build", "Category": "Dev", "RequiredSkills": "go"},
                {"TaskID": "T2", "TaskName": "", "Category": "Dev"},
            ]
        ).to_csv(tmp_path / "tasks.csv", index=False)
        config = ProjectConfig(
            project="demo",
            data_paths=DataPathsConfig(data_root=tmp_path, tasks=Path("tasks.csv")),
        )

        result = run_pipeline(config)

        assert result.n_rejected == 1
        assert result.transforms[EntityKind.TASK].rejected[0].index == 1
        messages = [finding.message for finding in result.findings]
        assert 'Required skill "go" is not available in any worker' in messages
        assert result.has_problems

    def test_unconfigured_tables_are_empty(
        self, tmp_path: Path, raw_worker_rows: list[dict[str, Any]]
    ) -> None:
        """Test that only configured tables are loaded."""
        pd.DataFrame(raw_worker_rows).to_csv(tmp_path / "workers.csv", index=False)
        config = ProjectConfig(
            project="demo",
            data_paths=DataPathsConfig(data_root=tmp_path, workers=Path("workers.csv")),
        )

        result = run_pipeline(config)

        assert result.records(EntityKind.CLIENT) == []
        assert len(result.records(EntityKind.WORKER)) == 2
        assert not result.has_problems
