"""Tests for the command-line interface."""

import json
from pathlib import Path

import pandas as pd
from typer.testing import CliRunner

from allocprep import __version__
from allocprep.cli import app

runner = CliRunner()


class TestVersion:
    """Tests for the version command."""

    def test_version(self) -> None:
        """Test that the installed version is printed."""
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestValidate:
    """Tests for the validate command."""

    def test_clean_data(self, project_config_file: Path) -> None:
        """Test that a clean data set exits 0."""
        result = runner.invoke(app, ["validate", "--config", str(project_config_file)])
        assert result.exit_code == 0, result.output
        assert "No validation findings." in result.output

    def test_findings_exit_nonzero(self, project_config_file: Path) -> None:
        """Test that findings make the command fail."""
        workers_csv = project_config_file.parent / "data" / "workers.csv"
        df = pd.read_csv(workers_csv, dtype=str, keep_default_na=False)
        df.loc[1, "worker_id"] = "W1"
        df.to_csv(workers_csv, index=False)

        result = runner.invoke(app, ["validate", "-c", str(project_config_file)])

        assert result.exit_code == 1
        assert "Duplicate" in result.output

    def test_missing_project_name(self, tmp_path: Path) -> None:
        """Test that config errors are reported."""
        config_path = tmp_path / "project.yaml"
        config_path.write_text("data:\n  root: /data\n")

        result = runner.invoke(app, ["validate", "-c", str(config_path)])

        assert result.exit_code == 1
        assert "project" in result.output

    def test_config_must_exist(self, tmp_path: Path) -> None:
        """Test that a missing config file is a usage error."""
        result = runner.invoke(app, ["validate", "-c", str(tmp_path / "missing.yaml")])
        assert result.exit_code == 2


class TestExport:
    """Tests for the export command."""

    def test_export(self, project_config_file: Path, tmp_path: Path) -> None:
        """Test that all files are written to the output directory."""
        out_dir = tmp_path / "exported"

        result = runner.invoke(
            app, ["export", "-c", str(project_config_file), "-o", str(out_dir)]
        )

        assert result.exit_code == 0, result.output
        for name in ("clients.csv", "workers.csv", "tasks.csv", "rules.json"):
            assert (out_dir / name).exists()
        assert "Saved to:" in result.output

    def test_export_default_dir_and_rules(self, project_config_file: Path, tmp_path: Path) -> None:
        """Test the project export directory and a supplied rules file."""
        rules_path = tmp_path / "rules_in.json"
        rules_path.write_text(
            json.dumps(
                {"businessRules": [{"id": "r1", "type": "coRun", "config": {"tasks": "T1,T2"}}]}
            )
        )

        result = runner.invoke(
            app, ["export", "-c", str(project_config_file), "-r", str(rules_path)]
        )

        assert result.exit_code == 0, result.output
        written = json.loads((tmp_path / "output" / "demo" / "rules.json").read_text())
        assert written["businessRules"][0]["config"] == {"tasks": ["T1", "T2"]}
        assert written["metadata"]["counts"] == {"clients": 2, "workers": 2, "tasks": 2}

    def test_export_with_findings(self, project_config_file: Path, tmp_path: Path) -> None:
        """Test that findings are reported but do not block the export."""
        clients_csv = project_config_file.parent / "data" / "clients.csv"
        df = pd.read_csv(clients_csv, dtype=str, keep_default_na=False)
        df.loc[0, "Requested Task IDs"] = "T1, T9"
        df.to_csv(clients_csv, index=False)

        result = runner.invoke(
            app, ["export", "-c", str(project_config_file), "-o", str(tmp_path / "out")]
        )

        assert result.exit_code == 0, result.output
        assert "open validation findings" in result.output
        assert (tmp_path / "out" / "clients.csv").exists()
