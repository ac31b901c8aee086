"""Pytest configuration and shared fixtures."""

import copy
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pandas as pd
import pytest
import structlog


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    """Drop any logging configuration a test (e.g. a CLI run) installed."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def clients() -> list[dict[str, Any]]:
    """Canonical client records consistent with the worker/task fixtures."""
    return copy.deepcopy(
        [
            {
                "ClientID": "C1",
                "ClientName": "Acme Corp",
                "PriorityLevel": 3,
                "RequestedTaskIDs": ["T1", "T2"],
                "GroupTag": "GroupA",
                "AttributesJSON": {"budget": 100},
                "id": "C1",
            },
            {
                "ClientID": "C2",
                "ClientName": "Globex",
                "PriorityLevel": 5,
                "RequestedTaskIDs": ["T1"],
                "GroupTag": None,
                "AttributesJSON": {},
                "id": "C2",
            },
        ]
    )


@pytest.fixture
def workers() -> list[dict[str, Any]]:
    """Canonical worker records offering phases 1-4."""
    return copy.deepcopy(
        [
            {
                "WorkerID": "W1",
                "WorkerName": "Alice",
                "Skills": ["python", "ml"],
                "AvailableSlots": [1, 2, 3],
                "MaxLoadPerPh": 2,
                "WorkerGroup": "A",
                "QualificationLevel": 4,
                "id": "W1",
            },
            {
                "WorkerID": "W2",
                "WorkerName": "Bob",
                "Skills": ["python"],
                "AvailableSlots": [2, 3, 4],
                "MaxLoadPerPh": 1,
                "WorkerGroup": "B",
                "QualificationLevel": 3,
                "id": "W2",
            },
        ]
    )


@pytest.fixture
def tasks() -> list[dict[str, Any]]:
    """Canonical task records coverable by the worker fixture."""
    return copy.deepcopy(
        [
            {
                "TaskID": "T1",
                "TaskName": "Build API",
                "Category": "Development",
                "Duration": 2,
                "RequiredSkills": ["python"],
                "PreferredPhase": [1, 2],
                "MaxConcurrent": 2,
                "id": "T1",
            },
            {
                "TaskID": "T2",
                "TaskName": "Train model",
                "Category": "Research",
                "Duration": 1,
                "RequiredSkills": ["ml"],
                "PreferredPhase": [3],
                "MaxConcurrent": 1,
                "id": "T2",
            },
        ]
    )


@pytest.fixture
def raw_client_rows() -> list[dict[str, Any]]:
    """Client rows as they arrive from a spreadsheet upload."""
    return [
        {
            "Client ID": "C1",
            "client_name": " Acme Corp ",
            "PriorityLevel": "3",
            "Requested Task IDs": "T1, T2",
            "GroupTag": "GroupA",
            "AttributesJSON": '{"budget": 100}',
        },
        {
            "ClientID": "C2",
            "ClientName": "Globex",
            "PriorityLevel": 5,
            "RequestedTaskIDs": ["T1"],
            "GroupTag": "",
            "AttributesJSON": "",
        },
    ]


@pytest.fixture
def raw_worker_rows() -> list[dict[str, Any]]:
    """Worker rows with string-encoded collections."""
    return [
        {
            "WorkerID": "W1",
            "WorkerName": "Alice",
            "Skills": "python, ml",
            "AvailableSlots": "[1-3]",
            "MaxLoadPerPh": "2",
            "WorkerGroup": "A",
            "QualificationLevel": "4",
        },
        {
            "worker_id": "W2",
            "worker_name": "Bob",
            "skills": "python",
            "available_slots": "2,3,4",
            "max_load_per_ph": 1,
            "worker_group": "B",
            "qualification_level": 3,
        },
    ]


@pytest.fixture
def raw_task_rows() -> list[dict[str, Any]]:
    """Task rows with mixed header spellings."""
    return [
        {
            "TaskID": "T1",
            "TaskName": "Build API",
            "Category": "Development",
            "Duration": "2",
            "RequiredSkills": "python",
            "PreferredPhase": "1-2",
            "MaxConcurrent": "2",
        },
        {
            "Task ID": "T2",
            "Task Name": "Train model",
            "Category": "Research",
            "Duration": 1,
            "Required Skills": "ml",
            "Preferred Phase": "[3]",
            "Max Concurrent": 1,
        },
    ]


@pytest.fixture
def raw_frames(
    raw_client_rows: list[dict[str, Any]],
    raw_worker_rows: list[dict[str, Any]],
    raw_task_rows: list[dict[str, Any]],
) -> dict[str, pd.DataFrame]:
    """Raw rows as DataFrames keyed by table name."""
    return {
        "clients": pd.DataFrame(raw_client_rows),
        "workers": pd.DataFrame(raw_worker_rows),
        "tasks": pd.DataFrame(raw_task_rows),
    }


def write_csv(path: Path, rows: list[dict[str, Any]]) -> Path:
    """Write rows as a CSV file the way a spreadsheet export would."""
    pd.DataFrame(rows).to_csv(path, index=False)
    return path


@pytest.fixture
def project_config_file(
    tmp_path: Path,
    raw_client_rows: list[dict[str, Any]],
    raw_worker_rows: list[dict[str, Any]],
    raw_task_rows: list[dict[str, Any]],
) -> Path:
    """Project YAML pointing at CSV copies of the raw fixture rows."""
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    # Collections must be text in a CSV
    client_rows = [dict(row) for row in raw_client_rows]
    client_rows[1]["RequestedTaskIDs"] = "T1"
    write_csv(data_dir / "clients.csv", client_rows)
    write_csv(data_dir / "workers.csv", raw_worker_rows)
    write_csv(data_dir / "tasks.csv", raw_task_rows)

    config_path = tmp_path / "project.yaml"
    config_path.write_text(
        f"""
project: demo
data:
  root: {data_dir}
  clients: clients.csv
  workers: workers.csv
  tasks: tasks.csv
output:
  root: {tmp_path / "output"}
logging:
  level: WARNING
""",
        encoding="utf-8",
    )
    return config_path
