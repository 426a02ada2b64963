"""Shared fixtures for Forensic Timeliner tests.

Provides export-tree builders, a collecting reporter and an artifact
definition factory.
"""

import csv
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from timeliner.core.logging import RunEvent
from timeliner.models.artifact import ArtifactDefinition

CHROME_TIME = "Last Visited Date/Time - UTC+00:00 (M/d/yyyy)"
IE_TIME = "Accessed Date/Time - UTC+00:00 (M/d/yyyy)"

RBCMD_HEADER = ["SourceName", "FileType", "FileName", "FileSize", "DeletedOn"]
CHROME_HEADER = ["URL", "Title", CHROME_TIME]


class CollectingReporter:
    """Reporter that keeps every event for assertions."""

    def __init__(self) -> None:
        self.events: list[RunEvent] = []

    def record(self, event: RunEvent) -> None:
        self.events.append(event)

    def of_kind(self, kind: str) -> list[RunEvent]:
        return [e for e in self.events if e.kind == kind]


def rbcmd_rows(count: int, day_offset: int = 0) -> list[list[str]]:
    """RBCmd records with one deletion per day starting June 1st."""
    return [
        [
            f"$I{i:05d}.docx",
            "$I",
            f"C:\\Users\\alice\\Documents\\file{i}.docx",
            "1024",
            f"2023-06-{i + 1 + day_offset:02d} 08:00:00.0000000",
        ]
        for i in range(count)
    ]


def walk_denying(name: str) -> Callable[..., Any]:
    """os.walk replacement that reports directories called ``name`` as unreadable."""
    real_walk = os.walk

    def _walk(top, topdown=True, onerror=None, followlinks=False):
        for dirpath, dirnames, filenames in real_walk(top, topdown, None, followlinks):
            if name in dirnames:
                dirnames.remove(name)
                if onerror is not None:
                    onerror(PermissionError(13, "Permission denied", os.path.join(dirpath, name)))
            yield dirpath, dirnames, filenames

    return _walk


def chrome_rows(count: int) -> list[list[str]]:
    """AXIOM Chrome history records, one visit per day starting June 1st."""
    return [
        [
            f"https://example.com/page{i}",
            f"Page {i}",
            f"6/{i + 1}/2023 9:30:00 AM",
        ]
        for i in range(count)
    ]


@pytest.fixture
def reporter() -> CollectingReporter:
    """Create a collecting reporter."""
    return CollectingReporter()


@pytest.fixture
def write_csv() -> Callable[..., Path]:
    """Write a CSV export file, creating parent folders."""

    def _write(path: Path, header: list[str], rows: list[list[str]]) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(header)
            writer.writerows(rows)
        return path

    return _write


@pytest.fixture
def make_definition() -> Callable[..., ArtifactDefinition]:
    """Build an artifact definition with overridable fields."""

    def _make(**overrides: Any) -> ArtifactDefinition:
        data: dict[str, Any] = {
            "artifact": "Deleted",
            "tool": "EZTools",
            "artifact_name": "File Deletion",
            "description": "File Deletion",
            "parser": "eztools.deleted",
            "discovery": {
                "filename_patterns": ["RBCmd"],
                "foldername_patterns": ["FileDeletion"],
                "required_headers": ["DeletedOn"],
            },
        }
        data.update(overrides)
        return ArtifactDefinition.model_validate(data)

    return _make


@pytest.fixture
def deleted_definition(make_definition) -> ArtifactDefinition:
    """EZTools RBCmd definition."""
    return make_definition()


@pytest.fixture
def chrome_definition(make_definition) -> ArtifactDefinition:
    """AXIOM Chrome history definition."""
    return make_definition(
        artifact="ChromeHistory",
        tool="Axiom",
        artifact_name="Web History",
        description="Chrome History",
        parser="axiom.chrome_history",
        discovery={"filename_patterns": ["Chrome Web History"], "required_headers": ["URL"]},
    )


@pytest.fixture
def export_tree(tmp_path, write_csv) -> Path:
    """Base directory with 5 RBCmd rows and 3 AXIOM Chrome rows."""
    base = tmp_path / "case"
    write_csv(
        base / "EZTools" / "FileDeletion" / "20230601_RBCmd_Output.csv",
        RBCMD_HEADER,
        rbcmd_rows(5),
    )
    write_csv(base / "Axiom" / "Chrome Web History.csv", CHROME_HEADER, chrome_rows(3))
    return base
