"""Canonical timeline row shared by every parser."""

from dataclasses import dataclass
from typing import Any

# Output column order. Every writer emits exactly these columns.
COLUMNS: tuple[str, ...] = (
    "DateTime",
    "TimestampInfo",
    "ArtifactName",
    "Tool",
    "Description",
    "DataPath",
    "DataDetails",
    "FileSize",
    "EvidencePath",
)


@dataclass(frozen=True)
class TimelineRow:
    """A single normalized forensic event.

    ``date_time`` is always rendered as ``YYYY-MM-DDTHH:MM:SS.fffffffZ``
    and ``evidence_path`` is relative to the run base directory.
    """

    date_time: str
    timestamp_info: str
    artifact_name: str
    tool: str
    evidence_path: str
    description: str = ""
    data_path: str = ""
    data_details: str | None = None
    file_size: int | None = None

    def __post_init__(self) -> None:
        if self.data_details == "":
            object.__setattr__(self, "data_details", None)
        if not self.date_time or not self.date_time.endswith("Z"):
            raise ValueError(f"DateTime must be a Z-suffixed UTC value: {self.date_time!r}")
        for name in ("timestamp_info", "artifact_name", "tool", "evidence_path"):
            if not getattr(self, name):
                raise ValueError(f"{name} is required")
        if self.evidence_path.startswith(("/", "\\")) or (
            len(self.evidence_path) > 1 and self.evidence_path[1] == ":"
        ):
            raise ValueError(f"EvidencePath must be relative: {self.evidence_path!r}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary keyed by output column name."""
        return {
            "DateTime": self.date_time,
            "TimestampInfo": self.timestamp_info,
            "ArtifactName": self.artifact_name,
            "Tool": self.tool,
            "Description": self.description,
            "DataPath": self.data_path,
            "DataDetails": self.data_details,
            "FileSize": self.file_size,
            "EvidencePath": self.evidence_path,
        }

    def sort_key(self) -> tuple[Any, ...]:
        """Deterministic ordering key, chronological first."""
        return (
            self.date_time,
            self.tool,
            self.artifact_name,
            self.timestamp_info,
            self.description,
            self.data_path,
            self.data_details or "",
            self.evidence_path,
            -1 if self.file_size is None else self.file_size,
        )
