"""Data models for Forensic Timeliner."""

from timeliner.models.artifact import ArtifactDefinition, DiscoveryRule
from timeliner.models.error import ErrorCode, StructuredError
from timeliner.models.metrics import ArtifactSummary, RunSummary
from timeliner.models.options import RunOptions
from timeliner.models.row import COLUMNS, TimelineRow

__all__ = [
    "ArtifactDefinition",
    "ArtifactSummary",
    "COLUMNS",
    "DiscoveryRule",
    "ErrorCode",
    "RunOptions",
    "RunSummary",
    "StructuredError",
    "TimelineRow",
]
