"""Run summary models for Forensic Timeliner."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

from timeliner.models.error import StructuredError


class ArtifactSummary(BaseModel):
    """Outcome of processing one artifact definition."""

    tool: str = Field(..., description="Extraction tool")
    artifact: str = Field(..., description="Artifact identity")

    status: Literal["ok", "no_files", "partial", "failed"] = Field(
        ...,
        description="ok, no_files (nothing discovered), partial (some files "
        "failed) or failed (the artifact raised)",
    )

    files_found: int = Field(default=0, ge=0, description="Candidate files discovered")
    files_parsed: int = Field(default=0, ge=0, description="Files read successfully")
    files_failed: int = Field(default=0, ge=0, description="Files abandoned")
    rows: int = Field(default=0, ge=0, description="Timeline rows contributed")
    duration_ms: int = Field(default=0, ge=0, description="Processing time")

    model_config = {"extra": "forbid"}


class RunSummary(BaseModel):
    """Summary report for a complete run.

    Partial success is the normal outcome: ``issues`` lists every warning
    and error while ``artifacts`` carries the per-artifact counts.
    """

    run_id: UUID = Field(..., description="Unique identifier for this run")
    timeliner_version: str = Field(..., description="Forensic Timeliner version")
    started_at: datetime = Field(..., description="ISO-8601 start timestamp")
    completed_at: datetime | None = Field(default=None, description="ISO-8601 completion timestamp")
    duration_ms: int = Field(default=0, ge=0, description="Total run time")

    artifacts: list[ArtifactSummary] = Field(default_factory=list)
    rows_collected: int = Field(default=0, ge=0, description="Rows gathered by all parsers")
    rows_written: int = Field(default=0, ge=0, description="Rows emitted after filtering")
    warnings: int = Field(default=0, ge=0)
    errors: int = Field(default=0, ge=0)
    issues: list[StructuredError] = Field(default_factory=list)

    model_config = {"extra": "forbid"}
