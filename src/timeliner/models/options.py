"""Run options supplied by the CLI layer."""

from datetime import date
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, model_validator

OutputFormat = Literal["csv", "json", "jsonl"]


class RunOptions(BaseModel):
    """Options for one timeline run."""

    base_dir: Path = Field(
        ...,
        description="Base evidence directory; evidence paths are relative to it",
    )

    tool_dirs: dict[str, Path] = Field(
        default_factory=dict,
        description="Per-tool input directories (defaults to base_dir)",
    )

    output_format: OutputFormat = Field(default="csv")

    start_date: date | None = Field(default=None, description="Inclusive lower date bound")
    end_date: date | None = Field(default=None, description="Inclusive upper date bound")

    deduplicate: bool = Field(default=False, description="Drop identical rows")

    workers: int = Field(default=1, ge=1, le=64, description="Artifact worker threads")

    tools: list[str] = Field(default_factory=list, description="Only run these tools")
    artifacts: list[str] = Field(default_factory=list, description="Only run these artifacts")

    model_config = {"extra": "forbid"}

    @model_validator(mode="after")
    def check_date_range(self) -> "RunOptions":
        """Reject an inverted date range."""
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self

    def input_dir_for(self, tool: str) -> Path:
        """Directory to scan for a tool's exports."""
        for name, path in self.tool_dirs.items():
            if name.lower() == tool.lower():
                return path
        return self.base_dir

    def selects(self, tool: str, artifact: str) -> bool:
        """Check the tool/artifact selection filters."""
        if self.tools and tool.lower() not in {t.lower() for t in self.tools}:
            return False
        if self.artifacts and artifact.lower() not in {a.lower() for a in self.artifacts}:
            return False
        return True
