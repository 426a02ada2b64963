"""Artifact definition models loaded from configuration."""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

DateFormat = Literal["auto", "iso", "mdy", "dmy"]


class DiscoveryRule(BaseModel):
    """How to recognize an artifact's export files on disk."""

    filename_patterns: list[str] = Field(
        default_factory=list,
        description="Substrings or globs matched against the file name",
    )

    foldername_patterns: list[str] = Field(
        default_factory=list,
        description="Substrings or globs matched against parent folder names",
    )

    file_extensions: list[str] = Field(
        default_factory=lambda: [".csv"],
        description="Allowed file extensions",
    )

    required_headers: list[str] = Field(
        default_factory=list,
        description="Header names that must be present (case-insensitive)",
    )

    strict_filename_match: bool = Field(
        default=False,
        description="Require the file name (or stem) to equal a pattern",
    )

    strict_folder_match: bool = Field(
        default=False,
        description="Require a folder name to equal a pattern",
    )

    model_config = {"extra": "forbid", "frozen": True}

    @field_validator("file_extensions")
    @classmethod
    def normalize_extensions(cls, v: list[str]) -> list[str]:
        """Lowercase extensions and ensure a leading dot."""
        return [ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in v]


class ArtifactDefinition(BaseModel):
    """Binds an artifact to its tool, discovery rule and parser.

    Immutable for the duration of a run.
    """

    artifact: str = Field(
        ...,
        min_length=1,
        description="Artifact identity within its tool (e.g., 'Deleted')",
    )

    tool: str = Field(
        ...,
        min_length=1,
        description="Extraction tool that produced the export (e.g., 'EZTools')",
    )

    description: str = Field(
        ...,
        description="Default event description for rows",
    )

    parser: str = Field(
        ...,
        description="Registered parser key (e.g., 'eztools.deleted')",
    )

    artifact_name: str | None = Field(
        default=None,
        description="Logical category written to rows (defaults to artifact)",
    )

    date_format: DateFormat | None = Field(
        default=None,
        description="Override for the parser's date format family",
    )

    enabled: bool = Field(
        default=True,
        description="Whether the artifact is processed",
    )

    discovery: DiscoveryRule = Field(
        default_factory=DiscoveryRule,
        description="File discovery rule",
    )

    model_config = {"extra": "forbid", "frozen": True}

    @property
    def key(self) -> tuple[str, str]:
        """Identity of the definition: (tool, artifact)."""
        return (self.tool, self.artifact)

    @property
    def category(self) -> str:
        """Artifact name written to timeline rows."""
        return self.artifact_name or self.artifact
