"""Issue model shared by run-fatal errors and per-file problems."""

from typing import Any

from pydantic import BaseModel, Field


class StructuredError(BaseModel):
    """A coded problem with a suggested fix.

    Run-fatal errors and per-file/per-artifact issues use the same shape so
    the run summary can list them side by side.
    """

    model_config = {"extra": "forbid"}

    code: str = Field(..., pattern=r"^[A-Z][A-Z0-9_]*$", description="ErrorCode value")
    message: str = Field(..., description="What went wrong")
    remediation: str = Field(..., description="What the operator can do about it")
    retryable: bool = False
    severity: str = Field(default="error", pattern=r"^(warning|error)$")
    context: dict[str, Any] | None = Field(
        default=None,
        description="Tool, artifact, path and similar details",
    )


class ErrorCode:
    """Known issue codes."""

    # non-fatal, collected in the run summary
    NO_FILES_FOUND = "NO_FILES_FOUND"
    DIRECTORY_SKIPPED = "DIRECTORY_SKIPPED"
    FILE_PARSE_FAILURE = "FILE_PARSE_FAILURE"
    ARTIFACT_FAILURE = "ARTIFACT_FAILURE"

    # fatal, raised as TimelinerError
    CONFIG_NOT_FOUND = "CONFIG_NOT_FOUND"
    CONFIG_VALIDATION_ERROR = "CONFIG_VALIDATION_ERROR"
    UNKNOWN_PARSER = "UNKNOWN_PARSER"
    BASE_DIRECTORY_ERROR = "BASE_DIRECTORY_ERROR"
    OUTPUT_ERROR = "OUTPUT_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
