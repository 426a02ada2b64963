"""Run-fatal errors and structured issue helpers."""

import sys
from pathlib import Path
from typing import Any, NoReturn

from timeliner.models.error import ErrorCode, StructuredError


class TimelinerError(Exception):
    """Base exception for conditions that stop a whole run.

    Subclasses fix the error code and default remediation; the wrapped
    StructuredError is what the CLI prints.
    """

    code: str = ErrorCode.INTERNAL_ERROR
    remediation: str = "This is an unexpected error. Please report it."
    retryable: bool = False

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        remediation: str | None = None,
    ):
        self.error = StructuredError(
            code=self.code,
            message=message,
            remediation=remediation or self.remediation,
            retryable=self.retryable,
            context=context,
        )
        super().__init__(message)

    def to_structured(self) -> StructuredError:
        return self.error

    def to_structured_error(self) -> dict:
        """JSON-serializable form for output."""
        return self.error.model_dump(mode="json", exclude_none=True)


class ConfigNotFoundError(TimelinerError):
    """Artifact configuration file or directory does not exist."""

    code = ErrorCode.CONFIG_NOT_FOUND
    remediation = "Check the --config path"

    def __init__(self, path: Path):
        super().__init__(f"Artifact configuration not found: {path}", {"path": str(path)})


class ConfigValidationError(TimelinerError):
    """Artifact configuration failed validation."""

    code = ErrorCode.CONFIG_VALIDATION_ERROR
    remediation = "Fix the listed problems in the definition file"

    def __init__(self, path: Path, errors: list[str]):
        super().__init__(
            f"Artifact configuration '{path}' is invalid: {len(errors)} problem(s)",
            {"path": str(path), "errors": errors},
        )


class UnknownParserError(TimelinerError):
    """Artifact definition references a parser that is not registered."""

    code = ErrorCode.UNKNOWN_PARSER

    def __init__(self, parser_name: str, supported: list[str]):
        super().__init__(
            f"Parser '{parser_name}' is not registered",
            {"parser": parser_name, "supported": supported},
            remediation=f"Use one of: {', '.join(supported)}",
        )


class BaseDirectoryError(TimelinerError):
    """Base evidence directory is missing or unreadable."""

    code = ErrorCode.BASE_DIRECTORY_ERROR
    remediation = "Check that the directory exists and is readable"

    def __init__(self, path: Path):
        super().__init__(f"Base directory is not accessible: {path}", {"path": str(path)})


class OutputError(TimelinerError):
    """Timeline output could not be written."""

    code = ErrorCode.OUTPUT_ERROR
    remediation = "Check the output path and free disk space"
    retryable = True

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message, {"path": path} if path else None)


def handle_error(error: Exception, exit_code: int = 1) -> NoReturn:
    """Print an error as structured JSON on stderr and exit.

    Args:
        error: A TimelinerError, or any exception (reported as INTERNAL_ERROR)
        exit_code: Process exit status
    """
    from timeliner.cli.output import output_error

    if not isinstance(error, TimelinerError):
        error = TimelinerError(str(error), {"type": type(error).__name__})
    output_error(error.to_structured())
    sys.exit(exit_code)


def create_error(
    code: str,
    message: str,
    remediation: str,
    severity: str = "error",
    context: dict[str, Any] | None = None,
) -> StructuredError:
    """Build a non-fatal issue for the run summary.

    Args:
        code: ErrorCode value
        message: Human-readable message
        remediation: Suggested fix
        severity: 'warning' or 'error'
        context: Tool, artifact, path and similar details

    Returns:
        StructuredError instance
    """
    return StructuredError(
        code=code,
        message=message,
        remediation=remediation,
        severity=severity,
        context=context,
    )
