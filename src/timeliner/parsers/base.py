"""Base parser interface for Forensic Timeliner.

Every vendor parser shares the same external behavior: discover export
files, read each one as tolerant CSV, map records to timeline rows and
report per-file outcomes. Subclasses only supply ``map_record``.
"""

import csv
import sys
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import ClassVar

from timeliner.core.discovery import find_artifact_files, relative_evidence_path
from timeliner.core.errors import UnknownParserError, create_error
from timeliner.core.logging import LogReporter, Reporter, RunEvent
from timeliner.core.timestamps import UtcTimestamp, normalize_timestamp
from timeliner.models.artifact import ArtifactDefinition
from timeliner.models.error import ErrorCode, StructuredError
from timeliner.models.options import RunOptions
from timeliner.models.row import TimelineRow

csv.field_size_limit(min(sys.maxsize, 2**31 - 1))


def no_files_found(artifact: ArtifactDefinition, input_dir: Path) -> StructuredError:
    """Warning issued when discovery finds no export files."""
    return create_error(
        code=ErrorCode.NO_FILES_FOUND,
        message=f"No matching files found in: {input_dir}",
        remediation="Check the input directory and the artifact's discovery patterns",
        severity="warning",
        context={"tool": artifact.tool, "artifact": artifact.artifact, "path": str(input_dir)},
    )


def directory_skipped(artifact: ArtifactDefinition, exc: OSError) -> StructuredError:
    """Warning issued when discovery cannot list a directory."""
    return create_error(
        code=ErrorCode.DIRECTORY_SKIPPED,
        message=f"Skipping unreadable directory: {exc.filename} ({exc.strerror})",
        remediation="Check permissions on the directory; files below it were not scanned",
        severity="warning",
        context={"tool": artifact.tool, "artifact": artifact.artifact, "path": str(exc.filename)},
    )


def file_parse_failure(artifact: ArtifactDefinition, evidence_path: str, exc: Exception) -> StructuredError:
    return create_error(
        code=ErrorCode.FILE_PARSE_FAILURE,
        message=f"Failed to parse {evidence_path}: {exc}",
        remediation="Check the export file for corruption or re-export it",
        context={"tool": artifact.tool, "artifact": artifact.artifact, "path": evidence_path},
    )


class CsvRecord:
    """One export record with case-insensitive, fallible field access.

    Accessors return None instead of raising when a column is absent,
    blank or malformed.
    """

    __slots__ = ("_fields",)

    def __init__(self, raw: dict[str | None, str | list[str] | None]):
        self._fields = {
            key.strip().lower(): value
            for key, value in raw.items()
            if isinstance(key, str) and isinstance(value, str)
        }

    def get_string(self, name: str) -> str | None:
        """Trimmed text of a column, or None if absent or blank."""
        value = self._fields.get(name.lower())
        if value is None:
            return None
        value = value.strip()
        return value or None

    def first_string(self, *names: str) -> str | None:
        """First non-blank value among several candidate columns."""
        for name in names:
            value = self.get_string(name)
            if value is not None:
                return value
        return None

    def get_int(self, name: str) -> int | None:
        """Integer value of a column, tolerating thousands separators."""
        value = self.get_string(name)
        if value is None:
            return None
        try:
            return int(value.replace(",", ""))
        except ValueError:
            try:
                return int(float(value))
            except (ValueError, OverflowError):
                return None

    def get_timestamp(self, name: str, date_format: str = "auto") -> UtcTimestamp | None:
        """UTC timestamp of a column, or None if missing or unparseable."""
        return normalize_timestamp(self.get_string(name), date_format)

    def __contains__(self, name: str) -> bool:
        return name.lower() in self._fields


@dataclass(frozen=True)
class SourceFile:
    """The export file being parsed, passed to ``map_record``."""

    path: Path
    evidence_path: str
    artifact: ArtifactDefinition
    date_format: str

    def row(
        self,
        timestamp: UtcTimestamp,
        timestamp_info: str,
        data_path: str | None = "",
        data_details: str | None = None,
        description: str | None = None,
        artifact_name: str | None = None,
        file_size: int | None = None,
    ) -> TimelineRow:
        """Build a row with the artifact's defaults filled in."""
        return TimelineRow(
            date_time=timestamp.isoformat(),
            timestamp_info=timestamp_info,
            artifact_name=artifact_name or self.artifact.category,
            tool=self.artifact.tool,
            description=self.artifact.description if description is None else description,
            data_path=data_path or "",
            data_details=data_details,
            file_size=file_size,
            evidence_path=self.evidence_path,
        )


@dataclass
class FileResult:
    """Outcome of parsing one export file."""

    path: Path
    evidence_path: str
    rows: list[TimelineRow] = field(default_factory=list)
    error: StructuredError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def row_count(self) -> int:
        return len(self.rows)


class BaseParser(ABC):
    """Base class for all export parsers.

    Parsers must implement ``map_record`` to turn one export record into
    zero or more timeline rows. Records whose mandatory timestamp or
    subject field is missing yield nothing.
    """

    # Parser metadata (must be set by subclasses)
    name: ClassVar[str]
    tool: ClassVar[str]
    date_format: ClassVar[str] = "auto"

    def __init__(self, reporter: Reporter | None = None) -> None:
        """Initialize parser.

        Args:
            reporter: Sink for progress, warning and error events
        """
        self.reporter = reporter or LogReporter()
        self.current_file: str | None = None
        self.warnings: list[StructuredError] = []

    def parse(
        self,
        input_dir: Path,
        base_dir: Path,
        artifact: ArtifactDefinition,
        options: RunOptions,
    ) -> Iterator[FileResult]:
        """Discover and parse every export file of an artifact.

        Args:
            input_dir: Directory to scan for exports
            base_dir: Run base directory (evidence paths are relative to it)
            artifact: Artifact definition being processed
            options: Run options

        Yields:
            One FileResult per discovered file, in discovery order. Skipped
            directories are collected in ``warnings``.
        """
        self._event("scan", f"Scanning for relevant CSVs under: {input_dir}", artifact)

        def _skipped(exc: OSError) -> None:
            issue = directory_skipped(artifact, exc)
            self.warnings.append(issue)
            self._event("warning", issue.message, artifact, path=str(exc.filename), issue=issue)

        files = find_artifact_files(input_dir, base_dir, artifact.discovery, on_skip=_skipped)
        if not files:
            issue = no_files_found(artifact, input_dir)
            self._event("warning", issue.message, artifact, issue=issue)
            return

        for path in files:
            yield self.parse_file(path, base_dir, artifact)
        self.current_file = None

    def parse_file(self, path: Path, base_dir: Path, artifact: ArtifactDefinition) -> FileResult:
        """Parse one export file.

        Any failure while reading or mapping the file produces a failed
        FileResult without rows instead of raising, so sibling files are
        still parsed.
        """
        evidence_path = relative_evidence_path(path, base_dir)
        self.current_file = evidence_path
        source = SourceFile(
            path=path,
            evidence_path=evidence_path,
            artifact=artifact,
            date_format=artifact.date_format or self.date_format,
        )
        self._event("process", f"Processing: {evidence_path}", artifact, path=evidence_path)

        result = FileResult(path=path, evidence_path=evidence_path)
        try:
            with open(path, encoding="utf-8-sig", newline="") as handle:
                for raw in csv.DictReader(handle):
                    result.rows.extend(self.map_record(CsvRecord(raw), source))
        except (OSError, UnicodeError, csv.Error) as e:
            return self._failed(result, artifact, e)
        except Exception as e:
            # mapping bug or unexpected record shape
            return self._failed(result, artifact, RuntimeError(f"{type(e).__name__}: {e}"))

        self._event(
            "success",
            f"Parsed {result.row_count} timeline rows from: {path.name}",
            artifact,
            path=evidence_path,
            rows=result.row_count,
        )
        return result

    def _failed(self, result: FileResult, artifact: ArtifactDefinition, exc: Exception) -> FileResult:
        result.rows = []
        result.error = file_parse_failure(artifact, result.evidence_path, exc)
        self._event("error", result.error.message, artifact, path=result.evidence_path, issue=result.error)
        return result

    @abstractmethod
    def map_record(self, record: CsvRecord, source: SourceFile) -> Iterable[TimelineRow]:
        """Map one export record to timeline rows.

        Args:
            record: Export record
            source: File being parsed, with row-building defaults

        Returns:
            Zero or more TimelineRow instances
        """
        ...

    def timestamp(self, record: CsvRecord, column: str, source: SourceFile) -> UtcTimestamp | None:
        """Read a timestamp column using the file's date format family."""
        return record.get_timestamp(column, source.date_format)

    def _event(
        self,
        kind: str,
        message: str,
        artifact: ArtifactDefinition,
        path: str | None = None,
        issue: StructuredError | None = None,
        **context: object,
    ) -> None:
        self.reporter.record(
            RunEvent(
                kind=kind,  # type: ignore[arg-type]
                message=message,
                tool=artifact.tool,
                artifact=artifact.artifact,
                path=path,
                issue=issue,
                context=dict(context),
            )
        )


class ParserRegistry:
    """Registry of available parsers, keyed by parser name."""

    _parsers: ClassVar[dict[str, type[BaseParser]]] = {}

    @classmethod
    def register(cls, parser_class: type[BaseParser]) -> type[BaseParser]:
        """Register a parser class.

        Args:
            parser_class: Parser class to register

        Returns:
            The registered class (for use as decorator)
        """
        existing = cls._parsers.get(parser_class.name)
        if existing is not None and existing is not parser_class:
            raise ValueError(f"Parser name '{parser_class.name}' is already registered")
        cls._parsers[parser_class.name] = parser_class
        return parser_class

    @classmethod
    def get(cls, name: str) -> type[BaseParser] | None:
        """Get parser class by name.

        Args:
            name: Parser name (e.g., 'eztools.deleted')

        Returns:
            Parser class or None if not found
        """
        return cls._parsers.get(name)

    @classmethod
    def supported_parsers(cls) -> list[str]:
        """Get sorted list of registered parser names."""
        return sorted(cls._parsers)

    @classmethod
    def resolve(cls, artifact: ArtifactDefinition, reporter: Reporter | None = None) -> BaseParser:
        """Instantiate the parser responsible for an artifact definition.

        Raises:
            UnknownParserError: If the definition names an unregistered parser
        """
        parser_class = cls.get(artifact.parser)
        if parser_class is None:
            raise UnknownParserError(artifact.parser, cls.supported_parsers())
        return parser_class(reporter=reporter)
