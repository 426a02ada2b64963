"""Aggregation engine: runs every artifact definition and merges rows.

Each definition is processed once, in configuration order. A failure in
one artifact never stops the others; rows gathered before the failure
are kept.
"""

from collections.abc import Iterable, Iterator
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from timeliner.core.errors import BaseDirectoryError, create_error
from timeliner.core.logging import LogReporter, Reporter, RunEvent
from timeliner.core.metrics import RunContext, timed
from timeliner.models.artifact import ArtifactDefinition
from timeliner.models.error import ErrorCode, StructuredError
from timeliner.models.metrics import ArtifactSummary
from timeliner.models.options import RunOptions
from timeliner.models.row import TimelineRow
from timeliner.parsers import BaseParser, FileResult, ParserRegistry
from timeliner.parsers.base import no_files_found


@dataclass
class ArtifactResult:
    """Rows and outcome of one artifact definition."""

    definition: ArtifactDefinition
    rows: list[TimelineRow] = field(default_factory=list)
    issues: list[StructuredError] = field(default_factory=list)
    files_found: int = 0
    files_failed: int = 0
    failed: bool = False
    duration_ms: int = 0

    def add_file(self, file_result: FileResult) -> None:
        """Merge one file's outcome."""
        self.files_found += 1
        if file_result.ok:
            self.rows.extend(file_result.rows)
        else:
            self.files_failed += 1
            self.issues.append(file_result.error)

    @property
    def status(self) -> str:
        if self.failed:
            return "failed"
        if self.files_found == 0:
            return "no_files"
        if self.files_failed:
            return "partial"
        return "ok"

    def to_summary(self) -> ArtifactSummary:
        """Convert to ArtifactSummary model."""
        return ArtifactSummary(
            tool=self.definition.tool,
            artifact=self.definition.artifact,
            status=self.status,
            files_found=self.files_found,
            files_parsed=self.files_found - self.files_failed,
            files_failed=self.files_failed,
            rows=len(self.rows),
            duration_ms=self.duration_ms,
        )


class TimelineEngine:
    """Drives discovery and parsing across artifact definitions."""

    def __init__(self, reporter: Reporter | None = None, context: RunContext | None = None):
        self.reporter = reporter or LogReporter()
        self.context = context or RunContext()

    def run(self, definitions: Iterable[ArtifactDefinition], options: RunOptions) -> list[TimelineRow]:
        """Process all selected definitions and merge their rows.

        Args:
            definitions: Artifact definitions in configuration order
            options: Run options

        Returns:
            Unsorted merged rows

        Raises:
            BaseDirectoryError: If the base directory is not a readable directory
        """
        if not Path(options.base_dir).is_dir():
            raise BaseDirectoryError(options.base_dir)

        selected = [d for d in definitions if d.enabled and options.selects(d.tool, d.artifact)]

        rows: list[TimelineRow] = []
        for result in self._results(selected, options):
            rows.extend(result.rows)
            self.context.add_artifact(result.to_summary(), result.issues)
            result.rows = []

        return rows

    def process_artifact(self, definition: ArtifactDefinition, options: RunOptions) -> ArtifactResult:
        """Run one artifact definition with failure isolation.

        Args:
            definition: Artifact definition
            options: Run options

        Returns:
            ArtifactResult holding every row gathered, even when the
            parser raised part way through
        """
        result = ArtifactResult(definition=definition)
        parser: BaseParser | None = None

        with timed() as timing:
            try:
                parser = ParserRegistry.resolve(definition, self.reporter)
                input_dir = options.input_dir_for(definition.tool)
                for file_result in parser.parse(input_dir, options.base_dir, definition, options):
                    result.add_file(file_result)
                if result.files_found == 0:
                    result.issues.append(no_files_found(definition, input_dir))
            except Exception as e:
                result.failed = True
                current_file = parser.current_file if parser is not None else None
                context = {"tool": definition.tool, "artifact": definition.artifact}
                if current_file:
                    context["path"] = current_file
                issue = create_error(
                    code=ErrorCode.ARTIFACT_FAILURE,
                    message=f"{definition.tool}/{definition.artifact} failed"
                    + (f" while parsing {current_file}" if current_file else "")
                    + f": {type(e).__name__}: {e}",
                    remediation="Rows gathered before the failure were kept; check the parser and export file",
                    context=context,
                )
                result.issues.append(issue)
                self._event("error", issue.message, definition, path=current_file, issue=issue)
            if parser is not None:
                result.issues.extend(parser.warnings)

        result.duration_ms = timing["duration_ms"]
        self._event(
            "summary",
            f"{definition.tool}/{definition.artifact}: {len(result.rows)} rows "
            f"from {result.files_found - result.files_failed}/{result.files_found} files",
            definition,
            rows=len(result.rows),
            status=result.status,
        )
        return result

    def _results(self, definitions: list[ArtifactDefinition], options: RunOptions) -> Iterator[ArtifactResult]:
        """Artifact results in configuration order, sequential or threaded."""
        if options.workers <= 1 or len(definitions) <= 1:
            for definition in definitions:
                yield self.process_artifact(definition, options)
            return

        with ThreadPoolExecutor(max_workers=options.workers, thread_name_prefix="artifact") as pool:
            yield from pool.map(lambda d: self.process_artifact(d, options), definitions)

    def _event(
        self,
        kind: str,
        message: str,
        definition: ArtifactDefinition,
        path: str | None = None,
        issue: StructuredError | None = None,
        **context: object,
    ) -> None:
        self.reporter.record(
            RunEvent(
                kind=kind,  # type: ignore[arg-type]
                message=message,
                tool=definition.tool,
                artifact=definition.artifact,
                path=path,
                issue=issue,
                context=dict(context),
            )
        )
