"""End-to-end timeline run: aggregate, sort, emit, summarize."""

import sys
from collections.abc import Iterable
from pathlib import Path

from timeliner.core.errors import OutputError
from timeliner.core.logging import LogReporter, Reporter, RunEvent
from timeliner.core.metrics import RunContext
from timeliner.models.artifact import ArtifactDefinition
from timeliner.models.metrics import RunSummary
from timeliner.models.options import RunOptions
from timeliner.pipeline.emit import emit_timeline, open_writer
from timeliner.pipeline.engine import TimelineEngine


def run_timeline(
    definitions: Iterable[ArtifactDefinition],
    options: RunOptions,
    output_path: Path | None = None,
    reporter: Reporter | None = None,
    context: RunContext | None = None,
    show_progress: bool = True,
) -> RunSummary:
    """Build the timeline and write it to a file or stdout.

    Args:
        definitions: Artifact definitions in configuration order
        options: Run options
        output_path: Destination file, or None for stdout
        reporter: Sink for run events
        context: Run context (created if not given)
        show_progress: Report write progress to stderr

    Returns:
        Summary of the completed run

    Raises:
        BaseDirectoryError: If the base directory is not accessible
        OutputError: If the timeline cannot be written
    """
    reporter = reporter or LogReporter()
    context = context or RunContext()

    engine = TimelineEngine(reporter=reporter, context=context)
    rows = engine.run(definitions, options)

    if output_path is not None:
        output_path = Path(output_path)
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(output_path, "w", encoding="utf-8", newline="") as handle:
                writer = open_writer(options.output_format, handle)
                context.rows_written = emit_timeline(
                    rows,
                    writer,
                    start_date=options.start_date,
                    end_date=options.end_date,
                    deduplicate=options.deduplicate,
                    show_progress=show_progress,
                )
        except OSError as e:
            raise OutputError(f"Failed to write timeline: {e}", str(output_path)) from e
    else:
        writer = open_writer(options.output_format, sys.stdout)
        context.rows_written = emit_timeline(
            rows,
            writer,
            start_date=options.start_date,
            end_date=options.end_date,
            deduplicate=options.deduplicate,
            show_progress=show_progress,
        )

    context.complete()
    summary = context.to_summary()

    destination = str(output_path) if output_path is not None else "stdout"
    reporter.record(
        RunEvent(
            kind="summary",
            message=(
                f"Timeline complete: {summary.rows_written} rows written to {destination} "
                f"({summary.warnings} warnings, {summary.errors} errors)"
            ),
            context={"run_id": str(summary.run_id), "rows": summary.rows_written},
        )
    )
    return summary
