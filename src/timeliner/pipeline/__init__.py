"""Aggregation, ordering and output of the merged timeline."""

from timeliner.pipeline.emit import (
    TimelineWriter,
    deduplicate_rows,
    emit_timeline,
    filter_rows,
    open_writer,
    sort_rows,
)
from timeliner.pipeline.engine import ArtifactResult, TimelineEngine
from timeliner.pipeline.run import run_timeline

__all__ = [
    "ArtifactResult",
    "TimelineEngine",
    "TimelineWriter",
    "deduplicate_rows",
    "emit_timeline",
    "filter_rows",
    "open_writer",
    "run_timeline",
    "sort_rows",
]
