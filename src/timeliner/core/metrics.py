"""Run ID generation, summary counters and run context."""

import threading
import time
from collections.abc import Generator, Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from uuid import UUID, uuid4

from timeliner import __version__
from timeliner.models.error import StructuredError
from timeliner.models.metrics import ArtifactSummary, RunSummary


def generate_run_id() -> UUID:
    """Generate a unique run ID.

    Returns:
        UUID v4 for run correlation
    """
    return uuid4()


class SummaryCounters:
    """Row counts per (tool, artifact), accumulated across a run.

    Updates are serialized with a lock so artifact workers may report
    from their own threads.
    """

    def __init__(self) -> None:
        self._counts: dict[tuple[str, str], int] = {}
        self._lock = threading.Lock()

    def add(self, tool: str, artifact: str, count: int) -> None:
        """Add rows contributed by an artifact."""
        with self._lock:
            key = (tool, artifact)
            self._counts[key] = self._counts.get(key, 0) + count

    def get(self, tool: str, artifact: str) -> int:
        """Rows counted for an artifact (0 if never counted)."""
        return self._counts.get((tool, artifact), 0)

    def total(self) -> int:
        """Rows counted across all artifacts."""
        return sum(self._counts.values())

    def reset(self) -> None:
        """Clear all counts between independent runs."""
        with self._lock:
            self._counts.clear()

    def __iter__(self) -> Iterator[tuple[tuple[str, str], int]]:
        return iter(list(self._counts.items()))

    def __len__(self) -> int:
        return len(self._counts)


class RunContext:
    """Context for one timeline run: ID, timing, counters and issues."""

    def __init__(self, run_id: UUID | None = None):
        self.run_id = run_id or generate_run_id()
        self.started_at = datetime.now(UTC)
        self.completed_at: datetime | None = None
        self.counters = SummaryCounters()
        self.artifacts: list[ArtifactSummary] = []
        self.issues: list[StructuredError] = []
        self.rows_written = 0
        self._start = time.perf_counter()
        self._end: float | None = None

    @property
    def duration_ms(self) -> int:
        """Run duration in milliseconds."""
        end = self._end or time.perf_counter()
        return int((end - self._start) * 1000)

    def add_artifact(self, summary: ArtifactSummary, issues: list[StructuredError]) -> None:
        """Record an artifact outcome and update the counters."""
        self.artifacts.append(summary)
        self.issues.extend(issues)
        self.counters.add(summary.tool, summary.artifact, summary.rows)

    def complete(self) -> None:
        """Mark the run as complete."""
        self.completed_at = datetime.now(UTC)
        self._end = time.perf_counter()

    def to_summary(self) -> RunSummary:
        """Convert to RunSummary model."""
        return RunSummary(
            run_id=self.run_id,
            timeliner_version=__version__,
            started_at=self.started_at,
            completed_at=self.completed_at,
            duration_ms=self.duration_ms,
            artifacts=list(self.artifacts),
            rows_collected=self.counters.total(),
            rows_written=self.rows_written,
            warnings=sum(1 for i in self.issues if i.severity == "warning"),
            errors=sum(1 for i in self.issues if i.severity == "error"),
            issues=list(self.issues),
        )


@contextmanager
def timed() -> Generator[dict[str, int], None, None]:
    """Context manager measuring elapsed milliseconds.

    Usage:
        with timed() as timing:
            process()
        elapsed = timing["duration_ms"]
    """
    result = {"duration_ms": 0}
    start = time.perf_counter()
    try:
        yield result
    finally:
        result["duration_ms"] = int((time.perf_counter() - start) * 1000)
