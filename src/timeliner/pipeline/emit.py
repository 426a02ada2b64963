"""Deterministic ordering and serialization of the merged timeline."""

import csv
import json
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from datetime import UTC, date, datetime, time, timedelta
from typing import IO

from timeliner.core.logging import ProgressReporter
from timeliner.core.timestamps import render_timestamp
from timeliner.models.options import OutputFormat
from timeliner.models.row import COLUMNS, TimelineRow


def sort_rows(rows: list[TimelineRow]) -> list[TimelineRow]:
    """Sort rows in place: chronological, then tool, artifact and the rest.

    DateTime strings have a fixed width, so string order is time order.
    """
    rows.sort(key=TimelineRow.sort_key)
    return rows


def filter_rows(
    rows: Iterable[TimelineRow],
    start_date: date | None = None,
    end_date: date | None = None,
) -> Iterator[TimelineRow]:
    """Keep rows whose date falls within an inclusive date range."""
    lower = render_timestamp(datetime.combine(start_date, time.min, UTC)) if start_date else None
    upper = None
    if end_date and end_date < date.max:
        upper = render_timestamp(datetime.combine(end_date + timedelta(days=1), time.min, UTC))

    for row in rows:
        if lower is not None and row.date_time < lower:
            continue
        if upper is not None and row.date_time >= upper:
            continue
        yield row


def deduplicate_rows(rows: Iterable[TimelineRow]) -> Iterator[TimelineRow]:
    """Drop identical rows from a sorted sequence.

    Identical rows share a sort key, so they are adjacent once sorted.
    """
    previous: TimelineRow | None = None
    for row in rows:
        if row != previous:
            yield row
        previous = row


class TimelineWriter(ABC):
    """Sink that appends timeline rows to a text stream."""

    format: OutputFormat

    def __init__(self, stream: IO[str]):
        self.stream = stream
        self.rows_written = 0
        self._started = False

    def write_row(self, row: TimelineRow) -> None:
        """Append one row."""
        if not self._started:
            self._begin()
            self._started = True
        self._write(row)
        self.rows_written += 1

    def close(self) -> None:
        """Finish the document and flush."""
        if not self._started:
            self._begin()
            self._started = True
        self._end()
        self.stream.flush()

    def __enter__(self) -> "TimelineWriter":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def _begin(self) -> None:
        pass

    def _end(self) -> None:
        pass

    @abstractmethod
    def _write(self, row: TimelineRow) -> None:
        ...


class CsvTimelineWriter(TimelineWriter):
    """CSV with a header row; absent values are empty cells."""

    format: OutputFormat = "csv"

    def __init__(self, stream: IO[str]):
        super().__init__(stream)
        self._writer = csv.writer(stream)

    def _begin(self) -> None:
        self._writer.writerow(COLUMNS)

    def _write(self, row: TimelineRow) -> None:
        values = row.to_dict()
        self._writer.writerow(["" if values[c] is None else values[c] for c in COLUMNS])


class JsonlTimelineWriter(TimelineWriter):
    """One JSON object per line, every column present."""

    format: OutputFormat = "jsonl"

    def _write(self, row: TimelineRow) -> None:
        self.stream.write(json.dumps(row.to_dict(), ensure_ascii=False))
        self.stream.write("\n")


class JsonTimelineWriter(TimelineWriter):
    """A JSON array streamed one element at a time."""

    format: OutputFormat = "json"

    def _begin(self) -> None:
        self.stream.write("[")

    def _write(self, row: TimelineRow) -> None:
        self.stream.write("\n" if self.rows_written == 0 else ",\n")
        self.stream.write(json.dumps(row.to_dict(), ensure_ascii=False))

    def _end(self) -> None:
        self.stream.write("\n]\n" if self.rows_written else "]\n")


WRITERS: dict[str, type[TimelineWriter]] = {
    "csv": CsvTimelineWriter,
    "json": JsonTimelineWriter,
    "jsonl": JsonlTimelineWriter,
}


def open_writer(output_format: OutputFormat, stream: IO[str]) -> TimelineWriter:
    """Create the writer for an output format."""
    try:
        return WRITERS[output_format](stream)
    except KeyError:
        raise ValueError(f"Unsupported output format: {output_format}") from None


def emit_timeline(
    rows: list[TimelineRow],
    writer: TimelineWriter,
    start_date: date | None = None,
    end_date: date | None = None,
    deduplicate: bool = False,
    show_progress: bool = True,
) -> int:
    """Sort rows and stream them into a writer.

    Args:
        rows: Merged rows (sorted in place)
        writer: Output sink
        start_date: Inclusive lower date bound
        end_date: Inclusive upper date bound
        deduplicate: Drop identical rows
        show_progress: Report write progress to stderr

    Returns:
        Number of rows written
    """
    sort_rows(rows)

    selected: Iterable[TimelineRow] = rows
    if start_date or end_date:
        selected = filter_rows(selected, start_date, end_date)
    if deduplicate:
        selected = deduplicate_rows(selected)

    progress = ProgressReporter(total=len(rows), description="Writing timeline") if show_progress else None
    before = writer.rows_written
    for row in selected:
        writer.write_row(row)
        if progress:
            progress.update()
    writer.close()

    if progress:
        progress.finish()
    return writer.rows_written - before
