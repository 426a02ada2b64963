"""Listing and summary output for the Timeliner CLI.

The timeline itself is written by ``timeliner.pipeline.emit``. Because it
may be going to stdout, run summaries and errors are written to stderr.
"""

import json
import sys
from collections.abc import Iterable
from datetime import date, datetime
from pathlib import Path
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel

OutputFormat = Literal["json", "jsonl", "human"]


class JSONEncoder(json.JSONEncoder):
    """Encode UUIDs, dates, paths and pydantic models."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, BaseModel):
            return obj.model_dump(mode="json", exclude_none=True)
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, (UUID, Path)):
            return str(obj)
        return super().default(obj)


def _write_json(data: Any, file: Any, indent: int | None = None) -> None:
    if isinstance(data, BaseModel):
        data = data.model_dump(mode="json", exclude_none=True)
    file.write(json.dumps(data, cls=JSONEncoder, ensure_ascii=False, indent=indent))
    file.write("\n")


def output_json(data: Any, file: Any = None, indent: int | None = None) -> None:
    """Write one JSON document (dict, list or model) to ``file`` or stdout."""
    file = file or sys.stdout
    _write_json(data, file, indent)
    file.flush()


def output_jsonl(records: Iterable[Any], file: Any = None) -> None:
    """Write each record as its own JSON line."""
    file = file or sys.stdout
    for record in records:
        _write_json(record, file)
    file.flush()


def _cell(value: Any, width: int) -> str:
    text = "" if value is None else str(value)
    if len(text) > width:
        text = text[: width - 3] + "..."
    return text.ljust(width)


def output_human_table(
    records: list[dict[str, Any]],
    columns: list[str] | None = None,
    title: str | None = None,
    file: Any = None,
    max_width: int = 50,
) -> None:
    """Render records as a fixed-width text table.

    Args:
        records: Row dictionaries
        columns: Keys to show, in order (defaults to the first record's keys)
        title: Heading printed above the table
        file: Destination (defaults to stdout)
        max_width: Longer cell values are cut and end in '...'
    """
    file = file or sys.stdout
    if not records:
        file.write("No records.\n")
        return

    columns = columns or list(records[0])
    widths = {
        col: min(max_width, max([len(col)] + [len(str(r.get(col) or "")) for r in records]))
        for col in columns
    }

    if title:
        file.write(f"\n{title}\n{'=' * len(title)}\n\n")
    header = " | ".join(_cell(col, widths[col]) for col in columns)
    file.write(f"{header}\n{'-' * len(header)}\n")
    for record in records:
        line = " | ".join(_cell(record.get(col), widths[col]) for col in columns)
        file.write(line.rstrip() + "\n")
    file.write(f"\nTotal: {len(records)} records\n")
    file.flush()


def output_error(error: Any, file: Any = None) -> None:
    """Write a structured error to stderr."""
    output_json(error, file=file or sys.stderr)


def summary_table(summary: Any, file: Any = None) -> None:
    """Print per-artifact outcomes and run totals.

    Args:
        summary: RunSummary of a completed run
        file: Destination (defaults to stderr)
    """
    file = file or sys.stderr
    output_human_table(
        [
            {
                "Tool": a.tool,
                "Artifact": a.artifact,
                "Status": a.status,
                "Files": a.files_found,
                "Failed": a.files_failed,
                "Rows": a.rows,
            }
            for a in summary.artifacts
        ],
        title="Timeline Summary",
        file=file,
    )
    file.write(
        f"Rows collected: {summary.rows_collected}, written: {summary.rows_written}, "
        f"warnings: {summary.warnings}, errors: {summary.errors}\n"
    )
    file.flush()


class OutputFormatter:
    """Writes command listings in the format picked with --format."""

    def __init__(self, format: OutputFormat = "json"):
        self.format = format

    def records(self, records: list[dict[str, Any]], title: str | None = None) -> None:
        if self.format == "human":
            output_human_table(records, title=title)
        elif self.format == "jsonl":
            output_jsonl(records)
        else:
            output_json(records)
