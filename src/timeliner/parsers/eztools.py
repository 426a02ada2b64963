"""Parsers for Eric Zimmerman's tools (EZTools) CSV exports.

EZTools write ISO-8601 timestamps in UTC with seven fractional digits,
e.g. ``2023-06-01 10:15:00.1234567``.
"""

from collections.abc import Iterator
from pathlib import PureWindowsPath
from typing import ClassVar

from timeliner.models.row import TimelineRow
from timeliner.parsers.base import BaseParser, CsvRecord, ParserRegistry, SourceFile


def _file_name(path: str | None) -> str | None:
    """Final component of a Windows or POSIX path."""
    if not path:
        return None
    return PureWindowsPath(path).name or None


@ParserRegistry.register
class DeletedParser(BaseParser):
    """RBCmd Recycle Bin ($I / INFO2) output."""

    name: ClassVar[str] = "eztools.deleted"
    tool: ClassVar[str] = "EZTools"
    date_format: ClassVar[str] = "iso"

    def map_record(self, record: CsvRecord, source: SourceFile) -> Iterator[TimelineRow]:
        deleted_on = self.timestamp(record, "DeletedOn", source)
        if deleted_on is None:
            return

        full_path = record.get_string("FileName")
        yield source.row(
            deleted_on,
            "File Deleted On",
            data_path=full_path,
            data_details=_file_name(full_path),
            file_size=record.get_int("FileSize"),
        )


@ParserRegistry.register
class PrefetchParser(BaseParser):
    """PECmd prefetch output: last run plus up to seven previous runs."""

    name: ClassVar[str] = "eztools.prefetch"
    tool: ClassVar[str] = "EZTools"
    date_format: ClassVar[str] = "iso"

    PREVIOUS_RUN_COLUMNS: ClassVar[tuple[str, ...]] = tuple(f"PreviousRun{i}" for i in range(7))

    def map_record(self, record: CsvRecord, source: SourceFile) -> Iterator[TimelineRow]:
        executable = record.get_string("ExecutableName")
        if executable is None:
            return

        run_count = record.get_string("RunCount")
        details = f"Run Count: {run_count}" if run_count else None
        size = record.get_int("Size")

        last_run = self.timestamp(record, "LastRun", source)
        if last_run is not None:
            yield source.row(last_run, "Last Run", data_path=executable, data_details=details, file_size=size)

        for column in self.PREVIOUS_RUN_COLUMNS:
            previous = self.timestamp(record, column, source)
            if previous is not None:
                yield source.row(previous, "Previous Run", data_path=executable, data_details=details, file_size=size)


@ParserRegistry.register
class LnkParser(BaseParser):
    """LECmd shortcut (.lnk) output."""

    name: ClassVar[str] = "eztools.lnk"
    tool: ClassVar[str] = "EZTools"
    date_format: ClassVar[str] = "iso"

    TIMESTAMP_COLUMNS: ClassVar[tuple[tuple[str, str], ...]] = (
        ("SourceCreated", "Lnk Created"),
        ("SourceModified", "Lnk Modified"),
        ("TargetCreated", "Target Created"),
        ("TargetModified", "Target Modified"),
        ("TargetAccessed", "Target Accessed"),
    )

    def map_record(self, record: CsvRecord, source: SourceFile) -> Iterator[TimelineRow]:
        target = record.first_string("LocalPath", "NetworkPath", "RelativePath")
        if target is None:
            return

        lnk_name = _file_name(record.get_string("SourceFile"))
        size = record.get_int("FileSize")
        arguments = record.get_string("Arguments")
        details = f"{lnk_name} {arguments}" if lnk_name and arguments else lnk_name

        for column, label in self.TIMESTAMP_COLUMNS:
            ts = self.timestamp(record, column, source)
            if ts is not None:
                yield source.row(ts, label, data_path=target, data_details=details, file_size=size)


@ParserRegistry.register
class EventLogParser(BaseParser):
    """EvtxECmd event log output."""

    name: ClassVar[str] = "eztools.evtx"
    tool: ClassVar[str] = "EZTools"
    date_format: ClassVar[str] = "iso"

    def map_record(self, record: CsvRecord, source: SourceFile) -> Iterator[TimelineRow]:
        created = self.timestamp(record, "TimeCreated", source)
        event_id = record.get_string("EventId")
        if created is None or event_id is None:
            return

        channel = record.get_string("Channel")
        description = record.get_string("MapDescription") or source.artifact.description
        details = " | ".join(
            part
            for part in (
                f"EventId: {event_id}",
                channel,
                record.get_string("Computer"),
                record.get_string("UserName"),
                record.get_string("RemoteHost"),
                record.get_string("PayloadData1"),
            )
            if part
        )

        yield source.row(
            created,
            "Event Time",
            data_path=record.first_string("ExecutableInfo", "PayloadData2") or channel,
            data_details=details,
            description=description,
        )
