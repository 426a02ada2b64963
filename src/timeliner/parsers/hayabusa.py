"""Parser for Hayabusa event log detection timelines.

Hayabusa writes timestamps with an explicit offset
(``2023-06-01 12:15:00.123 +02:00``); they are converted to UTC.
"""

from collections.abc import Iterator
from typing import ClassVar

from timeliner.models.row import TimelineRow
from timeliner.parsers.base import BaseParser, CsvRecord, ParserRegistry, SourceFile


@ParserRegistry.register
class HayabusaParser(BaseParser):
    """Sigma rule detections from ``hayabusa csv-timeline``."""

    name: ClassVar[str] = "hayabusa.detections"
    tool: ClassVar[str] = "Hayabusa"
    date_format: ClassVar[str] = "iso"

    def map_record(self, record: CsvRecord, source: SourceFile) -> Iterator[TimelineRow]:
        ts = self.timestamp(record, "Timestamp", source)
        rule = record.get_string("RuleTitle")
        if ts is None or rule is None:
            return

        level = record.get_string("Level")
        event_id = record.first_string("EventID", "EventId")
        channel = record.get_string("Channel")

        details = record.get_string("Details")
        if event_id:
            details = f"EventID: {event_id} | {details}" if details else f"EventID: {event_id}"

        yield source.row(
            ts,
            "Event Time",
            data_path=" / ".join(part for part in (record.get_string("Computer"), channel) if part),
            data_details=details,
            description=f"{rule} [{level}]" if level else rule,
        )
