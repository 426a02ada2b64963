"""Parsers for NirSoft utility CSV exports."""

from collections.abc import Iterator
from typing import ClassVar

from timeliner.models.row import TimelineRow
from timeliner.parsers.activity import url_activity
from timeliner.parsers.base import BaseParser, CsvRecord, ParserRegistry, SourceFile


@ParserRegistry.register
class BrowsingHistoryViewParser(BaseParser):
    """BrowsingHistoryView output covering every browser on the host.

    The visit time follows the exporting machine's locale; month-first is
    the default and a definition can switch it to ``dmy``.
    """

    name: ClassVar[str] = "nirsoft.web_history"
    tool: ClassVar[str] = "Nirsoft"
    date_format: ClassVar[str] = "mdy"

    def map_record(self, record: CsvRecord, source: SourceFile) -> Iterator[TimelineRow]:
        visited = self.timestamp(record, "Visit Time", source)
        url = record.get_string("URL")
        if visited is None or url is None:
            return

        browser = record.get_string("Web Browser")
        description = f"{browser} History" if browser else source.artifact.description

        yield source.row(
            visited,
            "Last Visited",
            data_path=url,
            data_details=record.get_string("Title"),
            description=description + url_activity(url),
        )
