"""Parsers for Magnet AXIOM CSV exports.

AXIOM names its timestamp columns after the export settings, e.g.
``Accessed Date/Time - UTC+00:00 (M/d/yyyy)``, and writes month-first
dates in UTC.
"""

from collections.abc import Iterator
from typing import ClassVar

from timeliner.models.row import TimelineRow
from timeliner.parsers.activity import url_activity
from timeliner.parsers.base import BaseParser, CsvRecord, ParserRegistry, SourceFile


class AxiomWebHistoryParser(BaseParser):
    """Shared mapping for AXIOM browser history exports.

    The URL is mandatory; the description gets a search, download or
    file-access suffix derived from it.
    """

    tool: ClassVar[str] = "Axiom"
    date_format: ClassVar[str] = "mdy"

    timestamp_column: ClassVar[str]
    timestamp_info: ClassVar[str] = "Last Visited"
    title_columns: ClassVar[tuple[str, ...]] = ("Page Title", "Title")
    lowercase_url: ClassVar[bool] = False

    def map_record(self, record: CsvRecord, source: SourceFile) -> Iterator[TimelineRow]:
        visited = self.timestamp(record, self.timestamp_column, source)
        if visited is None:
            return

        url = record.get_string("URL")
        if url is None:
            return
        if self.lowercase_url:
            url = url.lower()

        yield source.row(
            visited,
            self.timestamp_info,
            data_path=url,
            data_details=record.first_string(*self.title_columns),
            description=source.artifact.description + url_activity(url),
        )


@ParserRegistry.register
class AxiomIEHistoryParser(AxiomWebHistoryParser):
    """Internet Explorer history. URLs are stored lowercased."""

    name: ClassVar[str] = "axiom.ie_history"
    timestamp_column: ClassVar[str] = "Accessed Date/Time - UTC+00:00 (M/d/yyyy)"
    lowercase_url: ClassVar[bool] = True


@ParserRegistry.register
class AxiomChromeHistoryParser(AxiomWebHistoryParser):
    """Chrome and Chromium-based browser history."""

    name: ClassVar[str] = "axiom.chrome_history"
    timestamp_column: ClassVar[str] = "Last Visited Date/Time - UTC+00:00 (M/d/yyyy)"


@ParserRegistry.register
class AxiomFirefoxHistoryParser(AxiomWebHistoryParser):
    """Firefox history."""

    name: ClassVar[str] = "axiom.firefox_history"
    timestamp_column: ClassVar[str] = "Last Visited Date/Time - UTC+00:00 (M/d/yyyy)"


@ParserRegistry.register
class AxiomAutoRunsParser(BaseParser):
    """AutoRun registry entries."""

    name: ClassVar[str] = "axiom.autoruns"
    tool: ClassVar[str] = "Axiom"
    date_format: ClassVar[str] = "mdy"

    def map_record(self, record: CsvRecord, source: SourceFile) -> Iterator[TimelineRow]:
        modified = self.timestamp(record, "Registry Key Modified Date/Time - UTC+00:00 (M/d/yyyy)", source)
        if modified is None:
            return

        path = record.get_string("File Path")
        if path is None:
            return

        yield source.row(
            modified,
            "Last Modified",
            data_path=path,
            data_details=record.get_string("File Name"),
        )
