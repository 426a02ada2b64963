"""Export parsers for Forensic Timeliner."""

# Import parsers to register them
from timeliner.parsers import (
    axiom,  # noqa: F401
    eztools,  # noqa: F401
    hayabusa,  # noqa: F401
    nirsoft,  # noqa: F401
)
from timeliner.parsers.base import BaseParser, CsvRecord, FileResult, ParserRegistry, SourceFile

__all__ = ["BaseParser", "CsvRecord", "FileResult", "ParserRegistry", "SourceFile"]
