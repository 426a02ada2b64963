"""Logging, progress and run event reporting for Forensic Timeliner.

All progress and log output goes to stderr so stdout stays free for the
timeline when it is written there.
"""

import json
import sys
import threading
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Literal, Protocol

from timeliner.models.error import StructuredError

LogLevel = Literal["debug", "info", "warning", "error"]
EventKind = Literal["scan", "process", "success", "warning", "error", "summary"]

_verbose = False
_quiet = False
_log_format: Literal["text", "json"] = "text"
_lock = threading.Lock()


def set_verbose(verbose: bool) -> None:
    """Show debug messages."""
    global _verbose
    _verbose = verbose


def configure_logging(
    log_format: Literal["text", "json"] = "text",
    quiet: bool = False,
) -> None:
    """Configure logging settings.

    Args:
        log_format: 'text' lines or one JSON object per line
        quiet: Suppress progress output
    """
    global _log_format, _quiet
    _log_format = log_format
    _quiet = quiet


def _enabled(level: LogLevel) -> bool:
    if level in ("warning", "error"):
        return True
    if _quiet:
        return False
    return level == "info" or _verbose


def _write(line: str, end: str = "\n") -> None:
    with _lock:
        print(line, end=end, file=sys.stderr)


def log(message: str, level: LogLevel = "info", **context: Any) -> None:
    """Log a message to stderr.

    Args:
        message: Log message
        level: Log level
        **context: Extra fields (only rendered in json format)
    """
    if not _enabled(level):
        return

    if _log_format == "json":
        entry = {"timestamp": datetime.now(UTC).isoformat(), "level": level, "message": message}
        entry.update(context)
        _write(json.dumps(entry, default=str))
    elif level == "info":
        _write(message)
    else:
        _write(f"[{level.upper()}] {message}")


def debug(message: str, **context: Any) -> None:
    log(message, level="debug", **context)


def info(message: str, **context: Any) -> None:
    log(message, level="info", **context)


def warning(message: str, **context: Any) -> None:
    log(message, level="warning", **context)


def error(message: str, **context: Any) -> None:
    log(message, level="error", **context)


@dataclass
class RunEvent:
    """A progress, warning or error signal raised during a run."""

    kind: EventKind
    message: str
    tool: str | None = None
    artifact: str | None = None
    path: str | None = None
    issue: StructuredError | None = None
    context: dict[str, Any] = field(default_factory=dict)

    def to_context(self) -> dict[str, Any]:
        """Flatten to keyword context for structured logging."""
        result: dict[str, Any] = {"event": self.kind}
        if self.tool:
            result["tool"] = self.tool
        if self.artifact:
            result["artifact"] = self.artifact
        if self.path:
            result["path"] = self.path
        if self.issue:
            result["code"] = self.issue.code
        result.update(self.context)
        return result


class Reporter(Protocol):
    """Narrow sink for run events."""

    def record(self, event: RunEvent) -> None:
        ...


class LogReporter:
    """Reporter that forwards events to the stderr log."""

    _LEVELS: dict[str, LogLevel] = {
        "scan": "debug",
        "process": "debug",
        "success": "info",
        "warning": "warning",
        "error": "error",
        "summary": "info",
    }

    def record(self, event: RunEvent) -> None:
        """Log the event at the level matching its kind."""
        label = f"[{event.artifact}] " if event.artifact else ""
        log(f"{label}{event.message}", level=self._LEVELS[event.kind], **event.to_context())


class ProgressReporter:
    """Throttled progress line for long timeline writes.

    Text mode redraws one stderr line in place; json mode prints one
    object per update.
    """

    INTERVAL = 0.5  # seconds between redraws

    def __init__(
        self,
        total: int | None = None,
        description: str = "Processing",
        unit: str = "rows",
    ):
        self.total = total
        self.description = description
        self.unit = unit
        self.current = 0
        self.start_time = time.perf_counter()
        self._last_draw = 0.0

    @property
    def elapsed(self) -> float:
        return time.perf_counter() - self.start_time

    @property
    def rate(self) -> float:
        elapsed = self.elapsed
        return self.current / elapsed if elapsed > 0 else 0.0

    def update(self, amount: int = 1) -> None:
        """Count processed items and redraw at most every INTERVAL seconds."""
        self.current += amount
        if _quiet:
            return

        now = time.perf_counter()
        if now - self._last_draw >= self.INTERVAL:
            self._last_draw = now
            self._draw()

    def finish(self) -> None:
        """Print the final count, duration and rate."""
        if _quiet:
            return

        if _log_format == "json":
            _write(
                json.dumps(
                    {
                        "complete": {
                            "description": self.description,
                            "total": self.current,
                            "unit": self.unit,
                            "duration_seconds": round(self.elapsed, 2),
                            "rate": round(self.rate, 1),
                        }
                    }
                )
            )
            return

        _write(
            f"\n{self.description}: {self.current} {self.unit} in "
            f"{_format_duration(self.elapsed)} ({self.rate:.1f} {self.unit}/s)"
        )

    def _draw(self) -> None:
        if _log_format == "json":
            state: dict[str, Any] = {
                "description": self.description,
                "current": self.current,
                "unit": self.unit,
                "rate": round(self.rate, 1),
            }
            if self.total:
                state["total"] = self.total
                state["percentage"] = round(self.current * 100 / self.total, 1)
            _write(json.dumps({"progress": state}))
            return

        done = f"{self.current}/{self.total}" if self.total else str(self.current)
        percent = f" ({self.current * 100 / self.total:.1f}%)" if self.total else ""
        _write(f"\r{self.description}: {done} {self.unit}{percent}, {self.rate:.1f}/s", end="")


def _format_duration(seconds: float) -> str:
    """Format a duration as '12.3s', '4m 5s' or '1h 2m'."""
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes, secs = divmod(int(seconds), 60)
    if minutes < 60:
        return f"{minutes}m {secs}s"
    hours, minutes = divmod(minutes, 60)
    return f"{hours}h {minutes}m"
