"""Timestamp normalization for tool exports.

Export tools write dates in different textual shapes: ISO-8601 with seven
fractional digits (EZTools), ``M/d/yyyy h:mm:ss tt`` (AXIOM), day-first
locale formats (NirSoft) and values with explicit offsets (Hayabusa).
Everything is normalized to UTC and rendered as
``YYYY-MM-DDTHH:MM:SS.fffffffZ``.

Values without an offset marker are taken to be UTC. Tools in this domain
export UTC unless they say otherwise, so no local-time guessing is done.
"""

import re
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta, timezone

DATE_FORMATS: dict[str, tuple[str, ...]] = {
    "iso": (
        "%Y-%m-%dT%H:%M:%S",
        "%Y-%m-%d %H:%M:%S",
        "%Y-%m-%dT%H:%M",
        "%Y-%m-%d %H:%M",
        "%Y/%m/%d %H:%M:%S",
        "%Y-%m-%d",
        "%Y/%m/%d",
    ),
    "mdy": (
        "%m/%d/%Y %I:%M:%S %p",
        "%m/%d/%Y %H:%M:%S",
        "%m/%d/%Y %I:%M %p",
        "%m/%d/%Y %H:%M",
        "%m/%d/%Y",
    ),
    "dmy": (
        "%d/%m/%Y %H:%M:%S",
        "%d/%m/%Y %I:%M:%S %p",
        "%d/%m/%Y %H:%M",
        "%d.%m.%Y %H:%M:%S",
        "%d.%m.%Y %H:%M",
        "%d-%m-%Y %H:%M:%S",
        "%d-%m-%Y %H:%M",
        "%d/%m/%Y",
        "%d.%m.%Y",
        "%d-%m-%Y",
    ),
}
DATE_FORMATS["auto"] = DATE_FORMATS["iso"] + DATE_FORMATS["mdy"] + DATE_FORMATS["dmy"]

# Seven digits: .NET "o" format precision (100 ns ticks).
FRACTION_DIGITS = 7

_FRACTION_RE = re.compile(r"(?<=:\d\d)[.,](\d+)")
_OFFSET_RE = re.compile(
    r"\s*(?:(?P<utc>Z|UTC|GMT)|(?P<sign>[+-])(?P<hours>\d{2}):?(?P<minutes>\d{2}))$",
    re.IGNORECASE,
)


@dataclass(frozen=True, order=True)
class UtcTimestamp:
    """A resolved UTC instant with 100 ns precision."""

    moment: datetime
    ticks: int = 0  # 100 ns units below the microsecond, 0-9

    def isoformat(self) -> str:
        """Render as ``YYYY-MM-DDTHH:MM:SS.fffffffZ``."""
        return render_timestamp(self.moment, self.ticks)

    def __str__(self) -> str:
        return self.isoformat()


def render_timestamp(moment: datetime, ticks: int = 0) -> str:
    """Render an aware or naive-UTC datetime in timeline form."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(UTC)
    return (
        f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d}T"
        f"{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}."
        f"{moment.microsecond:06d}{ticks:d}Z"
    )


def get_date_formats(date_format: str) -> tuple[str, ...]:
    """Look up the strptime patterns of a date format family.

    Raises:
        ValueError: If the family is unknown (a configuration error)
    """
    try:
        return DATE_FORMATS[date_format]
    except KeyError:
        raise ValueError(
            f"Unknown date format '{date_format}'. Supported: {', '.join(sorted(DATE_FORMATS))}"
        ) from None


def normalize_timestamp(raw: str | None, date_format: str = "auto") -> UtcTimestamp | None:
    """Parse a raw export value into a UTC timestamp.

    Args:
        raw: Text as found in the export (may be None or blank)
        date_format: Date format family ('iso', 'mdy', 'dmy' or 'auto')

    Returns:
        UtcTimestamp, or None when the value is missing or unparseable
    """
    patterns = get_date_formats(date_format)

    if raw is None:
        return None
    value = " ".join(str(raw).split())
    if not value:
        return None

    microsecond, ticks = 0, 0
    fraction = _FRACTION_RE.search(value)
    if fraction:
        digits = fraction.group(1)[:FRACTION_DIGITS].ljust(FRACTION_DIGITS, "0")
        microsecond, ticks = int(digits[:6]), int(digits[6])
        value = value[: fraction.start()] + value[fraction.end():]

    tzinfo = None
    offset = _OFFSET_RE.search(value)
    if offset and ":" in value[: offset.start()]:
        if offset.group("utc"):
            tzinfo = UTC
        else:
            delta = timedelta(hours=int(offset.group("hours")), minutes=int(offset.group("minutes")))
            if delta >= timedelta(hours=24):
                return None
            tzinfo = timezone(-delta if offset.group("sign") == "-" else delta)
        value = value[: offset.start()].rstrip()

    for pattern in patterns:
        try:
            parsed = datetime.strptime(value, pattern)
        except ValueError:
            continue

        parsed = parsed.replace(microsecond=microsecond, tzinfo=tzinfo or UTC)
        try:
            return UtcTimestamp(moment=parsed.astimezone(UTC), ticks=ticks)
        except OverflowError:
            return None

    return None


def format_timestamp(raw: str | None, date_format: str = "auto") -> str | None:
    """Normalize and render a raw value, or None if it does not parse."""
    parsed = normalize_timestamp(raw, date_format)
    return parsed.isoformat() if parsed else None
