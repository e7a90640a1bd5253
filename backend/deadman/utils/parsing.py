"""Canonical parsing and formatting of record fields.

Both the JSON wire format and the database row mapping go through these
helpers, so status and timestamp semantics are identical on every surface.
All parsers here are lenient: bad input yields a fallback value, never an
exception.
"""
import re
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional


class Status(str, Enum):
    """Outcome reported for a job run."""
    SUCCESS = "success"
    FAILURE = "failure"


_RFC3339 = re.compile(
    r"^(?P<date>\d{4}-\d{2}-\d{2})[Tt ]"
    r"(?P<time>\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<frac>\d+))?"
    r"(?P<offset>[Zz]|[+-]\d{2}:\d{2})\Z"
)

_INTEGER = re.compile(r"[+-]?[0-9]+")

DURATION_UNITS = {
    "s": timedelta(seconds=1),
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
}


def status_from_string(value: Optional[str]) -> Status:
    """Classify a free-form status string.

    Anything mentioning "fail" (in any case) is a failure, everything else,
    including empty or unknown strings, counts as success.
    """
    if value and "fail" in value.lower():
        return Status.FAILURE
    return Status.SUCCESS


def parse_timestamp(value) -> Optional[datetime]:
    """Parse an RFC 3339 timestamp into an aware UTC datetime.

    Datetime instances pass through (naive ones are taken as UTC).
    Returns None when the value cannot be parsed.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        try:
            return value.astimezone(timezone.utc)
        except OverflowError:
            return None
    if not isinstance(value, str):
        return None

    match = _RFC3339.match(value.strip())
    if not match:
        return None

    # fromisoformat only understands up to microsecond precision
    frac = (match.group("frac") or "")[:6].ljust(6, "0")
    offset = match.group("offset")
    if offset in ("Z", "z"):
        offset = "+00:00"

    try:
        parsed = datetime.fromisoformat(
            f"{match.group('date')}T{match.group('time')}.{frac}{offset}"
        )
        # Offsets can push the instant outside the representable range
        return parsed.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        return None


def format_timestamp(value: datetime) -> str:
    """Format as fixed-width RFC 3339 UTC, e.g. ``2024-05-01T12:00:00.000000Z``.

    Fixed width keeps lexical order of stored text equal to time order.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    # strftime does not zero-pad years below 1000
    return f"{value.year:04d}-{value:%m-%dT%H:%M:%S.%f}Z"


def get_next_from_duration(base_ts: datetime, duration: Optional[str]) -> Optional[datetime]:
    """Add a single-unit duration such as ``30s``, ``15m`` or ``2h`` to ``base_ts``.

    Returns None for an empty string, an unknown unit, a non-integer amount
    or composite durations like ``2m45s``.
    """
    if not duration:
        return None

    unit = DURATION_UNITS.get(duration[-1])
    if unit is None:
        return None

    amount = duration[:-1]
    if not _INTEGER.fullmatch(amount):
        return None

    try:
        return base_ts + int(amount) * unit
    except OverflowError:
        return None
