"""Timestamp parsing, display formatting and session durations."""

from __future__ import annotations

import logging
import math
import random
import string
import time
from datetime import datetime, timezone

from vetanesthesia.utils.config import get_timezone

logger = logging.getLogger(__name__)

INVALID_DATE = "Invalid Date"
DURATION_NA = "-"

TIMESTAMP_FMT = "%Y/%m/%d %H:%M:%S"
DATETIME_FMT = "%Y/%m/%d %H:%M"
TIME_FMT = "%H:%M:%S"

_ID_ALPHABET = string.digits + string.ascii_lowercase


def _zone(tz=None):
    return tz if tz is not None else get_timezone()


def parse_timestamp(text: str, tz=None) -> datetime | None:
    """Parse an ISO-8601 string into an aware datetime.

    A trailing "Z" is accepted. Naive values are taken as display-zone
    local time. Returns None for anything unparseable.
    """
    if not isinstance(text, str):
        return None
    s = text.strip()
    if not s:
        return None
    if s[-1] in "Zz":
        s = s[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(s)
    except ValueError:
        return None
    if dt.tzinfo is None:
        try:
            dt = _zone(tz).localize(dt)
        except (OverflowError, ValueError):
            # naive 0001-01-01 or 9999-12-31 shifted past the calendar
            return None
    return dt


def to_local(text: str, tz=None) -> datetime | None:
    """Parse *text* and convert it to the display zone."""
    dt = parse_timestamp(text, tz)
    if dt is None:
        return None
    try:
        return dt.astimezone(_zone(tz))
    except (OverflowError, ValueError):
        logger.debug("Timestamp %r out of range in display zone", text)
        return None


def _render(timestamp: str, fmt: str, tz) -> str:
    local = to_local(timestamp, tz)
    if local is None:
        logger.debug("Cannot format timestamp %r", timestamp)
        return INVALID_DATE
    return local.strftime(fmt)


def format_timestamp(timestamp: str, tz=None) -> str:
    """Date, time and seconds, e.g. ``2026/01/15 14:30:05``."""
    return _render(timestamp, TIMESTAMP_FMT, tz)


def format_date_time(timestamp: str, tz=None) -> str:
    return _render(timestamp, DATETIME_FMT, tz)


def format_time(timestamp: str, tz=None) -> str:
    return _render(timestamp, TIME_FMT, tz)


def format_clock_label(timestamp: str, tz=None) -> str:
    """Compact chart axis label: hour unpadded, minutes padded (``9:05``)."""
    local = to_local(timestamp, tz)
    if local is None:
        return ""
    return f"{local.hour}:{local.minute:02d}"


def calculate_duration(start_time: str, end_time: str | None = None, tz=None) -> str:
    """Human-readable elapsed time between two timestamps.

    Returns DURATION_NA when the session has no end, either timestamp is
    unparseable, or the end precedes the start.
    """
    if not end_time:
        return DURATION_NA
    start = parse_timestamp(start_time, tz)
    end = parse_timestamp(end_time, tz)
    if start is None or end is None:
        return DURATION_NA

    try:
        elapsed = (end - start).total_seconds()
    except OverflowError:
        return DURATION_NA
    if elapsed < 0:
        logger.debug("End %s precedes start %s", end_time, start_time)
        return DURATION_NA

    # round half up to whole minutes
    minutes = math.floor(elapsed / 60 + 0.5)
    hours, mins = divmod(minutes, 60)
    if hours > 0:
        return f"{hours} hours {mins} minutes"
    return f"{mins} minutes"


def now_iso() -> str:
    """Current UTC time in the millisecond ``...Z`` form stored in records."""
    return to_iso_utc(datetime.now(timezone.utc))


def to_iso_utc(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def generate_session_id() -> str:
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"session_{int(time.time() * 1000)}_{suffix}"
