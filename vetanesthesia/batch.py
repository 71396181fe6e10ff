"""Convert between vital records and batch-entry table rows.

A row is a dict of raw strings: ``time`` (``HH:MM``), one entry per
measurement under its storage key (``heartRate``, ``spO2`` ...) and
``notes``. Row order is kept as entered; timestamps are not sorted.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta
from typing import Iterable, Optional

from vetanesthesia.models import STORAGE_KEYS, VITAL_FIELDS, AnesthesiaSession, VitalRecord
from vetanesthesia.utils.config import get_timezone
from vetanesthesia.utils.csv_safety import format_number, parse_number
from vetanesthesia.utils.timefmt import now_iso, to_iso_utc, to_local

logger = logging.getLogger(__name__)

_HHMM_RE = re.compile(r"(\d{1,2}):(\d{2})", re.ASCII)
ROW_INTERVAL_MINUTES = 5
_MINUTES_PER_DAY = 24 * 60


def format_hhmm(timestamp: str, tz=None) -> str:
    local = to_local(timestamp, tz)
    if local is None:
        return ""
    return f"{local.hour:02d}:{local.minute:02d}"


def add_minutes(time_str: str, minutes: int) -> str:
    """Shift an ``H:MM`` clock time, wrapping past midnight.

    Text that is not a clock time is returned unchanged.
    """
    match = _HHMM_RE.fullmatch(time_str or "")
    if not match:
        return time_str
    total = int(match.group(1)) * 60 + int(match.group(2)) + minutes
    h, m = divmod(total % _MINUTES_PER_DAY, 60)
    return f"{h:02d}:{m:02d}"


def parse_time_to_iso(time_str: str, session_start: str, tz=None) -> str:
    """Place an ``HH:MM`` entry on the session's start date, as UTC ISO.

    Falls back to the current time when either input is unusable.
    """
    match = _HHMM_RE.fullmatch(time_str or "")
    base = to_local(session_start, tz)
    if not match or base is None:
        logger.debug("Using current time for row time %r", time_str)
        return now_iso()

    zone = tz if tz is not None else get_timezone()
    midnight = datetime(base.year, base.month, base.day)
    try:
        wall = midnight + timedelta(hours=int(match.group(1)), minutes=int(match.group(2)))
        return to_iso_utc(zone.localize(wall))
    except OverflowError:
        logger.debug("Row time %r falls outside the calendar, using current time", time_str)
        return now_iso()


def record_to_row(record: VitalRecord, tz=None) -> dict[str, str]:
    row = {"time": format_hhmm(record.timestamp, tz)}
    for f in VITAL_FIELDS:
        v = getattr(record, f)
        row[STORAGE_KEYS[f]] = "" if v is None else format_number(v)
    row["notes"] = record.notes or ""
    return row


def row_to_record(row: dict, session_start: str, tz=None) -> Optional[VitalRecord]:
    """Build a record from a row; rows with no values and no notes give None."""
    has_any = any(row.get(STORAGE_KEYS[f]) for f in VITAL_FIELDS) or row.get("notes")
    if not has_any:
        return None

    values = {f: parse_number(row.get(STORAGE_KEYS[f]) or "") for f in VITAL_FIELDS}
    return VitalRecord(
        timestamp=parse_time_to_iso(row.get("time") or "", session_start, tz),
        notes=(row.get("notes") or "").strip(),
        **values,
    )


def rows_to_records(rows: Iterable[dict], session_start: str, tz=None) -> list[VitalRecord]:
    records = []
    for row in rows:
        record = row_to_record(row, session_start, tz)
        if record is not None:
            records.append(record)
    return records


def empty_row(time_str: str) -> dict[str, str]:
    row = {"time": time_str}
    row.update({STORAGE_KEYS[f]: "" for f in VITAL_FIELDS})
    row["notes"] = ""
    return row


def next_row_time(session: AnesthesiaSession, tz=None) -> str:
    """Suggested time for a new row: last record (or session start) plus five minutes."""
    if session.records:
        last = format_hhmm(session.records[-1].timestamp, tz)
    else:
        last = format_hhmm(session.start_time, tz)
    return add_minutes(last, ROW_INTERVAL_MINUTES)
