"""Project a record series onto one vital for trend charts."""

from __future__ import annotations

import math
from typing import Iterable, Optional

from vetanesthesia.models import ChartData, STORAGE_KEYS, VitalRecord, field_name
from vetanesthesia.utils.csv_safety import parse_number
from vetanesthesia.utils.timefmt import format_clock_label

MAX_LABELS = 6
FLAT_PADDING = 10.0  # used when every value is identical


def _raw_value(record, field: str):
    if isinstance(record, VitalRecord):
        return record.value(field)
    if isinstance(record, dict):
        name = field_name(field)
        return record.get(STORAGE_KEYS.get(name, field), record.get(name))
    return None


def _timestamp(record) -> str:
    if isinstance(record, dict):
        return record.get("timestamp") or ""
    return getattr(record, "timestamp", "") or ""


def coerce_chart_value(value) -> Optional[float]:
    """Number for plotting, or None for blanks, text and non-finite values.

    Text goes through the strict parser. Zero is a real reading and is kept.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        return parse_number(value)
    if not isinstance(value, (int, float)):
        return None
    try:
        value = float(value)
    except OverflowError:
        return None
    return value if math.isfinite(value) else None


def process_chart_data(
    records: Iterable[VitalRecord | dict], field: str, tz=None
) -> ChartData | None:
    """Build chart series for *field*, or None when no record has a usable value."""
    points = []
    for r in records:
        v = coerce_chart_value(_raw_value(r, field))
        if v is not None:
            points.append((r, v))

    if not points:
        return None

    n = len(points)
    step = math.ceil(n / MAX_LABELS)
    data = [v for _, v in points]
    labels = [
        format_clock_label(_timestamp(r), tz) if n <= MAX_LABELS or i % step == 0 else ""
        for i, (r, _) in enumerate(points)
    ]

    min_value = min(data)
    max_value = max(data)
    padding = (max_value - min_value) * 0.1 or FLAT_PADDING
    return ChartData(data=data, labels=labels, min_value=min_value,
                     max_value=max_value, padding=padding)
