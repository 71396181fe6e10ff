"""Tests for chart series projection."""

import pytest
import pytz

from vetanesthesia.charts import FLAT_PADDING, coerce_chart_value, process_chart_data
from vetanesthesia.models import VitalRecord


def _records(values, field="heart_rate"):
    return [
        VitalRecord(timestamp=f"2026-01-15T10:{i:02d}:00.000Z", **{field: v})
        for i, v in enumerate(values)
    ]


class TestProcessChartData:
    def test_empty(self):
        assert process_chart_data([], "heartRate") is None

    def test_all_null(self):
        assert process_chart_data(_records([None, None]), "heartRate") is None

    def test_filters_invalid(self, utc):
        chart = process_chart_data(
            _records([80, float("inf"), float("nan"), None, 90]), "heartRate", tz=utc
        )
        assert chart.data == [80, 90]
        assert chart.labels == ["10:00", "10:04"]

    def test_zero_preserved(self, utc):
        chart = process_chart_data(_records([0, 50]), "heart_rate", tz=utc)
        assert chart.data == [0, 50]
        assert chart.min_value == 0

    def test_min_max_padding(self, utc):
        chart = process_chart_data(_records([80, 100, 90]), "heartRate", tz=utc)
        assert chart.min_value == 80
        assert chart.max_value == 100
        assert chart.padding == pytest.approx(2.0)

    def test_flat_series_padding(self, utc):
        chart = process_chart_data(_records([70, 70, 70]), "heartRate", tz=utc)
        assert chart.padding == FLAT_PADDING
        assert chart.padding > 0

    def test_single_point(self, utc):
        chart = process_chart_data(_records([38.5], "temperature"), "temperature", tz=utc)
        assert chart.data == [38.5]
        assert chart.padding == FLAT_PADDING

    def test_order_preserved(self, utc):
        chart = process_chart_data(_records([90, 70, 110]), "heartRate", tz=utc)
        assert chart.data == [90, 70, 110]

    def test_storage_dicts(self, utc):
        records = [
            {"timestamp": "2026-01-15T10:00:00Z", "heartRate": ""},
            {"timestamp": "2026-01-15T10:05:00Z", "heartRate": "abc"},
            {"timestamp": "2026-01-15T10:10:00Z", "heartRate": "75"},
            {"timestamp": "2026-01-15T10:15:00Z", "heartRate": 82},
            {"timestamp": "2026-01-15T10:20:00Z"},
        ]
        chart = process_chart_data(records, "heartRate", tz=utc)
        assert chart.data == [75, 82]

    def test_unknown_field(self):
        assert process_chart_data(_records([80]), "bogus") is None


class TestLabels:
    def test_short_series_every_point(self, utc):
        chart = process_chart_data(_records([1, 2, 3, 4, 5, 6]), "heartRate", tz=utc)
        assert all(chart.labels)

    def test_long_series_thinned(self, utc):
        chart = process_chart_data(_records(list(range(12))), "heartRate", tz=utc)
        assert len(chart.labels) == 12
        assert [bool(label) for label in chart.labels] == [True, False] * 6

    def test_seven_points(self, utc):
        chart = process_chart_data(_records(list(range(7))), "heartRate", tz=utc)
        assert sum(1 for label in chart.labels if label) == 4

    def test_large_series_at_most_six(self, utc):
        values = list(range(60))
        records = [
            VitalRecord(timestamp=f"2026-01-15T{10 + i // 60:02d}:{i % 60:02d}:00Z", heart_rate=v)
            for i, v in enumerate(values)
        ]
        chart = process_chart_data(records, "heartRate", tz=utc)
        assert sum(1 for label in chart.labels if label) <= 6


class TestCoerceChartValue:
    @pytest.mark.parametrize("value", [None, "", "  ", "abc", float("nan"), float("inf"), True, [1]])
    def test_rejected(self, value):
        assert coerce_chart_value(value) is None

    def test_accepted(self):
        assert coerce_chart_value(0) == 0
        assert coerce_chart_value(" 12.5 ") == 12.5


class TestCalendarEdges:
    def test_out_of_range_timestamp_keeps_value(self):
        taipei = pytz.timezone("Asia/Taipei")
        records = [
            VitalRecord(timestamp="9999-12-31T23:59:59-01:00", heart_rate=80.0),
            VitalRecord(timestamp="2026-01-15T02:00:00Z", heart_rate=90.0),
        ]
        chart = process_chart_data(records, "heartRate", tz=taipei)
        assert chart.data == [80.0, 90.0]
        assert chart.labels == ["", "10:00"]
