"""Print-ready HTML report with inline SVG trend charts.

The output is handed to an external print-to-PDF facility. All patient
identifiers, species codes and notes are HTML-escaped here; nothing
downstream escapes again.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from vetanesthesia.charts import process_chart_data
from vetanesthesia.export.csv_report import VITAL_COLUMNS, export_file_name, species_label
from vetanesthesia.models import AnesthesiaSession, VitalRecord
from vetanesthesia.utils.csv_safety import escape_html, format_number
from vetanesthesia.utils.timefmt import calculate_duration, format_time, format_timestamp

logger = logging.getLogger(__name__)

CHART_WIDTH = 600
CHART_HEIGHT = 150
CHART_MARGIN = 40

CHART_COLORS = {
    "systolic_bp": "#e53935",
    "diastolic_bp": "#c62828",
    "mean_bp": "#ad1457",
    "heart_rate": "#d81b60",
    "respiratory_rate": "#8e24aa",
    "spo2": "#1e88e5",
    "etco2": "#0277bd",
    "anesthesia_conc": "#43a047",
    "temperature": "#fb8c00",
}

_STYLE = """
    body { font-family: Arial, sans-serif; padding: 20px; }
    h1 { color: #2196F3; border-bottom: 2px solid #2196F3; padding-bottom: 10px; }
    h2 { color: #333; margin-top: 30px; }
    h3 { color: #666; font-size: 14px; margin: 10px 0 5px 0; }
    .info-table { width: 100%; border-collapse: collapse; margin-bottom: 20px; }
    .info-table td { padding: 8px; border-bottom: 1px solid #ddd; }
    .info-table td:first-child { font-weight: bold; width: 120px; color: #666; }
    .data-table { width: 100%; border-collapse: collapse; font-size: 12px; }
    .data-table th, .data-table td { border: 1px solid #ddd; padding: 6px; text-align: center; }
    .data-table th { background-color: #2196F3; color: white; }
    .data-table tr:nth-child(even) { background-color: #f9f9f9; }
    .data-table .notes { text-align: left; max-width: 150px; font-size: 11px; }
    .charts-grid { display: grid; grid-template-columns: 1fr 1fr; gap: 20px; }
    .chart-container { page-break-inside: avoid; }
"""


def _fmt(value: float) -> str:
    return f"{value:.1f}".rstrip("0").rstrip(".")


def generate_svg_chart(
    records: Iterable[VitalRecord],
    field: str,
    title: str,
    color: str,
    unit: str,
    tz=None,
) -> str:
    """Inline SVG polyline for one vital; empty string when there is no data."""
    chart = process_chart_data(records, field, tz)
    if chart is None:
        return ""

    plot_w = CHART_WIDTH - CHART_MARGIN * 2
    plot_h = CHART_HEIGHT - CHART_MARGIN * 2
    span = chart.max_value - chart.min_value or 1
    last = len(chart.data) - 1 or 1

    coords = []
    for i, v in enumerate(chart.data):
        x = CHART_MARGIN + i / last * plot_w
        y = CHART_MARGIN + plot_h - (v - chart.min_value) / span * plot_h
        coords.append((x, y))

    points = " ".join(f"{_fmt(x)},{_fmt(y)}" for x, y in coords)
    circles = "".join(
        f'<circle cx="{_fmt(x)}" cy="{_fmt(y)}" r="3" fill="{color}" />' for x, y in coords
    )
    labels = "".join(
        f'<text x="{_fmt(x)}" y="{CHART_HEIGHT - 10}" font-size="9" fill="#666" '
        f'text-anchor="middle">{escape_html(label)}</text>'
        for (x, _), label in zip(coords, chart.labels)
        if label
    )
    bottom = CHART_HEIGHT - CHART_MARGIN
    return (
        '<div class="chart-container">'
        f"<h3>{escape_html(title)} ({escape_html(unit)})</h3>"
        f'<svg width="{CHART_WIDTH}" height="{CHART_HEIGHT}" '
        'style="border: 1px solid #ddd; background: #fff;">'
        f'<line x1="{CHART_MARGIN}" y1="{CHART_MARGIN}" x2="{CHART_MARGIN}" y2="{bottom}" stroke="#ccc" />'
        f'<line x1="{CHART_MARGIN}" y1="{bottom}" x2="{CHART_WIDTH - CHART_MARGIN}" y2="{bottom}" stroke="#ccc" />'
        f'<text x="10" y="{CHART_MARGIN + 5}" font-size="10" fill="#666">{chart.max_value:.1f}</text>'
        f'<text x="10" y="{bottom}" font-size="10" fill="#666">{chart.min_value:.1f}</text>'
        f'<polyline points="{points}" fill="none" stroke="{color}" stroke-width="2" />'
        f"{circles}{labels}"
        "</svg></div>"
    )


def _cell(value) -> str:
    return "-" if value is None else escape_html(format_number(value))


def _info_rows(session: AnesthesiaSession, tz=None) -> list[str]:
    info = session.patient_info
    weight = "" if info.weight is None else f"{format_number(info.weight)} kg"
    rows = [
        ("Hospital", info.hospital_name),
        ("Patient", info.patient_name),
        ("Case Number", info.case_number),
        ("Species", species_label(info.species)),
        ("Weight", weight),
        ("Start Time", format_timestamp(session.start_time, tz)),
    ]
    if session.end_time:
        rows.append(("End Time", format_timestamp(session.end_time, tz)))
        rows.append(("Duration", calculate_duration(session.start_time, session.end_time, tz)))
    return [f"<tr><td>{escape_html(k)}</td><td>{escape_html(v)}</td></tr>" for k, v in rows]


def _record_rows(records: list[VitalRecord], tz=None) -> list[str]:
    rows = []
    for r in records:
        cells = "".join(f"<td>{_cell(r.value(f))}</td>" for f, _, _ in VITAL_COLUMNS)
        rows.append(
            f"<tr><td>{escape_html(format_time(r.timestamp, tz))}</td>{cells}"
            f'<td class="notes">{escape_html(r.notes or "")}</td></tr>'
        )
    return rows


def generate_html_report(session: AnesthesiaSession, tz=None) -> str:
    """Render the whole session as a standalone HTML document."""
    info = session.patient_info
    hospital = escape_html(info.hospital_name)

    charts = ""
    if session.records:
        blocks = [
            generate_svg_chart(session.records, f, label, CHART_COLORS[f], unit, tz)
            for f, label, unit in VITAL_COLUMNS
        ]
        charts = (
            "<h2>Vital Sign Trends</h2>"
            f'<div class="charts-grid">{"".join(b for b in blocks if b)}</div>'
        )

    header_cells = "".join(
        f"<th>{escape_html(label)}<br>({escape_html(unit)})</th>" for _, label, unit in VITAL_COLUMNS
    )
    parts = [
        "<!DOCTYPE html>",
        "<html>",
        "<head>",
        '<meta charset="UTF-8">',
        f"<title>Anesthesia Record - {escape_html(info.patient_name)}</title>",
        f"<style>{_STYLE}</style>",
        "</head>",
        "<body>",
        f"<h1>{hospital} Anesthesia Monitoring Record</h1>",
        "<h2>Patient Information</h2>",
        '<table class="info-table">',
        *_info_rows(session, tz),
        "</table>",
        charts,
        "<h2>Vital Records</h2>",
        '<table class="data-table">',
        f"<thead><tr><th>Time</th>{header_cells}<th>Notes</th></tr></thead>",
        "<tbody>",
        *_record_rows(session.records, tz),
        "</tbody>",
        "</table>",
        "</body>",
        "</html>",
    ]
    return "\n".join(p for p in parts if p)


def write_html(session: AnesthesiaSession, output_dir: str | Path, tz=None) -> Path:
    """Write the HTML report and return its path."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / export_file_name(session, "html")
    path.write_text(generate_html_report(session, tz), encoding="utf-8")
    logger.info("Wrote %s", path)
    return path
