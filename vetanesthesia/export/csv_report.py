"""Build the session CSV and write it with a BOM for spreadsheet apps.

Layout
──────
  Patient Information
  Hospital,<name>
  Patient,<name>
  Case Number,<id>
  Weight (kg),<n>
  Species,<label or raw code>
  Start Time,<ts>
  End Time,<ts>          (finished sessions only)
  Duration,<h m>         (finished sessions only)

  Vital Records
  Time,Systolic BP (mmHg),...,Notes
  <one row per record, insertion order>

Formatted times and durations are written as-is. Every other cell goes
through escape_csv, so free text in identifiers or notes cannot start a
formula or break out of its cell.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from types import MappingProxyType

from vetanesthesia.models import AnesthesiaSession, VitalRecord
from vetanesthesia.utils.csv_safety import escape_csv, sanitize_file_name
from vetanesthesia.utils.timefmt import calculate_duration, format_timestamp

logger = logging.getLogger(__name__)

BOM = "\ufeff"

SPECIES_LABELS = MappingProxyType({
    "dog": "Dog",
    "cat": "Cat",
    "other": "Other",
})

# (field, label, unit) in export order
VITAL_COLUMNS: tuple[tuple[str, str, str], ...] = (
    ("systolic_bp", "Systolic BP", "mmHg"),
    ("diastolic_bp", "Diastolic BP", "mmHg"),
    ("mean_bp", "MAP", "mmHg"),
    ("heart_rate", "Heart Rate", "bpm"),
    ("respiratory_rate", "Respiratory Rate", "breaths/min"),
    ("spo2", "SpO2", "%"),
    ("etco2", "EtCO2", "mmHg"),
    ("anesthesia_conc", "Anesthetic Conc.", "%"),
    ("temperature", "Temperature", "°C"),
)


def species_label(code: str | None) -> str:
    """Display label for a species code; unknown codes are shown as-is."""
    if code is None:
        return ""
    return SPECIES_LABELS.get(code, code)


def _row(cells: list) -> str:
    return ",".join(escape_csv(c) for c in cells)


def _record_row(record: VitalRecord, tz=None) -> str:
    cells = [record.value(f) for f, _, _ in VITAL_COLUMNS]
    cells.append(record.notes or "")
    return format_timestamp(record.timestamp, tz) + "," + _row(cells)


def generate_csv(session: AnesthesiaSession, tz=None) -> str:
    info = session.patient_info
    lines = [
        "Patient Information",
        _row(["Hospital", info.hospital_name]),
        _row(["Patient", info.patient_name]),
        _row(["Case Number", info.case_number]),
        _row(["Weight (kg)", info.weight]),
        _row(["Species", species_label(info.species)]),
        f"Start Time,{format_timestamp(session.start_time, tz)}",
    ]
    if session.end_time:
        lines.append(f"End Time,{format_timestamp(session.end_time, tz)}")
        lines.append(f"Duration,{calculate_duration(session.start_time, session.end_time, tz)}")
    lines.append("")

    lines.append("Vital Records")
    header = ["Time"] + [f"{label} ({unit})" for _, label, unit in VITAL_COLUMNS] + ["Notes"]
    lines.append(_row(header))
    for record in session.records:
        lines.append(_record_row(record, tz))

    return "\n".join(lines)


def export_file_name(session: AnesthesiaSession, ext: str, now_ms: int | None = None) -> str:
    """``anesthesia_<case>_<epoch ms>.<ext>`` with unsafe characters replaced."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    case = session.patient_info.case_number or "unnamed"
    return sanitize_file_name(f"anesthesia_{case}_{now_ms}.{ext}")


def write_csv(session: AnesthesiaSession, output_dir: str | Path, tz=None) -> Path:
    """Write the session CSV (UTF-8 with BOM) and return its path."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / export_file_name(session, "csv")
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(BOM + generate_csv(session, tz))
    logger.info("Wrote %s (%d records)", path, len(session.records))
    return path
