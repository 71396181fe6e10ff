"""Shared dataclasses for patients, vital records and sessions."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional

from vetanesthesia.utils.csv_safety import parse_number

# Export order of the measurement columns.
VITAL_FIELDS: tuple[str, ...] = (
    "systolic_bp",
    "diastolic_bp",
    "mean_bp",
    "heart_rate",
    "respiratory_rate",
    "spo2",
    "etco2",
    "anesthesia_conc",
    "temperature",
)

# Key names used by the persisted session blob.
STORAGE_KEYS: dict[str, str] = {
    "systolic_bp": "systolicBP",
    "diastolic_bp": "diastolicBP",
    "mean_bp": "meanBP",
    "heart_rate": "heartRate",
    "respiratory_rate": "respiratoryRate",
    "spo2": "spO2",
    "etco2": "etCO2",
    "anesthesia_conc": "anesthesiaConc",
    "temperature": "temperature",
}
FIELD_BY_STORAGE_KEY: dict[str, str] = {v: k for k, v in STORAGE_KEYS.items()}

SPECIES: tuple[str, ...] = ("dog", "cat", "other")


def field_name(key: str) -> str:
    """Map a storage key (``heartRate``) to its attribute name (``heart_rate``)."""
    return FIELD_BY_STORAGE_KEY.get(key, key)


def coerce_vital(value) -> Optional[float]:
    """Coerce a stored measurement to a finite float, or None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        try:
            value = float(value)
        except OverflowError:
            return None
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, str):
        return parse_number(value)
    return None


@dataclass
class VitalRecord:
    timestamp: str
    systolic_bp: Optional[float] = None      # Sys, mmHg
    diastolic_bp: Optional[float] = None     # Dia, mmHg
    mean_bp: Optional[float] = None          # MAP, mmHg
    heart_rate: Optional[float] = None       # HR, bpm
    respiratory_rate: Optional[float] = None  # RR, breaths/min
    spo2: Optional[float] = None             # %
    etco2: Optional[float] = None            # mmHg
    anesthesia_conc: Optional[float] = None  # MAC, %
    temperature: Optional[float] = None      # BT, °C
    notes: str = ""

    def value(self, name: str) -> Optional[float]:
        """Return one measurement by attribute or storage name."""
        name = field_name(name)
        if name not in VITAL_FIELDS:
            return None
        return getattr(self, name)

    def has_values(self) -> bool:
        return any(getattr(self, f) is not None for f in VITAL_FIELDS)

    def to_dict(self) -> dict:
        d = {"timestamp": self.timestamp}
        for f in VITAL_FIELDS:
            d[STORAGE_KEYS[f]] = getattr(self, f)
        d["notes"] = self.notes
        return d

    @classmethod
    def from_dict(cls, d: dict) -> VitalRecord:
        kwargs = {}
        for f in VITAL_FIELDS:
            raw = d.get(STORAGE_KEYS[f], d.get(f))
            kwargs[f] = coerce_vital(raw)
        notes = d.get("notes")
        return cls(
            timestamp=str(d.get("timestamp") or ""),
            notes="" if notes is None else str(notes),
            **kwargs,
        )


@dataclass
class PatientInfo:
    hospital_name: str
    patient_name: str
    case_number: str
    weight: Optional[float]
    species: str = "dog"  # dog | cat | other; unknown codes are kept verbatim

    def to_dict(self) -> dict:
        return {
            "hospitalName": self.hospital_name,
            "patientName": self.patient_name,
            "caseNumber": self.case_number,
            "weight": self.weight,
            "species": self.species,
        }

    @classmethod
    def from_dict(cls, d: dict) -> PatientInfo:
        return cls(
            hospital_name=d.get("hospitalName") or "",
            patient_name=d.get("patientName") or "",
            case_number=d.get("caseNumber") or "",
            weight=coerce_vital(d.get("weight")),
            species=d.get("species") or "",
        )


@dataclass
class AnesthesiaSession:
    id: str
    patient_info: PatientInfo
    start_time: str
    end_time: Optional[str] = None
    # insertion order; batch entry may leave timestamps out of order
    records: list[VitalRecord] = field(default_factory=list)

    @property
    def is_finished(self) -> bool:
        return bool(self.end_time)

    def to_dict(self) -> dict:
        d = {
            "id": self.id,
            "patientInfo": self.patient_info.to_dict(),
            "startTime": self.start_time,
            "records": [r.to_dict() for r in self.records],
        }
        if self.end_time:
            d["endTime"] = self.end_time
        return d

    @classmethod
    def from_dict(cls, d: dict) -> AnesthesiaSession:
        info = d.get("patientInfo")
        records = d.get("records")
        return cls(
            id=str(d.get("id", "")),
            patient_info=PatientInfo.from_dict(info if isinstance(info, dict) else {}),
            start_time=d.get("startTime", ""),
            end_time=d.get("endTime") or None,
            records=[VitalRecord.from_dict(r) for r in records if isinstance(r, dict)]
            if isinstance(records, list) else [],
        )


@dataclass
class ChartData:
    data: list[float]
    labels: list[str]
    min_value: float
    max_value: float
    padding: float
