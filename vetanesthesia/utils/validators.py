"""Form validation for patient intake and vital sign plausibility.

Validators never raise: they return a ValidationResult the form can show
next to the offending field.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Optional

from vetanesthesia.models import PatientInfo, field_name
from vetanesthesia.utils.csv_safety import format_number, parse_number

WEIGHT_MESSAGE = "Please enter a valid weight"


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    message: Optional[str] = None


VALID = ValidationResult(True)


@dataclass(frozen=True)
class VitalRange:
    min: float
    max: float


# Plausible veterinary bounds. Temperature is in °C.
VITAL_RANGES = MappingProxyType({
    "systolic_bp":      VitalRange(0, 400),
    "diastolic_bp":     VitalRange(0, 300),
    "mean_bp":          VitalRange(0, 350),
    "heart_rate":       VitalRange(0, 500),
    "respiratory_rate": VitalRange(0, 200),
    "spo2":             VitalRange(0, 100),
    "etco2":            VitalRange(0, 150),
    "anesthesia_conc":  VitalRange(0, 20),
    "temperature":      VitalRange(15, 50),
})

_REQUIRED_TEXT = (
    ("hospital_name", "hospitalName", "Please enter the hospital name"),
    ("patient_name", "patientName", "Please enter the patient name"),
    ("case_number", "caseNumber", "Please enter the case number"),
)


def _get(info, attr: str, key: str):
    if isinstance(info, dict):
        return info.get(key, info.get(attr))
    return getattr(info, attr, None)


def _as_finite(value) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        f = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return f if math.isfinite(f) else None


def validate_patient_info(info: PatientInfo | dict) -> ValidationResult:
    """Check the intake form: three non-blank identifiers and a positive weight.

    Length and content of the identifiers are not restricted; escaping is
    left to the exporters.
    """
    for attr, key, message in _REQUIRED_TEXT:
        value = _get(info, attr, key)
        if not isinstance(value, str) or not value.strip():
            return ValidationResult(False, message)

    weight = _get(info, "weight", "weight")
    if not isinstance(weight, (int, float)) or isinstance(weight, bool):
        return ValidationResult(False, WEIGHT_MESSAGE)
    weight = _as_finite(weight)
    if weight is None or weight <= 0:
        return ValidationResult(False, WEIGHT_MESSAGE)
    return VALID


def validate_weight(weight_str: str) -> ValidationResult:
    weight = parse_number(weight_str)
    if weight is None or weight <= 0:
        return ValidationResult(False, WEIGHT_MESSAGE)
    return VALID


def validate_vital_range(field: str, value: float | None) -> ValidationResult:
    """Check one measurement against VITAL_RANGES.

    None means the vital was not measured and is valid. Fields without a
    configured range are not restricted.
    """
    if value is None:
        return VALID

    number = _as_finite(value)
    if number is None:
        return ValidationResult(False, f"{field} value is invalid")

    bounds = VITAL_RANGES.get(field_name(field))
    if bounds is None:
        return VALID

    if number < bounds.min or number > bounds.max:
        return ValidationResult(
            False,
            f"{field} out of range ({format_number(bounds.min)}–{format_number(bounds.max)})",
        )
    return VALID
