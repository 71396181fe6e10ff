import pytest
import pytz

from vetanesthesia.models import AnesthesiaSession, PatientInfo, VitalRecord


@pytest.fixture
def utc():
    return pytz.utc


@pytest.fixture
def make_session():
    """Factory for sessions with sensible defaults."""

    def _make(records=None, end_time=None, species="dog", **info):
        patient = PatientInfo(
            hospital_name=info.get("hospital_name", "Sunrise Animal Hospital"),
            patient_name=info.get("patient_name", "Lucky"),
            case_number=info.get("case_number", "C-001"),
            weight=info.get("weight", 5.0),
            species=species,
        )
        return AnesthesiaSession(
            id=info.get("id", "session_1"),
            patient_info=patient,
            start_time=info.get("start_time", "2026-01-15T10:00:00.000Z"),
            end_time=end_time,
            records=list(records or []),
        )

    return _make


@pytest.fixture
def sample_record():
    return VitalRecord(
        timestamp="2026-01-15T10:05:00.000Z",
        systolic_bp=120.0,
        diastolic_bp=80.0,
        mean_bp=93.0,
        heart_rate=88.0,
        respiratory_rate=14.0,
        spo2=98.0,
        etco2=38.0,
        anesthesia_conc=1.5,
        temperature=38.2,
        notes="stable",
    )
