"""Tests for JSON session persistence."""

import json

import pytest

from vetanesthesia.models import VitalRecord
from vetanesthesia.storage.session_store import (
    SessionStore,
    find_latest_unfinished,
    parse_sessions_json,
    upsert_session,
)


@pytest.fixture
def store(tmp_path):
    return SessionStore(tmp_path / "data" / "sessions.json")


class TestParseSessionsJson:
    @pytest.mark.parametrize("raw", [
        None, "", "not valid json{{{", "null", '[{"id":"s1"', '{"id":"s1"}', "42",
    ])
    def test_unusable_blob(self, raw):
        assert parse_sessions_json(raw) == []

    def test_valid_array(self):
        assert parse_sessions_json('[{"id":"s1"}]') == [{"id": "s1"}]

    def test_large_array(self):
        raw = json.dumps([{"id": f"s{i}"} for i in range(1000)])
        assert len(parse_sessions_json(raw)) == 1000


class TestUpsertSession:
    def test_append_new(self, make_session):
        result = upsert_session([make_session(id="s1")], make_session(id="s2"))
        assert [s.id for s in result] == ["s1", "s2"]

    def test_replace_existing(self, make_session):
        original = [make_session(id="s1")]
        updated = make_session(id="s1", patient_name="Renamed")
        result = upsert_session(original, updated)
        assert len(result) == 1
        assert result[0].patient_info.patient_name == "Renamed"
        assert original[0].patient_info.patient_name == "Lucky"

    def test_empty_list(self, make_session):
        assert len(upsert_session([], make_session(id="s1"))) == 1


class TestFindLatestUnfinished:
    def test_none(self):
        assert find_latest_unfinished([]) is None

    def test_all_finished(self, make_session):
        sessions = [make_session(end_time="2026-01-01T12:00:00Z", start_time="2026-01-01T10:00:00Z")]
        assert find_latest_unfinished(sessions) is None

    def test_single_unfinished(self, make_session):
        s = make_session(id="s1", start_time="2026-01-01T10:00:00Z")
        assert find_latest_unfinished([s]) is s

    def test_latest_wins(self, make_session):
        sessions = [
            make_session(id="old", start_time="2026-01-01T08:00:00Z"),
            make_session(id="done", start_time="2026-01-01T11:00:00Z", end_time="2026-01-01T12:00:00Z"),
            make_session(id="new", start_time="2026-01-01T10:00:00Z"),
        ]
        assert find_latest_unfinished(sessions).id == "new"

    def test_unparseable_start_skipped(self, make_session):
        sessions = [make_session(id="bad", start_time="garbage"), make_session(id="ok")]
        assert find_latest_unfinished(sessions).id == "ok"


class TestSessionStore:
    def test_missing_file(self, store):
        assert store.load_sessions() == []

    def test_round_trip(self, store, make_session, sample_record):
        session = make_session(records=[sample_record], end_time="2026-01-15T11:00:00.000Z")
        store.save_sessions([session])
        assert store.load_sessions() == [session]

    def test_storage_keys(self, store, make_session, sample_record):
        store.save_sessions([make_session(records=[sample_record])])
        data = json.loads(store.path.read_text(encoding="utf-8"))
        assert data[0]["patientInfo"]["patientName"] == "Lucky"
        assert data[0]["records"][0]["spO2"] == 98.0
        assert "endTime" not in data[0]

    def test_save_session_upserts(self, store, make_session):
        store.save_session(make_session(id="s1"))
        store.save_session(make_session(id="s1", patient_name="Again"))
        store.save_session(make_session(id="s2"))
        sessions = store.load_sessions()
        assert [s.id for s in sessions] == ["s1", "s2"]
        assert sessions[0].patient_info.patient_name == "Again"

    def test_delete_session(self, store, make_session):
        store.save_sessions([make_session(id="s1"), make_session(id="s2")])
        store.delete_session("s1")
        assert [s.id for s in store.load_sessions()] == ["s2"]

    def test_delete_missing_is_noop(self, store, make_session):
        store.save_sessions([make_session(id="s1")])
        store.delete_session("nope")
        assert [s.id for s in store.load_sessions()] == ["s1"]

    def test_corrupt_file(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text("[{broken", encoding="utf-8")
        assert store.load_sessions() == []

    def test_non_dict_entries_skipped(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text('[1, "x", {"id": "s1", "startTime": "2026-01-01T10:00:00Z"}]', encoding="utf-8")
        sessions = store.load_sessions()
        assert [s.id for s in sessions] == ["s1"]

    def test_no_temp_file_left(self, store, make_session):
        store.save_sessions([make_session()])
        assert not store.path.with_suffix(".tmp").exists()

    def test_get_session(self, store, make_session):
        store.save_sessions([make_session(id="s1")])
        assert store.get_session("s1").id == "s1"
        assert store.get_session("s2") is None

    def test_latest_unfinished(self, store, make_session):
        store.save_sessions([
            make_session(id="s1", start_time="2026-01-01T08:00:00Z"),
            make_session(id="s2", start_time="2026-01-01T09:00:00Z"),
        ])
        assert store.latest_unfinished().id == "s2"

    def test_records_survive_reload(self, store, make_session):
        records = [
            VitalRecord(timestamp="2026-01-15T10:30:00Z", heart_rate=90.0, notes="=1+1"),
            VitalRecord(timestamp="2026-01-15T10:10:00Z"),
        ]
        store.save_session(make_session(records=records))
        loaded = store.load_sessions()[0].records
        assert [r.timestamp for r in loaded] == ["2026-01-15T10:30:00Z", "2026-01-15T10:10:00Z"]
        assert loaded[0].notes == "=1+1"
