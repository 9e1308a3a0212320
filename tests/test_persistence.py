"""Tests for the JSON persistence adapter and the SQLite key-value store."""

from __future__ import annotations

import json

from pomocycle.database.preferences import PreferenceStore
from pomocycle.persistence import (
    STORAGE_KEY, PersistenceAdapter, Snapshot, parse_session,
)
from pomocycle.settings import Settings
from pomocycle.timer.models import Phase, Session, TimerState, TimerStatus

from helpers import MemoryStore


def _triple():
    settings = Settings(
        work_minutes=50, break_minutes=10, long_break_minutes=20,
        auto_start=True, haptics_enabled=False, sound_enabled=True,
        selected_sound="bell",
    )
    history = [
        Session("1700000100000", 1_700_000_100_000, 600_000, Phase.BREAK,
                True, 1_700_000_700_000),
        Session("1700000000000", 1_700_000_000_000, 3_000_000, Phase.WORK,
                True, 1_700_003_000_000),
    ]
    current = Session("1700005000000", 1_700_005_000_000, 3_000_000, Phase.WORK)
    timer = TimerState(
        status=TimerStatus.PAUSED,
        current_session=current,
        remaining_time=2_400_000,
        phase=Phase.WORK,
        completed_work_sessions=7,
        paused_at=1_700_005_600_000,
    )
    return settings, history, timer


class TestRoundTrip:
    def test_dumps_loads_equal(self):
        settings, history, timer = _triple()
        snap = PersistenceAdapter.loads(
            PersistenceAdapter.dumps(settings, history, timer)
        )
        assert snap.settings == settings
        assert snap.history == history
        assert snap.timer == timer

    def test_save_load_through_store(self):
        store = MemoryStore()
        adapter = PersistenceAdapter(store)
        settings, history, timer = _triple()
        adapter.save(settings, history, timer)
        assert list(store.data) == [STORAGE_KEY]
        assert adapter.load() == Snapshot(settings, history, timer)

    def test_save_overwrites_whole_document(self):
        store = MemoryStore()
        adapter = PersistenceAdapter(store)
        settings, history, timer = _triple()
        adapter.save(settings, history, timer)
        adapter.save(Settings(), [], TimerState())
        assert adapter.load() == Snapshot()

    def test_idle_state_round_trip(self):
        snap = PersistenceAdapter.loads(
            PersistenceAdapter.dumps(Settings(), [], TimerState())
        )
        assert snap == Snapshot()

    def test_document_shape(self):
        data = json.loads(PersistenceAdapter.dumps(*_triple()))
        assert set(data) == {"settings", "history", "timer"}
        assert data["timer"]["status"] == "paused"
        assert data["history"][0]["phase"] == "break"


class TestForgivingLoad:
    def test_missing_document(self):
        assert PersistenceAdapter(MemoryStore()).load() == Snapshot()

    def test_invalid_json(self):
        assert PersistenceAdapter.loads("NOT VALID JSON") == Snapshot()

    def test_not_an_object(self):
        assert PersistenceAdapter.loads("[1, 2, 3]") == Snapshot()

    def test_missing_sections(self):
        blob = json.dumps({"settings": {"work_minutes": 30}})
        snap = PersistenceAdapter.loads(blob)
        assert snap.settings.work_minutes == 30
        assert snap.history == []
        assert snap.timer == TimerState()

    def test_malformed_setting_fields_fall_back(self):
        blob = json.dumps({"settings": {
            "work_minutes": "many",
            "break_minutes": 7,
            "auto_start": "yes",
            "selected_sound": None,
            "future_key": 1,
        }})
        s = PersistenceAdapter.loads(blob).settings
        assert s.work_minutes == 25
        assert s.break_minutes == 7
        assert s.auto_start is False
        assert s.selected_sound == "default"

    def test_malformed_history_entries_dropped(self):
        good = {"id": "5", "start_time": 5, "duration": 10, "phase": "work",
                "completed": True, "end_time": 15}
        blob = json.dumps({"history": [good, {"id": "x"}, 42,
                                        dict(good, phase="nap")]})
        history = PersistenceAdapter.loads(blob).history
        assert len(history) == 1
        assert history[0].id == "5"

    def test_history_not_a_list(self):
        blob = json.dumps({"history": {"oops": True}})
        assert PersistenceAdapter.loads(blob).history == []

    def test_malformed_timer_fields_fall_back(self):
        blob = json.dumps({"timer": {
            "status": "sprinting",
            "phase": "break",
            "remaining_time": -4,
            "completed_work_sessions": "two",
            "current_session": {"id": "1"},
        }})
        timer = PersistenceAdapter.loads(blob).timer
        assert timer.status == TimerStatus.IDLE
        assert timer.phase == Phase.BREAK
        assert timer.remaining_time == 0
        assert timer.completed_work_sessions == 0
        assert timer.current_session is None


class TestParseSession:
    def test_numeric_id_accepted(self):
        s = parse_session({"id": 123, "start_time": 1, "duration": 2,
                           "phase": "work"})
        assert s.id == "123"
        assert s.completed is False
        assert s.end_time is None

    def test_end_before_start_dropped(self):
        s = parse_session({"id": "1", "start_time": 100, "duration": 2,
                           "phase": "break", "end_time": 50})
        assert s.end_time is None

    def test_float_timestamps(self):
        s = parse_session({"id": "1", "start_time": 100.0, "duration": 2.0,
                           "phase": "work"})
        assert s.start_time == 100
        assert isinstance(s.duration, int)


class TestPreferenceStore:
    def test_get_missing(self):
        assert PreferenceStore().get("nope") is None

    def test_set_get(self):
        store = PreferenceStore()
        store.set("k", "v1")
        assert store.get("k") == "v1"
        store.set("k", "v2")
        assert store.get("k") == "v2"

    def test_remove(self):
        store = PreferenceStore()
        store.set("k", "v")
        store.remove("k")
        assert store.get("k") is None
        store.remove("k")  # removing twice is fine

    def test_clear(self):
        store = PreferenceStore()
        store.set("a", "1")
        store.set("b", "2")
        store.clear()
        assert store.get("a") is None
        assert store.get("b") is None

    def test_adapter_round_trip_through_sqlite(self):
        adapter = PersistenceAdapter(PreferenceStore())
        settings, history, timer = _triple()
        adapter.save(settings, history, timer)
        assert adapter.load() == Snapshot(settings, history, timer)

    def test_adapter_clear(self):
        adapter = PersistenceAdapter(PreferenceStore())
        adapter.save(*_triple())
        adapter.clear()
        assert adapter.load() == Snapshot()
