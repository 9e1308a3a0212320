"""Shared pytest fixtures for PomoCycle tests."""

import os
import sys

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtWidgets import QApplication

from pomocycle.database.db import configure_engine, init_db
from pomocycle.history import SessionHistoryStore
from pomocycle.settings import Settings, SettingsStore
from pomocycle.timer.engine import TimerEngine

from helpers import (
    FakeClock, RecordingAudio, RecordingHaptics, RecordingNotifications,
)


@pytest.fixture(scope="session")
def qapp():
    """A single QApplication instance shared across the entire test run."""
    app = QApplication.instance() or QApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def test_db():
    """Point every test at a fresh in-memory SQLite database."""
    configure_engine("sqlite:///:memory:")
    init_db()
    yield


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def settings_store():
    return SettingsStore(Settings(work_minutes=25, break_minutes=5))


@pytest.fixture
def history_store():
    return SessionHistoryStore()


@pytest.fixture
def notifications():
    return RecordingNotifications()


@pytest.fixture
def audio():
    return RecordingAudio()


@pytest.fixture
def haptics():
    return RecordingHaptics()


@pytest.fixture
def engine(qapp, settings_store, history_store, clock, notifications, audio, haptics):
    """Fresh TimerEngine with recording collaborators, auto-start OFF."""
    eng = TimerEngine(
        settings_store,
        history_store,
        clock=clock,
        notifications=notifications,
        audio=audio,
        haptics=haptics,
    )
    yield eng
    eng.reset()


@pytest.fixture
def engine_auto(engine, settings_store):
    """Same engine with auto-start ON."""
    settings_store.update(auto_start=True)
    return engine


@pytest.fixture
def engine_shift(qapp, settings_store, history_store, clock, notifications):
    """Engine that excludes paused time from the deadline."""
    eng = TimerEngine(
        settings_store,
        history_store,
        clock=clock,
        notifications=notifications,
        shift_deadline_on_resume=True,
    )
    yield eng
    eng.reset()
