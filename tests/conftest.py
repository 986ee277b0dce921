"""Shared pytest fixtures for Pomodoro tests."""

import sys
from datetime import datetime

import pytest

from PyQt6.QtWidgets import QApplication

from pomodoro.database.db import configure_engine, init_db
from pomodoro.database.history import HistoryStore
from pomodoro.settings import Settings
from pomodoro.timer.engine import TimerEngine
from pomodoro.timer.time_utils import time_utils

from helpers import (
    FakeNotifier, FakeSoundPlayer, FakeStatusReporter,
    ManualScheduler, RecordingStore,
)

# Tuesday, 5 of March of 2024, 14:05
FIXED_NOW = datetime(2024, 3, 5, 14, 5)


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


@pytest.fixture(autouse=True)
def settings_path(tmp_path, monkeypatch):
    """Keep settings.json writes out of the real home directory."""
    path = tmp_path / "settings.json"
    monkeypatch.setattr("pomodoro.settings.SETTINGS_PATH", path)
    monkeypatch.setattr("pomodoro.settings.APP_SUPPORT_DIR", tmp_path)
    yield path


@pytest.fixture
def fixed_time():
    return lambda: time_utils(FIXED_NOW)


@pytest.fixture
def settings():
    """Short durations so whole cycles fit in a handful of ticks."""
    return Settings(
        work_time=3,
        break_time=2,
        long_break=5,
        sessions_long_break=4,
        break_time_percentage=20,
    )


@pytest.fixture
def store():
    return RecordingStore(HistoryStore())


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def sounds():
    return FakeSoundPlayer()


@pytest.fixture
def reporter():
    return FakeStatusReporter()


@pytest.fixture
def make_engine(qapp, store, settings, scheduler, notifier, sounds, reporter, fixed_time):
    """Factory for engines wired to fakes; keyword overrides win."""

    def _make(**overrides):
        kwargs = dict(
            notifier=notifier,
            sound_player=sounds,
            status_reporter=reporter,
            scheduler=scheduler,
            time_utils=fixed_time,
        )
        kwargs.update(overrides)
        return TimerEngine(
            kwargs.pop("store", store),
            kwargs.pop("settings", settings),
            None,
            **kwargs,
        )

    return _make


@pytest.fixture
def engine(make_engine):
    """Pomodoro engine (work 3s, break 2s, long break 5s every 4 cycles)."""
    return make_engine()


@pytest.fixture
def flow_engine(make_engine, settings):
    """Flowtime engine at 20% break allowance."""
    settings.technique = "flowtime"
    return make_engine()
