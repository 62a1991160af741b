"""Shared pytest fixtures for Training Timer tests."""

import os
import sys

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtWidgets import QApplication

from trainingtimer.storage.db import configure_engine, init_db
from trainingtimer.storage.state_store import BlobStore, StateStore
from trainingtimer.timer.engine import TimerEngine

from helpers import FakeScheduler, RecordingCuePlayer, make_state


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
    """Keep settings writes out of the real application folder."""
    path = tmp_path / "settings.json"
    monkeypatch.setattr("trainingtimer.settings.SETTINGS_PATH", path)
    return path


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def cues():
    return RecordingCuePlayer()


@pytest.fixture
def store():
    return StateStore(BlobStore())


@pytest.fixture
def engine(qapp, scheduler, cues, store):
    """Engine on a 10 s work / 5 s rest / 2 set plan, persisted to the test DB."""
    return TimerEngine(
        parent=None,
        repository=store,
        cue_player=cues,
        scheduler=scheduler,
        initial_state=make_state((10, 5, 2)),
    )


@pytest.fixture
def engine_no_db(qapp, scheduler, cues):
    """Engine without persistence (pure state-machine tests)."""
    return TimerEngine(
        parent=None,
        cue_player=cues,
        scheduler=scheduler,
        initial_state=make_state((10, 5, 2)),
    )
