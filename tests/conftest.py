"""Shared fixtures for the KAI test suite."""

from datetime import datetime

import pytest
from PySide6.QtCore import QCoreApplication

from kai.core.models import DurationConfig
from kai.core.storage import Storage
from kai.core.timer_engine import TimerEngine

from helpers import ManualTicker, MovingClock, RecordingNotifier

# Short phases keep the tick loops small: 60s work, 60s short, 120s long, 30s simple
TEST_DURATIONS = DurationConfig(
    pomodoro_minutes=1,
    short_break_minutes=1,
    long_break_minutes=2,
    simple_hours=0,
    simple_minutes=0,
    simple_seconds=30,
)


@pytest.fixture(scope="session", autouse=True)
def qt_app():
    """A core application so QTimer and signals have an instance to hang off."""
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def storage(tmp_path):
    return Storage(str(tmp_path / "kai.db"))


@pytest.fixture
def ticker():
    return ManualTicker()


@pytest.fixture
def clock():
    return MovingClock(datetime(2024, 3, 4, 9, 0, 0))


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def make_engine(storage, ticker, notifier, clock):
    """Build an engine over the shared storage, with the given durations saved first."""
    engines = []

    def _make(durations=TEST_DURATIONS, **kwargs):
        storage.save_durations(durations)
        kwargs.setdefault("ticker", ticker)
        kwargs.setdefault("notifier", notifier)
        kwargs.setdefault("now", clock)
        engine = TimerEngine(storage, **kwargs)
        engines.append(engine)
        return engine

    yield _make

    for engine in engines:
        engine.cleanup()


@pytest.fixture
def engine(make_engine):
    return make_engine()
