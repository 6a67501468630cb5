from datetime import datetime, timedelta
from pathlib import Path

import pytest

from anesrec.config.settings import Settings
from anesrec.store.timeseries import TimeSeriesStore


class FakeClock:
    """Manually advanced clock so tests control which minute a log lands on."""
    def __init__(self, hour=9, minute=0):
        self.now = datetime(2026, 3, 14, hour, minute, 5)

    def __call__(self):
        return self.now

    def advance(self, minutes=1):
        self.now += timedelta(minutes=minutes)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return TimeSeriesStore(clock=clock)


@pytest.fixture
def settings(tmp_path: Path):
    return Settings(data_dir=tmp_path / "data", log_level="DEBUG", px_per_slot=40, refresh_ms=1000)


def log_minutes(store, clock, readings):
    """Log one vitals dict per minute, advancing the clock after each."""
    for fields in readings:
        store.log_vitals(**fields)
        clock.advance()
