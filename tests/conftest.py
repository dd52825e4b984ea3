"""Test configuration and fixtures."""

import random
from datetime import datetime, timedelta, timezone

import pytest

from storymind.config import Config
from storymind.processing import MemoryProcessor
from storymind.store import CrossSessionPatternStore, MemoryStorage

COFFEE_STORY = (
    "Sarah walked into the coffee shop on Maple Street every Tuesday morning. "
    "She ordered her usual latte and sat at the corner table. "
    "She opened her laptop to work on the quarterly report. "
    "She remembered her mother's birthday was next week, so she noted to buy flowers."
)

STUDY_STORY = (
    "Maya spent the afternoon in the library. "
    "She reviewed her notes for the chemistry exam. "
    "She tried to study one chapter at a time."
)


class FixedClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class FixedRandom(random.Random):
    """Random source whose random() always returns the same value."""

    def __init__(self, value: float):
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2025, 10, 24, 10, 30, 0, tzinfo=timezone.utc))


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def config() -> Config:
    return Config()


@pytest.fixture
def store(storage, config, clock) -> CrossSessionPatternStore:
    return CrossSessionPatternStore(storage, config, clock=clock)


@pytest.fixture
def processor(store, clock) -> MemoryProcessor:
    """Processor whose random association fallback is always 0.0 (never retained)."""
    return MemoryProcessor(store, rng=FixedRandom(0.0), clock=clock)


@pytest.fixture
def isolated_xdg(tmp_path, monkeypatch):
    """Point config and data directories at a temporary location."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    return tmp_path
