"""Shared fixtures for the loot_core tests."""

from __future__ import annotations

import pytest

from loot_core import LootTracker

START = 1_700_000_000


class FakeClock:
    """Injectable clock; ``step`` seconds pass on every read."""

    def __init__(self, now: int = START, step: int = 0):
        self.now = now
        self.step = step

    def __call__(self) -> float:
        self.now += self.step
        return float(self.now)

    def advance(self, seconds: int = 1) -> None:
        self.now += seconds


@pytest.fixture()
def make_clock():
    return FakeClock


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def ticking_clock():
    return FakeClock(step=1)


@pytest.fixture()
def tracker(clock):
    return LootTracker(clock=clock)


@pytest.fixture()
def make_tracker():
    def _make(now: int = START, step: int = 1, **kwargs) -> LootTracker:
        return LootTracker(clock=FakeClock(now, step), **kwargs)

    return _make
