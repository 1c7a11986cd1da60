"""Shared test fixtures for the leakybucket test suite."""

from __future__ import annotations

import pytest

from leakybucket.adapters.memory import MemoryAdapter
from leakybucket.bucket import Bucket

START_TIME = 1_700_000_000


class FakeClock:
    """Manually advanced stand-in for the system clock."""

    def __init__(self, now: int = START_TIME) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def adapter() -> MemoryAdapter:
    """Empty in-memory storage."""
    return MemoryAdapter()


@pytest.fixture
def make_bucket(adapter: MemoryAdapter, clock: FakeClock):
    """Factory building buckets on the shared adapter and clock."""

    def _make(bucket_id: str = "test", **settings) -> Bucket:
        return Bucket(bucket_id, adapter, settings, clock=clock)

    return _make
