"""
Shared fixtures: sample rate snapshots, a controllable clock and a scripted rate source.
"""

import asyncio
from datetime import UTC, datetime, timedelta

import pytest

from domain.exceptions.currency import FetchError
from domain.models.currency import RateSnapshot
from domain.models.result import Err, Ok

FETCHED_AT = datetime(2025, 11, 5, 10, 30, 0, tzinfo=UTC)


class FakeClock:
    def __init__(self, now: datetime = FETCHED_AT):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


class ScriptedRateSource:
    """Rate source returning queued results; an empty queue yields a FetchError."""

    def __init__(self, *results, delay: float = 0):
        self.results = list(results)
        self.delay = delay
        self.calls: list[str] = []
        self.active = 0
        self.max_active = 0
        self.closed = False

    @property
    def name(self) -> str:
        return 'scripted'

    async def fetch(self, base_currency: str):
        self.calls.append(base_currency)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
        finally:
            self.active -= 1
        if not self.results:
            return Err(FetchError('no scripted result'))
        result = self.results.pop(0)
        if isinstance(result, FetchError):
            return Err(result)
        return Ok(result)

    async def close(self) -> None:
        self.closed = True


def make_snapshot(base='USD', rates=None, timestamp=FETCHED_AT, provider_timestamp=None):
    return RateSnapshot(
        base_currency=base,
        rates=rates if rates is not None else {'EUR': 0.92, 'JPY': 149.5},
        timestamp=timestamp,
        provider_timestamp=provider_timestamp,
    )


@pytest.fixture
def usd_snapshot():
    return make_snapshot()


@pytest.fixture
def wide_snapshot():
    return make_snapshot(
        rates={
            'EUR': 0.92,
            'GBP': 0.79,
            'JPY': 149.5,
            'CAD': 1.36,
            'AUD': 1.53,
            'CHF': 0.88,
        }
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def snapshot_factory():
    return make_snapshot


@pytest.fixture
def scripted_source():
    return ScriptedRateSource
