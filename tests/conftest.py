"""Pytest Configuration and Shared Fixtures

Loaded automatically by pytest: fixtures here are available to all tests.
"""
import random

import pytest

from stocksim.app.application.ports.subscriber_channel import ISubscriberChannel
from stocksim.domain.value_objects.market_config import MarketConfig


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


class RecordingChannel(ISubscriberChannel):
    """Channel that keeps every accepted message in memory."""

    def __init__(self, accept: bool = True):
        self.accept = accept
        self.messages = []

    def send(self, message):
        if not self.accept:
            return False
        self.messages.append(message)
        return True

    @property
    def types(self):
        return [m["type"] for m in self.messages]


class ExplodingChannel(ISubscriberChannel):
    """Channel whose transport is gone: every send raises."""

    def __init__(self):
        self.attempts = 0

    def send(self, message):
        self.attempts += 1
        raise ConnectionError("socket closed")


class FakeClock:
    """Manually advanced wall clock (seconds)."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


@pytest.fixture
def market_config():
    """Small, fast configuration. Producers effectively never fire on their own."""
    return MarketConfig(
        candle_duration_ms=1_000,
        tick_interval_ms=100_000,
        history_capacity=50,
        base_price=150.0,
        volatility=0.01,
        bootstrap_candles=20,
        bootstrap_ticks_per_candle=5,
        total_symbols=30,
        quote_update_interval_ms=100_000,
        quote_broadcast_interval_ms=100_000,
        stocks_per_update=5,
    )


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def channel_factory():
    return RecordingChannel


@pytest.fixture
def exploding_channel():
    return ExplodingChannel()
