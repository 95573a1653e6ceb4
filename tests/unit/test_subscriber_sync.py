"""
Unit tests for SubscriberSyncManager.

Tests verify:
- First message is always a full snapshot
- Later chart messages are single-candle increments
- Fallback snapshot for records without the flag
- Best-effort delivery: failures never abort the broadcast
"""

import random

import pytest

from stocksim.app.services.candle_aggregator import CandleAggregator
from stocksim.app.services.subscriber_sync import (
    SNAPSHOT_MESSAGE,
    STOCK_UPDATE_MESSAGE,
    UPDATE_MESSAGE,
    SubscriberSyncManager,
)
from stocksim.domain.services.price_process import PriceProcess
from stocksim.domain.services.trend_regime import TrendRegime

T0 = 1_700_000_000.0


@pytest.fixture
def aggregator(market_config):
    rng = random.Random(8)
    trend = TrendRegime(market_config.trend_change_probability, rng)
    process = PriceProcess(market_config, trend, rng)
    aggregator = CandleAggregator(market_config)
    aggregator.bootstrap(process, trend, T0, candles=10, ticks_per_candle=4)
    return aggregator


@pytest.fixture
def sync(aggregator):
    return SubscriberSyncManager(aggregator)


class TestConnect:

    def test_connect_sends_full_snapshot(self, sync, aggregator, channel_factory):
        channel = channel_factory()

        sync.connect("a", channel)

        assert channel.types == [SNAPSHOT_MESSAGE]
        data = channel.messages[0]["data"]
        assert len(data) == 11
        assert data == [c.to_dict() for c in aggregator.snapshot()]
        assert data[-1] == aggregator.current_candle().to_dict()
        assert sync.has_full_snapshot("a")

    def test_snapshot_is_oldest_first(self, sync, channel_factory):
        channel = channel_factory()
        sync.connect("a", channel)

        times = [c["time"] for c in channel.messages[0]["data"]]
        assert times == sorted(times)

    def test_candle_wire_shape(self, sync, channel_factory):
        channel = channel_factory()
        sync.connect("a", channel)

        candle = channel.messages[0]["data"][0]
        assert set(candle) == {"time", "open", "high", "low", "close"}
        assert isinstance(candle["time"], int)
        for key in ("open", "high", "low", "close"):
            assert round(candle[key], 2) == candle[key]


class TestBroadcast:

    def test_subsequent_messages_are_single_candle_updates(
        self, sync, aggregator, channel_factory
    ):
        channel = channel_factory()
        sync.connect("a", channel)

        for k in range(25):
            now = T0 + k * 0.1
            aggregator.maybe_complete(now)
            aggregator.ingest_tick(150.0 + k * 0.01, now)
            sync.broadcast_candle()

        assert channel.types[0] == SNAPSHOT_MESSAGE
        assert channel.types[1:] == [UPDATE_MESSAGE] * 25
        for message in channel.messages[1:]:
            assert len(message["data"]) == 1
        assert channel.messages[-1]["data"][0] == aggregator.current_candle().to_dict()

    def test_record_without_flag_gets_snapshot_fallback(self, sync, channel_factory):
        channel = channel_factory()
        sync.register("late", channel)
        assert not sync.has_full_snapshot("late")

        sync.broadcast_candle()
        sync.broadcast_candle()

        assert channel.types == [SNAPSHOT_MESSAGE, UPDATE_MESSAGE]
        assert sync.has_full_snapshot("late")

    def test_mixed_subscribers(self, sync, channel_factory):
        synced, late = channel_factory(), channel_factory()
        sync.connect("synced", synced)
        sync.register("late", late)

        sync.broadcast_candle()

        assert synced.types == [SNAPSHOT_MESSAGE, UPDATE_MESSAGE]
        assert late.types == [SNAPSHOT_MESSAGE]

    def test_sibling_feed_reaches_everyone_without_touching_flag(
        self, sync, channel_factory
    ):
        synced, late = channel_factory(), channel_factory()
        sync.connect("synced", synced)
        sync.register("late", late)

        delivered = sync.broadcast(STOCK_UPDATE_MESSAGE, [{"symbol_name": "AAA.X0000"}])

        assert delivered == 2
        assert late.types == [STOCK_UPDATE_MESSAGE]
        assert not sync.has_full_snapshot("late")

    def test_send_to_reaches_only_the_target(self, sync, channel_factory):
        first, second = channel_factory(), channel_factory()
        sync.connect("first", first)
        sync.connect("second", second)

        assert sync.send_to("second", STOCK_UPDATE_MESSAGE, [])

        assert first.types == [SNAPSHOT_MESSAGE]
        assert second.types == [SNAPSHOT_MESSAGE, STOCK_UPDATE_MESSAGE]
        assert sync.get_record("second").messages_sent == 2

    def test_send_to_unknown_subscriber(self, sync):
        assert sync.send_to("ghost", STOCK_UPDATE_MESSAGE, []) is False


class TestDeliveryFailures:

    def test_exploding_channel_does_not_abort_cycle(
        self, sync, channel_factory, exploding_channel
    ):
        healthy = channel_factory()
        sync.connect("dead", exploding_channel)
        sync.connect("healthy", healthy)

        sync.broadcast_candle()

        assert healthy.types == [SNAPSHOT_MESSAGE, UPDATE_MESSAGE]
        assert exploding_channel.attempts == 2
        assert not sync.has_full_snapshot("dead")
        assert sync.get_record("dead").messages_dropped == 2

    def test_rejected_snapshot_is_retried(self, sync, channel_factory):
        channel = channel_factory(accept=False)
        sync.connect("slow", channel)
        assert not sync.has_full_snapshot("slow")

        channel.accept = True
        sync.broadcast_candle()

        assert channel.types == [SNAPSHOT_MESSAGE]
        assert sync.has_full_snapshot("slow")


class TestDisconnect:

    def test_disconnect_removes_record(self, sync, channel_factory):
        channel = channel_factory()
        sync.connect("a", channel)

        assert sync.disconnect("a") is True
        assert "a" not in sync
        assert sync.subscriber_count == 0

        sync.broadcast_candle()
        assert channel.types == [SNAPSHOT_MESSAGE]

    def test_disconnect_unknown_is_noop(self, sync):
        assert sync.disconnect("ghost") is False
