"""
Unit tests for MarketState (one tick cycle as an atomic unit).
"""

import random

from stocksim.app.state.market_state import MarketState

T0 = 1_700_000_000.0


class TestMarketState:

    def test_create_bootstraps_history_and_quotes(self, market_config):
        state = MarketState.create(market_config, T0, rng=random.Random(1))

        assert len(state.aggregator.history) == market_config.bootstrap_candles
        assert len(state.quote_board) == market_config.total_symbols
        assert state.current_candle().open_time == int(T0)

    def test_step_advances_price_and_candle(self, market_config):
        state = MarketState.create(market_config, T0, rng=random.Random(1))

        result = state.step(T0 + 0.1)

        assert result.price == state.last_price
        assert result.current == state.current_candle()
        assert result.current.close == result.price
        assert result.completed is None
        assert state.total_ticks == 1

    def test_step_reports_completed_candle(self, market_config):
        state = MarketState.create(market_config, T0, rng=random.Random(1))

        result = state.step(T0 + market_config.candle_duration)

        assert result.completed is not None
        assert state.aggregator.history[-1] == result.completed
        assert result.current.open == result.completed.close

    def test_same_seed_same_market(self, market_config):
        def run():
            state = MarketState.create(market_config, T0, rng=random.Random(31))
            for k in range(40):
                state.step(T0 + k * 0.1)
            return state.candles_snapshot(), state.quote_board.to_list()

        assert run() == run()

    def test_seed_from_config(self):
        from stocksim.domain.value_objects.market_config import MarketConfig

        config = MarketConfig(random_seed=3, bootstrap_candles=5, total_symbols=5)

        first = MarketState.create(config, T0).candles_snapshot()
        second = MarketState.create(config, T0).candles_snapshot()

        assert first == second

    def test_clear(self, market_config):
        state = MarketState.create(market_config, T0, rng=random.Random(1))

        state.clear()

        assert state.candles_snapshot() == []
        assert len(state.quote_board) == 0
