"""
Unit tests for MarketConfig and Settings.
"""

import pytest

from stocksim.domain.exceptions.domain_errors import DomainError, InvalidMarketConfigError
from stocksim.domain.value_objects.market_config import MarketConfig
from stocksim.shared.config.settings import Settings


class TestValidation:

    def test_defaults_are_valid(self):
        config = MarketConfig()
        assert config.candle_duration == 5.0
        assert config.tick_interval == 0.5
        assert config.ticks_per_candle == 10

    @pytest.mark.parametrize("kwargs, field", [
        ({"candle_duration_ms": 500}, "candle_duration_ms"),
        ({"tick_interval_ms": 0}, "tick_interval_ms"),
        ({"history_capacity": 0}, "history_capacity"),
        ({"base_price": 0.0}, "base_price"),
        ({"volatility": -0.1}, "volatility"),
        ({"shock_probability": 1.5}, "shock_probability"),
        ({"trend_change_probability": -0.01}, "trend_change_probability"),
        ({"bootstrap_candles": -1}, "bootstrap_candles"),
        ({"min_spread": 0.1, "max_spread": 0.05}, "min_spread"),
    ])
    def test_invalid_values_rejected(self, kwargs, field):
        with pytest.raises(InvalidMarketConfigError) as exc_info:
            MarketConfig(**kwargs)

        assert exc_info.value.field == field
        assert exc_info.value.to_dict()["error"] == "INVALID_MARKET_CONFIG"
        assert isinstance(exc_info.value, DomainError)

    def test_is_immutable(self):
        config = MarketConfig()
        with pytest.raises(AttributeError):
            config.volatility = 1.0

    def test_duration_and_cadence_are_independent(self):
        config = MarketConfig(candle_duration_ms=60_000, tick_interval_ms=250)
        assert config.candle_duration == 60.0
        assert config.tick_interval == 0.25
        assert config.ticks_per_candle == 240


class TestFromSettings:

    def test_maps_every_field(self):
        settings = Settings(
            candle_duration_ms=2_000,
            tick_interval_ms=200,
            max_candles_buffer=77,
            base_price=42.0,
            volatility=0.004,
            bootstrap_candles=12,
            bootstrap_ticks_per_candle=3,
            total_symbols=9,
            random_seed=5,
        )

        config = MarketConfig.from_settings(settings)

        assert config.candle_duration_ms == 2_000
        assert config.tick_interval_ms == 200
        assert config.history_capacity == 77
        assert config.base_price == 42.0
        assert config.volatility == 0.004
        assert config.bootstrap_candles == 12
        assert config.bootstrap_ticks_per_candle == 3
        assert config.total_symbols == 9
        assert config.random_seed == 5

    def test_settings_read_environment(self, monkeypatch):
        monkeypatch.setenv("CANDLE_DURATION_MS", "1000")
        monkeypatch.setenv("BASE_PRICE", "99.5")

        settings = Settings()

        assert settings.candle_duration_ms == 1000
        assert settings.base_price == 99.5
