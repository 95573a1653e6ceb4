"""
StockSim – Domain Value Object: MarketConfig
==============================================
Parámetros inmutables de la simulación de mercado.

El núcleo (TrendRegime, PriceProcess, CandleAggregator, QuoteBoard,
LifecycleController) recibe SIEMPRE este objeto; nunca lee Settings ni
tiene constantes de negocio propias. Se valida una sola vez al
construirlo, fuera del camino caliente.

DESACOPLAMIENTO DURACIÓN / CADENCIA:
- candle_duration_ms y tick_interval_ms son independientes.
- Solo su relación (ticks_per_candle) es derivada.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from stocksim.domain.exceptions.domain_errors import InvalidMarketConfigError


@dataclass(frozen=True, slots=True)
class MarketConfig:
    """Configuración de mercado validada."""

    # Velas
    candle_duration_ms: int = 5_000
    tick_interval_ms: int = 500
    history_capacity: int = 200

    # Proceso de precio
    base_price: float = 150.0
    volatility: float = 0.002
    trend_change_probability: float = 0.02
    shock_probability: float = 0.05
    mean_reversion_factor: float = 0.1

    # Bootstrap
    bootstrap_candles: int = 100
    bootstrap_ticks_per_candle: int = 10

    # Tabla de cotizaciones
    total_symbols: int = 300
    quote_update_interval_ms: int = 100
    quote_broadcast_interval_ms: int = 500
    stocks_per_update: int = 15
    price_change_range: float = 0.05
    min_spread: float = 0.01
    max_spread: float = 0.05

    random_seed: Optional[int] = None

    def __post_init__(self) -> None:
        # open_time es entero en segundos → velas de menos de 1s colisionarían
        if self.candle_duration_ms < 1_000:
            raise InvalidMarketConfigError(
                f"candle_duration_ms debe ser ≥ 1000 (recibido {self.candle_duration_ms})",
                field="candle_duration_ms",
            )
        for name in ("tick_interval_ms", "quote_update_interval_ms",
                     "quote_broadcast_interval_ms", "history_capacity"):
            if getattr(self, name) <= 0:
                raise InvalidMarketConfigError(
                    f"{name} debe ser positivo", field=name,
                )
        if self.base_price <= 0:
            raise InvalidMarketConfigError("base_price debe ser positivo", field="base_price")
        for name in ("volatility", "mean_reversion_factor", "price_change_range"):
            if getattr(self, name) < 0:
                raise InvalidMarketConfigError(f"{name} no puede ser negativo", field=name)
        for name in ("trend_change_probability", "shock_probability"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise InvalidMarketConfigError(
                    f"{name} debe estar en [0, 1] (recibido {value})", field=name,
                )
        for name in ("bootstrap_candles", "bootstrap_ticks_per_candle",
                     "total_symbols", "stocks_per_update"):
            if getattr(self, name) < 0:
                raise InvalidMarketConfigError(f"{name} no puede ser negativo", field=name)
        if not 0.0 <= self.min_spread <= self.max_spread < 1.0:
            raise InvalidMarketConfigError(
                "Se requiere 0 ≤ min_spread ≤ max_spread < 1", field="min_spread",
            )

    # ─── Derivados ──────────────────────────────────────────────────────

    @property
    def candle_duration(self) -> float:
        """Duración de vela en segundos."""
        return self.candle_duration_ms / 1000

    @property
    def tick_interval(self) -> float:
        return self.tick_interval_ms / 1000

    @property
    def quote_update_interval(self) -> float:
        return self.quote_update_interval_ms / 1000

    @property
    def quote_broadcast_interval(self) -> float:
        return self.quote_broadcast_interval_ms / 1000

    @property
    def ticks_per_candle(self) -> float:
        """Ticks esperados por vela (sin deriva del scheduler)."""
        return self.candle_duration_ms / self.tick_interval_ms

    @classmethod
    def from_settings(cls, settings) -> "MarketConfig":
        """Construir desde Settings (pydantic) – único punto de acoplamiento."""
        return cls(
            candle_duration_ms=settings.candle_duration_ms,
            tick_interval_ms=settings.tick_interval_ms,
            history_capacity=settings.max_candles_buffer,
            base_price=settings.base_price,
            volatility=settings.volatility,
            trend_change_probability=settings.trend_change_probability,
            shock_probability=settings.shock_probability,
            mean_reversion_factor=settings.mean_reversion_factor,
            bootstrap_candles=settings.bootstrap_candles,
            bootstrap_ticks_per_candle=settings.bootstrap_ticks_per_candle,
            total_symbols=settings.total_symbols,
            quote_update_interval_ms=settings.quote_update_interval_ms,
            quote_broadcast_interval_ms=settings.quote_broadcast_interval_ms,
            stocks_per_update=settings.stocks_per_update,
            price_change_range=settings.price_change_range,
            min_spread=settings.min_spread,
            max_spread=settings.max_spread,
            random_seed=settings.random_seed,
        )

    def to_dict(self) -> dict:
        return {
            "candle_duration_ms": self.candle_duration_ms,
            "tick_interval_ms": self.tick_interval_ms,
            "history_capacity": self.history_capacity,
            "base_price": self.base_price,
            "volatility": self.volatility,
            "total_symbols": self.total_symbols,
            "quote_update_interval_ms": self.quote_update_interval_ms,
            "quote_broadcast_interval_ms": self.quote_broadcast_interval_ms,
            "stocks_per_update": self.stocks_per_update,
        }
