"""
StockSim – Market State
=========================
Estado en memoria de UN mercado activo: tendencia, precio, velas y tabla
de cotizaciones.

CICLO DE VIDA:
- Se construye (y se hace bootstrap) en la transición Idle → Active.
- Se descarta completo en Active → Idle. No existen globals de módulo:
  quien tiene la referencia (LifecycleController) es el único dueño.

ATOMICIDAD:
- step() ejecuta tendencia → precio → vela sin ningún await, así que
  dentro del event loop ningún suscriptor observa una vela a medio
  actualizar.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional

from stocksim.app.services.candle_aggregator import CandleAggregator
from stocksim.app.services.quote_board import QuoteBoard
from stocksim.domain.entities.candle import Candle
from stocksim.domain.services.price_process import PriceProcess
from stocksim.domain.services.trend_regime import TrendRegime
from stocksim.domain.value_objects.market_config import MarketConfig
from stocksim.shared.logging.logger import get_logger

logger = get_logger("market_state")


@dataclass(frozen=True, slots=True)
class TickResult:
    """Resultado de un ciclo de tick."""

    price: float
    current: Candle                  # vela abierta tras el tick
    completed: Optional[Candle] = None


class MarketState:
    """Agrupa todo el estado mutable del mercado simulado."""

    def __init__(self, config: MarketConfig, rng: random.Random) -> None:
        self.config = config
        self.rng = rng
        self.trend = TrendRegime(config.trend_change_probability, rng)
        self.price_process = PriceProcess(config, self.trend, rng)
        self.aggregator = CandleAggregator(config)
        self.quote_board = QuoteBoard(config, rng)
        self.total_ticks = 0

    @classmethod
    def create(
        cls,
        config: MarketConfig,
        now: float,
        rng: random.Random | None = None,
    ) -> "MarketState":
        """Construir un estado fresco con historial y tabla inicializados."""
        if rng is None:
            rng = random.Random(config.random_seed)
        state = cls(config, rng)
        state.aggregator.bootstrap(
            state.price_process,
            state.trend,
            now,
            candles=config.bootstrap_candles,
            ticks_per_candle=config.bootstrap_ticks_per_candle,
        )
        state.quote_board.initialize()
        return state

    def step(self, now: float) -> TickResult:
        """Un tick atómico: cerrar vela si toca, avanzar tendencia y precio, agregar."""
        completed = self.aggregator.maybe_complete(now)
        self.trend.advance()
        price = self.price_process.next_price()
        current = self.aggregator.ingest_tick(price, now)
        self.total_ticks += 1
        return TickResult(price=price, current=current, completed=completed)

    @property
    def last_price(self) -> float:
        return self.price_process.last_price

    def candles_snapshot(self) -> list[Candle]:
        return self.aggregator.snapshot()

    def current_candle(self) -> Optional[Candle]:
        return self.aggregator.current_candle()

    def clear(self) -> None:
        """Liberar historial, vela abierta y tabla."""
        self.aggregator.clear()
        self.quote_board.clear()

    def snapshot(self) -> dict:
        """Snapshot para diagnóstico / API."""
        return {
            "last_price": self.last_price,
            "trend_bias": self.trend.bias,
            "trend_strength": round(self.trend.strength, 4),
            "total_ticks": self.total_ticks,
            "total_candles": self.aggregator.completed_count,
            "candles_in_buffer": len(self.aggregator.history),
            "ticks_in_current_candle": self.aggregator.current_tick_count,
            "symbols": len(self.quote_board),
        }
