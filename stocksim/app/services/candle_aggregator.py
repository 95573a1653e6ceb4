"""
StockSim – Candle Aggregator Service
======================================
Construye velas OHLC a partir de los ticks del PriceProcess y mantiene
el historial acotado de velas completadas.

MÁQUINA DE ESTADOS:
  SinVela ──ingest_tick──▸ Abierta ──ingest_tick──▸ Abierta ...
                              │
                    maybe_complete(now) con now - opened_at ≥ duración
                              ▼
                         Completada ──▸ (inmediato) nueva Abierta
                                        sembrada con el close anterior

ORDEN POR CICLO:
  maybe_complete(now) → ingest_tick(price, now)
  Con duración 1000ms y tick 100ms caen exactamente 10 ticks por vela.

REJILLA DE APERTURA:
  La vela siguiente abre en opened_at + k·duración (k ≥ 1, el mayor que
  no supera `now`), no en el instante tardío del tick que la cerró.
  El retraso de cada despertar no se acumula en los límites de vela.

CÓMO SE EVITA REPAINTING:
- La vela en construcción solo existe en `_building`. Al completarse se
  congela como Candle(frozen=True) y se inserta en el historial.
- Una vez congelada, NADIE puede modificarla.

REPARACIÓN DE INVARIANTES:
- Antes de sellar se ensanchan high/low para garantizar
  high ≥ max(open, close) y low ≤ min(open, close). Nunca se propaga error.

PROTECCIÓN DE MEMORIA:
- Solo UNA vela en construcción.
- El historial usa deque(maxlen=N) → descarta la más antigua (FIFO). O(1).
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, Optional

from stocksim.domain.entities.candle import Candle
from stocksim.domain.services.price_process import PriceProcess
from stocksim.domain.services.trend_regime import TrendRegime
from stocksim.domain.value_objects.market_config import MarketConfig
from stocksim.shared.logging.logger import get_logger

logger = get_logger("candle_aggregator")


@dataclass
class _BuildingCandle:
    """Vela mutable en construcción (solo uso interno)."""

    open_time: int        # segundos UNIX de apertura (clave del gráfico)
    opened_at: float      # instante exacto de apertura, para medir la duración
    open: float
    high: float
    low: float
    close: float
    tick_count: int = 0

    @classmethod
    def seeded(cls, price: float, now: float) -> "_BuildingCandle":
        return cls(
            open_time=int(now),
            opened_at=now,
            open=price,
            high=price,
            low=price,
            close=price,
        )

    def update(self, price: float) -> None:
        """Actualizar HLC con un nuevo precio. open no cambia."""
        self.high = max(self.high, price)
        self.low = min(self.low, price)
        self.close = price
        self.tick_count += 1

    def snapshot(self) -> Candle:
        return Candle(
            open_time=self.open_time,
            open=self.open,
            high=self.high,
            low=self.low,
            close=self.close,
        )

    def freeze(self) -> Candle:
        """Reparar invariantes OHLC y convertir en Candle inmutable."""
        high = max(self.high, self.open, self.close)
        low = min(self.low, self.open, self.close)
        if high != self.high or low != self.low:
            logger.debug(
                "Vela %d reparada: H %.5f→%.5f L %.5f→%.5f",
                self.open_time, self.high, high, self.low, low,
            )
        return Candle(
            open_time=self.open_time,
            open=self.open,
            high=high,
            low=low,
            close=self.close,
        )


class CandleAggregator:
    """
    Agrega ticks en velas de duración fija y guarda el historial.

    Uso:
        aggregator = CandleAggregator(config)
        completed = aggregator.maybe_complete(now)
        aggregator.ingest_tick(price, now)
    """

    def __init__(self, config: MarketConfig) -> None:
        self._duration = config.candle_duration
        self._capacity = config.history_capacity
        self._history: Deque[Candle] = deque(maxlen=config.history_capacity)
        self._building: Optional[_BuildingCandle] = None
        self._completed_count = 0

    # ─── Ticks en vivo ──────────────────────────────────────────────────

    def ingest_tick(self, price: float, now: float) -> Candle:
        """
        Incorporar un tick a la vela abierta (abriéndola si no existe).
        Retorna una copia inmutable del estado actual de la vela.
        """
        if self._building is None:
            self._building = _BuildingCandle.seeded(price, now)
            self._building.tick_count = 1
        else:
            self._building.update(price)
        return self._building.snapshot()

    def maybe_complete(self, now: float) -> Optional[Candle]:
        """
        Cerrar la vela abierta si alcanzó su duración.

        Retorna la vela completada (ya en el historial) o None.
        La siguiente vela se abre inmediatamente al close de la completada,
        con opened_at en la rejilla de duración.
        """
        building = self._building
        if building is None or now - building.opened_at < self._duration:
            return None

        completed = building.freeze()
        self._append(completed)
        self._building = _BuildingCandle.seeded(
            completed.close, self._next_boundary(building.opened_at, now)
        )

        logger.debug(
            "Vela cerrada: t=%d O=%.2f H=%.2f L=%.2f C=%.2f ticks=%d",
            completed.open_time,
            completed.open,
            completed.high,
            completed.low,
            completed.close,
            building.tick_count,
        )
        return completed

    def _next_boundary(self, opened_at: float, now: float) -> float:
        """Último límite de la rejilla de duración que no supera `now`."""
        periods = max(1, int((now - opened_at) // self._duration))
        return opened_at + periods * self._duration

    def _append(self, candle: Candle) -> None:
        """deque(maxlen=N) descarta automáticamente la más antigua."""
        self._history.append(candle)
        self._completed_count += 1

    # ─── Bootstrap ──────────────────────────────────────────────────────

    def bootstrap(
        self,
        process: PriceProcess,
        trend: TrendRegime,
        now: float,
        candles: int,
        ticks_per_candle: int,
    ) -> None:
        """
        Generar `candles` velas sintéticas offline, cada una con
        `ticks_per_candle` sub-ticks del PriceProcess.

        Las velas quedan espaciadas una duración entre sí y la última abre
        una duración antes de `now`. Al terminar se abre la vela en curso
        al último close, con opened_at = now.
        """
        price = process.last_price
        for i in range(candles):
            opened_at = now - (candles - i) * self._duration
            building = _BuildingCandle.seeded(price, opened_at)
            for _ in range(ticks_per_candle):
                trend.advance()
                building.update(process.next_price())
            candle = building.freeze()
            self._append(candle)
            price = candle.close

        self._building = _BuildingCandle.seeded(price, now)
        logger.info(
            "Bootstrap completado: %d velas × %d ticks, último close=%.2f",
            candles, ticks_per_candle, price,
        )

    # ─── Lectura ────────────────────────────────────────────────────────

    def current_candle(self) -> Optional[Candle]:
        """Copia inmutable de la vela en construcción (None si no hay)."""
        if self._building is None:
            return None
        return self._building.snapshot()

    @property
    def history(self) -> list[Candle]:
        """Velas completadas, de la más antigua a la más reciente."""
        return list(self._history)

    def snapshot(self) -> list[Candle]:
        """Historial completo seguido de la vela en construcción."""
        candles = list(self._history)
        if self._building is not None:
            candles.append(self._building.snapshot())
        return candles

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def completed_count(self) -> int:
        return self._completed_count

    @property
    def current_tick_count(self) -> int:
        return self._building.tick_count if self._building is not None else 0

    def clear(self) -> None:
        """Descartar historial y vela abierta."""
        self._history.clear()
        self._building = None
