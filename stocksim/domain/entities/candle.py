"""
StockSim – Domain Entity: Candle
==================================
Vela OHLC inmutable producida por el CandleAggregator.

Decisiones de diseño:
- frozen=True → inmutable una vez sellada en el historial.
  Nadie puede alterar una vela pasada, garantizando integridad histórica.
- Se usa dataclass por rendimiento (más ligera que Pydantic para hot-path).
- open_time en segundos UNIX enteros: es la clave temporal del gráfico.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Candle:
    """Vela OHLC con timestamp de apertura."""

    open_time: int       # segundos UNIX de apertura
    open: float
    high: float
    low: float
    close: float

    def is_consistent(self) -> bool:
        """high ≥ max(open, close) y low ≤ min(open, close)."""
        return self.high >= max(self.open, self.close) and self.low <= min(
            self.open, self.close
        )

    def to_dict(self) -> dict:
        """Serialización para WebSocket / frontend."""
        return {
            "time": int(self.open_time),
            "open": round(self.open, 2),
            "high": round(self.high, 2),
            "low": round(self.low, 2),
            "close": round(self.close, 2),
        }
