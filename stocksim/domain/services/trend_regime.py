"""
StockSim – Domain Service: Trend Regime
=========================================
Sesgo direccional de corta duración aplicado al proceso de precio.

DINÁMICA POR TICK:
  - Con probabilidad p_trend → nuevo régimen:
        bias     ~ Uniforme{-1, 0, +1}
        strength ~ Uniforme[0.3, 0.8]
  - Si no → decaimiento geométrico: strength *= 0.98 (bias se mantiene)

Así una tendencia nace fuerte y se desvanece sola si no se renueva.
"""

from __future__ import annotations

import random
from dataclasses import dataclass

STRENGTH_MIN = 0.3
STRENGTH_MAX = 0.8
STRENGTH_DECAY = 0.98
BIASES = (-1, 0, 1)


@dataclass(slots=True)
class TrendState:
    """Estado de tendencia: dirección y fuerza."""

    bias: int = 0          # -1 bajista, 0 lateral, +1 alcista
    strength: float = 0.0  # [0, 1]


class TrendRegime:
    """
    Avanza el TrendState una vez por tick.

    El generador aleatorio se inyecta para reproducibilidad en tests.
    """

    def __init__(
        self,
        change_probability: float,
        rng: random.Random,
        state: TrendState | None = None,
    ) -> None:
        self._change_probability = change_probability
        self._rng = rng
        self.state = state or TrendState()

    @property
    def bias(self) -> int:
        return self.state.bias

    @property
    def strength(self) -> float:
        return self.state.strength

    def advance(self) -> TrendState:
        """Avanzar un tick: re-sortear régimen o decaer la fuerza."""
        if self._rng.random() < self._change_probability:
            self.state.bias = self._rng.choice(BIASES)
            self.state.strength = self._rng.uniform(STRENGTH_MIN, STRENGTH_MAX)
        else:
            self.state.strength *= STRENGTH_DECAY
        return self.state
