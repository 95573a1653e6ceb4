"""
StockSim – Domain Service: Price Process
==========================================
Genera el siguiente precio a partir del último.

FÓRMULA (por tick):
    random    = U(-1, 1) · σ            (×3 con probabilidad p_shock)
    trend     = bias · strength · σ · 0.5
    reversion = -((last - base) / base) · k · σ
    candidate = last · (1 + random + trend + reversion)
    price     = round(clamp(candidate, base·0.5, base·2), 2)

donde σ = volatility y k = mean_reversion_factor.

El shock se aplica SOLO al término aleatorio, antes de combinar con
tendencia/reversión y antes del clamp final.

REPRODUCIBILIDAD:
- Todo el azar sale de un random.Random inyectado. Con la misma semilla y
  la misma secuencia de llamadas, la secuencia de precios es idéntica.
"""

from __future__ import annotations

import random

from stocksim.domain.services.trend_regime import TrendRegime
from stocksim.domain.value_objects.market_config import MarketConfig

SHOCK_MULTIPLIER = 3.0
TREND_WEIGHT = 0.5
FLOOR_FACTOR = 0.5
CEILING_FACTOR = 2.0
PRICE_DECIMALS = 2


class PriceProcess:
    """Paseo aleatorio con sesgo de tendencia, reversión a la media y shocks."""

    def __init__(
        self,
        config: MarketConfig,
        trend: TrendRegime,
        rng: random.Random,
        last_price: float | None = None,
    ) -> None:
        self._base = config.base_price
        self._volatility = config.volatility
        self._shock_probability = config.shock_probability
        self._reversion_factor = config.mean_reversion_factor
        self._trend = trend
        self._rng = rng
        # PriceState: solo next_price() lo modifica
        self.last_price: float = config.base_price if last_price is None else last_price

    def next_price(self, last: float | None = None) -> float:
        """Calcular y registrar el siguiente precio (desde `last` o el último registrado)."""
        if last is None:
            last = self.last_price

        noise = self._rng.uniform(-1.0, 1.0) * self._volatility
        if self._rng.random() < self._shock_probability:
            noise *= SHOCK_MULTIPLIER

        trend_term = (
            self._trend.bias * self._trend.strength * self._volatility * TREND_WEIGHT
        )
        reversion_term = (
            -((last - self._base) / self._base)
            * self._reversion_factor
            * self._volatility
        )

        candidate = last * (1 + noise + trend_term + reversion_term)
        clamped = min(max(candidate, self._base * FLOOR_FACTOR), self._base * CEILING_FACTOR)

        self.last_price = round(clamped, PRICE_DECIMALS)
        return self.last_price
