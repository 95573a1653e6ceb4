"""
StockSim – Quote Board Service
================================
Tabla de cotizaciones compra/venta de instrumentos sintéticos (ticker).

ALGORITMO:
  initialize():
    - N instrumentos: símbolo "ABC.X0001", nombre "<Prefijo> <Sufijo>"
    - buy  ~ U[1, 1000), 3 decimales
    - sell = buy · (1 - spread), spread ~ U[min_spread, max_spread]
  update_random():
    - Se eligen `stocks_per_update` índices distintos al azar.
    - buy y sell varían de forma independiente: U(-1, 1) · price_change_range
    - Piso en 0.001, 3 decimales, variación registrada como "+x.xx%".

Feed hermano del gráfico de velas: no comparte estado con el núcleo,
solo el ciclo de vida (se crea al activar y se descarta al desactivar).
"""

from __future__ import annotations

import random
import string

from stocksim.domain.entities.stock_quote import StockQuote, format_change
from stocksim.domain.value_objects.market_config import MarketConfig
from stocksim.shared.logging.logger import get_logger

logger = get_logger("quote_board")

NAME_PREFIXES = (
    "Aero", "Bio", "Cyber", "Data", "Eco",
    "Fintech", "Global", "Hydro", "Info", "Quantum",
)
NAME_SUFFIXES = (
    "Systems", "Technologies", "Solutions", "Industries", "Corp",
    "Group", "Dynamics", "Innovations", "Enterprises", "Holdings",
)
MIN_QUOTE = 0.001
QUOTE_DECIMALS = 3


class QuoteBoard:
    """Tabla de cotizaciones con jitter aleatorio sobre un subconjunto."""

    def __init__(self, config: MarketConfig, rng: random.Random) -> None:
        self._config = config
        self._rng = rng
        self._quotes: list[StockQuote] = []
        self._update_cycles = 0

    def generate_symbol(self, index: int) -> str:
        prefix = "".join(self._rng.choice(string.ascii_uppercase) for _ in range(3))
        return f"{prefix}.X{index:04d}"

    def generate_company_name(self) -> str:
        return f"{self._rng.choice(NAME_PREFIXES)} {self._rng.choice(NAME_SUFFIXES)}"

    def generate_sell_price(self, buy_price: float) -> float:
        spread = self._rng.uniform(self._config.min_spread, self._config.max_spread)
        return round(buy_price * (1 - spread), QUOTE_DECIMALS)

    def initialize(self) -> None:
        """Generar la tabla completa desde cero."""
        quotes = []
        for index in range(self._config.total_symbols):
            buy_price = round(self._rng.random() * 999 + 1, QUOTE_DECIMALS)
            quotes.append(
                StockQuote(
                    symbol_name=self.generate_symbol(index),
                    name=self.generate_company_name(),
                    buy_value=buy_price,
                    sell_value=self.generate_sell_price(buy_price),
                )
            )
        self._quotes = quotes
        if quotes:
            sample = quotes[0]
            logger.info(
                "Tabla inicializada: %d instrumentos (ej. %s – %s buy=%.3f sell=%.3f)",
                len(quotes), sample.symbol_name, sample.name,
                sample.buy_value, sample.sell_value,
            )

    def _jitter(self, price: float) -> float:
        change = self._rng.uniform(-1.0, 1.0) * self._config.price_change_range
        return round(max(MIN_QUOTE, price * (1 + change)), QUOTE_DECIMALS)

    def update_quote(self, quote: StockQuote) -> None:
        """Aplicar variación independiente a buy y sell de una cotización."""
        old_buy, old_sell = quote.buy_value, quote.sell_value

        quote.buy_value = self._jitter(old_buy)
        quote.buy_change = format_change(old_buy, quote.buy_value)

        quote.sell_value = self._jitter(old_sell)
        quote.sell_change = format_change(old_sell, quote.sell_value)

    def update_random(self) -> list[int]:
        """Actualizar un subconjunto aleatorio; retorna los índices tocados."""
        count = min(self._config.stocks_per_update, len(self._quotes))
        indices = self._rng.sample(range(len(self._quotes)), count)
        for index in indices:
            self.update_quote(self._quotes[index])
        self._update_cycles += 1
        return indices

    def to_list(self) -> list[dict]:
        return [q.to_dict() for q in self._quotes]

    @property
    def quotes(self) -> list[StockQuote]:
        return list(self._quotes)

    @property
    def update_cycles(self) -> int:
        return self._update_cycles

    def __len__(self) -> int:
        return len(self._quotes)

    def clear(self) -> None:
        self._quotes = []
