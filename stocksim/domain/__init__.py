"""
StockSim – Domain Layer
=========================
Núcleo puro del sistema. CERO dependencias externas.

- entities/: Candle, StockQuote
- value_objects/: MarketConfig
- services/: TrendRegime, PriceProcess
- exceptions/: Excepciones de dominio

REGLA DE DEPENDENCIA:
Este módulo NO puede importar de app/ ni de frameworks (FastAPI, pydantic).
"""

from stocksim.domain.entities.candle import Candle
from stocksim.domain.entities.stock_quote import StockQuote
from stocksim.domain.value_objects.market_config import MarketConfig

__all__ = [
    "Candle",
    "StockQuote",
    "MarketConfig",
]
