"""Domain services - Pure business logic with no external dependencies."""
from stocksim.domain.services.trend_regime import TrendRegime, TrendState
from stocksim.domain.services.price_process import PriceProcess

__all__ = [
    "TrendRegime",
    "TrendState",
    "PriceProcess",
]
