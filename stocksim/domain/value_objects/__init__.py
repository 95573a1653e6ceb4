"""Domain value objects."""
from stocksim.domain.value_objects.market_config import MarketConfig

__all__ = ["MarketConfig"]
