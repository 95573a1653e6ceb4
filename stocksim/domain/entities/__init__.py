"""Domain entities."""
from stocksim.domain.entities.candle import Candle
from stocksim.domain.entities.stock_quote import StockQuote

__all__ = ["Candle", "StockQuote"]
