"""
StockSim – Domain Entity: StockQuote
======================================
Fila de la tabla de cotizaciones (ticker de órdenes).

A diferencia de Candle NO es frozen: la QuoteBoard la muta en cada
ciclo de actualización. Los consumidores solo ven to_dict().
"""

from __future__ import annotations

from dataclasses import dataclass

ZERO_CHANGE = "+0.00%"


def format_change(old_price: float, new_price: float) -> str:
    """Variación porcentual con signo explícito, e.g. "+1.25%" / "-0.40%"."""
    change = (new_price - old_price) / old_price * 100
    sign = "+" if change >= 0 else ""
    return f"{sign}{change:.2f}%"


@dataclass(slots=True)
class StockQuote:
    """Cotización compra/venta de un instrumento sintético."""

    symbol_name: str     # e.g. "QZA.X0007"
    name: str            # e.g. "Quantum Dynamics"
    buy_value: float
    sell_value: float
    buy_change: str = ZERO_CHANGE
    sell_change: str = ZERO_CHANGE

    def to_dict(self) -> dict:
        return {
            "symbol_name": self.symbol_name,
            "buy_value": self.buy_value,
            "name": self.name,
            "buy_change": self.buy_change,
            "sell_value": self.sell_value,
            "sell_change": self.sell_change,
        }
