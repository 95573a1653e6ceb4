"""StockSim – simulador de feed de mercado en tiempo real."""

__version__ = "1.0.0"
