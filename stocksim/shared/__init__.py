"""
StockSim – Shared Module
==========================
Utilidades transversales usadas por todas las capas.

- config/: Settings
- logging/: Setup de logging

NOTA: Este módulo no contiene lógica de negocio.
"""

from stocksim.shared.config.settings import Settings
from stocksim.shared.logging.logger import get_logger, resolve_log_level, setup_logging

__all__ = [
    "Settings",
    "setup_logging",
    "resolve_log_level",
    "get_logger",
]
