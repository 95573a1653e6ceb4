"""
StockSim – Logging configuration
==================================
Una línea por evento: timestamp, nivel y namespace del componente
(`stocksim.<componente>`).

NIVEL:
  Settings.log_level (INFO por defecto). Con Settings.debug = True se
  fuerza DEBUG para ver reparaciones de velas y envíos descartados.

  setup_logging(resolve_log_level(settings.log_level, settings.debug))
"""

from __future__ import annotations

import logging
import sys
from typing import Union

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-30s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Librerías cuyo INFO/DEBUG satura la salida del tick
_NOISY_LOGGERS = ("websockets", "uvicorn.access", "asyncio")


def resolve_log_level(log_level: Union[str, int] = "INFO", debug: bool = False) -> int:
    """Nivel numérico a partir del nombre configurado. debug=True gana."""
    if debug:
        return logging.DEBUG
    if isinstance(log_level, int):
        return log_level
    level = logging.getLevelName(log_level.strip().upper())
    if not isinstance(level, int):
        raise ValueError(f"Nivel de log desconocido: {log_level!r}")
    return level


def setup_logging(level: Union[str, int] = logging.INFO) -> None:
    """Configura el root logger una sola vez al arranque."""
    if isinstance(level, str):
        level = resolve_log_level(level)

    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        root.addHandler(handler)
    root.setLevel(level)
    logging.getLogger("stocksim").setLevel(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: str) -> logging.Logger:
    """Logger del componente bajo el namespace `stocksim.`."""
    return logging.getLogger(f"stocksim.{name}")
