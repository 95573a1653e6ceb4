"""
StockSim – Main Application Entry Point
=========================================
Simulador de feed de mercado: tabla de cotizaciones + gráfico de velas
en tiempo real vía WebSocket.

ARQUITECTURA DE ARRANQUE:
  1. Crear contenedor (Settings → MarketConfig → LifecycleController)
  2. Configurar logging con Settings.log_level (DEBUG si Settings.debug)
  3. FastAPI lifespan:
     a. Inyectar dependencias en el router
     b. (nada más: el mercado arranca con el primer suscriptor)
  4. Shutdown: cerrar clientes y cancelar tasks del LifecycleController

FLUJO DE DATOS:
  Cliente WS conecta → WebSocketManager → LifecycleController
       ├── (0→1) MarketState.create() → bootstrap de velas + tabla
       └── SubscriberSyncManager.connect() → snapshot
  cada tick_interval:
       TrendRegime → PriceProcess → CandleAggregator → broadcast_candle()
  cada quote_update_interval / quote_broadcast_interval:
       QuoteBoard.update_random() / broadcast("stock_update")

  uvicorn stocksim.main:app --host 0.0.0.0 --port 3000
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stocksim import __version__
from stocksim.app.api.routes import init_routes, router
from stocksim.container import init_container
from stocksim.shared.logging.logger import get_logger, resolve_log_level, setup_logging

# ─── Contenedor de Dependencias ─────────────────────────────────────────
container = init_container()

# ─── Logging ────────────────────────────────────────────────────────────
setup_logging(resolve_log_level(container.settings.log_level, container.settings.debug))
logger = get_logger("main")


# ─── FastAPI Lifespan ───────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle de la aplicación."""
    config = container.market_config
    logger.info("=" * 60)
    logger.info("  StockSim v%s", __version__)
    logger.info("  Vela: %d ms | Tick: %d ms | Historial: %d velas",
                config.candle_duration_ms, config.tick_interval_ms,
                config.history_capacity)
    logger.info("  Precio base: %.2f | Volatilidad: %.4f",
                config.base_price, config.volatility)
    logger.info("  Tabla: %d símbolos, %d por update cada %d ms, broadcast cada %d ms",
                config.total_symbols, config.stocks_per_update,
                config.quote_update_interval_ms, config.quote_broadcast_interval_ms)
    logger.info("  Logging: %s", logging.getLevelName(logging.getLogger("stocksim").level))
    logger.info("  Mercado en reposo hasta el primer suscriptor")
    logger.info("=" * 60)

    init_routes(container.ws_manager, container.controller, config)

    yield  # ← La app está corriendo aquí

    # ── SHUTDOWN ──
    logger.info("Iniciando shutdown...")
    await container.controller.shutdown()
    await container.ws_manager.stop()
    logger.info("✓ Shutdown completo")


# ─── FastAPI App ────────────────────────────────────────────────────────

app = FastAPI(
    title="StockSim",
    description="Simulador de mercado: cotizaciones y velas OHLC en tiempo real",
    version=__version__,
    lifespan=lifespan,
)

# CORS para frontend local
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


def run() -> None:
    """Entry point de consola: arrancar uvicorn con la configuración."""
    import uvicorn

    settings = container.settings
    uvicorn.run(
        "stocksim.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
