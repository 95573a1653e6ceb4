"""
StockSim – Lifecycle Controller
=================================
Arranca y detiene todo el pipeline de mercado según el número de
suscriptores conectados.

ESTADOS:
  Idle ──(0 → 1 suscriptores)──▸ Active
       · MarketState fresco (tendencia, precio, velas + bootstrap, tabla)
       · SubscriberSyncManager fresco
       · tasks periódicas: tick+broadcast de velas, update de tabla,
         broadcast de tabla
  Active ──(1 → 0 suscriptores)──▸ Idle
       · cancelar todas las tasks (idempotente)
       · descartar MarketState y registros → memoria O(1) en reposo

INVARIANTE:
- Con cero suscriptores no hay trabajo periódico ni estado de mercado.

CONCURRENCIA:
- Todo corre en un único event loop asyncio. Cada ciclo de tick
  (vela + broadcast) es síncrono dentro de la task → atómico.
- Cadencia de tick y duración de vela son valores independientes.
"""

from __future__ import annotations

import asyncio
import random
import time
from enum import Enum
from typing import Callable, Optional

from stocksim.app.application.ports.subscriber_channel import ISubscriberChannel
from stocksim.app.services.subscriber_sync import (
    SNAPSHOT_MESSAGE,
    STOCK_UPDATE_MESSAGE,
    SubscriberSyncManager,
    build_message,
)
from stocksim.app.state.market_state import MarketState
from stocksim.domain.value_objects.market_config import MarketConfig
from stocksim.shared.logging.logger import get_logger

logger = get_logger("lifecycle")


class LifecycleState(str, Enum):
    """Estado global del pipeline."""
    IDLE = "Idle"
    ACTIVE = "Active"


class LifecycleController:
    """
    Dueño único de MarketState, SubscriberSyncManager y de las tasks
    periódicas.

    Uso (desde el transporte):
        controller.connect(client_id, channel)    # puede activar
        controller.disconnect(client_id)          # puede desactivar
    """

    def __init__(
        self,
        config: MarketConfig,
        clock: Callable[[], float] = time.time,
        rng_factory: Optional[Callable[[], random.Random]] = None,
    ) -> None:
        self._config = config
        self._clock = clock
        self._rng_factory = rng_factory or (lambda: random.Random(config.random_seed))
        self._market: Optional[MarketState] = None
        self._sync: Optional[SubscriberSyncManager] = None
        self._tasks: list[asyncio.Task] = []

        # Estadísticas de monitoreo (sobreviven a activaciones)
        self._activations = 0
        self._ticks_processed = 0
        self._candles_completed = 0

    # ─── Suscriptores ───────────────────────────────────────────────────

    def connect(self, subscriber_id: str, channel: ISubscriberChannel) -> None:
        """
        Registrar suscriptor (activa el mercado si era el primero).
        Recibe el snapshot de velas y, a continuación, la tabla completa.
        """
        sync = self._sync if self._sync is not None else self._activate()
        sync.connect(subscriber_id, channel)
        sync.send_to(subscriber_id, STOCK_UPDATE_MESSAGE, self.stocks())

    def disconnect(self, subscriber_id: str) -> None:
        """Eliminar suscriptor; desactiva el mercado si era el último."""
        if self._sync is None:
            return
        self._sync.disconnect(subscriber_id)
        if self._sync.subscriber_count == 0:
            self._deactivate()

    # ─── Transiciones ───────────────────────────────────────────────────

    def _activate(self) -> SubscriberSyncManager:
        started = time.perf_counter()
        self._market = MarketState.create(
            self._config, self._clock(), rng=self._rng_factory()
        )
        self._sync = SubscriberSyncManager(self._market.aggregator)
        self._start_producers()
        self._activations += 1
        logger.info(
            "Mercado ACTIVO (activación #%d, bootstrap=%d velas en %.1f ms, "
            "%.1f ticks/vela)",
            self._activations,
            len(self._market.aggregator.history),
            (time.perf_counter() - started) * 1000,
            self._config.ticks_per_candle,
        )
        return self._sync

    def _deactivate(self) -> None:
        self.stop()
        if self._market is not None:
            self._market.clear()
        if self._sync is not None:
            self._sync.clear()
        self._market = None
        self._sync = None
        logger.info("Mercado IDLE – estado descartado")

    def _start_producers(self) -> None:
        self._tasks = [
            asyncio.create_task(
                self._periodic(self.run_tick_cycle, self._config.tick_interval),
                name="market-tick",
            ),
            asyncio.create_task(
                self._periodic(self.run_quote_update, self._config.quote_update_interval),
                name="quote-update",
            ),
            asyncio.create_task(
                self._periodic(self.run_quote_broadcast, self._config.quote_broadcast_interval),
                name="quote-broadcast",
            ),
        ]

    def stop(self) -> None:
        """Cancelar todas las tasks programadas. Idempotente."""
        if not self._tasks:
            return
        for task in self._tasks:
            if not task.done():
                task.cancel()
        logger.info("Productores periódicos detenidos (%d tasks)", len(self._tasks))
        self._tasks = []

    async def shutdown(self) -> None:
        """Shutdown de la aplicación: cancelar, esperar tasks y descartar estado."""
        tasks = list(self._tasks)
        self._deactivate()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass

    # ─── Trabajo periódico ──────────────────────────────────────────────

    async def _periodic(self, work: Callable[[], None], interval: float) -> None:
        """
        Ejecutar `work` cada `interval` segundos sin acumular deriva.
        Un fallo en un ciclo se loguea y no detiene la task.
        """
        loop = asyncio.get_running_loop()
        next_run = loop.time() + interval
        try:
            while True:
                await asyncio.sleep(max(0.0, next_run - loop.time()))
                next_run += interval
                try:
                    work()
                except Exception as e:
                    logger.error("Error en ciclo periódico: %s", e, exc_info=True)
        except asyncio.CancelledError:
            pass  # Shutdown limpio

    def run_tick_cycle(self) -> None:
        """Tick de precio + agregación de vela + broadcast como unidad atómica."""
        if self._market is None or self._sync is None:
            return
        result = self._market.step(self._clock())
        self._ticks_processed += 1
        if result.completed is not None:
            self._candles_completed += 1
        self._sync.broadcast_candle()

    def run_quote_update(self) -> None:
        if self._market is None:
            return
        self._market.quote_board.update_random()

    def run_quote_broadcast(self) -> None:
        if self._market is None or self._sync is None:
            return
        self._sync.broadcast(STOCK_UPDATE_MESSAGE, self._market.quote_board.to_list())

    # ─── Consultas (pull síncrono) ──────────────────────────────────────

    def candles_snapshot(self) -> dict:
        """Mismo contenido que un snapshot completo (vacío en Idle)."""
        if self._sync is None:
            return build_message(SNAPSHOT_MESSAGE, [])
        return self._sync.snapshot_message()

    def stocks(self) -> list[dict]:
        if self._market is None:
            return []
        return self._market.quote_board.to_list()

    @property
    def state(self) -> LifecycleState:
        return LifecycleState.ACTIVE if self._market is not None else LifecycleState.IDLE

    @property
    def market(self) -> Optional[MarketState]:
        return self._market

    @property
    def sync(self) -> Optional[SubscriberSyncManager]:
        return self._sync

    @property
    def task_count(self) -> int:
        return len(self._tasks)

    @property
    def subscriber_count(self) -> int:
        return self._sync.subscriber_count if self._sync is not None else 0

    @property
    def stats(self) -> dict:
        return {
            "state": self.state.value,
            "subscribers": self.subscriber_count,
            "activations": self._activations,
            "ticks_processed": self._ticks_processed,
            "candles_completed": self._candles_completed,
            "scheduled_tasks": len(self._tasks),
            "market": self._market.snapshot() if self._market is not None else None,
        }
