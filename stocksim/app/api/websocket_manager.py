"""
StockSim – WebSocket Manager (conexiones frontend)
====================================================
Adapta cada conexión WebSocket a un ISubscriberChannel y la registra en
el LifecycleController.

ARQUITECTURA:
  LifecycleController ──send()──▸ WebSocketChannel._outbox (deque acotada)
                                        │
                                  _writer() task
                                        ▼
                                   ws.send_text()

NO BLOQUEA EL LOOP PRINCIPAL:
- send() solo encola en una cola acotada por cliente y despierta al writer.
- Si la cola está llena se descarta el mensaje MÁS ANTIGUO (drop-oldest):
  un cliente lento pierde frames intermedios sin frenar el tick.
- Un snapshot encolado nunca se descarta mientras quede otro mensaje que
  descartar. El primer mensaje de gráfico sigue siendo el historial.
- El writer usa asyncio.wait_for con timeout para que un cliente colgado
  no retenga su task indefinidamente; ante fallo el canal se cierra.
"""

from __future__ import annotations

import asyncio
import json
import uuid
from collections import deque
from typing import Any, Deque, Dict, Optional

from fastapi import WebSocket

from stocksim.app.application.lifecycle_controller import LifecycleController
from stocksim.app.application.ports.subscriber_channel import ISubscriberChannel
from stocksim.app.services.subscriber_sync import SNAPSHOT_MESSAGE
from stocksim.shared.logging.logger import get_logger

logger = get_logger("ws_manager")


class WebSocketChannel(ISubscriberChannel):
    """Canal no bloqueante sobre un WebSocket de Starlette/FastAPI."""

    def __init__(
        self,
        client_id: str,
        websocket: WebSocket,
        max_queue_size: int = 256,
        send_timeout: float = 5.0,
    ) -> None:
        self.client_id = client_id
        self._ws = websocket
        self._outbox: Deque[Dict[str, Any]] = deque()
        self._max_queue_size = max(1, max_queue_size)
        self._ready = asyncio.Event()
        self._send_timeout = send_timeout
        self._writer_task: Optional[asyncio.Task] = None
        self._closed = False
        self.dropped = 0

    def start(self) -> None:
        self._writer_task = asyncio.create_task(
            self._writer(), name=f"ws-writer-{self.client_id}"
        )

    def send(self, message: Dict[str, Any]) -> bool:
        if self._closed:
            return False
        if len(self._outbox) >= self._max_queue_size and not self._make_room(message):
            return False
        self._outbox.append(message)
        self._ready.set()
        return True

    def _make_room(self, incoming: Dict[str, Any]) -> bool:
        """
        Drop-oldest saltando snapshots. Si solo quedan snapshots, uno nuevo
        reemplaza al más viejo y cualquier otro mensaje se rechaza.
        """
        victim = next(
            (i for i, queued in enumerate(self._outbox)
             if queued.get("type") != SNAPSHOT_MESSAGE),
            None,
        )
        if victim is None:
            if incoming.get("type") != SNAPSHOT_MESSAGE:
                self.dropped += 1
                return False
            victim = 0
        del self._outbox[victim]
        self.dropped += 1
        logger.warning(
            "Cola llena para cliente %s – mensaje antiguo descartado", self.client_id
        )
        return True

    async def _writer(self) -> None:
        """Drenar la cola hacia el socket. Termina al primer fallo de envío."""
        try:
            while True:
                if not self._outbox:
                    self._ready.clear()
                    await self._ready.wait()
                    continue
                message = self._outbox.popleft()
                await asyncio.wait_for(
                    self._ws.send_text(json.dumps(message)), timeout=self._send_timeout
                )
        except asyncio.CancelledError:
            pass  # Shutdown limpio
        except Exception as e:
            logger.info("Cliente %s no responde (%s) – canal cerrado", self.client_id, e)
            self._closed = True
            self._outbox.clear()

    async def close(self) -> None:
        self._closed = True
        if self._writer_task is not None and not self._writer_task.done():
            self._writer_task.cancel()
            try:
                await self._writer_task
            except asyncio.CancelledError:
                pass

    @property
    def pending(self) -> list[Dict[str, Any]]:
        """Mensajes aún no escritos en el socket, en orden de envío."""
        return list(self._outbox)

    @property
    def closed(self) -> bool:
        return self._closed


class WebSocketManager:
    """Gestiona conexiones frontend y las conecta al LifecycleController."""

    def __init__(
        self,
        controller: LifecycleController,
        max_queue_size: int = 256,
        send_timeout: float = 5.0,
    ) -> None:
        self._controller = controller
        self._max_queue_size = max_queue_size
        self._send_timeout = send_timeout
        self._channels: Dict[str, WebSocketChannel] = {}

    async def connect(self, websocket: WebSocket) -> str:
        """Aceptar el socket, registrarlo y enviar el snapshot inicial."""
        await websocket.accept()
        client_id = uuid.uuid4().hex[:12]
        channel = WebSocketChannel(
            client_id, websocket, self._max_queue_size, self._send_timeout
        )
        channel.start()
        self._channels[client_id] = channel
        self._controller.connect(client_id, channel)
        logger.info("Cliente WS %s conectado. Total: %d", client_id, len(self._channels))
        return client_id

    async def disconnect(self, client_id: str) -> None:
        """Des-registrar un cliente desconectado."""
        channel = self._channels.pop(client_id, None)
        self._controller.disconnect(client_id)
        if channel is not None:
            await channel.close()
        logger.info("Cliente WS %s desconectado. Total: %d", client_id, len(self._channels))

    def send_to(self, client_id: str, message: Dict[str, Any]) -> bool:
        """Respuesta directa a un cliente (peticiones bajo demanda)."""
        channel = self._channels.get(client_id)
        return channel is not None and channel.send(message)

    async def stop(self) -> None:
        """Cerrar todos los canales (shutdown)."""
        for client_id in list(self._channels):
            await self.disconnect(client_id)
        logger.info("WebSocketManager detenido")

    @property
    def client_count(self) -> int:
        return len(self._channels)
