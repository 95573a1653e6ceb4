"""
StockSim – API Routes (FastAPI)
=================================
Endpoints REST y WebSocket.

Endpoints disponibles:
  WS   /ws/market      → snapshot inicial + updates de vela + tabla
  GET  /               → info del servicio y configuración
  GET  /health         → health check
  GET  /stocks         → tabla de cotizaciones actual
  GET  /api/candles    → pull síncrono (mismo contenido que un snapshot)
  GET  /api/status     → estado del ciclo de vida y contadores
"""

from __future__ import annotations

import json
from datetime import datetime, timezone

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from stocksim.app.services.subscriber_sync import STOCK_UPDATE_MESSAGE, build_message
from stocksim.shared.logging.logger import get_logger

logger = get_logger("api.routes")

router = APIRouter()

# Referencias a componentes inyectados desde main.py
_ws_manager = None
_controller = None
_config = None


def init_routes(ws_manager, controller, config) -> None:
    """Inyectar dependencias desde main.py al arrancar."""
    global _ws_manager, _controller, _config
    _ws_manager = ws_manager
    _controller = controller
    _config = config


def _parse_request(raw: str) -> str:
    """Acepta "get_stocks" en texto plano o {"type": "get_stocks"}."""
    try:
        payload = json.loads(raw)
    except ValueError:
        return raw.strip()
    if isinstance(payload, dict):
        return str(payload.get("type", ""))
    return ""


# ─── WebSocket endpoint ────────────────────────────────────────────────

@router.websocket("/ws/market")
async def market_stream(websocket: WebSocket) -> None:
    """
    El frontend se conecta aquí. El snapshot inicial y los broadcasts los
    gestiona el LifecycleController; este handler solo mantiene el ciclo
    de vida de la conexión y atiende peticiones bajo demanda.
    """
    if _ws_manager is None:
        await websocket.close(code=1011, reason="Server not ready")
        return

    client_id = await _ws_manager.connect(websocket)
    try:
        while True:
            try:
                data = await websocket.receive_text()
            except WebSocketDisconnect:
                break
            request = _parse_request(data)
            if request == "get_stocks":
                _ws_manager.send_to(
                    client_id, build_message(STOCK_UPDATE_MESSAGE, _controller.stocks())
                )
            else:
                logger.debug("Mensaje de cliente WS ignorado: %s", data[:100])
    finally:
        await _ws_manager.disconnect(client_id)


# ─── REST endpoints ────────────────────────────────────────────────────

@router.get("/")
async def service_info() -> dict:
    """Descripción del servicio."""
    return {
        "message": "Stock Exchange Simulator API",
        "status": "running",
        "config": _config.to_dict() if _config else {},
        "endpoints": {
            "websocket": "/ws/market",
            "events": ["snapshot", "update", STOCK_UPDATE_MESSAGE],
            "candles": "/api/candles",
            "stocks": "/stocks",
        },
    }


@router.get("/health")
async def health_check() -> dict:
    """Health check para monitoreo."""
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/stocks")
async def get_stocks() -> dict:
    """Tabla de cotizaciones (vacía si no hay suscriptores)."""
    stocks = _controller.stocks() if _controller else []
    return {"count": len(stocks), "stocks": stocks}


@router.get("/api/candles")
async def get_candles() -> dict:
    """Historial + vela en curso, con el mismo formato que el snapshot WS."""
    if _controller is None:
        return build_message("snapshot", [])
    return _controller.candles_snapshot()


@router.get("/api/status")
async def system_status() -> dict:
    """Estado del ciclo de vida y contadores."""
    return {
        "lifecycle": _controller.stats if _controller else {},
        "ws_clients": _ws_manager.client_count if _ws_manager else 0,
    }
