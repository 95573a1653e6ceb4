"""
StockSim – Subscriber Sync Manager
====================================
Decide, por suscriptor, si enviar un snapshot completo o un incremento.

PROTOCOLO:
  connect(id)  → registro {has_full_snapshot: False}
               → snapshot completo (historial + vela en curso)
               → has_full_snapshot = True
  broadcast_candle()
               → con flag:    "update"  con exactamente la vela actual
               → sin flag:    "snapshot" (fallback: late joiner o registro
                              creado fuera de banda) y se marca el flag
  send_to(id)  → mensaje puntual de un feed hermano (tabla al conectar)
  disconnect(id) → se elimina el registro

INVARIANTE:
- El primer mensaje de gráfico que recibe un suscriptor es SIEMPRE un
  snapshot; los siguientes son incrementos de una sola vela.

ENTREGA BEST-EFFORT:
- Cada canal es no bloqueante (ISubscriberChannel.send).
- Si un envío falla se descarta y se sigue con el resto: un cliente
  lento o muerto nunca frena a los demás.
- El flag solo se marca si el snapshot fue aceptado; si no, el siguiente
  broadcast vuelve a intentar el snapshot.

PROPIEDAD:
- El registro es exclusivo de este manager. Las velas se LEEN del
  CandleAggregator; este manager nunca las guarda.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from stocksim.app.application.ports.subscriber_channel import ISubscriberChannel
from stocksim.app.services.candle_aggregator import CandleAggregator
from stocksim.shared.logging.logger import get_logger

logger = get_logger("subscriber_sync")

SNAPSHOT_MESSAGE = "snapshot"
UPDATE_MESSAGE = "update"
STOCK_UPDATE_MESSAGE = "stock_update"


def build_message(message_type: str, data: Any) -> Dict[str, Any]:
    return {"type": message_type, "data": data}


@dataclass
class SubscriberRecord:
    """Estado de sincronización de un suscriptor."""

    channel: ISubscriberChannel
    has_full_snapshot: bool = False
    messages_sent: int = 0
    messages_dropped: int = 0


class SubscriberSyncManager:
    """Registro de suscriptores y política snapshot / incremental."""

    def __init__(self, aggregator: CandleAggregator) -> None:
        self._aggregator = aggregator
        self._records: Dict[str, SubscriberRecord] = {}

    # ─── Registro ───────────────────────────────────────────────────────

    def register(self, subscriber_id: str, channel: ISubscriberChannel) -> SubscriberRecord:
        """Crear el registro SIN enviar nada (el próximo broadcast hará el snapshot)."""
        record = SubscriberRecord(channel=channel)
        self._records[subscriber_id] = record
        return record

    def connect(self, subscriber_id: str, channel: ISubscriberChannel) -> None:
        """Registrar y enviar el snapshot completo de forma síncrona."""
        record = self.register(subscriber_id, channel)
        self._send_snapshot(subscriber_id, record)
        logger.info(
            "Suscriptor %s sincronizado. Total: %d", subscriber_id, len(self._records)
        )

    def disconnect(self, subscriber_id: str) -> bool:
        """Eliminar el registro. Retorna False si no existía."""
        record = self._records.pop(subscriber_id, None)
        if record is None:
            return False
        logger.info(
            "Suscriptor %s eliminado (enviados=%d, descartados=%d). Total: %d",
            subscriber_id, record.messages_sent, record.messages_dropped,
            len(self._records),
        )
        return True

    # ─── Mensajes ───────────────────────────────────────────────────────

    def snapshot_message(self) -> Dict[str, Any]:
        """Historial (más antigua primero) + vela en curso."""
        return build_message(
            SNAPSHOT_MESSAGE, [c.to_dict() for c in self._aggregator.snapshot()]
        )

    def broadcast_candle(self) -> None:
        """Enviar a cada suscriptor el incremento o, si le falta, el snapshot."""
        current = self._aggregator.current_candle()
        update = (
            build_message(UPDATE_MESSAGE, [current.to_dict()])
            if current is not None else None
        )

        for subscriber_id, record in list(self._records.items()):
            if not record.has_full_snapshot or update is None:
                self._send_snapshot(subscriber_id, record)
            else:
                self._deliver(subscriber_id, record, update)

    def broadcast(self, message_type: str, data: Any) -> int:
        """Fan-out de un feed hermano a todos los suscriptores. No toca el flag."""
        message = build_message(message_type, data)
        delivered = 0
        for subscriber_id, record in list(self._records.items()):
            if self._deliver(subscriber_id, record, message):
                delivered += 1
        return delivered

    def send_to(self, subscriber_id: str, message_type: str, data: Any) -> bool:
        """Entrega puntual a un solo suscriptor. No toca el flag."""
        record = self._records.get(subscriber_id)
        if record is None:
            return False
        return self._deliver(subscriber_id, record, build_message(message_type, data))

    def _send_snapshot(self, subscriber_id: str, record: SubscriberRecord) -> None:
        if self._deliver(subscriber_id, record, self.snapshot_message()):
            record.has_full_snapshot = True

    def _deliver(
        self, subscriber_id: str, record: SubscriberRecord, message: Dict[str, Any]
    ) -> bool:
        """
        Entregar sin bloquear. Un fallo se descarta y NO interrumpe el ciclo.
        """
        try:
            accepted = record.channel.send(message)
        except Exception as e:
            logger.debug("Envío a %s falló: %s", subscriber_id, e)
            accepted = False

        if accepted:
            record.messages_sent += 1
        else:
            record.messages_dropped += 1
        return accepted

    # ─── Consultas ──────────────────────────────────────────────────────

    def has_full_snapshot(self, subscriber_id: str) -> bool:
        record = self._records.get(subscriber_id)
        return record is not None and record.has_full_snapshot

    def get_record(self, subscriber_id: str) -> Optional[SubscriberRecord]:
        return self._records.get(subscriber_id)

    def __contains__(self, subscriber_id: str) -> bool:
        return subscriber_id in self._records

    @property
    def subscriber_count(self) -> int:
        return len(self._records)

    def clear(self) -> None:
        self._records.clear()
