"""
StockSim – Application Port: Subscriber Channel
=================================================
Interfaz de entrega hacia UN suscriptor conectado.

El núcleo decide QUÉ enviar; el transporte (WebSocket, tests, etc.)
decide CÓMO entregarlo.

CONTRATO:
- send() NUNCA bloquea: encola o descarta.
- Retorna False si el mensaje no pudo aceptarse (canal cerrado).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict


class ISubscriberChannel(ABC):
    """Canal de salida no bloqueante hacia un suscriptor."""

    @abstractmethod
    def send(self, message: Dict[str, Any]) -> bool:
        """
        Entregar un mensaje (best-effort, sin bloquear).

        Args:
            message: {"type": ..., "data": ...} serializable a JSON

        Returns:
            True si el mensaje fue aceptado para entrega.
        """
        pass
