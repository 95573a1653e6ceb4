"""
StockSim – Domain Exceptions
==============================
Excepciones específicas del dominio.

JERARQUÍA:
    DomainError (base)
    └── InvalidMarketConfigError

El núcleo de simulación no lanza errores en el camino caliente: las
únicas violaciones posibles se detectan al construir la configuración.
"""

from __future__ import annotations


class DomainError(Exception):
    """Excepción base para errores de dominio."""

    def __init__(self, message: str, code: str = "DOMAIN_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)

    def to_dict(self) -> dict:
        return {
            "error": self.code,
            "message": self.message,
        }


class InvalidMarketConfigError(DomainError):
    """Parámetro de simulación fuera de rango."""

    def __init__(self, message: str, field: str = None):
        super().__init__(message, code="INVALID_MARKET_CONFIG")
        self.field = field

    def to_dict(self) -> dict:
        result = super().to_dict()
        result["field"] = self.field
        return result
