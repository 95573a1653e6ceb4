"""
Dependency Injection Container.

Único lugar donde se crean las dependencias concretas de larga vida:
MarketConfig, LifecycleController y WebSocketManager. El estado de
mercado NO vive aquí: lo crea y destruye el LifecycleController.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from stocksim.app.api.websocket_manager import WebSocketManager
from stocksim.app.application.lifecycle_controller import LifecycleController
from stocksim.domain.value_objects.market_config import MarketConfig
from stocksim.shared.config.settings import Settings


@dataclass
class Container:
    """Contenedor de Inyección de Dependencias."""

    settings: Settings = field(default_factory=Settings)

    _market_config: Optional[MarketConfig] = None
    _controller: Optional[LifecycleController] = None
    _ws_manager: Optional[WebSocketManager] = None

    @property
    def market_config(self) -> MarketConfig:
        """Configuración inmutable validada (lanza InvalidMarketConfigError)."""
        if self._market_config is None:
            self._market_config = MarketConfig.from_settings(self.settings)
        return self._market_config

    @property
    def controller(self) -> LifecycleController:
        if self._controller is None:
            self._controller = LifecycleController(self.market_config)
        return self._controller

    @property
    def ws_manager(self) -> WebSocketManager:
        if self._ws_manager is None:
            self._ws_manager = WebSocketManager(
                self.controller,
                max_queue_size=self.settings.ws_outbox_size,
                send_timeout=self.settings.ws_send_timeout,
            )
        return self._ws_manager

    def reset(self) -> None:
        """Resetea todas las instancias (útil para tests)."""
        self._market_config = None
        self._controller = None
        self._ws_manager = None

    def override(self, name: str, instance: Any) -> None:
        """
        Override una dependencia (útil para tests).

        Args:
            name: Nombre de la dependencia (ej: 'market_config')
            instance: Instancia a usar
        """
        attr_name = f"_{name}"
        if hasattr(self, attr_name):
            setattr(self, attr_name, instance)
        else:
            raise ValueError(f"Unknown dependency: {name}")


# ==================== Global Container ====================

_container: Optional[Container] = None


def get_container() -> Container:
    """Instancia global del contenedor (singleton)."""
    global _container
    if _container is None:
        _container = Container()
    return _container


def reset_container() -> None:
    global _container
    if _container is not None:
        _container.reset()
    _container = None


def init_container(settings: Optional[Settings] = None) -> Container:
    """
    Inicializa el contenedor con configuración específica.

    Args:
        settings: Configuración opcional. Si es None, usa valores por defecto.
    """
    global _container
    if settings is None:
        settings = Settings()
    _container = Container(settings=settings)
    return _container
