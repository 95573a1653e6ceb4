"""
StockSim – Settings (Pydantic BaseSettings)
===========================================
Configuración centralizada cargada desde variables de entorno / .env.
Se usa pydantic-settings para validación estricta al arranque.

El núcleo de simulación NUNCA lee este objeto directamente: recibe un
MarketConfig inmutable construido con MarketConfig.from_settings().
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ─── Velas ──────────────────────────────────────────────────────────
    candle_duration_ms: int = Field(
        default=5_000, description="Duración de cada vela en milisegundos"
    )
    tick_interval_ms: int = Field(
        default=500, description="Cadencia del tick de precio + broadcast del gráfico (ms)"
    )
    max_candles_buffer: int = Field(
        default=200, description="Capacidad máxima del historial de velas (FIFO)"
    )

    # ─── Proceso de precio ──────────────────────────────────────────────
    base_price: float = Field(
        default=150.0, description="Precio de referencia para reversión a la media"
    )
    volatility: float = Field(
        default=0.002, description="Amplitud relativa del paseo aleatorio por tick"
    )
    trend_change_probability: float = Field(
        default=0.02, description="Probabilidad por tick de cambiar de régimen de tendencia"
    )
    shock_probability: float = Field(
        default=0.05, description="Probabilidad por tick de un shock (x3 en el término aleatorio)"
    )
    mean_reversion_factor: float = Field(
        default=0.1, description="Fuerza de atracción hacia el precio base"
    )
    random_seed: Optional[int] = Field(
        default=None, description="Semilla del generador aleatorio (None = no determinista)"
    )

    # ─── Bootstrap ──────────────────────────────────────────────────────
    bootstrap_candles: int = Field(
        default=100, description="Velas sintéticas generadas al activar el mercado"
    )
    bootstrap_ticks_per_candle: int = Field(
        default=10, description="Sub-ticks simulados por vela de bootstrap"
    )

    # ─── Tabla de cotizaciones ──────────────────────────────────────────
    total_symbols: int = Field(default=300, description="Instrumentos en la tabla")
    quote_update_interval_ms: int = Field(
        default=100, description="Cadencia de actualización aleatoria de cotizaciones (ms)"
    )
    quote_broadcast_interval_ms: int = Field(
        default=500, description="Cadencia de envío de la tabla a los suscriptores (ms)"
    )
    stocks_per_update: int = Field(
        default=15, description="Instrumentos modificados en cada ciclo"
    )
    price_change_range: float = Field(
        default=0.05, description="Variación relativa máxima por actualización (5%)"
    )
    min_spread: float = Field(default=0.01, description="Spread mínimo compra/venta (1%)")
    max_spread: float = Field(default=0.05, description="Spread máximo compra/venta (5%)")

    # ─── Transporte ─────────────────────────────────────────────────────
    ws_outbox_size: int = Field(
        default=256, description="Mensajes pendientes por cliente antes de descartar el más antiguo"
    )
    ws_send_timeout: float = Field(
        default=5.0, description="Timeout (seg) de envío a un cliente WebSocket"
    )

    # ─── Server ─────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000)
    debug: bool = Field(default=False, description="Recarga de uvicorn y logging en DEBUG")
    log_level: str = Field(default="INFO", description="Nivel de logging (DEBUG, INFO, WARNING...)")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }

