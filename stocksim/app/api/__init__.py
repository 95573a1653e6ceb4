"""Transporte: rutas FastAPI y gestión de conexiones WebSocket."""
