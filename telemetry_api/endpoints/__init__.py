"""Módulo de endpoints HTTP y WebSocket.

Contiene los endpoints del servicio organizados por función.
"""

from .health import router as health_router
from .history import router as history_router
from .observers import router as observers_router

__all__ = [
    "health_router",
    "history_router",
    "observers_router",
]
