"""Observadores conectados al fan-out (sesiones WebSocket, tests)."""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Optional, Protocol

from .events import ObserverEvent

logger = logging.getLogger(__name__)


class ObserverClosed(Exception):
    """El observador ya no acepta eventos."""


class Observer(Protocol):
    observer_id: str

    def deliver(self, event: ObserverEvent) -> None:
        """Entrega no bloqueante. Lanza ObserverClosed si está cerrado."""
        ...


class QueueObserver:
    """Observador respaldado por una asyncio.Queue acotada.

    `deliver` puede llamarse desde cualquier hilo (el hilo de red de paho
    incluido): el put se agenda en el event loop con call_soon_threadsafe.
    Si la cola está llena el evento se descarta solo para este observador.
    """

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        max_queue_size: int = 256,
        observer_id: Optional[str] = None,
    ):
        self.observer_id = observer_id or uuid.uuid4().hex
        self._loop = loop
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=max_queue_size)
        self._closed = False
        self.dropped = 0

    def deliver(self, event: ObserverEvent) -> None:
        if self._closed or self._loop.is_closed():
            raise ObserverClosed(self.observer_id)
        self._loop.call_soon_threadsafe(self._put, event)

    def _put(self, event: ObserverEvent) -> None:
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning(
                "[BROADCAST] Observer queue full, dropped event=%s observer=%s",
                event.event,
                self.observer_id,
            )

    async def next_event(self) -> ObserverEvent:
        return await self._queue.get()

    def close(self) -> None:
        self._closed = True
