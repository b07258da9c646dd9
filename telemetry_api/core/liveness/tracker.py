"""LivenessTracker - Estado del broker y del nodo crítico."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from ..broadcast.events import liveness_event
from ..broadcast.hub import BroadcastHub
from ..broadcast.observers import Observer
from ..domain.liveness import (
    LivenessKind,
    LivenessState,
    NodeStatus,
    STATUS_SENTINELS,
    TransportStatus,
)

logger = logging.getLogger(__name__)


class LivenessTracker:
    """Único dueño de LivenessState.

    El estado del nodo crítico llega como mensaje retenido del broker y no
    se vuelve a entregar a observadores ya conectados: por eso cada cambio
    se difunde en el momento y se reenvía a cada observador nuevo.

    Los callbacks de paho corren en su hilo de red y los observadores se
    adjuntan desde el event loop; el lock cubre mutación + difusión y
    snapshot + replay para que nadie vea un estado intermedio.
    """

    def __init__(
        self,
        hub: BroadcastHub,
        status_topic: str,
        subscriber: Optional[Callable[[], None]] = None,
    ):
        self._hub = hub
        self._status_topic = status_topic
        self._subscriber = subscriber
        self._state = LivenessState()
        self._lock = threading.Lock()

    def set_subscriber(self, subscriber: Callable[[], None]) -> None:
        """Callable que (re)emite las suscripciones al conectar."""
        self._subscriber = subscriber

    def on_transport_connect(self) -> None:
        # Las suscripciones no sobreviven a una reconexión
        if self._subscriber is not None:
            try:
                self._subscriber()
            except Exception as e:
                logger.exception("[LIVENESS] Subscribe failed: %s", e)

        with self._lock:
            self._state = LivenessState(
                transport_status=TransportStatus.ONLINE,
                critical_node_status=self._state.critical_node_status,
            )
            self._hub.broadcast_liveness(LivenessKind.TRANSPORT, TransportStatus.ONLINE.value)
        logger.info("[LIVENESS] Transport ONLINE")

    def on_transport_disconnect(self) -> None:
        with self._lock:
            self._state = LivenessState(
                transport_status=TransportStatus.DISCONNECTED,
                critical_node_status=self._state.critical_node_status,
            )
            self._hub.broadcast_liveness(LivenessKind.TRANSPORT, TransportStatus.DISCONNECTED.value)
        logger.warning("[LIVENESS] Transport Disconnected")

    def on_message(self, topic: str, payload: str) -> bool:
        """Actualiza el nodo crítico si corresponde.

        Returns:
            True si el mensaje cambió (o reafirmó) el estado del nodo
        """
        if topic != self._status_topic or payload not in STATUS_SENTINELS:
            return False

        status = NodeStatus(payload)
        with self._lock:
            self._state = LivenessState(
                transport_status=self._state.transport_status,
                critical_node_status=status,
            )
            self._hub.broadcast_liveness(LivenessKind.CRITICAL_NODE, status.value)
        logger.info("[LIVENESS] Critical node %s", status.value)
        return True

    def current_state(self) -> LivenessState:
        with self._lock:
            return self._state

    def attach_observer(self, observer: Observer) -> None:
        """Adjunta un observador reenviando solo los dos estados cacheados."""
        with self._lock:
            state = self._state
            self._hub.attach(
                observer,
                replay=(
                    liveness_event(LivenessKind.TRANSPORT, state.transport_status.value),
                    liveness_event(LivenessKind.CRITICAL_NODE, state.critical_node_status.value),
                ),
            )
