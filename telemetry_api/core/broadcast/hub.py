"""BroadcastHub - Fan-out de eventos a todos los observadores conectados."""

from __future__ import annotations

import logging
import threading
from typing import Dict, Iterable, List

from ..domain.liveness import LivenessKind
from ..monitoring import metrics
from .events import (
    ObserverEvent,
    history_cleared_event,
    liveness_event,
    message_event,
)
from .observers import Observer, ObserverClosed

logger = logging.getLogger(__name__)


class BroadcastHub:
    """Envía cada evento a todos los observadores actuales.

    - Observadores indexados por observer_id: adjuntar dos veces no duplica
    - Entrega fire-and-forget: un observador que falla se descarta sin
      afectar a los demás ni al pipeline
    - Los eventos de replay se entregan antes de entrar al set, así siempre
      preceden a cualquier evento en vivo posterior
    """

    def __init__(self):
        self._observers: Dict[str, Observer] = {}
        self._lock = threading.Lock()
        self._events_sent = 0
        self._observers_dropped = 0

    def attach(self, observer: Observer, replay: Iterable[ObserverEvent] = ()) -> None:
        with self._lock:
            for event in replay:
                if not self._deliver(observer, event):
                    return
            self._observers[observer.observer_id] = observer
            self._sync_gauge()
        logger.info("[BROADCAST] Observer attached id=%s total=%d", observer.observer_id, self.observer_count)

    def detach(self, observer: Observer) -> None:
        with self._lock:
            removed = self._observers.pop(observer.observer_id, None)
            self._sync_gauge()
        if removed is not None:
            logger.info("[BROADCAST] Observer detached id=%s", observer.observer_id)

    def broadcast_message(self, topic: str, value: str, timestamp: str) -> int:
        return self.publish(message_event(topic, value, timestamp))

    def broadcast_liveness(self, kind: LivenessKind, status: str) -> int:
        return self.publish(liveness_event(kind, status))

    def broadcast_history_cleared(self) -> int:
        return self.publish(history_cleared_event())

    def publish(self, event: ObserverEvent) -> int:
        """Entrega el evento a todos. Devuelve cuántos lo recibieron."""
        with self._lock:
            delivered = 0
            dead: List[str] = []
            for observer_id, observer in self._observers.items():
                if self._deliver(observer, event):
                    delivered += 1
                else:
                    dead.append(observer_id)
            for observer_id in dead:
                self._observers.pop(observer_id, None)
                self._observers_dropped += 1
            if dead:
                self._sync_gauge()
            self._events_sent += delivered
        return delivered

    def _sync_gauge(self) -> None:
        # Llamar con _lock tomado
        metrics.OBSERVERS_CONNECTED.set(len(self._observers))

    def _deliver(self, observer: Observer, event: ObserverEvent) -> bool:
        try:
            observer.deliver(event)
            return True
        except ObserverClosed:
            logger.debug("[BROADCAST] Observer closed id=%s", observer.observer_id)
            return False
        except Exception as e:
            logger.warning("[BROADCAST] Delivery failed id=%s err=%s", observer.observer_id, e)
            return False

    @property
    def observer_count(self) -> int:
        with self._lock:
            return len(self._observers)

    @property
    def stats(self) -> dict:
        with self._lock:
            return {
                "observers": len(self._observers),
                "events_sent": self._events_sent,
                "observers_dropped": self._observers_dropped,
            }
