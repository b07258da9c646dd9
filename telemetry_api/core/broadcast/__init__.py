"""Broadcast layer - Fan-out en tiempo real a observadores."""

from .events import (
    HISTORY_CLEARED,
    MQTT_MESSAGE,
    NODE_STATUS_UPDATE,
    STATUS_UPDATE,
    ObserverEvent,
)
from .hub import BroadcastHub
from .observers import Observer, ObserverClosed, QueueObserver

__all__ = [
    "HISTORY_CLEARED",
    "MQTT_MESSAGE",
    "NODE_STATUS_UPDATE",
    "STATUS_UPDATE",
    "ObserverEvent",
    "BroadcastHub",
    "Observer",
    "ObserverClosed",
    "QueueObserver",
]
