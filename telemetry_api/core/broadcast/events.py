"""Eventos enviados a los observadores en tiempo real."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

from ..domain.liveness import LivenessKind

MQTT_MESSAGE = "mqtt_message"
STATUS_UPDATE = "status_update"
NODE_STATUS_UPDATE = "node_status_update"
HISTORY_CLEARED = "history_cleared"

_LIVENESS_EVENTS = {
    LivenessKind.TRANSPORT: STATUS_UPDATE,
    LivenessKind.CRITICAL_NODE: NODE_STATUS_UPDATE,
}


@dataclass(frozen=True)
class ObserverEvent:
    event: str
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"event": self.event, "data": dict(self.data)}


def message_event(topic: str, value: str, timestamp: str) -> ObserverEvent:
    return ObserverEvent(MQTT_MESSAGE, {"topic": topic, "value": value, "timestamp": timestamp})


def liveness_event(kind: LivenessKind, status: str) -> ObserverEvent:
    return ObserverEvent(_LIVENESS_EVENTS[kind], {"status": status})


def history_cleared_event() -> ObserverEvent:
    return ObserverEvent(HISTORY_CLEARED)
