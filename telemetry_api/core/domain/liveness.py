"""Estado de vida del broker y del nodo crítico."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TransportStatus(str, Enum):
    DISCONNECTED = "Disconnected"
    ONLINE = "ONLINE"


class NodeStatus(str, Enum):
    UNKNOWN = "UNKNOWN"
    ONLINE = "ONLINE"
    OFFLINE = "OFFLINE"


class LivenessKind(str, Enum):
    """Tipo de estado que se difunde a los observadores."""
    TRANSPORT = "transport"
    CRITICAL_NODE = "critical_node"


# Únicos payloads que cambian el estado del nodo crítico.
STATUS_SENTINELS = frozenset({NodeStatus.ONLINE.value, NodeStatus.OFFLINE.value})


@dataclass(frozen=True)
class LivenessState:
    transport_status: TransportStatus = TransportStatus.DISCONNECTED
    critical_node_status: NodeStatus = NodeStatus.UNKNOWN

    def to_dict(self) -> dict:
        return {
            "transport_status": self.transport_status.value,
            "critical_node_status": self.critical_node_status.value,
        }
