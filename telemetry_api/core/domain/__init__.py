"""Domain layer - Modelos de mensajes, registros y estado de vida."""

from .records import (
    BatteryLog,
    ClassificationResult,
    ClassifiedRecord,
    GenericLog,
    InboundMessage,
    SeismicLog,
    isoformat_ms,
    utc_now,
)
from .liveness import (
    LivenessKind,
    LivenessState,
    NodeStatus,
    STATUS_SENTINELS,
    TransportStatus,
)

__all__ = [
    "BatteryLog",
    "ClassificationResult",
    "ClassifiedRecord",
    "GenericLog",
    "InboundMessage",
    "SeismicLog",
    "isoformat_ms",
    "utc_now",
    "LivenessKind",
    "LivenessState",
    "NodeStatus",
    "STATUS_SENTINELS",
    "TransportStatus",
]
