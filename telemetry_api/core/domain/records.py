"""Modelos de dominio para mensajes entrantes y registros clasificados."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Tuple, Union


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def isoformat_ms(ts: datetime) -> str:
    """ISO 8601 en UTC con milisegundos y sufijo Z (2024-01-31T12:00:00.123Z)."""
    return ts.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class InboundMessage:
    """Mensaje tal como llega del broker, ya decodificado a texto.

    Efímero: se crea por cada entrega y no se persiste tal cual.
    """
    topic: str
    payload: str
    received_at: datetime = field(default_factory=utc_now)

    @classmethod
    def from_transport(cls, topic: str, payload: bytes | str) -> "InboundMessage":
        if isinstance(payload, (bytes, bytearray)):
            text = bytes(payload).decode("utf-8", errors="replace")
        else:
            text = str(payload)
        return cls(topic=topic, payload=text)

    @property
    def timestamp(self) -> str:
        return isoformat_ms(self.received_at)


@dataclass(frozen=True)
class GenericLog:
    topic: str
    value: str
    timestamp: str


@dataclass(frozen=True)
class SeismicLog:
    node_id: str
    magnitude_or_text: str
    timestamp: str


@dataclass(frozen=True)
class BatteryLog:
    node_id: str
    voltage: str
    raw_message: str
    timestamp: str


ClassifiedRecord = Union[GenericLog, SeismicLog, BatteryLog]


@dataclass(frozen=True)
class ClassificationResult:
    """Decisión del clasificador para un mensaje.

    `records` vacío equivale a Discard. Un mensaje sísmico puede producir
    dos registros (SeismicLog + BatteryLog).
    """
    records: Tuple[ClassifiedRecord, ...] = ()
    reason: str = ""

    @property
    def is_discard(self) -> bool:
        return not self.records

    @classmethod
    def discard(cls, reason: str) -> "ClassificationResult":
        return cls(records=(), reason=reason)
