"""TopicClassifier - Clasificación de mensajes por topic y contenido.

Función pura: (topic, payload) → ClassificationResult. Sin estado ni I/O.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..domain.liveness import STATUS_SENTINELS
from ..domain.records import (
    BatteryLog,
    ClassificationResult,
    GenericLog,
    SeismicLog,
    isoformat_ms,
    utc_now,
)

# Número decimal seguido de la unidad V, delimitado por inicio/coma a la
# izquierda y coma/fin a la derecha. "12.4V,OK" coincide; "bat 12.4V" no.
VOLTAGE_PATTERN = re.compile(r"(?:^|,)\s*(\d+\.\d+)[vV]\s*(?=,|$)")

CONFIRMED_MARKER = "confirmed"


@dataclass(frozen=True)
class ClassifierConfig:
    generic_prefix: str = "fsae/"
    seismic_prefix: str = "home/earthquake/"
    heartbeat_marker: str = "main node:"

    @classmethod
    def from_settings(cls, settings) -> "ClassifierConfig":
        return cls(
            generic_prefix=settings.generic_topic_prefix,
            seismic_prefix=settings.seismic_topic_prefix,
            heartbeat_marker=settings.heartbeat_marker,
        )


def node_id_from_topic(topic: str) -> str:
    """Último segmento del topic. Sin '/' devuelve el topic completo."""
    return topic.rsplit("/", 1)[-1]


def extract_voltage(payload: str) -> Optional[str]:
    """Devuelve el primer voltaje delimitado del payload, como texto."""
    match = VOLTAGE_PATTERN.search(payload)
    if match is None:
        return None
    return match.group(1)


class TopicClassifier:
    """Clasifica mensajes del broker en registros persistibles.

    Orden de evaluación (gana la primera regla):
    1. Payload con marcador de heartbeat → Discard
    2. Namespace genérico → GenericLog
    3. Namespace sísmico → SeismicLog (+ BatteryLog si hay voltaje)
    4. Default → Discard
    """

    def __init__(self, config: Optional[ClassifierConfig] = None):
        self._config = config or ClassifierConfig()
        self._heartbeat = self._config.heartbeat_marker.lower()

    def classify(
        self,
        topic: str,
        payload: str,
        received_at: Optional[datetime] = None,
    ) -> ClassificationResult:
        """Clasifica un mensaje.

        Args:
            topic: Topic MQTT del mensaje
            payload: Payload decodificado
            received_at: Momento de recepción (default: ahora)

        Returns:
            ClassificationResult con 0, 1 o 2 registros
        """
        timestamp = isoformat_ms(received_at or utc_now())

        # 1. Heartbeats no se persisten
        if self._heartbeat and self._heartbeat in payload.lower():
            return ClassificationResult.discard("heartbeat")

        # 2. Log genérico
        if topic.startswith(self._config.generic_prefix):
            return ClassificationResult(
                records=(GenericLog(topic=topic, value=payload, timestamp=timestamp),),
                reason="generic",
            )

        # 3. Sísmico (+ batería)
        if topic.startswith(self._config.seismic_prefix):
            node_id = node_id_from_topic(topic)
            seismic = SeismicLog(
                node_id=node_id,
                magnitude_or_text=payload,
                timestamp=timestamp,
            )

            battery = self._battery_record(node_id, payload, timestamp)
            if battery is None:
                return ClassificationResult(records=(seismic,), reason="seismic")
            return ClassificationResult(records=(seismic, battery), reason="seismic+battery")

        return ClassificationResult.discard("unrouted topic")

    def _battery_record(
        self,
        node_id: str,
        payload: str,
        timestamp: str,
    ) -> Optional[BatteryLog]:
        if payload.strip() in STATUS_SENTINELS:
            return None
        if CONFIRMED_MARKER in payload.lower():
            return None

        voltage = extract_voltage(payload)
        if voltage is None:
            return None

        return BatteryLog(
            node_id=node_id,
            voltage=voltage,
            raw_message=payload,
            timestamp=timestamp,
        )
