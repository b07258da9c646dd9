"""Pipeline principal de ingesta de mensajes."""

from __future__ import annotations

import logging
import time
from typing import Protocol

from ..broadcast.hub import BroadcastHub
from ..classification.topic_classifier import TopicClassifier
from ..domain.records import (
    BatteryLog,
    ClassificationResult,
    ClassifiedRecord,
    GenericLog,
    InboundMessage,
)
from ..liveness.tracker import LivenessTracker
from ..monitoring import metrics
from ..monitoring.stats import Stats

logger = logging.getLogger(__name__)


class RecordPersister(Protocol):
    def persist(self, record: ClassifiedRecord) -> bool:
        ...


def _record_type(record: ClassifiedRecord) -> str:
    if isinstance(record, GenericLog):
        return "generic"
    if isinstance(record, BatteryLog):
        return "battery"
    return "seismic"


class IngestionPipeline:
    """Procesa cada mensaje del broker de principio a fin.

    Orden fijo por mensaje:
    1. Liveness (estado del nodo crítico)
    2. Clasificación
    3. Broadcast a observadores (siempre, incluso si se descarta)
    4. Persistencia de cada registro (fire-and-forget)

    El broadcast ocurre antes de persistir: un fallo de BD nunca oculta
    datos a los observadores. Ningún error sale de `handle`.
    """

    def __init__(
        self,
        tracker: LivenessTracker,
        classifier: TopicClassifier,
        hub: BroadcastHub,
        persister: RecordPersister,
    ):
        self._tracker = tracker
        self._classifier = classifier
        self._hub = hub
        self._persister = persister
        self._stats = Stats()

    def handle(self, topic: str, payload: bytes | str) -> ClassificationResult:
        """Procesa un mensaje MQTT (firma compatible con on_message)."""
        message = InboundMessage.from_transport(topic, payload)
        return self.process(message)

    def process(self, message: InboundMessage) -> ClassificationResult:
        self._stats.received += 1
        self._stats.last_message_at = time.time()

        # 1. Liveness
        try:
            self._tracker.on_message(message.topic, message.payload)
        except Exception as e:
            logger.exception("[PIPELINE] Liveness update failed topic=%s: %s", message.topic, e)

        # 2. Clasificación
        try:
            result = self._classifier.classify(message.topic, message.payload, message.received_at)
        except Exception as e:
            logger.exception("[PIPELINE] Classification failed topic=%s: %s", message.topic, e)
            result = ClassificationResult.discard("classifier error")

        # 3. Broadcast
        try:
            self._hub.broadcast_message(message.topic, message.payload, message.timestamp)
        except Exception as e:
            logger.exception("[PIPELINE] Broadcast failed topic=%s: %s", message.topic, e)

        # Log periódico
        if self._stats.received % 100 == 0:
            logger.info("[PIPELINE] %s", self._stats)

        # 4. Persistencia
        if result.is_discard:
            self._stats.discarded += 1
            metrics.MESSAGES_RECEIVED.labels(outcome="discarded").inc()
            logger.debug("[PIPELINE] Discarded topic=%s reason=%s", message.topic, result.reason)
            return result

        failed = False
        for record in result.records:
            metrics.RECORDS_CLASSIFIED.labels(record_type=_record_type(record)).inc()
            try:
                if not self._persister.persist(record):
                    failed = True
                    logger.warning(
                        "[PIPELINE] Writes dropped topic=%s type=%s",
                        message.topic, _record_type(record),
                    )
            except Exception as e:
                failed = True
                logger.exception("[PIPELINE] Persist dispatch failed topic=%s: %s", message.topic, e)

        if failed:
            self._stats.failed += 1
            metrics.MESSAGES_RECEIVED.labels(outcome="failed").inc()
        else:
            self._stats.processed += 1
            metrics.MESSAGES_RECEIVED.labels(outcome="persisted").inc()

        return result

    @property
    def stats(self) -> Stats:
        return self._stats
