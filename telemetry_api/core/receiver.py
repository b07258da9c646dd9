"""Servicio de telemetría - Punto de entrada principal.

Usa la arquitectura modular:
- transport/       → Cliente MQTT
- liveness/        → Estado del broker y nodo crítico
- classification/  → Reglas por topic
- broadcast/       → Fan-out a observadores
- pipeline/        → Orquestación por mensaje
- infrastructure/  → Stores y escrituras asíncronas
"""

from __future__ import annotations

import logging
from typing import Optional

from common.config import Settings, get_settings
from common.db import create_store_engine

from ..infrastructure.persistence import (
    BATTERY_LOGS,
    EARTHQUAKE_LOGS,
    MESSAGES,
    AsyncWriteDispatcher,
    LogStore,
    PersistenceRouter,
    StoreError,
)
from .broadcast.hub import BroadcastHub
from .classification.topic_classifier import ClassifierConfig, TopicClassifier
from .liveness.tracker import LivenessTracker
from .pipeline.ingestion import IngestionPipeline
from .transport.mqtt_client import MQTTClient

logger = logging.getLogger(__name__)


class TelemetryService:
    """Ensambla y gobierna el pipeline completo.

    Componentes:
    - MQTTClient: Conexión y suscripción MQTT
    - LivenessTracker: Estado del broker / nodo crítico
    - TopicClassifier: Clasificación por topic y contenido
    - BroadcastHub: Fan-out a observadores
    - PersistenceRouter: Escrituras live/archive/battery
    """

    def __init__(
        self,
        settings: Settings,
        live: LogStore,
        archive: LogStore,
        battery: LogStore,
        transport: Optional[MQTTClient] = None,
    ):
        self.settings = settings
        self.live = live
        self.archive = archive
        self.battery = battery

        self.hub = BroadcastHub()
        self.tracker = LivenessTracker(self.hub, status_topic=settings.critical_status_topic)
        self.classifier = TopicClassifier(ClassifierConfig.from_settings(settings))
        self.dispatcher = AsyncWriteDispatcher(
            max_queue_size=settings.persist_queue_size,
            num_workers=settings.persist_workers,
            on_error=PersistenceRouter.report_failure,
            on_success=PersistenceRouter.report_success,
        )
        self.router = PersistenceRouter(live, archive, battery, self.dispatcher)
        self.pipeline = IngestionPipeline(self.tracker, self.classifier, self.hub, self.router)

        self.transport = transport
        if self.transport is not None:
            self._wire_transport(self.transport)

        self._running = False

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "TelemetryService":
        settings = settings or get_settings()
        live = LogStore(
            create_store_engine(settings.live_db_url, name="live"),
            (MESSAGES, EARTHQUAKE_LOGS),
            name="live",
        )
        archive = LogStore(
            create_store_engine(settings.archive_db_url, name="archive"),
            (MESSAGES, EARTHQUAKE_LOGS),
            name="archive",
            prunable=False,
        )
        battery = LogStore(
            create_store_engine(settings.battery_db_url, name="battery"),
            (BATTERY_LOGS,),
            name="battery",
        )
        transport = MQTTClient(
            broker_host=settings.mqtt_host,
            broker_port=settings.mqtt_port,
            username=settings.mqtt_user,
            password=settings.mqtt_password,
            client_id_prefix=settings.mqtt_client_prefix,
            topics=settings.subscriptions,
            reconnect_seconds=settings.mqtt_reconnect_seconds,
            keepalive=settings.mqtt_keepalive,
        )
        return cls(settings, live, archive, battery, transport)

    def _wire_transport(self, transport: MQTTClient) -> None:
        transport.set_message_handler(self.pipeline.handle)
        transport.set_connection_callbacks(
            on_connected=self.tracker.on_transport_connect,
            on_disconnected=self.tracker.on_transport_disconnect,
        )
        self.tracker.set_subscriber(transport.subscribe_all)

    def start(self) -> bool:
        """Inicia stores, workers y transporte."""
        try:
            # 1. Esquemas
            for store in (self.live, self.archive, self.battery):
                store.ensure_schema()

            # 2. Workers de escritura
            self.dispatcher.start()

            # 3. MQTT (paho reintenta en segundo plano)
            if self.transport is not None and not self.transport.start():
                logger.error("[SERVICE] MQTT start failed")

            self._running = True
            logger.info("[SERVICE] Started successfully")
            return True

        except Exception as e:
            logger.exception("[SERVICE] Start failed: %s", e)
            return False

    def stop(self):
        """Detiene el servicio."""
        self._running = False

        if self.transport is not None:
            self.transport.stop()

        # Escrituras pendientes pueden perderse al cerrar
        self.dispatcher.stop(drain=False)
        logger.info("[SERVICE] Stopped. %s", self.pipeline.stats)

    def clear_history(self) -> None:
        """Borra live (messages, earthquake_logs) y battery. Nunca el archivo.

        Cada store se limpia aunque el otro falle. El aviso a observadores
        solo sale si ambos quedaron vacíos.

        Raises:
            StoreError: si alguno de los stores falla
        """
        errors = []
        for store in (self.live, self.battery):
            try:
                store.clear()
            except StoreError as e:
                logger.error("[SERVICE] Clear failed store=%s: %s", store.name, e)
                errors.append(f"{store.name}: {e}")

        if errors:
            raise StoreError("; ".join(errors))
        self.hub.broadcast_history_cleared()

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def stats(self) -> dict:
        return {
            "running": self._running,
            "transport_connected": self.transport.is_connected if self.transport else False,
            "reconnect_count": self.transport.reconnect_count if self.transport else 0,
            "liveness": self.tracker.current_state().to_dict(),
            "pipeline": self.pipeline.stats.to_dict(),
            "persistence": self.router.stats,
            "broadcast": self.hub.stats,
        }

    def health_check(self) -> dict:
        stores = {s.name: s.ping() for s in (self.live, self.archive, self.battery)}
        transport_ok = self.transport.is_connected if self.transport else False
        return {
            "healthy": self._running and all(stores.values()),
            "running": self._running,
            "transport_connected": transport_ok,
            "stores": stores,
        }


# Singleton
_service: Optional[TelemetryService] = None


def get_service() -> Optional[TelemetryService]:
    """Obtiene el servicio singleton."""
    return _service


def start_service(settings: Optional[Settings] = None) -> TelemetryService:
    """Crea (si hace falta) e inicia el servicio."""
    global _service

    if _service is None:
        _service = TelemetryService.from_settings(settings)
    if not _service.is_running:
        _service.start()
    return _service


def stop_service():
    """Detiene el servicio singleton."""
    global _service

    if _service is not None:
        _service.stop()
        _service = None
