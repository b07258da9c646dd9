"""Fixtures compartidas.

Ejecutar:
    pytest tests -v
"""

from dataclasses import replace
from typing import List

import pytest

from common.config import Settings
from common.db import create_store_engine
from telemetry_api.core.broadcast.events import ObserverEvent
from telemetry_api.core.broadcast.observers import ObserverClosed
from telemetry_api.core.receiver import TelemetryService
from telemetry_api.infrastructure.persistence import (
    BATTERY_LOGS,
    EARTHQUAKE_LOGS,
    MESSAGES,
    LogStore,
)


class RecordingObserver:
    """Observador que guarda cada evento recibido."""

    def __init__(self, observer_id: str = "obs-1"):
        self.observer_id = observer_id
        self.events: List[ObserverEvent] = []
        self.closed = False

    def deliver(self, event: ObserverEvent) -> None:
        if self.closed:
            raise ObserverClosed(self.observer_id)
        self.events.append(event)

    def names(self) -> List[str]:
        return [e.event for e in self.events]


def make_settings(tmp_path, **overrides) -> Settings:
    settings = Settings(
        mqtt_host="127.0.0.1",
        mqtt_port=1883,
        mqtt_user=None,
        mqtt_password=None,
        mqtt_client_prefix="pluto_test",
        mqtt_reconnect_seconds=1,
        mqtt_keepalive=60,
        live_db_url=f"sqlite:///{tmp_path / 'pluto.db'}",
        archive_db_url=f"sqlite:///{tmp_path / 'pluto_archive.db'}",
        battery_db_url=f"sqlite:///{tmp_path / 'plutobattery.db'}",
        admin_key="secret-admin",
        port=3000,
        static_dir=str(tmp_path / "public"),
        persist_queue_size=100,
        persist_workers=1,
        observer_queue_size=32,
        generic_topic_prefix="fsae/",
        seismic_topic_prefix="home/earthquake/",
        critical_status_topic="home/earthquake/status",
        heartbeat_marker="main node:",
    )
    return replace(settings, **overrides)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return make_settings(tmp_path)


@pytest.fixture
def stores(settings):
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
    for store in (live, archive, battery):
        store.ensure_schema()
    yield live, archive, battery
    for store in (live, archive, battery):
        store.engine.dispose()


@pytest.fixture
def service(settings, stores):
    """Servicio completo sin transporte MQTT."""
    live, archive, battery = stores
    svc = TelemetryService(settings, live, archive, battery)
    svc.start()
    yield svc
    svc.stop()


@pytest.fixture
def observer() -> RecordingObserver:
    return RecordingObserver()
