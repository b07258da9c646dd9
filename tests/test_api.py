"""Tests de endpoints HTTP y del canal WebSocket de observadores."""

import pytest
from fastapi.testclient import TestClient

from telemetry_api.core.broadcast import HISTORY_CLEARED
from telemetry_api.infrastructure.persistence import BATTERY_LOGS, EARTHQUAKE_LOGS, MESSAGES, StoreError
from telemetry_api.main import create_app

from .conftest import RecordingObserver

STATUS_TOPIC = "home/earthquake/status"


@pytest.fixture
def client(service):
    with TestClient(create_app(service)) as c:
        yield c


def _ingest(service, *messages):
    for topic, payload in messages:
        service.pipeline.handle(topic, payload)
    service.dispatcher.join()


# =============================================================================
# HEALTH
# =============================================================================

class TestHealth:

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}

    def test_ready_reports_stores(self, client):
        body = client.get("/ready").json()

        assert body["healthy"] is True
        assert body["stores"] == {"live": True, "archive": True, "battery": True}

    def test_status_reports_cached_liveness(self, client, service):
        service.pipeline.handle(STATUS_TOPIC, b"OFFLINE")

        assert client.get("/api/status").json() == {
            "transport_status": "Disconnected",
            "critical_node_status": "OFFLINE",
        }

    def test_metrics(self, client, service):
        _ingest(service, ("fsae/a", b"1"))

        body = client.get("/metrics").json()

        assert body["pipeline"]["received"] == 1
        assert body["persistence"]["written"] == 2


# =============================================================================
# QUERIES
# =============================================================================

class TestQueries:

    def test_history_newest_first(self, client, service):
        _ingest(service, ("fsae/a", b"1"), ("fsae/b", b"2"))

        rows = client.get("/api/history").json()

        assert [r["value"] for r in rows] == ["2", "1"]
        assert rows[0]["topic"] == "fsae/b"

    def test_earthquake_and_battery(self, client, service):
        _ingest(service, ("home/earthquake/node7", b"12.4V,OK"))

        quake = client.get("/api/earthquake").json()
        battery = client.get("/api/battery").json()

        assert quake[0]["node_id"] == "node7"
        assert quake[0]["magnitude"] == "12.4V,OK"
        assert battery[0]["voltage"] == "12.4"
        assert battery[0]["raw_message"] == "12.4V,OK"

    def test_limit_is_bounded(self, client):
        assert client.get("/api/earthquake?limit=101").status_code == 422
        assert client.get("/api/history?limit=0").status_code == 422

    def test_limit_applies(self, client, service):
        _ingest(service, *[("fsae/a", str(i).encode()) for i in range(5)])

        assert len(client.get("/api/history?limit=3").json()) == 3


# =============================================================================
# ADMIN CLEAR
# =============================================================================

class TestDeleteHistory:

    def test_missing_key_is_forbidden(self, client):
        assert client.delete("/api/history").status_code == 403

    def test_wrong_key_is_forbidden(self, client):
        resp = client.delete("/api/history", headers={"X-Admin-Key": "nope"})

        assert resp.status_code == 403

    def test_clear_live_and_battery_keeps_archive(self, client, service):
        _ingest(
            service,
            ("fsae/a", b"1"),
            ("home/earthquake/node7", b"12.4V,OK"),
        )
        observer = RecordingObserver()
        service.hub.attach(observer)

        resp = client.delete("/api/history", headers={"X-Admin-Key": "secret-admin"})

        assert resp.status_code == 200
        assert resp.json() == {"message": "All history deleted"}
        assert service.live.count(MESSAGES) == 0
        assert service.live.count(EARTHQUAKE_LOGS) == 0
        assert service.battery.count(BATTERY_LOGS) == 0
        assert service.archive.count(MESSAGES) == 1
        assert service.archive.count(EARTHQUAKE_LOGS) == 1
        assert observer.names() == [HISTORY_CLEARED]

    def test_ids_restart_after_clear(self, client, service):
        _ingest(service, ("fsae/a", b"1"), ("fsae/a", b"2"))
        client.delete("/api/history", headers={"X-Admin-Key": "secret-admin"})
        _ingest(service, ("fsae/a", b"3"))

        rows = client.get("/api/history").json()

        assert [(r["id"], r["value"]) for r in rows] == [(1, "3")]

    def test_live_failure_still_clears_battery(self, client, service, monkeypatch):
        _ingest(service, ("home/earthquake/n", b"12.4V,OK"))
        observer = RecordingObserver()
        service.hub.attach(observer)

        def broken_clear():
            raise StoreError("live locked")

        monkeypatch.setattr(service.live, "clear", broken_clear)

        resp = client.delete("/api/history", headers={"X-Admin-Key": "secret-admin"})

        assert resp.status_code == 500
        assert "live locked" in resp.json()["detail"]
        assert service.battery.count(BATTERY_LOGS) == 0
        assert service.live.count(EARTHQUAKE_LOGS) == 1
        assert HISTORY_CLEARED not in observer.names()


# =============================================================================
# OBSERVERS (WebSocket)
# =============================================================================

class TestObserverChannel:

    def test_attach_replays_status_then_streams(self, client, service):
        with client.websocket_connect("/ws") as ws:
            assert ws.receive_json() == {"event": "status_update", "data": {"status": "Disconnected"}}
            assert ws.receive_json() == {"event": "node_status_update", "data": {"status": "UNKNOWN"}}

            service.pipeline.handle(STATUS_TOPIC, b"ONLINE")

            assert ws.receive_json() == {"event": "node_status_update", "data": {"status": "ONLINE"}}
            live = ws.receive_json()
            assert live["event"] == "mqtt_message"
            assert live["data"]["topic"] == STATUS_TOPIC
            assert live["data"]["value"] == "ONLINE"

    def test_late_observer_gets_cached_node_status(self, client, service):
        service.pipeline.handle(STATUS_TOPIC, b"ONLINE")
        service.tracker.on_transport_connect()

        with client.websocket_connect("/ws") as ws:
            assert ws.receive_json()["data"] == {"status": "ONLINE"}
            assert ws.receive_json() == {"event": "node_status_update", "data": {"status": "ONLINE"}}

    def test_heartbeat_reaches_observers(self, client, service):
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()
            ws.receive_json()

            service.pipeline.handle("home/earthquake/main", b"main node: heartbeat")

            event = ws.receive_json()
            assert event["event"] == "mqtt_message"
            assert event["data"]["value"] == "main node: heartbeat"
