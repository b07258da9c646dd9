"""Tests del cliente MQTT (paho mockeado)."""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from telemetry_api.core.receiver import TelemetryService
from telemetry_api.core.transport import MQTTClient
from telemetry_api.core.domain import TransportStatus
from telemetry_api.infrastructure.persistence import MESSAGES

TOPICS = ["fsae/#", "home/earthquake/#"]


@pytest.fixture
def paho_client():
    with patch("telemetry_api.core.transport.mqtt_client.mqtt.Client") as client_cls:
        yield client_cls.return_value


class TestMQTTClient:

    def test_start_configures_fixed_backoff_and_credentials(self, paho_client):
        client = MQTTClient(username="u", password="p", topics=TOPICS, reconnect_seconds=1)

        assert client.start() is True

        paho_client.username_pw_set.assert_called_once_with("u", "p")
        paho_client.reconnect_delay_set.assert_called_once_with(min_delay=1, max_delay=1)
        paho_client.connect_async.assert_called_once_with("127.0.0.1", 1883, keepalive=60)
        paho_client.loop_start.assert_called_once()

    def test_client_id_has_random_suffix(self):
        a = MQTTClient(client_id_prefix="pluto_server")
        b = MQTTClient(client_id_prefix="pluto_server")

        assert a.client_id.startswith("pluto_server_")
        assert a.client_id != b.client_id

    def test_subscribe_all_on_connect(self, paho_client):
        client = MQTTClient(topics=TOPICS)
        client.start()

        client.subscribe_all()

        paho_client.subscribe.assert_called_once_with([("fsae/#", 0), ("home/earthquake/#", 0)])

    def test_connect_and_disconnect_callbacks(self, paho_client):
        on_connected, on_disconnected = MagicMock(), MagicMock()
        client = MQTTClient(topics=TOPICS)
        client.set_connection_callbacks(on_connected, on_disconnected)
        client.start()

        client._on_connect(paho_client, None, {}, 0)
        assert client.is_connected is True
        on_connected.assert_called_once()

        client._on_disconnect(paho_client, None, {}, 7)
        assert client.is_connected is False
        assert client.reconnect_count == 1
        on_disconnected.assert_called_once()

    def test_failed_connect_does_not_fire_callback(self, paho_client):
        on_connected = MagicMock()
        client = MQTTClient()
        client.set_connection_callbacks(on_connected, MagicMock())

        client._on_connect(paho_client, None, {}, 5)

        assert client.is_connected is False
        on_connected.assert_not_called()

    def test_message_delegated_to_handler(self):
        handler = MagicMock()
        client = MQTTClient()
        client.set_message_handler(handler)

        client._on_message(None, None, SimpleNamespace(topic="fsae/a", payload=b"1"))

        handler.assert_called_once_with("fsae/a", b"1")


class TestServiceWiring:

    def test_reconnect_reinstates_subscriptions_and_ingest(self, settings, stores, paho_client):
        live, archive, battery = stores
        transport = MQTTClient(topics=settings.subscriptions)
        service = TelemetryService(settings, live, archive, battery, transport)
        service.start()
        try:
            transport._on_connect(paho_client, None, {}, 0)
            transport._on_disconnect(paho_client, None, {}, 7)
            assert service.tracker.current_state().transport_status is TransportStatus.DISCONNECTED

            transport._on_connect(paho_client, None, {}, 0)

            assert service.tracker.current_state().transport_status is TransportStatus.ONLINE
            assert paho_client.subscribe.call_count == 2

            transport._on_message(None, None, SimpleNamespace(topic="fsae/lap", payload=b"1:31.9"))
            service.dispatcher.join()
            assert service.live.count(MESSAGES) == 1
        finally:
            service.stop()
