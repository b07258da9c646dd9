"""Cliente MQTT para recepción de telemetría."""

from __future__ import annotations

import logging
import secrets
from typing import Callable, List, Optional

import paho.mqtt.client as mqtt

from ..monitoring import metrics

logger = logging.getLogger(__name__)

MessageHandler = Callable[[str, bytes], object]


class MQTTClient:
    """Cliente MQTT ligero para recepción de telemetría.

    Responsabilidades:
    - Conexión/desconexión a broker MQTT (reconexión con backoff fijo)
    - Suscripción a topics, re-emitida en cada conexión
    - Delegación de mensajes y transiciones de conexión a callbacks
    """

    def __init__(
        self,
        broker_host: str = "127.0.0.1",
        broker_port: int = 1883,
        username: Optional[str] = None,
        password: Optional[str] = None,
        client_id_prefix: str = "pluto_server",
        topics: Optional[List[str]] = None,
        reconnect_seconds: int = 1,
        keepalive: int = 60,
    ):
        self.broker_host = broker_host
        self.broker_port = broker_port
        self.username = username
        self.password = password
        self.client_id = f"{client_id_prefix}_{secrets.token_hex(3)}"
        self.topics = list(topics or [])
        self.reconnect_seconds = max(1, int(reconnect_seconds))
        self.keepalive = keepalive

        self._client: Optional[mqtt.Client] = None
        self._connected = False
        self._reconnect_count = 0
        self._message_handler: Optional[MessageHandler] = None
        self._on_connected: Optional[Callable[[], None]] = None
        self._on_disconnected: Optional[Callable[[], None]] = None

    def set_message_handler(self, handler: MessageHandler):
        """Configura el handler de mensajes."""
        self._message_handler = handler

    def set_connection_callbacks(
        self,
        on_connected: Callable[[], None],
        on_disconnected: Callable[[], None],
    ):
        self._on_connected = on_connected
        self._on_disconnected = on_disconnected

    def start(self) -> bool:
        """Inicia la conexión asíncrona; paho reintenta solo."""
        try:
            self._client = mqtt.Client(
                callback_api_version=mqtt.CallbackAPIVersion.VERSION2,
                client_id=self.client_id,
                protocol=mqtt.MQTTv311,
            )

            self._client.on_connect = self._on_connect
            self._client.on_disconnect = self._on_disconnect
            self._client.on_message = self._on_message

            if self.username and self.password:
                self._client.username_pw_set(self.username, self.password)

            self._client.reconnect_delay_set(
                min_delay=self.reconnect_seconds,
                max_delay=self.reconnect_seconds,
            )

            logger.info("[MQTT] Connecting to %s:%d client_id=%s", self.broker_host, self.broker_port, self.client_id)
            self._client.connect_async(self.broker_host, self.broker_port, keepalive=self.keepalive)
            self._client.loop_start()
            return True

        except Exception as e:
            logger.exception("[MQTT] Start failed: %s", e)
            return False

    def stop(self):
        """Desconecta del broker."""
        if self._client:
            try:
                self._client.disconnect()
                self._client.loop_stop()
            except Exception as e:
                logger.warning("[MQTT] Disconnect error: %s", e)
        self._connected = False
        metrics.TRANSPORT_CONNECTED.set(0)

    def subscribe_all(self) -> None:
        """Suscribe a todos los topics configurados."""
        if not self._client or not self.topics:
            return
        self._client.subscribe([(topic, 0) for topic in self.topics])
        logger.info("[MQTT] Subscribed to %s", ", ".join(self.topics))

    def _on_connect(self, client, userdata, flags, rc, properties=None):
        """Callback de conexión."""
        if rc == 0:
            if self._reconnect_count > 0:
                logger.info("[MQTT] Reconnected to broker (count=%d)", self._reconnect_count)
            self._connected = True
            metrics.TRANSPORT_CONNECTED.set(1)
            logger.info("[MQTT] Connected to broker")
            if self._on_connected:
                self._on_connected()
        else:
            self._connected = False
            logger.error("[MQTT] Connection failed: rc=%s", rc)

    def _on_disconnect(self, client, userdata, flags, rc, properties=None):
        """Callback de desconexión."""
        was_connected = self._connected
        self._connected = False
        metrics.TRANSPORT_CONNECTED.set(0)
        if was_connected:
            self._reconnect_count += 1
        logger.warning("[MQTT] Disconnected (rc=%s)", rc)
        if self._on_disconnected:
            self._on_disconnected()

    def _on_message(self, client, userdata, msg):
        """Callback de mensaje - delega al handler."""
        if self._message_handler:
            self._message_handler(msg.topic, msg.payload)

    @property
    def is_connected(self) -> bool:
        return self._connected

    @property
    def reconnect_count(self) -> int:
        return self._reconnect_count
