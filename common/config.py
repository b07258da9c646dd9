from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


def _default_env_file() -> str:
    # Credentials live next to the process, same as the broker config.
    return str(Path.cwd() / ".env")


@dataclass(frozen=True)
class Settings:
    mqtt_host: str
    mqtt_port: int
    mqtt_user: str | None
    mqtt_password: str | None
    mqtt_client_prefix: str
    mqtt_reconnect_seconds: int
    mqtt_keepalive: int

    live_db_url: str
    archive_db_url: str
    battery_db_url: str

    admin_key: str | None
    port: int
    static_dir: str

    persist_queue_size: int
    persist_workers: int
    observer_queue_size: int

    generic_topic_prefix: str
    seismic_topic_prefix: str
    critical_status_topic: str
    heartbeat_marker: str

    @property
    def subscriptions(self) -> list[str]:
        """Filtros MQTT derivados de los prefijos de namespace."""
        return [
            f"{self.generic_topic_prefix.rstrip('/')}/#",
            f"{self.seismic_topic_prefix.rstrip('/')}/#",
        ]


def _optional(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return value


def get_settings() -> Settings:
    # Load env file (if present) but still allow overriding via real environment variables.
    env_file = os.getenv("PLUTO_ENV_FILE", _default_env_file())
    if env_file and Path(env_file).exists():
        load_dotenv(env_file, override=False)

    seismic_prefix = os.getenv("SEISMIC_TOPIC_PREFIX", "home/earthquake/")

    return Settings(
        mqtt_host=os.getenv("MQTT_BROKER_HOST", "127.0.0.1"),
        mqtt_port=int(os.getenv("MQTT_BROKER_PORT", "1883")),
        mqtt_user=_optional("MQTT_USER"),
        mqtt_password=_optional("MQTT_PASS"),
        mqtt_client_prefix=os.getenv("MQTT_CLIENT_PREFIX", "pluto_server"),
        mqtt_reconnect_seconds=int(os.getenv("MQTT_RECONNECT_SECONDS", "1")),
        mqtt_keepalive=int(os.getenv("MQTT_KEEPALIVE", "60")),
        live_db_url=os.getenv("LIVE_DB_URL", "sqlite:///./pluto.db"),
        archive_db_url=os.getenv("ARCHIVE_DB_URL", "sqlite:///./pluto_archive.db"),
        battery_db_url=os.getenv("BATTERY_DB_URL", "sqlite:///./plutobattery.db"),
        admin_key=_optional("ADMIN_KEY"),
        port=int(os.getenv("PORT", "3000")),
        static_dir=os.getenv("STATIC_DIR", "public"),
        persist_queue_size=int(os.getenv("PERSIST_QUEUE_SIZE", "1000")),
        persist_workers=int(os.getenv("PERSIST_WORKERS", "1")),
        observer_queue_size=int(os.getenv("OBSERVER_QUEUE_SIZE", "256")),
        generic_topic_prefix=os.getenv("GENERIC_TOPIC_PREFIX", "fsae/"),
        seismic_topic_prefix=seismic_prefix,
        critical_status_topic=os.getenv(
            "CRITICAL_STATUS_TOPIC",
            f"{seismic_prefix.rstrip('/')}/status",
        ),
        heartbeat_marker=os.getenv("HEARTBEAT_MARKER", "main node:"),
    )
