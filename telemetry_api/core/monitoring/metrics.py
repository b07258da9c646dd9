"""Métricas Prometheus del servicio."""

from __future__ import annotations

from prometheus_client import Counter, Gauge

MESSAGES_RECEIVED = Counter(
    "pluto_messages_received_total",
    "Total MQTT messages handled by the ingestion pipeline",
    ["outcome"],  # persisted, discarded, failed
)

RECORDS_CLASSIFIED = Counter(
    "pluto_records_classified_total",
    "Records produced by the classifier",
    ["record_type"],  # generic, seismic, battery
)

STORE_WRITES = Counter(
    "pluto_store_writes_total",
    "Store insert jobs by store/table and outcome",
    ["store", "table", "status"],  # success, failed, dropped
)

OBSERVERS_CONNECTED = Gauge(
    "pluto_observers_connected",
    "Live observers attached to the broadcast hub",
)

TRANSPORT_CONNECTED = Gauge(
    "pluto_transport_connected",
    "MQTT transport connection status",
)
