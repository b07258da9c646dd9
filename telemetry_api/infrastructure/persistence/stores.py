"""Stores de logs sobre SQLAlchemy.

Tres stores físicos:
- live     → messages + earthquake_logs (se purga por administración)
- archive  → messages + earthquake_logs (append-only, nunca se purga)
- battery  → battery_logs (se purga junto con live)
"""

from __future__ import annotations

import logging
from typing import Dict, List, Sequence

from sqlalchemy import text
from sqlalchemy.engine import Engine

from ...core.domain.records import BatteryLog, GenericLog, SeismicLog

logger = logging.getLogger(__name__)

MESSAGES = "messages"
EARTHQUAKE_LOGS = "earthquake_logs"
BATTERY_LOGS = "battery_logs"

_SCHEMAS: Dict[str, str] = {
    MESSAGES: """
        CREATE TABLE IF NOT EXISTS messages (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            topic TEXT,
            value TEXT,
            timestamp DATETIME DEFAULT CURRENT_TIMESTAMP
        )
    """,
    EARTHQUAKE_LOGS: """
        CREATE TABLE IF NOT EXISTS earthquake_logs (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            node_id TEXT,
            magnitude TEXT,
            location TEXT,
            timestamp DATETIME DEFAULT CURRENT_TIMESTAMP
        )
    """,
    BATTERY_LOGS: """
        CREATE TABLE IF NOT EXISTS battery_logs (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            node_id TEXT,
            voltage TEXT,
            raw_message TEXT,
            timestamp DATETIME DEFAULT CURRENT_TIMESTAMP
        )
    """,
}


class StoreError(Exception):
    """Fallo de lectura/escritura en un store."""


class ArchivePruneError(StoreError):
    """Se intentó borrar datos del archivo."""


class LogStore:
    """Tabla(s) de log ordenadas por id sobre un engine.

    Las filas nunca se actualizan; solo `clear` borra, y solo en stores
    marcados como prunable.
    """

    def __init__(
        self,
        engine: Engine,
        tables: Sequence[str],
        *,
        name: str,
        prunable: bool = True,
    ):
        unknown = [t for t in tables if t not in _SCHEMAS]
        if unknown:
            raise ValueError(f"Unknown log tables: {unknown}")

        self._engine = engine
        self._tables = tuple(tables)
        self.name = name
        self.prunable = prunable

    @property
    def tables(self) -> tuple:
        return self._tables

    @property
    def engine(self) -> Engine:
        return self._engine

    def ensure_schema(self) -> None:
        """Crea las tablas si no existen. Idempotente."""
        try:
            with self._engine.begin() as conn:
                for table in self._tables:
                    conn.execute(text(_SCHEMAS[table]))
            logger.info("[STORE] Schema ready store=%s tables=%s", self.name, ",".join(self._tables))
        except Exception as e:
            logger.exception("[STORE] Schema creation failed store=%s", self.name)
            raise StoreError(f"schema creation failed for {self.name}") from e

    def insert_generic(self, record: GenericLog) -> None:
        self._insert(
            MESSAGES,
            "INSERT INTO messages (topic, value, timestamp) VALUES (:topic, :value, :ts)",
            {"topic": record.topic, "value": record.value, "ts": record.timestamp},
        )

    def insert_seismic(self, record: SeismicLog) -> None:
        self._insert(
            EARTHQUAKE_LOGS,
            "INSERT INTO earthquake_logs (node_id, magnitude, timestamp) VALUES (:node_id, :magnitude, :ts)",
            {"node_id": record.node_id, "magnitude": record.magnitude_or_text, "ts": record.timestamp},
        )

    def insert_battery(self, record: BatteryLog) -> None:
        self._insert(
            BATTERY_LOGS,
            "INSERT INTO battery_logs (node_id, voltage, raw_message, timestamp) "
            "VALUES (:node_id, :voltage, :raw, :ts)",
            {
                "node_id": record.node_id,
                "voltage": record.voltage,
                "raw": record.raw_message,
                "ts": record.timestamp,
            },
        )

    def _insert(self, table: str, sql: str, params: dict) -> None:
        self._require_table(table)
        try:
            with self._engine.begin() as conn:
                conn.execute(text(sql), params)
        except Exception as e:
            raise StoreError(f"insert into {self.name}.{table} failed: {type(e).__name__}") from e

    def fetch_recent(self, table: str, limit: int) -> List[dict]:
        """Filas más recientes primero (ORDER BY id DESC)."""
        self._require_table(table)
        try:
            with self._engine.connect() as conn:
                rows = conn.execute(
                    text(f"SELECT * FROM {table} ORDER BY id DESC LIMIT :limit"),
                    {"limit": int(limit)},
                ).mappings().all()
            return [dict(r) for r in rows]
        except Exception as e:
            raise StoreError(f"read from {self.name}.{table} failed: {type(e).__name__}") from e

    def count(self, table: str) -> int:
        self._require_table(table)
        with self._engine.connect() as conn:
            return int(conn.execute(text(f"SELECT COUNT(*) FROM {table}")).scalar() or 0)

    def clear(self) -> None:
        """Borra todas las filas y reinicia la secuencia de ids.

        Raises:
            ArchivePruneError: si el store no es prunable
        """
        if not self.prunable:
            raise ArchivePruneError(f"store {self.name} is append-only")

        try:
            with self._engine.begin() as conn:
                for table in self._tables:
                    conn.execute(text(f"DELETE FROM {table}"))
                if self._engine.dialect.name == "sqlite":
                    for table in self._tables:
                        conn.execute(
                            text("DELETE FROM sqlite_sequence WHERE name = :name"),
                            {"name": table},
                        )
            if self._engine.dialect.name == "sqlite":
                # VACUUM no puede correr dentro de una transacción
                with self._engine.connect().execution_options(isolation_level="AUTOCOMMIT") as conn:
                    conn.execute(text("VACUUM"))
        except Exception as e:
            logger.exception("[STORE] Clear failed store=%s", self.name)
            raise StoreError(f"clear of {self.name} failed: {type(e).__name__}") from e

        logger.warning("[STORE] Cleared store=%s tables=%s", self.name, ",".join(self._tables))

    def ping(self) -> bool:
        try:
            with self._engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception:
            logger.exception("[STORE] Ping failed store=%s", self.name)
            return False

    def _require_table(self, table: str) -> None:
        if table not in self._tables:
            raise StoreError(f"table {table} does not belong to store {self.name}")
