"""Estadísticas de procesamiento."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass
class Stats:
    """Estadísticas de procesamiento de mensajes."""

    received: int = 0
    processed: int = 0
    discarded: int = 0
    failed: int = 0
    last_message_at: float = 0
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __str__(self) -> str:
        return (
            f"Stats: received={self.received} processed={self.processed} "
            f"discarded={self.discarded} failed={self.failed}"
        )

    def to_dict(self) -> dict:
        """Convierte a diccionario."""
        return {
            "received": self.received,
            "processed": self.processed,
            "discarded": self.discarded,
            "failed": self.failed,
            "last_message_at": self.last_message_at,
            "started_at": self.started_at.isoformat(),
            "success_rate": self._success_rate(),
        }

    def _success_rate(self) -> float:
        """Calcula tasa de éxito."""
        total = self.processed + self.discarded + self.failed
        if total == 0:
            return 1.0
        return (self.processed + self.discarded) / total


@dataclass
class WriteStats:
    """Contadores del despachador de escrituras (thread-safe)."""

    enqueued: int = 0
    dropped: int = 0
    written: int = 0
    errors: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def incr(self, name: str, amount: int = 1) -> None:
        with self._lock:
            setattr(self, name, getattr(self, name) + amount)

    def to_dict(self) -> dict:
        with self._lock:
            return {
                "enqueued": self.enqueued,
                "dropped": self.dropped,
                "written": self.written,
                "errors": self.errors,
            }
