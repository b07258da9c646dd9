"""Persistence infrastructure - stores de logs y enrutamiento de escrituras."""

from .dispatcher import AsyncWriteDispatcher, WriteJob
from .router import PersistenceRouter
from .stores import (
    BATTERY_LOGS,
    EARTHQUAKE_LOGS,
    MESSAGES,
    ArchivePruneError,
    LogStore,
    StoreError,
)

__all__ = [
    "AsyncWriteDispatcher",
    "WriteJob",
    "PersistenceRouter",
    "BATTERY_LOGS",
    "EARTHQUAKE_LOGS",
    "MESSAGES",
    "ArchivePruneError",
    "LogStore",
    "StoreError",
]
