"""Persistence Router - Enruta registros clasificados a sus stores.

Routing:
- GenericLog → live.messages + archive.messages
- SeismicLog → live.earthquake_logs + archive.earthquake_logs
- BatteryLog → battery.battery_logs (solo)

Cada escritura es un job independiente: si una falla la otra sigue, sin
rollback cruzado.
"""

from __future__ import annotations

import logging
import queue
from typing import List

from ...core.domain.records import BatteryLog, ClassifiedRecord, GenericLog, SeismicLog
from ...core.monitoring import metrics
from .dispatcher import AsyncWriteDispatcher, WriteJob
from .stores import BATTERY_LOGS, EARTHQUAKE_LOGS, MESSAGES, LogStore

logger = logging.getLogger(__name__)


class PersistenceRouter:
    """Traduce cada registro a jobs de escritura y los despacha.

    `persist` nunca bloquea ni lanza: los fallos terminan en logs y
    contadores, nunca en el pipeline ni en el broker.
    """

    def __init__(
        self,
        live: LogStore,
        archive: LogStore,
        battery: LogStore,
        dispatcher: AsyncWriteDispatcher,
    ):
        if archive.prunable:
            raise ValueError("archive store must be created with prunable=False")
        self._live = live
        self._archive = archive
        self._battery = battery
        self._dispatcher = dispatcher

    def persist(self, record: ClassifiedRecord) -> bool:
        """Despacha las escrituras del registro.

        Returns:
            True si el despachador aceptó todos los jobs del registro
        """
        try:
            jobs = self._jobs_for(record)
        except Exception as e:
            logger.exception("[PERSIST] Cannot route record type=%s: %s", type(record).__name__, e)
            return False

        accepted = sum(1 for job in jobs if self._dispatcher.submit(job))
        return accepted == len(jobs)

    def _jobs_for(self, record: ClassifiedRecord) -> List[WriteJob]:
        if isinstance(record, GenericLog):
            return [
                WriteJob(self._live.name, MESSAGES, lambda s=self._live: s.insert_generic(record)),
                WriteJob(self._archive.name, MESSAGES, lambda s=self._archive: s.insert_generic(record)),
            ]
        if isinstance(record, SeismicLog):
            return [
                WriteJob(self._live.name, EARTHQUAKE_LOGS, lambda s=self._live: s.insert_seismic(record)),
                WriteJob(self._archive.name, EARTHQUAKE_LOGS, lambda s=self._archive: s.insert_seismic(record)),
            ]
        if isinstance(record, BatteryLog):
            return [
                WriteJob(self._battery.name, BATTERY_LOGS, lambda s=self._battery: s.insert_battery(record)),
            ]
        raise TypeError(f"Unsupported record type: {type(record).__name__}")

    @staticmethod
    def report_failure(job: WriteJob, error: BaseException) -> None:
        """Error sink del despachador."""
        status = "dropped" if isinstance(error, queue.Full) else "failed"
        metrics.STORE_WRITES.labels(store=job.store, table=job.table, status=status).inc()
        logger.warning(
            "[PERSIST] Write %s store=%s table=%s err=%s",
            status, job.store, job.table, type(error).__name__,
        )

    @staticmethod
    def report_success(job: WriteJob) -> None:
        metrics.STORE_WRITES.labels(store=job.store, table=job.table, status="success").inc()

    @property
    def stats(self) -> dict:
        return self._dispatcher.metrics
