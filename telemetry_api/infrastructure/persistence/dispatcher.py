"""Async write dispatcher: desacopla las escrituras del hilo de ingesta.

Cola acotada + worker threads: `submit()` retorna de inmediato y el
pipeline sigue con el próximo mensaje. Los fallos se reportan al callback
`on_error` y nunca vuelven al llamador.
"""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from ...core.monitoring.stats import WriteStats

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 1000
DEFAULT_NUM_WORKERS = 1


@dataclass(frozen=True)
class WriteJob:
    store: str
    table: str
    action: Callable[[], None]


ErrorSink = Callable[[WriteJob, BaseException], None]
SuccessSink = Callable[[WriteJob], None]


class AsyncWriteDispatcher:
    """Queue + worker threads para inserts fire-and-forget.

    - submit() → put_nowait, nunca bloquea
    - Worker threads ejecutan cada job de forma independiente
    - Cola llena → el job se descarta y se reporta al error sink
    """

    def __init__(
        self,
        max_queue_size: int = DEFAULT_QUEUE_SIZE,
        num_workers: int = DEFAULT_NUM_WORKERS,
        on_error: Optional[ErrorSink] = None,
        on_success: Optional[SuccessSink] = None,
    ):
        self._queue: queue.Queue = queue.Queue(maxsize=max_queue_size)
        self._num_workers = max(1, num_workers)
        self._stop_event = threading.Event()
        self._on_error = on_error
        self._on_success = on_success
        self._stats = WriteStats()
        self._workers: list[threading.Thread] = []

    def start(self) -> None:
        """Start worker threads."""
        if self._workers:
            return
        self._stop_event.clear()
        for i in range(self._num_workers):
            t = threading.Thread(
                target=self._worker_loop,
                args=(i,),
                daemon=True,
                name=f"persist-worker-{i}",
            )
            t.start()
            self._workers.append(t)
        logger.info(
            "[PERSIST] Started workers=%d queue_max=%d",
            self._num_workers, self._queue.maxsize,
        )

    def stop(self, drain: bool = True) -> None:
        """Stop workers. If drain=True, process remaining jobs first."""
        if drain and self._workers:
            self._queue.join()
        self._stop_event.set()
        for t in self._workers:
            t.join(timeout=5.0)
        self._workers.clear()
        logger.info("[PERSIST] Stopped. %s", self.metrics)

    def join(self) -> None:
        """Bloquea hasta que la cola actual se haya procesado."""
        self._queue.join()

    def submit(self, job: WriteJob) -> bool:
        """Encola un job. Returns False si la cola está llena."""
        try:
            self._queue.put_nowait(job)
            self._stats.incr("enqueued")
            return True
        except queue.Full:
            self._stats.incr("dropped")
            logger.warning(
                "[PERSIST] Queue full, dropped write store=%s table=%s",
                job.store, job.table,
            )
            self._report_error(job, queue.Full())
            return False

    def _worker_loop(self, worker_id: int) -> None:
        while not self._stop_event.is_set():
            try:
                job = self._queue.get(timeout=0.5)
            except queue.Empty:
                continue

            try:
                job.action()
                self._stats.incr("written")
                if self._on_success is not None:
                    self._on_success(job)
            except Exception as e:
                self._stats.incr("errors")
                logger.error(
                    "[PERSIST] Worker %d write failed store=%s table=%s err=%s",
                    worker_id, job.store, job.table, e,
                )
                self._report_error(job, e)
            finally:
                self._queue.task_done()

    def _report_error(self, job: WriteJob, error: BaseException) -> None:
        if self._on_error is None:
            return
        try:
            self._on_error(job, error)
        except Exception:
            logger.exception("[PERSIST] Error sink failed")

    @property
    def metrics(self) -> dict:
        return {
            "queue_depth": self._queue.qsize(),
            "workers": len(self._workers),
            **self._stats.to_dict(),
        }
