"""Fixed-size pool of scan worker threads."""

from __future__ import annotations

import logging
import threading
from typing import List

from treescan.cancellation import CancellationToken
from treescan.constants import REASON_STARTUP_FAILURE, REASON_WORKER_FAILURE
from treescan.errors import WalkError
from treescan.reporters.base import RecordReporter
from treescan.telemetry.metrics import Metrics
from treescan.work_queue import BoundedWorkQueue
from .scan import scan_worker

logger = logging.getLogger(__name__)


class WorkerPool:
    """
    A fixed set of ``size`` threads created by :meth:`start` and joined by
    :meth:`join`. A worker that raises aborts the whole walk: the token is
    set, pending directories are dropped, and the exception is kept in
    :attr:`errors` for the caller.
    """

    def __init__(
        self,
        size: int,
        queue: BoundedWorkQueue,
        reporter: RecordReporter,
        metrics: Metrics,
        token: CancellationToken,
        *,
        max_path_length: int,
    ) -> None:
        if size < 1:
            raise ValueError("size must be >= 1")
        self.size = size
        self.queue = queue
        self.reporter = reporter
        self.metrics = metrics
        self.token = token
        self.max_path_length = max_path_length

        self._threads: List[threading.Thread] = []
        self._errors: List[BaseException] = []
        self._lock = threading.Lock()

    @property
    def errors(self) -> List[BaseException]:
        with self._lock:
            return list(self._errors)

    def start(self) -> None:
        """Start every worker thread.

        Raises :class:`WalkError` if a thread cannot be created; the walk is
        aborted and the threads already running are joined first.
        """
        if self._threads:
            raise RuntimeError("WorkerPool already started")
        for wid in range(self.size):
            thread = threading.Thread(
                target=self._run, args=(wid,), name=f"scanner-{wid}")
            try:
                thread.start()
            except RuntimeError as exc:
                logger.error("Failed to start scanner %d: %s", wid, exc)
                self._abort(REASON_STARTUP_FAILURE)
                self.join()
                raise WalkError(
                    f"could not start worker {wid} of {self.size}") from exc
            self._threads.append(thread)
        logger.debug("Started %d scanners", len(self._threads))

    def join(self) -> None:
        for thread in self._threads:
            thread.join()

    def _run(self, wid: int) -> None:
        try:
            scan_worker(wid, self.queue, self.reporter, self.metrics,
                        self.max_path_length)
        except Exception as exc:
            self.metrics.record_error(exc)
            logger.exception("Scanner %d failed: %s", wid, exc)
            with self._lock:
                self._errors.append(exc)
            self._abort(REASON_WORKER_FAILURE)

    def _abort(self, reason: str) -> None:
        self.token.request(reason)
        self.queue.discard_pending()
