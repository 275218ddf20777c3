"""Top level orchestration of a concurrent directory walk."""

from __future__ import annotations

import logging
import threading
from time import perf_counter

from treescan.cancellation import CancellationToken
from treescan.config import Config
from treescan.errors import WalkError
from treescan.reporters import RecordReporter, make_reporter
from treescan.telemetry.metrics import Metrics
from treescan.work_queue import BoundedWorkQueue
from treescan.workers.pool import WorkerPool

logger = logging.getLogger(__name__)


def _status_monitor(
    queue: BoundedWorkQueue,
    metrics: Metrics,
    token: CancellationToken,
    interval: float,
) -> None:
    last_reported = 0
    last_t = perf_counter()
    while not token.wait(interval):
        pending, in_flight = queue.snapshot()
        with metrics.lock:
            reported = metrics.entries_reported
        now = perf_counter()
        delta_t = now - last_t
        rate = (reported - last_reported) / delta_t if delta_t > 0 else 0.0
        logger.info(
            "Walk status: reported=%s pending=%d in_flight=%d rate=%.1f/s scan_dir_p95=%.4fs",
            f"{reported:,}",
            pending,
            in_flight,
            rate,
            metrics.stage_percentile("scan_dir", 95.0),
        )
        last_reported, last_t = reported, now


def run_walk(
    config: Config,
    *,
    token: CancellationToken | None = None,
    reporter: RecordReporter | None = None,
) -> Metrics:
    """Walk ``config.root`` with a pool of workers and return the metrics.

    Parameters
    ----------
    config:
        Walk settings, see :func:`treescan.config.initialize_environment`.
    token:
        Optional cancellation token. Pass one to be able to stop the walk
        from outside (signal handler, another thread). A fresh token is
        created otherwise.
    reporter:
        Optional unopened reporter. Defaults to the one selected by
        ``config.output_format`` writing to ``config.output``.

    The root itself is not reported, only the entries below it. Raises
    ``OSError`` if the sink cannot be opened and :class:`WalkError` if a
    worker fails or cannot be started.
    """
    if token is None:
        token = CancellationToken()
    if reporter is None:
        reporter = make_reporter(config.output_format, config.output)

    metrics = Metrics()
    queue = BoundedWorkQueue(config.queue_size, token, workers=config.workers)
    pool = WorkerPool(
        config.workers, queue, reporter, metrics, token,
        max_path_length=config.max_path_length,
    )

    logger.info(
        "Walk starting (root=%s, workers=%d, queue_size=%d, sink=%s)",
        config.root,
        config.workers,
        config.queue_size,
        reporter,
    )
    start = perf_counter()

    with reporter:
        queue.enqueue(str(config.root))

        monitor = None
        if config.status_interval > 0:
            monitor = threading.Thread(
                target=_status_monitor,
                args=(queue, metrics, token, config.status_interval),
                name="status-monitor",
                daemon=True,
            )
            monitor.start()

        try:
            pool.start()
            pool.join()
        finally:
            if monitor is not None:
                token.request("walk finished")
                monitor.join()

    pending, in_flight = queue.snapshot()
    with metrics.lock:
        metrics.queue_high_water = queue.high_water
        metrics.final_pending = pending
        metrics.final_in_flight = in_flight

    errors = pool.errors
    if errors:
        raise WalkError(f"walk aborted after {len(errors)} worker failure(s)") from errors[0]

    duration = perf_counter() - start
    logger.info(
        "Done - reported %s entries in %.2fs (stopped by %s)",
        f"{metrics.entries_reported:,}",
        duration,
        token.reason,
    )
    txt, _ = metrics.summary()
    logger.info("\n%s", txt)
    return metrics
