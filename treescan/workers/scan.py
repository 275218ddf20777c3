"""
Scan worker loop: takes a directory off the shared queue, reports every
direct child and feeds child directories back into the same queue.
"""
from __future__ import annotations

import logging
import os
from time import perf_counter
from typing import List

from treescan.core.entries import inspect_entry, iter_children
from treescan.models import EnqueueResult
from treescan.reporters.base import RecordReporter
from treescan.telemetry.metrics import Metrics
from treescan.work_queue import BoundedWorkQueue

logger = logging.getLogger(__name__)


def scan_directory(
    directory: str,
    queue: BoundedWorkQueue,
    reporter: RecordReporter,
    metrics: Metrics,
    backlog: List[str],
    max_path_length: int,
) -> None:
    """Report the children of ``directory`` and enqueue the subdirectories.

    Children whose attributes cannot be read are skipped. If listing fails
    part-way, the children read before the failure are still reported. A
    child directory that comes back as :attr:`EnqueueResult.OVERFLOW` is
    appended to ``backlog`` for the calling worker to scan itself. Reporter
    errors propagate.
    """
    start = perf_counter()
    children = iter_children(directory)
    try:
        while True:
            try:
                child = next(children)
            except StopIteration:
                break
            except OSError as exc:
                metrics.inc("list_failures")
                logger.debug("Cannot list %s: %s", directory, exc)
                return
            _scan_child(child, queue, reporter, metrics, backlog, max_path_length)
    finally:
        children.close()

    metrics.inc("directories_scanned")
    metrics.observe_stage("scan_dir", perf_counter() - start)


def _scan_child(
    child: str,
    queue: BoundedWorkQueue,
    reporter: RecordReporter,
    metrics: Metrics,
    backlog: List[str],
    max_path_length: int,
) -> None:
    # limit is in bytes of the encoded path, not characters
    if len(os.fsencode(child)) > max_path_length:
        metrics.inc("long_paths_skipped")
        logger.debug("Skipping %s: path longer than %d bytes", child, max_path_length)
        return
    try:
        record = inspect_entry(child)
    except OSError as exc:
        metrics.inc("stat_failures")
        logger.debug("Cannot stat %s: %s", child, exc)
        return

    reporter.report(record)
    metrics.observe_record(record)

    if not record.is_dir:
        return
    result = queue.enqueue(child)
    if result is EnqueueResult.QUEUED:
        metrics.inc("directories_enqueued")
    elif result is EnqueueResult.OVERFLOW:
        metrics.inc("overflow_items")
        backlog.append(child)
    else:
        metrics.inc("enqueue_cancelled")


def scan_worker(
    wid: int,
    queue: BoundedWorkQueue,
    reporter: RecordReporter,
    metrics: Metrics,
    max_path_length: int,
) -> None:
    """Run until the queue reports end of stream.

    Every dequeued or overflowed directory holds an in-flight slot, released
    with ``task_done()`` only after all of its children were enqueued.
    """
    logger.debug("Scanner %d started", wid)
    while True:
        item = queue.dequeue()
        if item is None:
            logger.debug("Scanner %d reached end of stream", wid)
            break

        backlog = [item]
        try:
            while backlog:
                directory = backlog.pop()
                try:
                    scan_directory(directory, queue, reporter, metrics,
                                   backlog, max_path_length)
                finally:
                    queue.task_done()
        finally:
            # overflow items left behind by a failure still hold slots
            for _ in backlog:
                queue.task_done()
