"""Bounded, monitor-guarded FIFO of directories waiting to be scanned."""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Deque, Optional, Tuple

from treescan.cancellation import CancellationToken
from treescan.models import EnqueueResult
from treescan.quiescence import QuiescenceDetector

logger = logging.getLogger(__name__)


class BoundedWorkQueue:
    """
    Fixed-capacity FIFO shared by all scan workers.

    Producers block while the queue is full and consumers block while it is
    empty. One re-entrant lock guards the items, the in-flight counter kept by
    :class:`QuiescenceDetector` and both conditions, so "take an item" and
    "mark it in flight" are a single step, as are "finish an item" and
    "decide whether the walk is over".

    When ``workers`` is given, a producer that would become the last of the
    ``workers`` threads parked in :meth:`enqueue` is not parked: nobody would
    be left to make room. It gets :attr:`EnqueueResult.OVERFLOW` instead and
    keeps the item (with an in-flight slot already taken for it).
    """

    def __init__(
        self,
        capacity: int,
        token: CancellationToken,
        *,
        workers: Optional[int] = None,
    ) -> None:
        """Create a new queue.

        Parameters
        ----------
        capacity:
            Maximum number of pending items. Must be at least 1.
        token:
            Cancellation token; setting it wakes every blocked caller.
        workers:
            Number of threads that both consume and produce. ``None``
            disables overflow handling and producers always block when full.
        """
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        if workers is not None and workers < 1:
            raise ValueError("workers must be >= 1")
        self._capacity = capacity
        self._workers = workers
        self._token = token
        self._items: Deque[str] = deque()
        self._waiting_producers = 0
        self._high_water = 0

        self.mutex = threading.RLock()
        self.not_empty = threading.Condition(self.mutex)
        self.not_full = threading.Condition(self.mutex)
        self.detector = QuiescenceDetector(token, self.mutex, self._pending_locked)

        token.add_listener(self._wake_all)

    def _pending_locked(self) -> int:
        return len(self._items)

    def _wake_all(self) -> None:
        with self.mutex:
            self.not_empty.notify_all()
            self.not_full.notify_all()

    # ------------------------------------------------------------------ #
    # Producer / consumer                                                #
    # ------------------------------------------------------------------ #
    def enqueue(self, item: str) -> EnqueueResult:
        """Append ``item`` at the tail, blocking while the queue is full.

        Returns :attr:`EnqueueResult.CANCELLED` without inserting once the
        token is set, including when it is set while the caller waits.
        """
        with self.mutex:
            while True:
                if self._token.is_requested():
                    return EnqueueResult.CANCELLED
                if len(self._items) < self._capacity:
                    break
                if self._workers is not None and self._waiting_producers + 1 >= self._workers:
                    self.detector.begin_locked()
                    logger.debug("Queue full with every worker producing; caller keeps %s", item)
                    return EnqueueResult.OVERFLOW
                self._waiting_producers += 1
                try:
                    self.not_full.wait()
                finally:
                    self._waiting_producers -= 1

            self._items.append(item)
            if len(self._items) > self._high_water:
                self._high_water = len(self._items)
            self.not_empty.notify()
            return EnqueueResult.QUEUED

    def dequeue(self) -> Optional[str]:
        """Remove and return the head item, blocking while the queue is empty.

        The returned item is counted as in flight until :meth:`task_done` is
        called for it. Returns ``None`` (end of stream) once the queue is
        empty and either the token is set or the walk has gone quiescent.
        Items still queued when the token is set are handed out first.
        """
        with self.mutex:
            while not self._items:
                if self._token.is_requested():
                    return None
                if self.detector.evaluate_locked():
                    return None
                self.not_empty.wait()

            item = self._items.popleft()
            self.detector.begin_locked()
            self.not_full.notify()
            return item

    def task_done(self) -> bool:
        """Release one in-flight slot and evaluate termination.

        Returns ``True`` if this call found the walk quiescent.
        """
        with self.mutex:
            self.detector.end_locked()
            return self.detector.evaluate_locked()

    def discard_pending(self) -> int:
        """Drop every queued item and return how many were dropped."""
        with self.mutex:
            dropped = len(self._items)
            self._items.clear()
            self.not_full.notify_all()
        if dropped:
            logger.warning("Discarded %d pending directories", dropped)
        return dropped

    # ------------------------------------------------------------------ #
    # Introspection                                                      #
    # ------------------------------------------------------------------ #
    def snapshot(self) -> Tuple[int, int]:
        """Return ``(pending, in_flight)`` read under the lock."""
        with self.mutex:
            return len(self._items), self.detector.in_flight

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def pending(self) -> int:
        with self.mutex:
            return len(self._items)

    @property
    def in_flight(self) -> int:
        with self.mutex:
            return self.detector.in_flight

    @property
    def high_water(self) -> int:
        """Largest number of items ever pending at once."""
        with self.mutex:
            return self._high_water
