"""Detection of the global "no work left anywhere" condition."""

from __future__ import annotations

import logging
import threading
from typing import Callable

from treescan.cancellation import CancellationToken
from treescan.constants import REASON_QUIESCENCE

logger = logging.getLogger(__name__)


class QuiescenceDetector:
    """
    Owns the in-flight counter and decides when the walk is finished.

    The counter is never touched on its own: every mutation and every
    decision happens while ``lock`` (the work queue's lock) is held, so
    ``in_flight`` and the queue's pending count are always read as one
    consistent pair. A worker takes its in-flight slot in the same critical
    section that removes the item from the queue, and gives it back in the
    same critical section that evaluates termination.
    """

    def __init__(
        self,
        token: CancellationToken,
        lock: threading.RLock,
        pending: Callable[[], int],
    ) -> None:
        """Create a detector.

        Parameters
        ----------
        token:
            Token to set once quiescence is reached.
        lock:
            The lock guarding the queue state ``pending`` reads from.
        pending:
            Callable returning the queue's pending count; only called while
            ``lock`` is held.
        """
        self._token = token
        self._lock = lock
        self._pending = pending
        self._in_flight = 0

    @property
    def in_flight(self) -> int:
        return self._in_flight

    def begin_locked(self) -> None:
        """Mark one more item as in flight. Caller holds the lock."""
        self._in_flight += 1

    def end_locked(self) -> None:
        """Mark one in-flight item as finished. Caller holds the lock."""
        if self._in_flight <= 0:
            raise ValueError("task_done() called more times than items were taken")
        self._in_flight -= 1

    def is_quiescent_locked(self) -> bool:
        return self._in_flight == 0 and self._pending() == 0

    def evaluate_locked(self) -> bool:
        """Set the token if nothing is pending or in flight. Caller holds the lock."""
        if not self.is_quiescent_locked():
            return False
        if not self._token.is_requested():
            logger.debug("Queue empty and no task in flight; walk is complete")
        self._token.request(REASON_QUIESCENCE)
        return True

    def evaluate(self) -> bool:
        """Evaluate termination under the shared lock."""
        with self._lock:
            return self.evaluate_locked()
