"""Process-wide cooperative cancellation flag shared by every worker."""

from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


class CancellationToken:
    """
    A thin wrapper around a threading.Event that can only ever go from
    "running" to "cancelled". Blocking primitives register a listener so they
    are woken the moment the token is set, whoever sets it.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.RLock()
        self._listeners: List[Callable[[], None]] = []
        self._reason: Optional[str] = None

    def is_requested(self) -> bool:
        """Return ``True`` once cancellation has been requested."""
        return self._event.is_set()

    @property
    def reason(self) -> Optional[str]:
        """The reason passed to the first :meth:`request` call, if any."""
        return self._reason

    def wait(self, timeout: float | None = None) -> bool:
        """Block until cancellation is requested or ``timeout`` elapses."""
        return self._event.wait(timeout)

    def add_listener(self, listener: Callable[[], None]) -> None:
        """Register ``listener`` to be called when the token is set.

        A listener added after the token was set is called immediately.
        """
        with self._lock:
            if not self._event.is_set():
                self._listeners.append(listener)
                return
        listener()

    def request(self, reason: str = "requested") -> None:
        """Set the token and wake every registered listener.

        Only the first call has any effect; later calls are ignored.
        """
        with self._lock:
            if self._event.is_set():
                return
            self._reason = reason
            self._event.set()
            listeners = list(self._listeners)
            self._listeners.clear()
        logger.info("Cancellation requested (%s)", reason)
        for listener in listeners:
            listener()
