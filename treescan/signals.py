"""Bridge from OS termination signals to a :class:`CancellationToken`."""

from __future__ import annotations

import contextlib
import logging
import signal
import threading
from typing import Any, Dict, Iterator, List, Sequence

from treescan.cancellation import CancellationToken

logger = logging.getLogger(__name__)

DEFAULT_SIGNALS: tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM)


@contextlib.contextmanager
def handle_signals(
    token: CancellationToken,
    signals: Sequence[signal.Signals] = DEFAULT_SIGNALS,
) -> Iterator[List[signal.Signals]]:
    """Route ``signals`` to ``token.request()`` for the duration of the block.

    Yields the list of signals received, in arrival order. Previous handlers
    are restored on exit. Outside the main thread Python cannot install
    handlers, so the block runs without them and the list stays empty.
    """
    received: List[signal.Signals] = []
    if threading.current_thread() is not threading.main_thread():
        logger.debug("Not on the main thread; signal handlers not installed")
        yield received
        return

    def _handler(signum: int, frame: Any) -> None:
        sig = signal.Signals(signum)
        received.append(sig)
        token.request(f"signal {sig.name}")

    previous: Dict[signal.Signals, Any] = {}
    try:
        for sig in signals:
            previous[sig] = signal.signal(sig, _handler)
        yield received
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)
