from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from types import TracebackType
from typing import Optional, Type

from ..models import EntryRecord


class RecordReporter(ABC):
    """
    Base class for metadata sinks.

    Reporters are context managers: the sink is opened in ``__enter__`` and
    closed in ``__exit__``. :meth:`report` may be called from any worker
    thread; one record is written as a single locked transaction so records
    never interleave.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()

    def __enter__(self) -> "RecordReporter":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        pass

    def report(self, record: EntryRecord) -> None:
        with self._lock:
            self._write(record)

    @abstractmethod
    def _write(self, record: EntryRecord) -> None:
        """Write one record. Called with the reporter lock held."""
        raise NotImplementedError


def utf8_path(path: str) -> str:
    """Return ``path`` safe for strict UTF-8 encoders.

    Undecodable bytes (kept by ``os`` as surrogate escapes) become U+FFFD.
    """
    return path.encode("utf-8", "surrogateescape").decode("utf-8", "replace")
