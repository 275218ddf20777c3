"""Thread worker implementations used by the walk."""

from __future__ import annotations

from .scan import scan_directory, scan_worker
from .pool import WorkerPool

__all__ = [
    "scan_directory",
    "scan_worker",
    "WorkerPool",
]
