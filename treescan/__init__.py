"""Public package exports for the :mod:`treescan` library."""

from __future__ import annotations

__all__ = [
    "pipeline",
    "config",
    "cancellation",
    "quiescence",
    "work_queue",
    "workers",
    "reporters",
    "constants",
    "models",
    "errors",
    "logging_setup",
    "signals",
    "core",
    "telemetry",
]
