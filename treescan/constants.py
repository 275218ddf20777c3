from __future__ import annotations

# ──────────────────────────────────────────────────────────────────────────────
# Defaults for the walk engine (overridable through env / CLI)
# ──────────────────────────────────────────────────────────────────────────────
DEFAULT_WORKERS: int = 8
DEFAULT_QUEUE_SIZE: int = 1000
DEFAULT_MAX_PATH_LENGTH: int = 4096
DEFAULT_FORMAT: str = "text"

# ──────────────────────────────────────────────────────────────────────────────
# Cancellation reasons
# ──────────────────────────────────────────────────────────────────────────────
REASON_QUIESCENCE: str = "quiescence"
REASON_WORKER_FAILURE: str = "worker failure"
REASON_STARTUP_FAILURE: str = "startup failure"

# ──────────────────────────────────────────────────────────────────────────────
# Process exit codes
# ──────────────────────────────────────────────────────────────────────────────
EXIT_OK: int = 0
EXIT_IO_ERROR: int = 1
EXIT_INTERRUPTED: int = 130
EXIT_SIGNAL_BASE: int = 128  # plus the signal number
