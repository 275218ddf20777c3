"""Environment-based configuration loading for a walk."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv

from treescan.constants import (
    DEFAULT_FORMAT,
    DEFAULT_MAX_PATH_LENGTH,
    DEFAULT_QUEUE_SIZE,
    DEFAULT_WORKERS,
)


OutputFormat = Literal["text", "jsonl", "arrow"]
OUTPUT_FORMATS: tuple[str, ...] = ("text", "jsonl", "arrow")


@dataclass
class Config:
    """Configuration values derived from environment variables and the CLI."""
    root: Path
    output: Path

    # Engine
    workers: int
    queue_size: int
    max_path_length: int

    # Output
    output_format: OutputFormat

    # Observability
    status_interval: float


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def initialize_environment(
    root: Path | str,
    output: Path | str,
    *,
    workers: int | None = None,
    queue_size: int | None = None,
    output_format: str | None = None,
    max_path_length: int | None = None,
    status_interval: float | None = None,
) -> Config:
    """Load environment variables and build a :class:`Config` instance.

    Values come from a ``.env`` file, then the process environment, then
    the explicit keyword arguments (which win when not ``None``). Raises
    ``ValueError`` for out-of-range values.
    """
    load_dotenv()

    if workers is None:
        workers = _env_int("TREESCAN_WORKERS", DEFAULT_WORKERS)
    if queue_size is None:
        queue_size = _env_int("TREESCAN_QUEUE_SIZE", DEFAULT_QUEUE_SIZE)
    if max_path_length is None:
        max_path_length = _env_int("TREESCAN_MAX_PATH", DEFAULT_MAX_PATH_LENGTH)
    if status_interval is None:
        status_interval = _env_float("TREESCAN_STATUS_INTERVAL", 0.0)
    if output_format is None:
        output_format = os.getenv("TREESCAN_FORMAT", DEFAULT_FORMAT)
    output_format = output_format.strip().lower()

    if workers < 1:
        raise ValueError("workers must be >= 1")
    if queue_size < 1:
        raise ValueError("queue size must be >= 1")
    if max_path_length < 1:
        raise ValueError("max path length must be >= 1")
    if status_interval < 0:
        raise ValueError("status interval must be >= 0")
    if output_format not in OUTPUT_FORMATS:
        raise ValueError(
            f"output format must be one of {', '.join(OUTPUT_FORMATS)}, got {output_format!r}")

    return Config(
        root=Path(root),
        output=Path(output),
        workers=workers,
        queue_size=queue_size,
        max_path_length=max_path_length,
        output_format=output_format,  # type: ignore[arg-type]
        status_interval=status_interval,
    )
