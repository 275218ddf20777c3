"""Metadata sinks selectable with ``--format``."""

from __future__ import annotations

from pathlib import Path

from .base import RecordReporter
from .text import TextReporter
from .jsonl import JsonLinesReporter
from .arrow import ArrowReporter

REPORTERS = {
    "text": TextReporter,
    "jsonl": JsonLinesReporter,
    "arrow": ArrowReporter,
}


def make_reporter(fmt: str, out_path: Path) -> RecordReporter:
    """Return an unopened reporter for ``fmt`` writing to ``out_path``."""
    try:
        cls = REPORTERS[fmt]
    except KeyError:
        raise ValueError(f"unknown output format: {fmt!r}") from None
    return cls(out_path)


__all__ = [
    "RecordReporter",
    "TextReporter",
    "JsonLinesReporter",
    "ArrowReporter",
    "REPORTERS",
    "make_reporter",
]
