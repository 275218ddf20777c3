"""
TextReporter - human readable, block-per-entry output.
"""
from __future__ import annotations

import io
import time
from pathlib import Path

from ..models import EntryRecord
from .base import RecordReporter

SEPARATOR = "-------------------"


def format_record(record: EntryRecord) -> str:
    return (
        f"Path: {record.path}\n"
        f"Size: {record.size} bytes\n"
        f"Type: {record.kind.value}\n"
        f"Permissions: {record.permissions:o}\n"
        f"Last Modified: {time.ctime(record.mtime)}\n"
        f"{SEPARATOR}\n"
    )


class TextReporter(RecordReporter):
    """
    Writes one block per entry and flushes after every block, so a reader
    tailing the file never sees half a record.
    """

    def __init__(self, out_path: Path, *, encoding: str = "utf-8") -> None:
        super().__init__()
        self.out_path = out_path
        self._encoding = encoding
        self._fp: io.TextIOWrapper | None = None

    def __enter__(self) -> "TextReporter":
        # undecodable names keep their surrogate escapes instead of failing the run
        self._fp = open(self.out_path, "w", encoding=self._encoding,
                        errors="surrogateescape")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._fp:
            self._fp.close()
            self._fp = None

    def _write(self, record: EntryRecord) -> None:
        if not self._fp:
            raise RuntimeError("TextReporter not initialised")
        self._fp.write(format_record(record))
        self._fp.flush()

    def __repr__(self) -> str:
        return f"<TextReporter path='{self.out_path}'>"
