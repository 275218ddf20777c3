"""
JsonLinesReporter - one orjson-encoded object per entry.
"""
from __future__ import annotations

import io
from pathlib import Path

import orjson

from ..models import EntryRecord
from .base import RecordReporter, utf8_path


class JsonLinesReporter(RecordReporter):
    def __init__(self, out_path: Path) -> None:
        super().__init__()
        self.out_path = out_path
        self._fp: io.BufferedWriter | None = None

    def __enter__(self) -> "JsonLinesReporter":
        self._fp = open(self.out_path, "wb")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._fp:
            self._fp.close()
            self._fp = None

    def _write(self, record: EntryRecord) -> None:
        if not self._fp:
            raise RuntimeError("JsonLinesReporter not initialised")
        row = record.to_dict()
        row["path"] = utf8_path(record.path)
        self._fp.write(orjson.dumps(row, option=orjson.OPT_APPEND_NEWLINE))
        self._fp.flush()

    def __repr__(self) -> str:
        return f"<JsonLinesReporter path='{self.out_path}'>"
