"""Reporter that buffers records and writes them to a local Apache Arrow IPC
file, one record batch per ``batch_size`` entries."""

from __future__ import annotations

import logging
from pathlib import Path
from time import perf_counter
from typing import Any, BinaryIO, List

import pyarrow as pa
import pyarrow.ipc as ipc

from ..models import EntryRecord
from .base import RecordReporter, utf8_path

logger = logging.getLogger(__name__)

SCHEMA = pa.schema([
    ("path", pa.string()),
    ("size", pa.int64()),
    ("type", pa.string()),
    ("permissions", pa.uint16()),
    ("mtime", pa.float64()),
])


class ArrowReporter(RecordReporter):
    def __init__(self, out_path: Path, *, batch_size: int = 10_000) -> None:
        super().__init__()
        self.out_path = out_path
        self.batch_size = max(1, batch_size)
        self._fp: BinaryIO | None = None
        self._writer: ipc.RecordBatchFileWriter | None = None
        self._columns: dict[str, List[Any]] = {name: [] for name in SCHEMA.names}
        self._rows = 0

    def __enter__(self) -> "ArrowReporter":
        self._fp = open(self.out_path, "wb")
        self._writer = ipc.new_file(self._fp, SCHEMA)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        try:
            if self._writer:
                with self._lock:
                    self._flush_locked()
                self._writer.close()
        finally:
            self._writer = None
            if self._fp:
                self._fp.close()
                self._fp = None
        logger.info("Wrote %d rows to %s", self._rows, self.out_path)

    def _write(self, record: EntryRecord) -> None:
        if not self._writer:
            raise RuntimeError("ArrowReporter not initialised")
        self._columns["path"].append(utf8_path(record.path))
        self._columns["size"].append(record.size)
        self._columns["type"].append(record.kind.value)
        self._columns["permissions"].append(record.permissions)
        self._columns["mtime"].append(record.mtime)
        if len(self._columns["path"]) >= self.batch_size:
            self._flush_locked()

    def _flush_locked(self) -> None:
        pending = len(self._columns["path"])
        if not pending or self._writer is None:
            return
        start = perf_counter()
        batch = pa.record_batch(
            [pa.array(self._columns[name], type=SCHEMA.field(name).type) for name in SCHEMA.names],
            schema=SCHEMA,
        )
        self._writer.write_batch(batch)
        self._rows += batch.num_rows
        for values in self._columns.values():
            values.clear()
        logger.debug("Flushed %d rows in %.3f s", pending, perf_counter() - start)

    def __repr__(self) -> str:
        return f"<ArrowReporter path='{self.out_path}'>"
