"""Shared fixtures for the walk tests."""

from __future__ import annotations

import os
import threading
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pytest

from treescan.config import Config
from treescan.models import EntryRecord
from treescan.reporters.base import RecordReporter


class MemoryReporter(RecordReporter):
    """Keeps every record in memory; ``on_record`` runs after each one."""

    def __init__(self, on_record: Optional[Callable[[EntryRecord], None]] = None) -> None:
        super().__init__()
        self.records: List[EntryRecord] = []
        self.on_record = on_record
        self.opened = False
        self.closed = False

    def __enter__(self) -> "MemoryReporter":
        self.opened = True
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.closed = True

    def _write(self, record: EntryRecord) -> None:
        self.records.append(record)
        if self.on_record is not None:
            self.on_record(record)

    @property
    def paths(self) -> List[str]:
        return sorted(r.path for r in self.records)


def build_tree(root: Path, layout: Dict[str, Any]) -> None:
    """Create ``layout`` under ``root``: dicts are directories, strings file bodies."""
    for name, value in layout.items():
        path = root / name
        if isinstance(value, dict):
            path.mkdir()
            build_tree(path, value)
        else:
            path.write_text(value)


def count_entries(root: Path) -> int:
    """Number of entries below ``root`` as seen by os.walk."""
    return sum(len(dirs) + len(files) for _, dirs, files in os.walk(root))


def call_with_timeout(fn: Callable[..., Any], *args: Any, timeout: float = 30.0, **kwargs: Any) -> Any:
    """Run ``fn`` on a helper thread and fail the test if it does not return."""
    outcome: Dict[str, Any] = {}

    def target() -> None:
        try:
            outcome["value"] = fn(*args, **kwargs)
        except BaseException as exc:  # re-raised on the test thread
            outcome["error"] = exc

    thread = threading.Thread(target=target, name="walk-under-test", daemon=True)
    thread.start()
    thread.join(timeout)
    assert not thread.is_alive(), f"{fn.__name__} did not return within {timeout}s"
    if "error" in outcome:
        raise outcome["error"]
    return outcome.get("value")


@pytest.fixture
def make_config(tmp_path: Path) -> Callable[..., Config]:
    def _make(root: Path, **overrides: Any) -> Config:
        values: Dict[str, Any] = dict(
            root=root,
            output=tmp_path / "out.txt",
            workers=4,
            queue_size=16,
            max_path_length=4096,
            output_format="text",
            status_interval=0.0,
        )
        values.update(overrides)
        return Config(**values)
    return _make


@pytest.fixture
def reporter() -> MemoryReporter:
    return MemoryReporter()


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in (
        "TREESCAN_WORKERS",
        "TREESCAN_QUEUE_SIZE",
        "TREESCAN_FORMAT",
        "TREESCAN_MAX_PATH",
        "TREESCAN_STATUS_INTERVAL",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
