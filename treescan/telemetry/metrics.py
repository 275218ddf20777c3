from __future__ import annotations

import threading
import math
from collections import Counter, defaultdict, deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Iterable, Tuple

from treescan.models import EntryKind, EntryRecord

# Percentiles are computed over the most recent samples per stage.
STAGE_SAMPLE_LIMIT: int = 10_000


def _percentile(sorted_values: List[float], p: float) -> float:
    if not sorted_values:
        return float("nan")
    k = (len(sorted_values) - 1) * (p / 100.0)
    f = math.floor(k)
    c = math.ceil(k)
    if f == c:
        return sorted_values[int(k)]
    d0 = sorted_values[f] * (c - k)
    d1 = sorted_values[c] * (k - f)
    return d0 + d1


def pct_summary(values: Iterable[float]) -> Dict[str, float]:
    vals = sorted(v for v in values if v is not None)
    if not vals:
        return {"count": 0, "min": float("nan"), "p50": float("nan"),
                "p95": float("nan"), "p99": float("nan"), "max": float("nan")}
    return {
        "count": len(vals),
        "min": vals[0],
        "p50": _percentile(vals, 50),
        "p95": _percentile(vals, 95),
        "p99": _percentile(vals, 99),
        "max": vals[-1],
    }


@dataclass
class Metrics:
    lock: threading.Lock = field(default_factory=threading.Lock)

    entries_reported: int = 0
    entries_by_kind: Counter[str] = field(default_factory=Counter)
    bytes_total: int = 0

    directories_scanned: int = 0
    directories_enqueued: int = 0
    enqueue_cancelled: int = 0
    overflow_items: int = 0

    # per-entry failures (skipped, never retried)
    stat_failures: int = 0
    list_failures: int = 0
    long_paths_skipped: int = 0

    # queue observations, filled in when the walk ends
    queue_high_water: int = 0
    final_pending: int = 0
    final_in_flight: int = 0

    # stage -> most recent durations, at most STAGE_SAMPLE_LIMIT each
    stage_durations: Dict[str, Deque[float]] = field(
        default_factory=lambda: defaultdict(lambda: deque(maxlen=STAGE_SAMPLE_LIMIT)))
    stage_counts: Counter[str] = field(default_factory=Counter)

    # error classification
    errors_by_type: Counter[str] = field(default_factory=Counter)

    def inc(self, attr: str, value: int = 1) -> None:
        with self.lock:
            setattr(self, attr, getattr(self, attr) + value)

    def observe_record(self, record: EntryRecord) -> None:
        with self.lock:
            self.entries_reported += 1
            self.entries_by_kind[record.kind.value] += 1
            if record.kind is EntryKind.REGULAR_FILE:
                self.bytes_total += record.size

    def observe_stage(self, stage: str, duration: float) -> None:
        with self.lock:
            self.stage_durations[stage].append(duration)
            self.stage_counts[stage] += 1

    def record_error(self, exc: BaseException) -> None:
        with self.lock:
            self.errors_by_type[type(exc).__name__] += 1

    def summary(self) -> Tuple[str, Dict]:
        with self.lock:
            stage_stats = {}
            for stage, durations in self.stage_durations.items():
                stats = pct_summary(durations)
                stats["count"] = self.stage_counts[stage]
                stage_stats[stage] = stats
            res = {
                "entries_reported": self.entries_reported,
                "entries_by_kind": dict(self.entries_by_kind),
                "bytes_total": self.bytes_total,
                "directories_scanned": self.directories_scanned,
                "directories_enqueued": self.directories_enqueued,
                "enqueue_cancelled": self.enqueue_cancelled,
                "overflow_items": self.overflow_items,
                "stat_failures": self.stat_failures,
                "list_failures": self.list_failures,
                "long_paths_skipped": self.long_paths_skipped,
                "queue_high_water": self.queue_high_water,
                "final_pending": self.final_pending,
                "final_in_flight": self.final_in_flight,
                "stage_stats": stage_stats,
                "errors_by_type": dict(self.errors_by_type),
            }

        lines = []
        lines.append("===== WALK SUMMARY =====")
        lines.append(f"Entries    : total={res['entries_reported']:,}  "
                     f"bytes={res['bytes_total'] / (1024*1024):.2f} MiB")
        for kind, count in sorted(res["entries_by_kind"].items()):
            lines.append(f"  {kind:14s} {count:,}")
        lines.append(f"Dirs       : scanned={res['directories_scanned']:,}  "
                     f"enqueued={res['directories_enqueued']:,}  "
                     f"overflow={res['overflow_items']:,}  "
                     f"cancelled={res['enqueue_cancelled']:,}")
        lines.append(f"Skipped    : stat={res['stat_failures']}  "
                     f"list={res['list_failures']}  "
                     f"long_path={res['long_paths_skipped']}")
        lines.append(f"Queue      : high_water={res['queue_high_water']}  "
                     f"pending={res['final_pending']}  "
                     f"in_flight={res['final_in_flight']}")
        lines.append("")
        lines.append("Per-stage timings (seconds):")
        for stage, stats in stage_stats.items():
            lines.append(
                f"  {stage:20s} "
                f"count={stats['count']:6d}  "
                f"min={stats['min']:.4f}  p50={stats['p50']:.4f}  "
                f"p95={stats['p95']:.4f}  p99={stats['p99']:.4f}  max={stats['max']:.4f}"
            )
        if res["errors_by_type"]:
            lines.append("")
            lines.append("Errors by type:")
            for k, v in sorted(res["errors_by_type"].items(), key=lambda kv: kv[1], reverse=True):
                lines.append(f"  {k}: {v}")

        return "\n".join(lines), res

    def stage_percentile(self, stage: str, p: float) -> float:
        with self.lock:
            vals = self.stage_durations.get(stage, [])
            if not vals:
                return float("nan")
            sorted_vals = sorted(vals)
            return _percentile(sorted_vals, p)
