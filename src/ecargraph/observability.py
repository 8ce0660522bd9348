"""In-process latency aggregates for conversion, load and schema operations."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from threading import Lock
from time import perf_counter

logger = logging.getLogger(__name__)


@dataclass
class OperationStats:
    """Running totals for one named operation."""

    count: int = 0
    error_count: int = 0
    total_ms: float = 0.0
    min_ms: float = 0.0
    max_ms: float = 0.0
    last_ms: float = 0.0

    def add(self, duration_ms: float, *, ok: bool) -> None:
        self.count += 1
        if not ok:
            self.error_count += 1
        self.total_ms += duration_ms
        self.last_ms = duration_ms
        if self.count == 1:
            self.min_ms = self.max_ms = duration_ms
        else:
            self.min_ms = min(self.min_ms, duration_ms)
            self.max_ms = max(self.max_ms, duration_ms)

    def as_dict(self) -> dict[str, float | int]:
        avg = self.total_ms / self.count if self.count else 0.0
        return {
            "count": self.count,
            "error_count": self.error_count,
            "total_ms": round(self.total_ms, 3),
            "avg_ms": round(avg, 3),
            "min_ms": round(self.min_ms, 3),
            "max_ms": round(self.max_ms, 3),
            "last_ms": round(self.last_ms, 3),
        }


_lock = Lock()
_stats: dict[str, OperationStats] = {}


def record_latency(*, operation: str, duration_ms: float, ok: bool = True) -> None:
    """Record one latency sample."""
    duration_ms = max(float(duration_ms), 0.0)
    with _lock:
        _stats.setdefault(operation, OperationStats()).add(duration_ms, ok=ok)
    logger.debug(
        "latency operation=%s duration_ms=%.3f ok=%s", operation, duration_ms, ok
    )


@contextmanager
def timed(operation: str) -> Iterator[None]:
    """Time the wrapped block; an escaping exception counts as an error."""
    start = perf_counter()
    ok = False
    try:
        yield
        ok = True
    finally:
        record_latency(
            operation=operation,
            duration_ms=(perf_counter() - start) * 1000,
            ok=ok,
        )


def latency_metrics_snapshot() -> dict[str, dict[str, float | int]]:
    """Return current in-process latency aggregates keyed by operation."""
    with _lock:
        return {name: stats.as_dict() for name, stats in sorted(_stats.items())}


def reset_latency_metrics() -> None:
    """Clear all latency aggregates (test helper)."""
    with _lock:
        _stats.clear()
