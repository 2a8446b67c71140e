"""
Metrics
~~~~~~~

Prometheus-style counters for snapshot and restore operations.
"""

from __future__ import annotations

import threading

from snapguard.core.models import EngineMetrics

__all__ = ["MetricsCollector"]


class MetricsCollector:
    """
    Collects and exposes Prometheus-style counters.

    Thread-safe so async callers running operations in worker threads
    can share one collector.
    """

    def __init__(self) -> None:
        self._counters: dict[str, int] = {
            "snapshots_created": 0,
            "snapshots_failed": 0,
            "fetch_failures": 0,
            "restores": 0,
            "restore_failures": 0,
            "snapshots_evicted": 0,
        }
        self._lock = threading.RLock()

    def increment(self, name: str, amount: int = 1) -> None:
        """Increment a counter. Unknown names are ignored."""
        with self._lock:
            if name in self._counters:
                self._counters[name] += amount

    def get(self, name: str) -> int:
        with self._lock:
            return self._counters.get(name, 0)

    def to_engine_metrics(self) -> EngineMetrics:
        """Export as an EngineMetrics dataclass."""
        with self._lock:
            return EngineMetrics(**self._counters)

    def reset(self) -> None:
        """Reset all metrics."""
        with self._lock:
            for name in self._counters:
                self._counters[name] = 0
