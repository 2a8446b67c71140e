"""snapguard observability — operation metrics."""

from snapguard.observability.metrics import MetricsCollector

__all__ = ["MetricsCollector"]
