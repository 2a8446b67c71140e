"""
Retention Manager
~~~~~~~~~~~~~~~~~

Evicts old snapshot payloads beyond a per-environment retention limit.
"""

from __future__ import annotations

import logging
from collections import defaultdict

from snapguard.core.models import Snapshot, SnapshotStatus
from snapguard.observability.metrics import MetricsCollector
from snapguard.rollback.store import SnapshotStore

__all__ = ["RetentionManager"]

logger = logging.getLogger(__name__)


class RetentionManager:
    """
    Keeps the newest ``max_per_environment`` created snapshots for each
    target environment and permanently deletes the rest.

    History ledger entries are left untouched, so the ledger can outlive
    the payloads it describes.
    """

    def __init__(
        self,
        store: SnapshotStore,
        max_per_environment: int = 10,
        metrics: MetricsCollector | None = None,
    ) -> None:
        if max_per_environment < 1:
            raise ValueError("max_per_environment must be at least 1")
        self._store = store
        self._max_per_environment = max_per_environment
        self._metrics = metrics or MetricsCollector()

    @property
    def max_per_environment(self) -> int:
        return self._max_per_environment

    def enforce(self) -> list[str]:
        """
        Apply the retention limit to every environment independently.

        Returns:
            Ids of the evicted snapshots.
        """
        by_environment: dict[str, list[Snapshot]] = defaultdict(list)
        # load_all() is already newest first
        for snapshot in self._store.load_all():
            if snapshot.status == SnapshotStatus.CREATED:
                by_environment[snapshot.target_environment].append(snapshot)

        evicted: list[str] = []
        for environment, snapshots in by_environment.items():
            for snapshot in snapshots[self._max_per_environment :]:
                self._store.delete(snapshot.id)
                evicted.append(snapshot.id)
                logger.info(
                    "Cleaned up old snapshot: %s (%s)", snapshot.id, environment
                )

        if evicted:
            self._metrics.increment("snapshots_evicted", len(evicted))
        return evicted
