"""
RollbackEngine — Main Engine Class
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

The primary entry point for snapguard. Assembles the snapshot store,
capturer, restore engine, retention manager and bounded logs around one
explicit store handle, and exposes the API the deployment orchestrator
calls.
"""

from __future__ import annotations

import asyncio
import logging

from snapguard.adapters.base import DeployAdapter, MetadataProvider
from snapguard.config.defaults import DEFAULT_CONFIG
from snapguard.config.loader import load_config, load_config_from_dict
from snapguard.config.schema import EngineConfig
from snapguard.core.artifacts import ArtifactSet
from snapguard.core.models import (
    EngineMetrics,
    HistoryEntry,
    RollbackResult,
    Snapshot,
    SnapshotStatus,
    SnapshotSummary,
)
from snapguard.exceptions import SnapshotNotFoundError
from snapguard.observability.metrics import MetricsCollector
from snapguard.rollback.capturer import SnapshotCapturer
from snapguard.rollback.ledger import HistoryLedger, RollbackLog
from snapguard.rollback.restorer import RestoreEngine
from snapguard.rollback.retention import RetentionManager
from snapguard.rollback.store import SnapshotStore

__all__ = ["RollbackEngine"]

logger = logging.getLogger(__name__)


class RollbackEngine:
    """
    Main snapguard class — entry point for snapshot and rollback operations.

    The engine does not lock environments. Callers must serialize capture
    and restore against the same target environment.
    """

    def __init__(
        self,
        provider: MetadataProvider,
        deployer: DeployAdapter,
        config: EngineConfig | None = None,
        store: SnapshotStore | None = None,
    ) -> None:
        self._config = config or EngineConfig()
        self._provider = provider
        self._deployer = deployer

        # ── Subsystems ────────────────────────────────────────────
        self._store = store or SnapshotStore(self._config.store)
        self._metrics = MetricsCollector()
        self._history = HistoryLedger(
            self._store, max_entries=self._config.store.history_max_entries
        )
        self._rollback_log = RollbackLog(
            self._store, max_entries=self._config.store.rollback_log_max_entries
        )
        self._capturer = SnapshotCapturer(
            store=self._store,
            ledger=self._history,
            provider=provider,
            config=self._config,
            metrics=self._metrics,
        )
        self._restorer = RestoreEngine(
            store=self._store,
            rollback_log=self._rollback_log,
            deployer=deployer,
            config=self._config,
            metrics=self._metrics,
        )
        self._retention = RetentionManager(
            self._store,
            max_per_environment=self._config.retention.max_snapshots_per_environment,
            metrics=self._metrics,
        )

    # ── Class Methods (constructors) ──────────────────────────────

    @classmethod
    def from_config(
        cls, path: str, provider: MetadataProvider, deployer: DeployAdapter
    ) -> RollbackEngine:
        """
        Create a RollbackEngine from a YAML config file.

        Args:
            path: Path to snapguard.yaml.
            provider: Reads current component state.
            deployer: Pushes restore bundles.

        Returns:
            Configured RollbackEngine instance.
        """
        config = load_config(path)
        return cls(provider, deployer, config=config)

    @classmethod
    def default(
        cls, provider: MetadataProvider, deployer: DeployAdapter
    ) -> RollbackEngine:
        """Create a RollbackEngine with default settings."""
        config = load_config_from_dict(DEFAULT_CONFIG)
        return cls(provider, deployer, config=config)

    # ── Properties ─────────────────────────────────────────────────

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def store(self) -> SnapshotStore:
        return self._store

    # ── Primary API: Capture ──────────────────────────────────────

    def capture(
        self,
        artifact_set: ArtifactSet,
        target_environment: str,
        deployment_id: str,
    ) -> Snapshot:
        """
        Snapshot every component in ``artifact_set`` before deploying it.

        Returns:
            The Snapshot; inspect ``status`` for ``failed``.

        Raises:
            ArtifactValidationError: If the artifact set is malformed.
        """
        snapshot = self._capturer.capture(artifact_set, target_environment, deployment_id)
        if (
            snapshot.status == SnapshotStatus.CREATED
            and self._config.retention.enforce_after_capture
        ):
            self.enforce_retention()
        return snapshot

    async def capture_async(
        self,
        artifact_set: ArtifactSet,
        target_environment: str,
        deployment_id: str,
    ) -> Snapshot:
        """Async version of capture."""
        return await asyncio.to_thread(
            self.capture, artifact_set, target_environment, deployment_id
        )

    # ── Primary API: Restore ──────────────────────────────────────

    def restore(self, snapshot_id: str, target_environment: str) -> RollbackResult:
        """
        Redeploy a snapshot's captured state.

        Raises:
            SnapshotNotFoundError: If the snapshot is not in the store.
        """
        return self._restorer.restore(snapshot_id, target_environment)

    async def restore_async(
        self, snapshot_id: str, target_environment: str
    ) -> RollbackResult:
        """Async version of restore."""
        return await asyncio.to_thread(self.restore, snapshot_id, target_environment)

    def restore_latest(self, target_environment: str) -> RollbackResult:
        """
        Restore the newest restorable snapshot for an environment.

        Raises:
            SnapshotNotFoundError: If the environment has no snapshot.
        """
        latest = self.get_latest_snapshot(target_environment)
        if latest is None:
            raise SnapshotNotFoundError(
                f"No snapshot available for rollback in {target_environment}",
                what_happened=(
                    f"No restorable snapshot exists for environment "
                    f"{target_environment}."
                ),
            )
        return self.restore(latest.snapshot_id, target_environment)

    # ── Primary API: Queries ──────────────────────────────────────

    def list_snapshots(
        self, target_environment: str | None = None
    ) -> list[SnapshotSummary]:
        """
        List restorable snapshots, newest first.

        Reads the live store rather than the history ledger, so only
        snapshots that can still be restored are returned.
        """
        return [
            snapshot.summary()
            for snapshot in self._store.load_all()
            if snapshot.status == SnapshotStatus.CREATED
            and (
                target_environment is None
                or snapshot.target_environment == target_environment
            )
        ]

    def get_latest_snapshot(self, target_environment: str) -> SnapshotSummary | None:
        """Return the newest restorable snapshot for an environment, if any."""
        snapshots = self.list_snapshots(target_environment)
        return snapshots[0] if snapshots else None

    def get_snapshot(self, snapshot_id: str) -> Snapshot:
        """
        Load a snapshot's full manifest.

        Raises:
            SnapshotNotFoundError: If the snapshot is not in the store.
        """
        return self._store.load(snapshot_id)

    def get_history(self, target_environment: str | None = None) -> list[HistoryEntry]:
        """Return the snapshot creation audit trail, newest first."""
        return self._history.entries(target_environment)

    def get_rollback_log(self) -> list[RollbackResult]:
        """Return logged restore attempts, newest first."""
        return self._rollback_log.entries()

    # ── Primary API: Maintenance ──────────────────────────────────

    def enforce_retention(self) -> list[str]:
        """
        Evict snapshots beyond the per-environment retention limit.

        Returns:
            Ids of the evicted snapshots.
        """
        return self._retention.enforce()

    # ── Primary API: Observability ────────────────────────────────

    def get_metrics(self) -> EngineMetrics:
        """Get current metrics snapshot."""
        return self._metrics.to_engine_metrics()

    def __repr__(self) -> str:
        return (
            f"<RollbackEngine root={self._store.root_dir!r} "
            f"provider={self._provider!r} deployer={self._deployer!r}>"
        )
