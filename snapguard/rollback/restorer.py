"""
Restore Engine
~~~~~~~~~~~~~~

Redeploys the captured pre-deployment state of a Snapshot to reverse a
deployment. Newly introduced components are only marked for follow-up
removal; this engine never issues destructive changes.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile

from snapguard.adapters.base import DeployAdapter
from snapguard.config.schema import EngineConfig
from snapguard.core.models import (
    BundleItem,
    RestoreBundle,
    RollbackResult,
    Snapshot,
    SnapshotStatus,
)
from snapguard.exceptions import (
    EnvironmentMismatchError,
    RestoreDeployError,
    RollbackError,
    SnapshotStoreError,
)
from snapguard.observability.metrics import MetricsCollector
from snapguard.rollback.ledger import RollbackLog
from snapguard.rollback.store import SnapshotStore

__all__ = ["RestoreEngine"]

logger = logging.getLogger(__name__)


class RestoreEngine:
    """
    Restores a Snapshot with a single deploy call.

    Every attempt, successful or not, is appended to the rollback log.
    There is no retry and no undo of a failed restore.
    """

    def __init__(
        self,
        store: SnapshotStore,
        rollback_log: RollbackLog,
        deployer: DeployAdapter,
        config: EngineConfig | None = None,
        metrics: MetricsCollector | None = None,
    ) -> None:
        self._store = store
        self._rollback_log = rollback_log
        self._deployer = deployer
        self._config = config or EngineConfig()
        self._metrics = metrics or MetricsCollector()

    def restore(self, snapshot_id: str, target_environment: str) -> RollbackResult:
        """
        Restore a snapshot to ``target_environment``.

        Args:
            snapshot_id: The snapshot to restore.
            target_environment: Environment to redeploy into. Must match
                the environment the snapshot was captured from.

        Returns:
            A RollbackResult. ``restored`` lists the components sent to
            the deploy adapter even when the deploy fails.

        Raises:
            SnapshotNotFoundError: If the store has no such snapshot.
        """
        logger.info("Executing rollback to snapshot: %s", snapshot_id)
        result = RollbackResult(snapshot_id=snapshot_id)

        try:
            snapshot = self._store.load(snapshot_id)
        except SnapshotStoreError as exc:
            logger.error("Rollback failed: %s", exc)
            result.success = False
            result.error = str(exc)
            self._finish(result)
            return result

        workspace: str | None = None
        try:
            self._check_restorable(snapshot, target_environment)
            items = self._collect(snapshot, result)

            if items:
                workspace = self._make_workspace()
                bundle = RestoreBundle(
                    target_environment=target_environment,
                    items=items,
                    workspace=workspace,
                )
                self._deploy(bundle, target_environment)

            if result.failed:
                result.success = False
                result.error = (
                    "Could not read captured payload for: " + ", ".join(result.failed)
                )
        except EnvironmentMismatchError as exc:
            logger.warning("Rollback refused: %s", exc.what_happened)
            result.success = False
            result.error = exc.what_happened
        except RollbackError as exc:
            logger.warning("Rollback of %s failed: %s", snapshot_id, exc)
            result.success = False
            result.error = str(exc)
        except Exception as exc:
            logger.error("Rollback failed: %s", exc)
            result.success = False
            result.error = str(exc)
        finally:
            if workspace is not None:
                shutil.rmtree(workspace, ignore_errors=True)

        self._finish(result)
        return result

    def _check_restorable(self, snapshot: Snapshot, target_environment: str) -> None:
        if snapshot.status != SnapshotStatus.CREATED:
            raise RollbackError(
                f"Snapshot {snapshot.id} is {snapshot.status} and cannot be restored"
                + (f": {snapshot.error}" if snapshot.error else "")
            )
        if snapshot.target_environment != target_environment:
            raise EnvironmentMismatchError(
                f"Snapshot {snapshot.id} targets a different environment",
                snapshot_environment=snapshot.target_environment,
                requested_environment=target_environment,
            )

    def _collect(self, snapshot: Snapshot, result: RollbackResult) -> list[BundleItem]:
        """Build bundle items from every component that had prior state."""
        items: list[BundleItem] = []
        for record in snapshot.components:
            if not record.had_existing:
                # Destructive removal needs a separately authorized step.
                result.deleted.append(record.name)
                continue

            try:
                content = self._store.read_payload(snapshot.id, record.payload_ref)
            except SnapshotStoreError as exc:
                logger.error("Cannot restore %s %s: %s", record.type, record.name, exc)
                result.failed.append(record.name)
                continue

            items.append(
                BundleItem(
                    type=record.type,
                    name=record.name,
                    content=content,
                    api_version=record.api_version,
                    file_name=os.path.basename(record.payload_ref),
                )
            )
            result.restored.append(record.name)
        return items

    def _make_workspace(self) -> str:
        parent = self._config.restore.workspace_dir
        if parent:
            os.makedirs(parent, exist_ok=True)
        return tempfile.mkdtemp(prefix="rollback-", dir=parent)

    def _deploy(self, bundle: RestoreBundle, target_environment: str) -> None:
        try:
            outcome = self._deployer.deploy(bundle, target_environment)
        except Exception as exc:
            raise RestoreDeployError(f"Rollback deployment failed: {exc}") from exc

        if not outcome.success:
            message = "Rollback deployment failed"
            if outcome.details and outcome.details.get("message"):
                message = f"{message}: {outcome.details['message']}"
            raise RestoreDeployError(message, details=outcome.details)

    def _finish(self, result: RollbackResult) -> None:
        try:
            self._rollback_log.append(result)
        except SnapshotStoreError as exc:
            logger.error("Could not log rollback of %s: %s", result.snapshot_id, exc)

        self._metrics.increment("restores")
        if result.success:
            logger.info(
                "Rollback completed: %d restored, %d marked for deletion",
                len(result.restored),
                len(result.deleted),
            )
        else:
            self._metrics.increment("restore_failures")
