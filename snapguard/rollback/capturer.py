"""
Snapshot Capturer
~~~~~~~~~~~~~~~~~

Records the pre-existing remote state of every component a deployment
is about to touch, so the deployment can be reversed later.
"""

from __future__ import annotations

import logging
import time

from snapguard.adapters.base import MetadataProvider
from snapguard.config.schema import EngineConfig
from snapguard.core.artifacts import ArtifactSet, build_descriptors
from snapguard.core.models import (
    ComponentDescriptor,
    ComponentRecord,
    FetchedComponent,
    Snapshot,
    SnapshotStatus,
)
from snapguard.exceptions import SnapshotStoreError
from snapguard.observability.metrics import MetricsCollector
from snapguard.rollback.ledger import HistoryLedger
from snapguard.rollback.store import SnapshotStore

__all__ = ["SnapshotCapturer"]

logger = logging.getLogger(__name__)


class SnapshotCapturer:
    """
    Captures a Snapshot before a deployment.

    Components are processed one at a time. A provider failure for one
    component degrades it to "newly introduced" and never aborts the
    capture; only a storage failure marks the whole snapshot ``failed``.
    """

    def __init__(
        self,
        store: SnapshotStore,
        ledger: HistoryLedger,
        provider: MetadataProvider,
        config: EngineConfig | None = None,
        metrics: MetricsCollector | None = None,
    ) -> None:
        self._store = store
        self._ledger = ledger
        self._provider = provider
        self._config = config or EngineConfig()
        self._metrics = metrics or MetricsCollector()
        self._types = {c.type: c for c in self._config.components}

    def capture(
        self,
        artifact_set: ArtifactSet,
        target_environment: str,
        deployment_id: str,
    ) -> Snapshot:
        """
        Capture the current state of every component in ``artifact_set``.

        Args:
            artifact_set: Mapping of component group to
                ``{file_name: content}``, or ComponentDescriptors.
            target_environment: Environment the deployment will target.
            deployment_id: Identifier of the deployment being protected.

        Returns:
            The Snapshot. Callers must check ``status``: a storage
            failure yields ``failed`` rather than an exception.

        Raises:
            ArtifactValidationError: If the artifact set is malformed.
        """
        descriptors = build_descriptors(artifact_set, self._config.component_types())
        logger.info("Creating pre-deployment snapshot for %s", deployment_id)

        try:
            snapshot_id, created_at = self._store.allocate()
        except OSError as exc:
            logger.error("Failed to create snapshot directory: %s", exc)
            self._metrics.increment("snapshots_failed")
            return Snapshot(
                id=f"snapshot-{time.time_ns() // 1_000_000}",
                deployment_id=deployment_id,
                target_environment=target_environment,
                status=SnapshotStatus.FAILED,
                error=str(exc),
            )

        snapshot = Snapshot(
            id=snapshot_id,
            deployment_id=deployment_id,
            target_environment=target_environment,
            created_at=created_at,
        )

        try:
            for descriptor in descriptors:
                existing = self._fetch_current(descriptor, target_environment)
                snapshot.components.append(
                    self._record(snapshot.id, descriptor, existing)
                )

            self._store.save(snapshot)
            self._ledger.append(snapshot)
        except Exception as exc:
            logger.error("Failed to create snapshot %s: %s", snapshot.id, exc)
            snapshot.status = SnapshotStatus.FAILED
            snapshot.error = str(exc)
            self._persist_failure(snapshot)
            self._metrics.increment("snapshots_failed")
            return snapshot

        self._metrics.increment("snapshots_created")
        logger.info(
            "Snapshot created: %s with %d components",
            snapshot.id,
            len(snapshot.components),
        )
        return snapshot

    def _fetch_current(
        self, descriptor: ComponentDescriptor, environment: str
    ) -> FetchedComponent | None:
        """Query the provider, treating any error as "absent"."""
        try:
            return self._provider.fetch(descriptor.type, descriptor.name, environment)
        except Exception as exc:
            logger.warning(
                "Could not fetch existing %s %s: %s",
                descriptor.type,
                descriptor.name,
                exc,
            )
            self._metrics.increment("fetch_failures")
            return None

    def _record(
        self,
        snapshot_id: str,
        descriptor: ComponentDescriptor,
        existing: FetchedComponent | None,
    ) -> ComponentRecord:
        if existing is None:
            logger.debug("%s %s is newly introduced", descriptor.type, descriptor.name)
            return ComponentRecord(
                type=descriptor.type, name=descriptor.name, had_existing=False
            )

        type_cfg = self._types[descriptor.type]
        file_name = descriptor.file_name or f"{descriptor.name}{type_cfg.suffix or ''}"
        payload_ref = self._store.write_payload(
            snapshot_id, f"{type_cfg.directory}/{file_name}", existing.content
        )
        logger.debug("Captured %s %s", descriptor.type, descriptor.name)
        return ComponentRecord(
            type=descriptor.type,
            name=descriptor.name,
            had_existing=True,
            payload_ref=payload_ref,
            api_version=existing.api_version or self._config.restore.default_api_version,
        )

    def _persist_failure(self, snapshot: Snapshot) -> None:
        """Best-effort rewrite of the manifest with ``failed`` status."""
        try:
            self._store.save(snapshot)
        except SnapshotStoreError as exc:
            logger.error("Could not record failure for %s: %s", snapshot.id, exc)
