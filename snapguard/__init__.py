"""
snapguard — Snapshot & rollback engine for automated platform deployments.

snapguard sits between a deployment orchestrator and a managed platform
(Salesforce-style orgs), making deployments reversible:

- Pre-deployment snapshots of every component about to be touched
- Durable, directory-per-snapshot storage with manifests
- Single-deploy restore of captured state, guarded by environment checks
- Per-environment retention of old snapshots
- Bounded history and rollback audit logs

Quick Start::

    from snapguard import RollbackEngine
    from snapguard.adapters import SfCliDeployAdapter, SfCliMetadataProvider

    engine = RollbackEngine.default(SfCliMetadataProvider(), SfCliDeployAdapter())

    snapshot = engine.capture(
        {"apex": {"AccountService.cls": new_source}},
        target_environment="dev-sandbox",
        deployment_id="deploy-42",
    )
    # ... deploy, run tests ...
    result = engine.restore(snapshot.id, "dev-sandbox")

:license: Apache-2.0
"""

from snapguard.adapters.base import DeployAdapter, MetadataProvider
from snapguard.core.engine import RollbackEngine
from snapguard.core.models import (
    BundleItem,
    ComponentDescriptor,
    ComponentRecord,
    DeployResult,
    EngineMetrics,
    FetchedComponent,
    HistoryEntry,
    RestoreBundle,
    RollbackResult,
    Snapshot,
    SnapshotStatus,
    SnapshotSummary,
)
from snapguard.rollback.store import SnapshotStore

__version__ = "0.1.0"
__license__ = "Apache-2.0"

__all__ = [
    # Main class
    "RollbackEngine",
    "SnapshotStore",
    # Enums
    "SnapshotStatus",
    # Data models
    "ComponentDescriptor",
    "ComponentRecord",
    "Snapshot",
    "SnapshotSummary",
    "HistoryEntry",
    "RollbackResult",
    "FetchedComponent",
    "BundleItem",
    "RestoreBundle",
    "DeployResult",
    "EngineMetrics",
    # Extension bases
    "MetadataProvider",
    "DeployAdapter",
    # Version
    "__version__",
]
