"""snapguard core module — data models, artifact boundary, and engine facade."""

from snapguard.core.models import (
    ComponentDescriptor,
    ComponentRecord,
    HistoryEntry,
    RollbackResult,
    Snapshot,
    SnapshotStatus,
    SnapshotSummary,
)

__all__ = [
    "SnapshotStatus",
    "ComponentDescriptor",
    "ComponentRecord",
    "Snapshot",
    "SnapshotSummary",
    "HistoryEntry",
    "RollbackResult",
]
