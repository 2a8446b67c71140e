"""snapguard rollback system — snapshot capture, storage, and restoration."""

from snapguard.rollback.capturer import SnapshotCapturer
from snapguard.rollback.ledger import BoundedJsonLog, HistoryLedger, RollbackLog
from snapguard.rollback.restorer import RestoreEngine
from snapguard.rollback.retention import RetentionManager
from snapguard.rollback.store import SnapshotStore

__all__ = [
    "SnapshotStore",
    "SnapshotCapturer",
    "RestoreEngine",
    "RetentionManager",
    "HistoryLedger",
    "RollbackLog",
    "BoundedJsonLog",
]
