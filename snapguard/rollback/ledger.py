"""
History Ledger & Rollback Log
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

Two independent, size-bounded, append-only JSON logs kept next to the
snapshot directories. Entries are stored newest first; once a log is
full the oldest entry is evicted.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

from snapguard.core.models import HistoryEntry, RollbackResult, Snapshot, SnapshotStatus
from snapguard.exceptions import SnapshotStoreError
from snapguard.rollback.store import SnapshotStore, read_json, write_json_atomic

__all__ = ["BoundedJsonLog", "HistoryLedger", "RollbackLog"]

logger = logging.getLogger(__name__)


class BoundedJsonLog:
    """
    A JSON list file capped at ``max_entries``, newest entry first.
    """

    def __init__(self, path: str, max_entries: int) -> None:
        self._path = path
        self._max_entries = max_entries
        self._lock = threading.Lock()

    @property
    def path(self) -> str:
        return self._path

    @property
    def max_entries(self) -> int:
        return self._max_entries

    def read(self) -> list[dict[str, Any]]:
        """Return the raw entries, newest first."""
        try:
            data = read_json(self._path, default=[])
        except (OSError, ValueError) as exc:
            raise SnapshotStoreError(f"Unreadable log {self._path}: {exc}") from exc
        if not isinstance(data, list):
            raise SnapshotStoreError(f"Log {self._path} does not contain a list")
        return data

    def prepend(self, entry: dict[str, Any]) -> None:
        """Insert an entry at the head and evict beyond the cap."""
        with self._lock:
            entries = self.read()
            entries.insert(0, entry)
            # Evict oldest if over limit
            del entries[self._max_entries :]
            try:
                write_json_atomic(self._path, entries)
            except OSError as exc:
                raise SnapshotStoreError(
                    f"Failed to write log {self._path}: {exc}"
                ) from exc

    def __len__(self) -> int:
        return len(self.read())


class HistoryLedger:
    """
    Audit trail of snapshot creations.

    Only ``created`` snapshots are recorded. Entries are never pruned
    when retention evicts the underlying snapshot, so an entry may name
    a snapshot that is no longer restorable.
    """

    def __init__(self, store: SnapshotStore, max_entries: int = 100) -> None:
        self._log = BoundedJsonLog(store.history_path, max_entries)

    def append(self, snapshot: Snapshot) -> HistoryEntry:
        """Record a created snapshot."""
        if snapshot.status != SnapshotStatus.CREATED:
            raise ValueError(
                f"Only created snapshots enter the history ledger, "
                f"{snapshot.id} is {snapshot.status}"
            )
        entry = HistoryEntry.from_snapshot(snapshot)
        self._log.prepend(entry.to_dict())
        return entry

    def entries(self, target_environment: str | None = None) -> list[HistoryEntry]:
        """Return history entries, newest first, optionally for one environment."""
        entries = [HistoryEntry.from_dict(raw) for raw in self._log.read()]
        if target_environment is None:
            return entries
        return [e for e in entries if e.target_environment == target_environment]

    def __len__(self) -> int:
        return len(self._log)


class RollbackLog:
    """Record of every restore attempt and its outcome."""

    def __init__(self, store: SnapshotStore, max_entries: int = 50) -> None:
        self._log = BoundedJsonLog(store.rollback_log_path, max_entries)

    def append(self, result: RollbackResult) -> None:
        self._log.prepend(result.to_dict())

    def entries(self) -> list[RollbackResult]:
        """Return logged restore results, newest first."""
        return [RollbackResult.from_dict(raw) for raw in self._log.read()]

    def __len__(self) -> int:
        return len(self._log)
