"""
Snapshot Store
~~~~~~~~~~~~~~

Durable, directory-per-snapshot storage for captured payloads and their
manifests. One store handle is constructed per root directory and passed
to every component that touches snapshot state.
"""

from __future__ import annotations

import json
import logging
import os
import re
import shutil
import tempfile
import time
from datetime import UTC, datetime, timedelta
from typing import Any

from snapguard.config.schema import StoreConfig
from snapguard.core.models import Snapshot
from snapguard.exceptions import SnapshotNotFoundError, SnapshotStoreError

__all__ = ["SnapshotStore", "read_json", "write_json_atomic"]

logger = logging.getLogger(__name__)

MANIFEST_NAME = "snapshot.json"
_SNAPSHOT_ID = re.compile(r"^snapshot-(\d+)$")


def write_json_atomic(path: str, data: Any) -> None:
    """Write JSON to ``path`` via a temp file and ``os.replace``."""
    directory = os.path.dirname(path) or "."
    fd, tmp_path = tempfile.mkstemp(prefix=".tmp-", suffix=".json", dir=directory)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, default=str)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    finally:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)


def read_json(path: str, default: Any = None) -> Any:
    """Read JSON from ``path``, returning ``default`` if it does not exist."""
    if not os.path.exists(path):
        return default
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def _sort_key(snapshot: Snapshot) -> tuple[datetime, int]:
    match = _SNAPSHOT_ID.match(snapshot.id)
    return snapshot.created_at, int(match.group(1)) if match else 0


class SnapshotStore:
    """
    Owns every snapshot directory under ``root_dir``.

    Layout::

        <root_dir>/snapshot-<millis>/snapshot.json
        <root_dir>/snapshot-<millis>/<directory>/<file_name>
        <root_dir>/<history_file>
        <root_dir>/<rollback_log_file>
    """

    def __init__(self, config: StoreConfig | None = None, root_dir: str | None = None) -> None:
        self._config = config or StoreConfig()
        self._root_dir = os.path.abspath(root_dir or self._config.root_dir)
        os.makedirs(self._root_dir, exist_ok=True)

    @property
    def root_dir(self) -> str:
        return self._root_dir

    @property
    def history_path(self) -> str:
        return os.path.join(self._root_dir, self._config.history_file)

    @property
    def rollback_log_path(self) -> str:
        return os.path.join(self._root_dir, self._config.rollback_log_file)

    def snapshot_dir(self, snapshot_id: str) -> str:
        if not _SNAPSHOT_ID.match(snapshot_id):
            raise SnapshotNotFoundError(
                f"Invalid snapshot id: {snapshot_id!r}", snapshot_id=snapshot_id
            )
        return os.path.join(self._root_dir, snapshot_id)

    # ── Allocation ────────────────────────────────────────────────

    def allocate(self, now_ms: int | None = None) -> tuple[str, datetime]:
        """
        Reserve a new snapshot directory.

        The id encodes the creation epoch in milliseconds. If that
        millisecond is already taken, it advances until a free one is
        found, so ids are unique and strictly ordered by creation.

        Returns:
            The snapshot id and its creation time.
        """
        millis = now_ms if now_ms is not None else time.time_ns() // 1_000_000
        while True:
            snapshot_id = f"snapshot-{millis}"
            try:
                os.mkdir(os.path.join(self._root_dir, snapshot_id))
            except FileExistsError:
                millis += 1
                continue
            created_at = datetime.fromtimestamp(millis // 1000, UTC) + timedelta(
                milliseconds=millis % 1000
            )
            return snapshot_id, created_at

    # ── Payloads ──────────────────────────────────────────────────

    def _payload_path(self, snapshot_id: str, payload_ref: str) -> str:
        base = self.snapshot_dir(snapshot_id)
        path = os.path.normpath(os.path.join(base, payload_ref))
        if os.path.commonpath([base, path]) != base or path == base:
            raise SnapshotStoreError(
                f"Payload reference escapes snapshot directory: {payload_ref!r}"
            )
        return path

    def write_payload(self, snapshot_id: str, payload_ref: str, content: str) -> str:
        """Persist a payload verbatim and return its reference."""
        path = self._payload_path(snapshot_id, payload_ref)
        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(path, "w", encoding="utf-8", newline="") as f:
                f.write(content)
        except OSError as exc:
            raise SnapshotStoreError(
                f"Failed to write payload {payload_ref} for {snapshot_id}: {exc}"
            ) from exc
        return payload_ref

    def read_payload(self, snapshot_id: str, payload_ref: str) -> str:
        """Read a captured payload back."""
        path = self._payload_path(snapshot_id, payload_ref)
        try:
            with open(path, encoding="utf-8", newline="") as f:
                return f.read()
        except OSError as exc:
            raise SnapshotStoreError(
                f"Failed to read payload {payload_ref} for {snapshot_id}: {exc}"
            ) from exc

    # ── Manifests ─────────────────────────────────────────────────

    def save(self, snapshot: Snapshot) -> None:
        """Persist a snapshot's manifest."""
        path = os.path.join(self.snapshot_dir(snapshot.id), MANIFEST_NAME)
        try:
            write_json_atomic(path, snapshot.to_dict())
        except OSError as exc:
            raise SnapshotStoreError(
                f"Failed to write manifest for {snapshot.id}: {exc}"
            ) from exc

    def exists(self, snapshot_id: str) -> bool:
        if not _SNAPSHOT_ID.match(snapshot_id):
            return False
        return os.path.exists(
            os.path.join(self._root_dir, snapshot_id, MANIFEST_NAME)
        )

    def load(self, snapshot_id: str) -> Snapshot:
        """
        Load a snapshot manifest.

        Raises:
            SnapshotNotFoundError: If no manifest exists for the id.
            SnapshotStoreError: If the manifest is unreadable.
        """
        if not self.exists(snapshot_id):
            raise SnapshotNotFoundError(
                f"Snapshot not found: {snapshot_id}", snapshot_id=snapshot_id
            )
        path = os.path.join(self.snapshot_dir(snapshot_id), MANIFEST_NAME)
        try:
            return Snapshot.from_dict(read_json(path))
        except (OSError, ValueError, KeyError, TypeError) as exc:
            raise SnapshotStoreError(
                f"Corrupt manifest for {snapshot_id}: {exc}"
            ) from exc

    def load_all(self) -> list[Snapshot]:
        """
        Return every snapshot with a readable manifest, newest first.

        Directories without a manifest (capture in progress or crashed)
        and unreadable manifests are skipped.
        """
        snapshots: list[Snapshot] = []
        for entry in sorted(os.listdir(self._root_dir)):
            if not _SNAPSHOT_ID.match(entry) or not self.exists(entry):
                continue
            try:
                snapshots.append(self.load(entry))
            except SnapshotStoreError as exc:
                logger.warning("Skipping snapshot %s: %s", entry, exc)
        snapshots.sort(key=_sort_key, reverse=True)
        return snapshots

    def delete(self, snapshot_id: str) -> None:
        """Permanently remove a snapshot directory and everything in it."""
        path = self.snapshot_dir(snapshot_id)
        try:
            shutil.rmtree(path)
        except FileNotFoundError:
            logger.debug("Snapshot %s already removed", snapshot_id)
        except OSError as exc:
            raise SnapshotStoreError(
                f"Failed to delete snapshot {snapshot_id}: {exc}"
            ) from exc
