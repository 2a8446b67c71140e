"""
snapguard Snapshot & Rollback Data Models
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

Defines the dataclasses that flow through capture and restore:
ComponentDescriptor (input), Snapshot and ComponentRecord (persisted
state), RollbackResult (output), and supporting types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

__all__ = [
    "SnapshotStatus",
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
]


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SnapshotStatus(StrEnum):
    """
    Lifecycle state of a Snapshot.

    - CREATED: every component was processed and the manifest persisted.
    - FAILED: persisting snapshot state failed; not restorable.
    """

    CREATED = "created"
    FAILED = "failed"


@dataclass(frozen=True)
class ComponentDescriptor:
    """
    One validated deployable unit from an artifact set.

    Attributes:
        type: Platform component type, e.g. "ApexClass".
        name: Component API name, e.g. "AccountService".
        content: The new content about to be deployed.
        file_name: Original file name, used for the payload file.
    """

    type: str
    name: str
    content: str
    file_name: str = ""


@dataclass
class ComponentRecord:
    """
    Pre-deployment state of one component inside a Snapshot.

    A record either had existing remote state (payload and API version
    captured) or is newly introduced by the deployment (neither captured).

    Attributes:
        type: Platform component type.
        name: Component API name.
        had_existing: Whether the component existed before the deployment.
        payload_ref: Payload path relative to the snapshot directory.
        api_version: API version of the captured component.
    """

    type: str
    name: str
    had_existing: bool
    payload_ref: str | None = None
    api_version: str | None = None

    def __post_init__(self) -> None:
        captured = self.payload_ref is not None and self.api_version is not None
        uncaptured = self.payload_ref is None and self.api_version is None
        if self.had_existing and not captured:
            raise ValueError(
                f"Existing component {self.name} needs payload_ref and api_version"
            )
        if not self.had_existing and not uncaptured:
            raise ValueError(
                f"New component {self.name} cannot carry payload_ref or api_version"
            )

    @property
    def is_new(self) -> bool:
        """Return True if the deployment introduced this component."""
        return not self.had_existing

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-safe dictionary."""
        data: dict[str, Any] = {
            "type": self.type,
            "name": self.name,
            "had_existing": self.had_existing,
        }
        if self.had_existing:
            data["payload_ref"] = self.payload_ref
            data["api_version"] = self.api_version
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ComponentRecord:
        return cls(
            type=data["type"],
            name=data["name"],
            had_existing=bool(data["had_existing"]),
            payload_ref=data.get("payload_ref"),
            api_version=data.get("api_version"),
        )


@dataclass
class Snapshot:
    """
    Captured pre-deployment state of a set of components for one
    target environment.

    Created once per deployment attempt and never mutated after it
    reaches ``created``; retention may delete it wholesale.
    """

    id: str
    deployment_id: str
    target_environment: str
    created_at: datetime = field(default_factory=_utcnow)
    components: list[ComponentRecord] = field(default_factory=list)
    status: SnapshotStatus = SnapshotStatus.CREATED
    error: str | None = None

    @property
    def is_restorable(self) -> bool:
        return self.status == SnapshotStatus.CREATED

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-safe dictionary."""
        return {
            "id": self.id,
            "deployment_id": self.deployment_id,
            "target_environment": self.target_environment,
            "created_at": self.created_at.isoformat(),
            "components": [c.to_dict() for c in self.components],
            "status": self.status.value,
            "error": self.error,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Snapshot:
        return cls(
            id=data["id"],
            deployment_id=data["deployment_id"],
            target_environment=data["target_environment"],
            created_at=datetime.fromisoformat(data["created_at"]),
            components=[ComponentRecord.from_dict(c) for c in data["components"]],
            status=SnapshotStatus(data["status"]),
            error=data.get("error"),
        )

    def summary(self) -> SnapshotSummary:
        """Project this snapshot onto the listing view."""
        return SnapshotSummary(
            snapshot_id=self.id,
            deployment_id=self.deployment_id,
            target_environment=self.target_environment,
            created_at=self.created_at,
            component_count=len(self.components),
        )


@dataclass(frozen=True)
class SnapshotSummary:
    """Listing view of a restorable snapshot."""

    snapshot_id: str
    deployment_id: str
    target_environment: str
    created_at: datetime
    component_count: int


@dataclass
class HistoryEntry:
    """
    Lightweight audit projection of a created Snapshot.

    Lives in the History Ledger independently of the snapshot payloads,
    so it may reference a snapshot that retention has since evicted.
    """

    snapshot_id: str
    deployment_id: str
    target_environment: str
    created_at: datetime
    component_count: int
    components: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot) -> HistoryEntry:
        return cls(
            snapshot_id=snapshot.id,
            deployment_id=snapshot.deployment_id,
            target_environment=snapshot.target_environment,
            created_at=snapshot.created_at,
            component_count=len(snapshot.components),
            components=[
                {"type": c.type, "name": c.name, "is_new": c.is_new}
                for c in snapshot.components
            ],
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-safe dictionary."""
        return {
            "snapshot_id": self.snapshot_id,
            "deployment_id": self.deployment_id,
            "target_environment": self.target_environment,
            "created_at": self.created_at.isoformat(),
            "component_count": self.component_count,
            "components": [dict(c) for c in self.components],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HistoryEntry:
        return cls(
            snapshot_id=data["snapshot_id"],
            deployment_id=data["deployment_id"],
            target_environment=data["target_environment"],
            created_at=datetime.fromisoformat(data["created_at"]),
            component_count=int(data["component_count"]),
            components=list(data.get("components", [])),
        )


@dataclass
class RollbackResult:
    """
    Outcome of a single restore attempt.

    Attributes:
        snapshot_id: The snapshot that was restored.
        timestamp: When the attempt started.
        restored: Components included in the restore deployment.
        deleted: Newly introduced components marked for follow-up
            removal. Nothing listed here was actually removed.
        failed: Components whose captured payload could not be read.
        success: Whether the attempt fully succeeded.
        error: Human-readable reason when ``success`` is False.
    """

    snapshot_id: str
    timestamp: datetime = field(default_factory=_utcnow)
    restored: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    success: bool = True
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-safe dictionary."""
        return {
            "snapshot_id": self.snapshot_id,
            "timestamp": self.timestamp.isoformat(),
            "restored": list(self.restored),
            "deleted": list(self.deleted),
            "failed": list(self.failed),
            "success": self.success,
            "error": self.error,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RollbackResult:
        return cls(
            snapshot_id=data["snapshot_id"],
            timestamp=datetime.fromisoformat(data["timestamp"]),
            restored=list(data.get("restored", [])),
            deleted=list(data.get("deleted", [])),
            failed=list(data.get("failed", [])),
            success=bool(data["success"]),
            error=data.get("error"),
        )


@dataclass(frozen=True)
class FetchedComponent:
    """Current remote state of a component, as reported by a MetadataProvider."""

    content: str
    api_version: str | None = None


@dataclass(frozen=True)
class BundleItem:
    """One component in a restore bundle."""

    type: str
    name: str
    content: str
    api_version: str
    file_name: str = ""


@dataclass
class RestoreBundle:
    """
    Everything a DeployAdapter needs to redeploy captured state.

    ``workspace`` is a scratch directory owned by the restore engine;
    adapters may materialize files there. It is removed after deploy.
    """

    target_environment: str
    items: list[BundleItem] = field(default_factory=list)
    workspace: str | None = None

    @property
    def names(self) -> list[str]:
        return [item.name for item in self.items]

    def __len__(self) -> int:
        return len(self.items)


@dataclass
class DeployResult:
    """Outcome reported by a DeployAdapter."""

    success: bool
    id: str | None = None
    details: dict[str, Any] | None = None


@dataclass
class EngineMetrics:
    """Prometheus-style metrics snapshot."""

    snapshots_created: int = 0
    snapshots_failed: int = 0
    fetch_failures: int = 0
    restores: int = 0
    restore_failures: int = 0
    snapshots_evicted: int = 0

    def to_prometheus(self) -> str:
        """Render as Prometheus text exposition format."""
        lines: list[str] = [
            f"snapguard_snapshots_created {self.snapshots_created}",
            f"snapguard_snapshots_failed {self.snapshots_failed}",
            f"snapguard_fetch_failures {self.fetch_failures}",
            f"snapguard_restores {self.restores}",
            f"snapguard_restore_failures {self.restore_failures}",
            f"snapguard_snapshots_evicted {self.snapshots_evicted}",
        ]
        return "\n".join(lines) + "\n"
