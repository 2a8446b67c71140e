"""
snapguard Custom Exceptions
~~~~~~~~~~~~~~~~~~~~~~~~~~~

All custom exception classes for snapguard, organized by domain.
Every distinct failure mode has its own exception type.

**Structured Error Messages**

Precondition errors that reach the caller provide three structured fields:
- ``what_happened``: Clear plain-English description
- ``check_failed``: Name of the check that rejected the request
- ``how_to_fix``: Concrete, actionable steps
"""

__all__ = [
    # Base
    "SnapGuardError",
    # Config
    "ConfigError",
    "ConfigFileNotFoundError",
    "ConfigValidationError",
    # Artifacts
    "ArtifactValidationError",
    # Snapshot
    "SnapshotError",
    "SnapshotNotFoundError",
    "SnapshotStoreError",
    # Rollback
    "RollbackError",
    "EnvironmentMismatchError",
    "RestoreDeployError",
    # Adapter
    "AdapterError",
    "MetadataFetchError",
    "DeployCommandError",
]


# ── Formatting Helper ────────────────────────────────────────────────────────

_SEPARATOR = "─" * 52


def _format_structured_error(
    title: str,
    what_happened: str,
    check_failed: str,
    how_to_fix: str,
) -> str:
    """Build a rich, structured error message."""
    lines = [
        f"  {title}",
        f"  {_SEPARATOR}",
        "  What happened:",
        *[f"    {line}" for line in what_happened.strip().splitlines()],
        "",
        "  Check failed:",
        f"    {check_failed}",
        "",
        "  How to fix:",
        *[f"    {line}" for line in how_to_fix.strip().splitlines()],
    ]
    return "\n".join(lines)


# ── Base Exception ───────────────────────────────────────────────────────────


class SnapGuardError(Exception):
    """Base exception for all snapguard errors."""

    def __init__(self, message: str = "", details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


# ── Config Exceptions ────────────────────────────────────────────────────────


class ConfigError(SnapGuardError):
    """Base exception for configuration-related errors."""


class ConfigFileNotFoundError(ConfigError):
    """Raised when a configuration file cannot be found at the specified path."""


class ConfigValidationError(ConfigError):
    """Raised when configuration values fail validation."""


# ── Artifact Exceptions ──────────────────────────────────────────────────────


class ArtifactValidationError(SnapGuardError):
    """Raised when an artifact set is malformed before capture begins."""


# ── Snapshot Exceptions ──────────────────────────────────────────────────────


class SnapshotError(SnapGuardError):
    """Base exception for snapshot errors."""


class SnapshotNotFoundError(SnapshotError):
    """
    Raised when a snapshot id is unknown to the snapshot store.

    This is the only error ``restore`` lets escape: the id was never
    created, or retention has already evicted it.
    """

    def __init__(
        self,
        message: str = "Snapshot not found",
        snapshot_id: str = "",
        details: dict | None = None,
        what_happened: str = "",
        check_failed: str = "snapshot_store",
        how_to_fix: str = "",
    ) -> None:
        self.snapshot_id = snapshot_id
        self.what_happened = what_happened or (
            f'No restorable snapshot "{snapshot_id}" exists in the store.'
        )
        self.check_failed = check_failed
        self.how_to_fix = how_to_fix or (
            "1. List restorable snapshots with engine.list_snapshots()\n"
            "2. History entries may outlive their payloads once retention\n"
            "   evicts them; pick a snapshot that is still on disk\n"
            "3. Raise retention.max_snapshots_per_environment to keep more"
        )
        super().__init__(message, details)

    def __str__(self) -> str:
        return _format_structured_error(
            title=f"SnapshotNotFoundError: {self.args[0]}",
            what_happened=self.what_happened,
            check_failed=self.check_failed,
            how_to_fix=self.how_to_fix,
        )


class SnapshotStoreError(SnapshotError):
    """Raised when the snapshot store cannot read or write its files."""


# ── Rollback Exceptions ──────────────────────────────────────────────────────


class RollbackError(SnapGuardError):
    """Base exception for rollback errors."""


class EnvironmentMismatchError(RollbackError):
    """
    Raised when a restore targets a different environment than the
    snapshot was captured from.

    Structured fields:
    - ``what_happened``: which environments disagree
    - ``check_failed``: the environment guard
    - ``how_to_fix``: how to pick the right snapshot
    """

    def __init__(
        self,
        message: str = "Environment mismatch",
        snapshot_environment: str = "",
        requested_environment: str = "",
        details: dict | None = None,
        what_happened: str = "",
        check_failed: str = "environment_guard",
        how_to_fix: str = "",
    ) -> None:
        self.snapshot_environment = snapshot_environment
        self.requested_environment = requested_environment
        self.what_happened = what_happened or (
            f"Snapshot was for environment {snapshot_environment}, "
            f"not {requested_environment}."
        )
        self.check_failed = check_failed
        self.how_to_fix = how_to_fix or (
            f"1. Restore against {snapshot_environment} instead\n"
            f"2. Use engine.get_latest_snapshot({requested_environment!r})\n"
            f"   to find a snapshot captured from {requested_environment}"
        )
        super().__init__(message, details)

    def __str__(self) -> str:
        return _format_structured_error(
            title=f"EnvironmentMismatchError: {self.args[0]}",
            what_happened=self.what_happened,
            check_failed=self.check_failed,
            how_to_fix=self.how_to_fix,
        )


class RestoreDeployError(RollbackError):
    """Raised when redeploying captured state does not succeed."""


# ── Adapter Exceptions ───────────────────────────────────────────────────────


class AdapterError(SnapGuardError):
    """Base exception for platform adapter errors."""


class MetadataFetchError(AdapterError):
    """Raised when a metadata provider cannot read a component."""


class DeployCommandError(AdapterError):
    """Raised when a deploy adapter cannot run or parse its deploy command."""
