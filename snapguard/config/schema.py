"""
Configuration Schema
~~~~~~~~~~~~~~~~~~~~

Pydantic models for validating rollback engine configuration.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator, model_validator

__all__ = [
    "EngineConfig",
    "StoreConfig",
    "RetentionConfig",
    "RestoreConfig",
    "ComponentTypeConfig",
    "SfCliConfig",
]


class StoreConfig(BaseModel):
    """Snapshot store location and bounded log sizes."""

    root_dir: str = "./snapshots"
    history_file: str = "deployment-history.json"
    rollback_log_file: str = "rollback-log.json"
    history_max_entries: int = Field(default=100, ge=1)
    rollback_log_max_entries: int = Field(default=50, ge=1)

    @field_validator("history_file", "rollback_log_file")
    @classmethod
    def validate_file_name(cls, v: str) -> str:
        """Log files live directly under root_dir."""
        if not v or "/" in v or "\\" in v:
            raise ValueError(f"Expected a bare file name, got {v!r}")
        if v.startswith("snapshot-"):
            raise ValueError(f"File name {v!r} collides with snapshot directories")
        return v


class RetentionConfig(BaseModel):
    """Per-environment snapshot retention."""

    max_snapshots_per_environment: int = Field(default=10, ge=1)
    enforce_after_capture: bool = False


class RestoreConfig(BaseModel):
    """Restore engine settings."""

    workspace_dir: str | None = None
    default_api_version: str = "60.0"


class ComponentTypeConfig(BaseModel):
    """Maps an artifact group to a platform component type."""

    group: str
    type: str
    suffix: str | None = None
    directory: str

    @field_validator("suffix")
    @classmethod
    def validate_suffix(cls, v: str | None) -> str | None:
        if v is not None and not v.startswith("."):
            raise ValueError(f"Suffix must start with '.': {v!r}")
        return v


class SfCliConfig(BaseModel):
    """Settings for the sf command-line adapters."""

    executable: str = "sf"
    timeout_seconds: int = Field(default=600, ge=1)


class EngineConfig(BaseModel):
    """
    Root configuration model for the rollback engine.

    Validated on load with clear error messages for invalid values.
    """

    version: str = "1.0"
    store: StoreConfig = Field(default_factory=StoreConfig)
    retention: RetentionConfig = Field(default_factory=RetentionConfig)
    restore: RestoreConfig = Field(default_factory=RestoreConfig)
    components: list[ComponentTypeConfig] = Field(
        default_factory=lambda: [
            ComponentTypeConfig(
                group="apex", type="ApexClass", suffix=".cls", directory="classes"
            ),
            ComponentTypeConfig(
                group="triggers",
                type="ApexTrigger",
                suffix=".trigger",
                directory="triggers",
            ),
            ComponentTypeConfig(
                group="metadata", type="CustomObject", suffix=None, directory="objects"
            ),
        ]
    )
    sf_cli: SfCliConfig = Field(default_factory=SfCliConfig)

    @model_validator(mode="after")
    def validate_unique_groups(self) -> EngineConfig:
        groups = [c.group for c in self.components]
        duplicates = sorted({g for g in groups if groups.count(g) > 1})
        if duplicates:
            raise ValueError(f"Duplicate component groups: {duplicates}")
        return self

    def component_types(self) -> dict[str, ComponentTypeConfig]:
        """Return component type settings keyed by artifact group."""
        return {c.group: c for c in self.components}
