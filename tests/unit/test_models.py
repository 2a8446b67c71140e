"""Tests for the snapshot data models."""

from datetime import UTC, datetime

import pytest

from snapguard.core.models import (
    ComponentRecord,
    HistoryEntry,
    RollbackResult,
    Snapshot,
    SnapshotStatus,
)


class TestComponentRecord:
    """Tests for the had_existing / payload invariant."""

    def test_existing_record_requires_payload_and_version(self):
        with pytest.raises(ValueError):
            ComponentRecord(type="ApexClass", name="A", had_existing=True)

    def test_new_record_rejects_payload(self):
        with pytest.raises(ValueError):
            ComponentRecord(
                type="ApexClass",
                name="A",
                had_existing=False,
                payload_ref="classes/A.cls",
            )

    def test_new_record_rejects_version(self):
        with pytest.raises(ValueError):
            ComponentRecord(
                type="ApexClass", name="A", had_existing=False, api_version="60.0"
            )

    def test_is_new_is_inverse_of_had_existing(self):
        new = ComponentRecord(type="ApexClass", name="A", had_existing=False)
        old = ComponentRecord(
            type="ApexClass",
            name="B",
            had_existing=True,
            payload_ref="classes/B.cls",
            api_version="60.0",
        )
        assert new.is_new is True
        assert old.is_new is False

    def test_new_record_serializes_without_payload_keys(self):
        data = ComponentRecord(type="ApexClass", name="A", had_existing=False).to_dict()
        assert "payload_ref" not in data
        assert "api_version" not in data


class TestSnapshot:
    def test_from_dict_restores_fields(self):
        snapshot = Snapshot(
            id="snapshot-1700000000000",
            deployment_id="deploy-1",
            target_environment="dev",
            created_at=datetime(2024, 1, 1, tzinfo=UTC),
            components=[ComponentRecord(type="ApexClass", name="A", had_existing=False)],
            status=SnapshotStatus.FAILED,
            error="disk full",
        )
        loaded = Snapshot.from_dict(snapshot.to_dict())
        assert loaded == snapshot
        assert loaded.is_restorable is False

    def test_summary_counts_components(self):
        snapshot = Snapshot(
            id="snapshot-1",
            deployment_id="d",
            target_environment="dev",
            components=[
                ComponentRecord(type="ApexClass", name="A", had_existing=False),
                ComponentRecord(type="ApexClass", name="B", had_existing=False),
            ],
        )
        summary = snapshot.summary()
        assert summary.snapshot_id == "snapshot-1"
        assert summary.component_count == 2


class TestHistoryEntry:
    def test_projection_marks_new_components(self):
        snapshot = Snapshot(
            id="snapshot-1",
            deployment_id="d",
            target_environment="dev",
            components=[
                ComponentRecord(
                    type="ApexClass",
                    name="A",
                    had_existing=True,
                    payload_ref="classes/A.cls",
                    api_version="60.0",
                ),
                ComponentRecord(type="ApexClass", name="B", had_existing=False),
            ],
        )
        entry = HistoryEntry.from_snapshot(snapshot)
        assert entry.component_count == 2
        assert entry.components == [
            {"type": "ApexClass", "name": "A", "is_new": False},
            {"type": "ApexClass", "name": "B", "is_new": True},
        ]


class TestRollbackResult:
    def test_defaults_to_success(self):
        result = RollbackResult(snapshot_id="snapshot-1")
        assert result.success is True
        assert result.restored == []
        assert result.deleted == []
        assert result.failed == []
        assert result.error is None
