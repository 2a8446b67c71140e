"""
Integration Tests for the RollbackEngine
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

End-to-end capture, deploy, restore and retention flows through the
public engine API against the in-memory platform.
"""

from __future__ import annotations

import pytest
import yaml

from snapguard import RollbackEngine
from snapguard.adapters.memory import InMemoryPlatform
from snapguard.config.loader import load_config_from_dict
from snapguard.core.models import SnapshotStatus
from snapguard.exceptions import SnapshotNotFoundError

ENV = "dev-sandbox"


def _deploy(platform: InMemoryPlatform, artifacts: dict) -> None:
    """Simulate the deployment the snapshot was taken for."""
    for file_name, content in artifacts["apex"].items():
        platform.put(ENV, "ApexClass", file_name.removesuffix(".cls"), content)


class TestCaptureRestoreFlow:
    def test_round_trip_restores_prior_content(self, engine, platform, artifacts):
        snapshot = engine.capture(artifacts, ENV, "deploy-1")
        _deploy(platform, artifacts)
        assert platform.get(ENV, "ApexClass", "ClassA").content.endswith("/* v2 */ }")

        result = engine.restore(snapshot.id, ENV)

        assert result.success is True
        restored = platform.get(ENV, "ApexClass", "ClassA")
        assert restored.content == "public class ClassA { /* v1 */ }"
        assert restored.api_version == "58.0"
        assert result.deleted == ["ClassB"]
        # Marked only, never removed.
        assert platform.get(ENV, "ApexClass", "ClassB") is not None

    def test_wrong_environment_leaves_platform_untouched(
        self, engine, platform, artifacts
    ):
        snapshot = engine.capture(artifacts, ENV, "deploy-1")
        _deploy(platform, artifacts)

        result = engine.restore(snapshot.id, "production")

        assert result.success is False
        assert platform.deploy_calls == []
        assert platform.get(ENV, "ApexClass", "ClassA").content.endswith("/* v2 */ }")

    def test_restore_latest_uses_newest_snapshot(self, engine, platform):
        engine.capture({"apex": {"ClassA.cls": "v2"}}, ENV, "deploy-1")
        platform.put(ENV, "ApexClass", "ClassA", "v2")
        second = engine.capture({"apex": {"ClassA.cls": "v3"}}, ENV, "deploy-2")
        platform.put(ENV, "ApexClass", "ClassA", "v3")

        result = engine.restore_latest(ENV)

        assert result.snapshot_id == second.id
        assert platform.get(ENV, "ApexClass", "ClassA").content == "v2"

    def test_restore_latest_without_snapshot_raises(self, engine):
        with pytest.raises(SnapshotNotFoundError):
            engine.restore_latest("production")

    def test_restore_unknown_snapshot_raises(self, engine):
        with pytest.raises(SnapshotNotFoundError):
            engine.restore("snapshot-1", ENV)

    def test_rollback_log_records_attempts(self, engine, artifacts):
        snapshot = engine.capture(artifacts, ENV, "deploy-1")
        engine.restore(snapshot.id, "production")
        engine.restore(snapshot.id, ENV)

        log = engine.get_rollback_log()
        assert [entry.success for entry in log] == [True, False]


class TestQueries:
    def test_list_snapshots_newest_first_and_idempotent(self, engine, artifacts):
        ids = [engine.capture(artifacts, ENV, f"deploy-{i}").id for i in range(3)]
        engine.capture(artifacts, "qa", "deploy-qa")

        listed = engine.list_snapshots(ENV)

        assert [s.snapshot_id for s in listed] == list(reversed(ids))
        assert engine.list_snapshots(ENV) == listed
        assert len(engine.list_snapshots()) == 4

    def test_list_excludes_failed_snapshots(self, engine, artifacts, monkeypatch):
        good = engine.capture(artifacts, ENV, "deploy-1")

        def broken_write(*args, **kwargs):
            raise OSError("read-only file system")

        monkeypatch.setattr(engine.store, "write_payload", broken_write)
        failed = engine.capture(artifacts, ENV, "deploy-2")

        assert failed.status == SnapshotStatus.FAILED
        assert [s.snapshot_id for s in engine.list_snapshots(ENV)] == [good.id]
        assert engine.get_latest_snapshot(ENV).snapshot_id == good.id

    def test_get_latest_snapshot_none(self, engine):
        assert engine.get_latest_snapshot(ENV) is None

    def test_get_snapshot_returns_manifest(self, engine, artifacts):
        snapshot = engine.capture(artifacts, ENV, "deploy-1")
        assert engine.get_snapshot(snapshot.id) == snapshot

    def test_history_filters_by_environment(self, engine, artifacts):
        engine.capture(artifacts, ENV, "deploy-1")
        engine.capture(artifacts, "qa", "deploy-2")

        assert [h.deployment_id for h in engine.get_history()] == ["deploy-2", "deploy-1"]
        assert [h.deployment_id for h in engine.get_history("qa")] == ["deploy-2"]


class TestRetention:
    def test_enforce_retention_keeps_ten_per_environment(self, engine, artifacts):
        ids = [engine.capture(artifacts, ENV, f"deploy-{i}").id for i in range(12)]

        evicted = engine.enforce_retention()

        assert sorted(evicted) == sorted(ids[:2])
        assert len(engine.list_snapshots(ENV)) == 10
        assert len(engine.get_history(ENV)) == 12
        with pytest.raises(SnapshotNotFoundError):
            engine.restore(ids[0], ENV)

    def test_enforce_after_capture(self, platform, tmp_path, artifacts):
        config = load_config_from_dict(
            {
                "store": {"root_dir": str(tmp_path / "snapshots")},
                "retention": {
                    "max_snapshots_per_environment": 2,
                    "enforce_after_capture": True,
                },
            }
        )
        engine = RollbackEngine(platform, platform, config=config)

        for i in range(4):
            engine.capture(artifacts, ENV, f"deploy-{i}")

        assert len(engine.list_snapshots(ENV)) == 2
        assert engine.get_metrics().snapshots_evicted == 2


class TestConstruction:
    def test_from_config_file(self, tmp_path, platform, artifacts):
        path = tmp_path / "snapguard.yaml"
        path.write_text(
            yaml.safe_dump(
                {
                    "store": {"root_dir": str(tmp_path / "store")},
                    "retention": {"max_snapshots_per_environment": 3},
                }
            )
        )

        engine = RollbackEngine.from_config(str(path), platform, platform)

        assert engine.config.retention.max_snapshots_per_environment == 3
        snapshot = engine.capture(artifacts, ENV, "deploy-1")
        assert (tmp_path / "store" / snapshot.id / "snapshot.json").exists()

    def test_default_uses_default_root(self, platform, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        engine = RollbackEngine.default(platform, platform)
        assert engine.config.store.root_dir == "./snapshots"

    def test_repr(self, engine):
        assert "RollbackEngine" in repr(engine)


class TestMetrics:
    def test_counters_follow_operations(self, engine, platform, artifacts):
        platform.fail_fetch("ApexClass", "ClassB")
        snapshot = engine.capture(artifacts, ENV, "deploy-1")
        engine.restore(snapshot.id, ENV)
        engine.restore(snapshot.id, "production")

        metrics = engine.get_metrics()
        assert metrics.snapshots_created == 1
        assert metrics.fetch_failures == 1
        assert metrics.restores == 2
        assert metrics.restore_failures == 1
        assert "snapguard_restores 2\n" in metrics.to_prometheus()
