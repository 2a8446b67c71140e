"""Shared fixtures for snapguard tests."""

from __future__ import annotations

import pytest

from snapguard import RollbackEngine
from snapguard.adapters.memory import InMemoryPlatform
from snapguard.config.loader import load_config_from_dict
from snapguard.config.schema import EngineConfig
from snapguard.observability.metrics import MetricsCollector
from snapguard.rollback.ledger import HistoryLedger, RollbackLog
from snapguard.rollback.store import SnapshotStore

ENV = "dev-sandbox"


@pytest.fixture
def config(tmp_path) -> EngineConfig:
    """Default config rooted in a per-test directory."""
    return load_config_from_dict(
        {
            "store": {"root_dir": str(tmp_path / "snapshots")},
            "restore": {"workspace_dir": str(tmp_path / "workspaces")},
        }
    )


@pytest.fixture
def store(config) -> SnapshotStore:
    return SnapshotStore(config.store)


@pytest.fixture
def history(store, config) -> HistoryLedger:
    return HistoryLedger(store, max_entries=config.store.history_max_entries)


@pytest.fixture
def rollback_log(store, config) -> RollbackLog:
    return RollbackLog(store, max_entries=config.store.rollback_log_max_entries)


@pytest.fixture
def metrics() -> MetricsCollector:
    return MetricsCollector()


@pytest.fixture
def platform() -> InMemoryPlatform:
    """An in-memory platform where ClassA already exists in dev-sandbox."""
    p = InMemoryPlatform()
    p.put(ENV, "ApexClass", "ClassA", "public class ClassA { /* v1 */ }", "58.0")
    return p


@pytest.fixture
def engine(platform, config) -> RollbackEngine:
    return RollbackEngine(platform, platform, config=config)


@pytest.fixture
def artifacts() -> dict:
    """ClassA pre-exists on the platform, ClassB is new."""
    return {
        "apex": {
            "ClassA.cls": "public class ClassA { /* v2 */ }",
            "ClassB.cls": "public class ClassB {}",
        }
    }
