"""
Async Integration Tests for the RollbackEngine
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

Covers the asyncio wrappers and concurrent captures against distinct
environments.
"""

from __future__ import annotations

import asyncio

ENV = "dev-sandbox"


async def test_capture_and_restore_async(engine, platform, artifacts):
    snapshot = await engine.capture_async(artifacts, ENV, "deploy-1")
    platform.put(ENV, "ApexClass", "ClassA", "overwritten")

    result = await engine.restore_async(snapshot.id, ENV)

    assert result.success is True
    assert platform.get(ENV, "ApexClass", "ClassA").content == (
        "public class ClassA { /* v1 */ }"
    )


async def test_concurrent_captures_get_unique_ids(engine, artifacts):
    environments = [f"env-{i}" for i in range(8)]

    snapshots = await asyncio.gather(
        *[
            engine.capture_async(artifacts, env, f"deploy-{env}")
            for env in environments
        ]
    )

    ids = [s.id for s in snapshots]
    assert len(set(ids)) == len(ids)
    assert {s.target_environment for s in engine.list_snapshots()} == set(environments)


async def test_async_restore_refuses_wrong_environment(engine, platform, artifacts):
    snapshot = await engine.capture_async(artifacts, ENV, "deploy-1")

    result = await engine.restore_async(snapshot.id, "production")

    assert result.success is False
    assert platform.deploy_calls == []
