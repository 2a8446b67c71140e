#!/usr/bin/env python3
"""
sf CLI Rollback Example
~~~~~~~~~~~~~~~~~~~~~~~

Snapshot Apex classes in a real org before a deployment, then roll the
org back if the deployment fails. Requires the ``sf`` CLI on PATH and an
authenticated org alias.

Run:
    python examples/sf_cli_rollback.py my-sandbox path/to/classes
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys

from snapguard import RollbackEngine
from snapguard.adapters import SfCliDeployAdapter, SfCliMetadataProvider
from snapguard.config import load_config_from_dict


def _read_classes(directory: str) -> dict[str, str]:
    classes = {}
    for file_name in sorted(os.listdir(directory)):
        if file_name.endswith(".cls"):
            with open(os.path.join(directory, file_name), encoding="utf-8") as f:
                classes[file_name] = f.read()
    return classes


async def main(org: str, source_dir: str) -> int:
    config = load_config_from_dict({"sf_cli": {"timeout_seconds": 900}})
    engine = RollbackEngine(
        SfCliMetadataProvider(config), SfCliDeployAdapter(config), config=config
    )

    artifacts = {"apex": _read_classes(source_dir)}
    print(f"Snapshotting {len(artifacts['apex'])} classes in {org}...")
    snapshot = await engine.capture_async(artifacts, org, f"manual-{os.getpid()}")
    if not snapshot.is_restorable:
        print(f"  snapshot failed: {snapshot.error}")
        return 1
    print(f"  {snapshot.id}")

    # Deploy with your usual tooling here; on failure, roll back:
    answer = input("Did the deployment fail? [y/N] ").strip().lower()
    if answer != "y":
        return 0

    result = await engine.restore_async(snapshot.id, org)
    print(f"  success={result.success} restored={result.restored}")
    if result.deleted:
        print(f"  remove manually: {', '.join(result.deleted)}")
    if result.error:
        print(f"  error: {result.error}")
    return 0 if result.success else 1


if __name__ == "__main__":
    if len(sys.argv) != 3:
        print(__doc__)
        sys.exit(2)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    sys.exit(asyncio.run(main(sys.argv[1], sys.argv[2])))
