"""
snapguard — In-Memory Rollback Example
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

Snapshot, deploy, and roll back against an in-memory platform: one
existing class, one new class, one restore.
"""

import tempfile

from snapguard import RollbackEngine
from snapguard.adapters import InMemoryPlatform
from snapguard.config import load_config_from_dict


def main() -> None:
    platform = InMemoryPlatform()
    platform.put("dev-sandbox", "ApexClass", "AccountService", "public class AccountService {}")

    root = tempfile.mkdtemp(prefix="snapguard_example_")
    config = load_config_from_dict({"store": {"root_dir": root}})
    engine = RollbackEngine(platform, platform, config=config)

    artifacts = {
        "apex": {
            "AccountService.cls": "public class AccountService { /* rewritten */ }",
            "AccountServiceTest.cls": "@IsTest public class AccountServiceTest {}",
        }
    }

    print("=" * 60)
    print("snapguard — In-Memory Rollback Example")
    print("=" * 60)

    # 1. Snapshot before deploying
    print("\n1. Capturing pre-deployment snapshot...")
    snapshot = engine.capture(artifacts, "dev-sandbox", "deploy-001")
    print(f"   ✓ {snapshot.id} ({snapshot.status}, {len(snapshot.components)} components)")
    for record in snapshot.components:
        state = "existing" if record.had_existing else "new"
        print(f"     - {record.type} {record.name}: {state}")

    # 2. Simulate the deployment
    print("\n2. Deploying new content...")
    for file_name, content in artifacts["apex"].items():
        platform.put("dev-sandbox", "ApexClass", file_name.removesuffix(".cls"), content)
    print("   ✓ Deployed")

    # 3. Roll back to the wrong environment (refused)
    print("\n3. Restoring into the wrong environment...")
    refused = engine.restore(snapshot.id, "production")
    print(f"   ✗ success={refused.success}: {refused.error}")

    # 4. Roll back for real
    print("\n4. Restoring snapshot...")
    result = engine.restore(snapshot.id, "dev-sandbox")
    print(f"   ✓ restored={result.restored} deleted(marked)={result.deleted}")
    current = platform.get("dev-sandbox", "ApexClass", "AccountService")
    print(f"   AccountService is now: {current.content!r}")

    print("\n" + "=" * 60)
    print(engine.get_metrics().to_prometheus())


if __name__ == "__main__":
    main()
