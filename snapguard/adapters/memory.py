"""
In-Memory Platform
~~~~~~~~~~~~~~~~~~

A fake platform implementing both MetadataProvider and DeployAdapter,
holding component state per environment in plain dicts. Useful for
dry runs and for exercising the engine without a remote org.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field

from snapguard.adapters.base import DeployAdapter, MetadataProvider
from snapguard.core.models import DeployResult, FetchedComponent, RestoreBundle
from snapguard.exceptions import MetadataFetchError

__all__ = ["InMemoryPlatform", "DeployCall"]

logger = logging.getLogger(__name__)


@dataclass
class DeployCall:
    """A recorded invocation of InMemoryPlatform.deploy."""

    environment: str
    bundle: RestoreBundle
    items: list[tuple[str, str, str, str]] = field(default_factory=list)


class InMemoryPlatform(MetadataProvider, DeployAdapter):
    """
    Dict-backed platform fake.

    State is keyed by ``(environment, component_type, name)``. Fetch
    failures and deploy outcomes can be injected to simulate a flaky
    remote.
    """

    def __init__(self) -> None:
        self._components: dict[tuple[str, str, str], FetchedComponent] = {}
        self._fetch_failures: set[tuple[str, str]] = set()
        self._deploy_outcome: DeployResult | None = None
        self._deploy_error: Exception | None = None
        self.fetch_calls: list[tuple[str, str, str]] = []
        self.deploy_calls: list[DeployCall] = []

    def put(
        self,
        environment: str,
        component_type: str,
        name: str,
        content: str,
        api_version: str | None = "60.0",
    ) -> None:
        """Set a component's current remote state."""
        self._components[(environment, component_type, name)] = FetchedComponent(
            content=content, api_version=api_version
        )

    def get(
        self, environment: str, component_type: str, name: str
    ) -> FetchedComponent | None:
        """Return a component's current remote state without recording a call."""
        return self._components.get((environment, component_type, name))

    def fail_fetch(self, component_type: str, name: str) -> None:
        """Make every subsequent fetch of this component raise."""
        self._fetch_failures.add((component_type, name))

    def fail_deploy(
        self, details: dict | None = None, error: Exception | None = None
    ) -> None:
        """Make subsequent deploys report failure, or raise ``error``."""
        self._deploy_error = error
        self._deploy_outcome = DeployResult(success=False, details=details)

    def fetch(
        self, component_type: str, name: str, environment: str
    ) -> FetchedComponent | None:
        self.fetch_calls.append((component_type, name, environment))
        if (component_type, name) in self._fetch_failures:
            raise MetadataFetchError(f"Injected fetch failure for {component_type} {name}")
        return self._components.get((environment, component_type, name))

    def deploy(self, bundle: RestoreBundle, environment: str) -> DeployResult:
        call = DeployCall(
            environment=environment,
            bundle=bundle,
            items=[
                (item.type, item.name, item.content, item.api_version)
                for item in bundle.items
            ],
        )
        self.deploy_calls.append(call)

        if self._deploy_error is not None:
            raise self._deploy_error
        if self._deploy_outcome is not None:
            return self._deploy_outcome

        for item in bundle.items:
            self.put(environment, item.type, item.name, item.content, item.api_version)
        logger.debug("Deployed %d components to %s", len(bundle), environment)
        return DeployResult(success=True, id=f"deploy-{uuid.uuid4().hex[:12]}")
