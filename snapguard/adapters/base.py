"""
Platform Adapter Interfaces
~~~~~~~~~~~~~~~~~~~~~~~~~~~

Abstract base classes for the two remote surfaces the rollback engine
consumes: reading current component state and deploying a bundle.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from snapguard.core.models import DeployResult, FetchedComponent, RestoreBundle

__all__ = ["MetadataProvider", "DeployAdapter"]


class MetadataProvider(ABC):
    """
    Reads the current remote state of a single component.

    Implementations may raise on transport or query errors; the snapshot
    capturer treats any exception as "component absent".
    """

    @abstractmethod
    def fetch(
        self, component_type: str, name: str, environment: str
    ) -> FetchedComponent | None:
        """
        Fetch a component's current content and API version.

        Args:
            component_type: Platform component type, e.g. "ApexClass".
            name: Component API name.
            environment: Target environment alias.

        Returns:
            The current state, or None if the component does not exist.
        """
        ...

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"


class DeployAdapter(ABC):
    """Pushes a restore bundle to a target environment."""

    @abstractmethod
    def deploy(self, bundle: RestoreBundle, environment: str) -> DeployResult:
        """
        Deploy every item in the bundle in a single operation.

        Args:
            bundle: The components to deploy. ``bundle.workspace`` is a
                scratch directory the adapter may write into.
            environment: Target environment alias.

        Returns:
            A DeployResult describing the outcome.
        """
        ...

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"
