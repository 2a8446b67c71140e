"""Platform adapters — the remote read and deploy surfaces."""

from snapguard.adapters.base import DeployAdapter, MetadataProvider
from snapguard.adapters.memory import DeployCall, InMemoryPlatform
from snapguard.adapters.sf_cli import SfCliDeployAdapter, SfCliMetadataProvider

__all__ = [
    "MetadataProvider",
    "DeployAdapter",
    "InMemoryPlatform",
    "DeployCall",
    "SfCliMetadataProvider",
    "SfCliDeployAdapter",
]
