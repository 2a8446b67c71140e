"""snapguard configuration — loading, validation, and defaults."""

from snapguard.config.defaults import DEFAULT_CONFIG
from snapguard.config.loader import load_config, load_config_from_dict
from snapguard.config.schema import EngineConfig

__all__ = [
    "load_config",
    "load_config_from_dict",
    "EngineConfig",
    "DEFAULT_CONFIG",
]
