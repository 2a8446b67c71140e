"""
Configuration Loader
~~~~~~~~~~~~~~~~~~~~

Loads and validates snapguard.yaml, merging with defaults.
"""

from __future__ import annotations

import logging
import os
from typing import Any

import yaml

from snapguard.config.defaults import DEFAULT_CONFIG
from snapguard.config.schema import EngineConfig
from snapguard.exceptions import (
    ConfigFileNotFoundError,
    ConfigValidationError,
)

__all__ = ["load_config", "load_config_from_dict"]

logger = logging.getLogger(__name__)


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dicts, with override taking precedence."""
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config(path: str) -> EngineConfig:
    """
    Load configuration from a YAML file.

    Merges user config with defaults and validates via Pydantic.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        Validated EngineConfig instance.

    Raises:
        ConfigFileNotFoundError: If the file doesn't exist.
        ConfigValidationError: If the config fails validation.
    """
    if not os.path.exists(path):
        raise ConfigFileNotFoundError(f"Configuration file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            user_config = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigValidationError(
            f"Invalid YAML in configuration file: {exc}"
        ) from exc

    if not isinstance(user_config, dict):
        raise ConfigValidationError(
            f"Configuration file must contain a mapping, got {type(user_config).__name__}"
        )

    logger.debug("Loaded configuration from %s", path)
    return load_config_from_dict(user_config)


def load_config_from_dict(data: dict[str, Any]) -> EngineConfig:
    """
    Load configuration from a dictionary, merging with defaults.

    Lists (such as ``components``) replace the default list wholesale.

    Args:
        data: Configuration dictionary.

    Returns:
        Validated EngineConfig instance.

    Raises:
        ConfigValidationError: If validation fails.
    """
    merged = _deep_merge(DEFAULT_CONFIG, data)

    try:
        return EngineConfig(**merged)
    except Exception as exc:
        raise ConfigValidationError(f"Configuration validation failed: {exc}") from exc
