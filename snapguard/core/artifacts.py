"""
Artifact Boundary
~~~~~~~~~~~~~~~~~

Turns the loosely-typed artifact set produced upstream
(``{group: {file_name: content}}``) into validated ComponentDescriptors
before any capture work begins.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping
from typing import Any

from snapguard.config.schema import ComponentTypeConfig
from snapguard.core.models import ComponentDescriptor
from snapguard.exceptions import ArtifactValidationError

__all__ = ["ArtifactSet", "build_descriptors", "component_name"]

logger = logging.getLogger(__name__)

ArtifactSet = Mapping[str, Mapping[str, str]] | Iterable[ComponentDescriptor]


def component_name(file_name: str, suffix: str | None) -> str:
    """
    Derive a component name by stripping the type-specific suffix.

    With no fixed suffix the final extension is stripped instead.
    """
    if suffix is None:
        return os.path.splitext(file_name)[0]
    if file_name.endswith(suffix):
        return file_name[: -len(suffix)]
    return file_name


def _check_file_name(group: str, file_name: Any) -> None:
    if not isinstance(file_name, str) or not file_name.strip():
        raise ArtifactValidationError(
            f"Artifact group {group!r} contains an empty file name",
            details={"group": group},
        )
    if "/" in file_name or "\\" in file_name or file_name in (".", ".."):
        raise ArtifactValidationError(
            f"File name {file_name!r} in group {group!r} must not contain a path",
            details={"group": group, "file_name": file_name},
        )


def _from_mapping(
    artifact_set: Mapping[str, Any],
    component_types: Mapping[str, ComponentTypeConfig],
) -> list[ComponentDescriptor]:
    descriptors: list[ComponentDescriptor] = []
    for group, files in artifact_set.items():
        type_cfg = component_types.get(group)
        if type_cfg is None:
            raise ArtifactValidationError(
                f"Unknown artifact group {group!r}; "
                f"expected one of {sorted(component_types)}",
                details={"group": group},
            )
        if not isinstance(files, Mapping):
            raise ArtifactValidationError(
                f"Artifact group {group!r} must map file names to content",
                details={"group": group},
            )
        for file_name, content in files.items():
            _check_file_name(group, file_name)
            if not isinstance(content, str):
                raise ArtifactValidationError(
                    f"Content of {file_name!r} must be a string, "
                    f"got {type(content).__name__}",
                    details={"group": group, "file_name": file_name},
                )
            name = component_name(file_name, type_cfg.suffix)
            if not name:
                raise ArtifactValidationError(
                    f"Cannot derive a component name from {file_name!r}",
                    details={"group": group, "file_name": file_name},
                )
            descriptors.append(
                ComponentDescriptor(
                    type=type_cfg.type,
                    name=name,
                    content=content,
                    file_name=file_name,
                )
            )
    return descriptors


def build_descriptors(
    artifact_set: ArtifactSet,
    component_types: Mapping[str, ComponentTypeConfig],
) -> list[ComponentDescriptor]:
    """
    Validate an artifact set and return typed component descriptors.

    Args:
        artifact_set: Either a mapping of component group to
            ``{file_name: content}``, or an iterable of ready-made
            ComponentDescriptors.
        component_types: Component type settings keyed by group.

    Returns:
        Descriptors in artifact-set order.

    Raises:
        ArtifactValidationError: If the artifact set is malformed or
            names the same component twice.
    """
    if isinstance(artifact_set, Mapping):
        descriptors = _from_mapping(artifact_set, component_types)
    else:
        descriptors = list(artifact_set)
        known_types = {cfg.type for cfg in component_types.values()}
        for item in descriptors:
            if not isinstance(item, ComponentDescriptor):
                raise ArtifactValidationError(
                    f"Expected ComponentDescriptor, got {type(item).__name__}"
                )
            if item.type not in known_types:
                raise ArtifactValidationError(
                    f"Unknown component type {item.type!r}; "
                    f"expected one of {sorted(known_types)}",
                    details={"type": item.type, "name": item.name},
                )
            if not item.name:
                raise ArtifactValidationError("Component descriptor has an empty name")
            if item.file_name:
                _check_file_name(item.type, item.file_name)

    seen: set[tuple[str, str]] = set()
    for desc in descriptors:
        key = (desc.type, desc.name)
        if key in seen:
            raise ArtifactValidationError(
                f"Component {desc.type} {desc.name} appears more than once",
                details={"type": desc.type, "name": desc.name},
            )
        seen.add(key)

    logger.debug("Validated %d component descriptors", len(descriptors))
    return descriptors
