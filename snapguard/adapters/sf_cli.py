"""
sf CLI Adapters
~~~~~~~~~~~~~~~

MetadataProvider and DeployAdapter backed by the ``sf`` command-line
tool. Every invocation passes an argument list (no shell), a bounded
timeout, and ``--json`` so output can be parsed reliably.
"""

from __future__ import annotations

import json
import logging
import os
import re
import shutil
import subprocess
import tempfile
from typing import Any

from snapguard.adapters.base import DeployAdapter, MetadataProvider
from snapguard.config.schema import EngineConfig
from snapguard.core.models import (
    BundleItem,
    DeployResult,
    FetchedComponent,
    RestoreBundle,
)
from snapguard.exceptions import DeployCommandError, MetadataFetchError

__all__ = ["SfCliMetadataProvider", "SfCliDeployAdapter", "apex_meta_xml"]

logger = logging.getLogger(__name__)

_API_NAME = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")

# Types whose body can be read with a tooling-free SOQL query.
_QUERYABLE_TYPES = ("ApexClass", "ApexTrigger")

_META_XML = """<?xml version="1.0" encoding="UTF-8"?>
<{type} xmlns="http://soap.sforce.com/2006/04/metadata">
    <apiVersion>{api_version}</apiVersion>
    <status>Active</status>
</{type}>
"""


def apex_meta_xml(component_type: str, api_version: str) -> str:
    """Render the ``-meta.xml`` companion file for an Apex component."""
    return _META_XML.format(type=component_type, api_version=api_version)


def _version_key(version: str) -> tuple[int, ...]:
    """Order API versions numerically ("9.0" < "60.0")."""
    try:
        return tuple(int(part) for part in version.split("."))
    except ValueError:
        return (0,)


def _run_sf(
    args: list[str], timeout: int, cwd: str | None = None
) -> tuple[int, dict[str, Any]]:
    """Run an sf command and parse its JSON output."""
    try:
        proc = subprocess.run(
            args,
            capture_output=True,
            text=True,
            timeout=timeout,
            cwd=cwd,
            check=False,
        )
    except FileNotFoundError as exc:
        raise DeployCommandError(f"sf executable not found: {args[0]}") from exc
    except subprocess.TimeoutExpired as exc:
        raise DeployCommandError(
            f"{' '.join(args[:3])} timed out after {timeout}s"
        ) from exc

    try:
        payload = json.loads(proc.stdout) if proc.stdout.strip() else {}
    except json.JSONDecodeError as exc:
        raise DeployCommandError(
            f"Could not parse sf output: {exc}",
            details={"stderr": proc.stderr[-2000:]},
        ) from exc
    return proc.returncode, payload


class SfCliMetadataProvider(MetadataProvider):
    """
    Reads Apex class and trigger bodies with ``sf data query``.

    Other component types report absent, so they are captured as newly
    introduced.
    """

    def __init__(self, config: EngineConfig | None = None) -> None:
        self._config = config or EngineConfig()

    def fetch(
        self, component_type: str, name: str, environment: str
    ) -> FetchedComponent | None:
        if component_type not in _QUERYABLE_TYPES:
            return None
        if not _API_NAME.match(name):
            raise MetadataFetchError(f"Invalid component API name: {name!r}")

        query = (
            f"SELECT Id, Name, Body, ApiVersion FROM {component_type} "
            f"WHERE Name = '{name}'"
        )
        args = [
            self._config.sf_cli.executable,
            "data",
            "query",
            "--query",
            query,
            "--target-org",
            environment,
            "--json",
        ]
        try:
            returncode, payload = _run_sf(args, self._config.sf_cli.timeout_seconds)
        except DeployCommandError as exc:
            raise MetadataFetchError(str(exc), details=exc.details) from exc

        if returncode != 0:
            raise MetadataFetchError(
                f"Query for {component_type} {name} failed: "
                f"{payload.get('message', 'unknown error')}",
                details={"returncode": returncode},
            )

        records = (payload.get("result") or {}).get("records") or []
        if not records:
            return None
        record = records[0]
        api_version = record.get("ApiVersion")
        return FetchedComponent(
            content=record.get("Body") or "",
            api_version=str(api_version) if api_version is not None else None,
        )


class SfCliDeployAdapter(DeployAdapter):
    """
    Deploys a restore bundle with ``sf project deploy start``.

    The bundle is materialized as a source-format project inside
    ``bundle.workspace`` (or a private temporary directory when the
    bundle has none).
    """

    def __init__(self, config: EngineConfig | None = None) -> None:
        self._config = config or EngineConfig()
        self._types = {c.type: c for c in self._config.components}

    def _item_path(self, source_root: str, item: BundleItem) -> str:
        type_cfg = self._types.get(item.type)
        directory = type_cfg.directory if type_cfg else item.type
        file_name = item.file_name
        if not file_name:
            suffix = type_cfg.suffix if type_cfg and type_cfg.suffix else ""
            file_name = f"{item.name}{suffix}"
        return os.path.join(source_root, directory, file_name)

    def materialize(self, bundle: RestoreBundle, workspace: str) -> str:
        """
        Write the bundle as a deployable project under ``workspace``.

        Returns:
            The project directory.
        """
        source_root = os.path.join(workspace, "force-app", "main", "default")
        for item in bundle.items:
            path = self._item_path(source_root, item)
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                f.write(item.content)
            if item.type in _QUERYABLE_TYPES:
                with open(f"{path}-meta.xml", "w", encoding="utf-8") as f:
                    f.write(apex_meta_xml(item.type, item.api_version))

        versions = sorted({item.api_version for item in bundle.items}, key=_version_key)
        project = {
            "packageDirectories": [{"path": "force-app", "default": True}],
            "namespace": "",
            "sourceApiVersion": versions[-1]
            if versions
            else self._config.restore.default_api_version,
        }
        with open(os.path.join(workspace, "sfdx-project.json"), "w", encoding="utf-8") as f:
            json.dump(project, f, indent=2)
        return workspace

    def deploy(self, bundle: RestoreBundle, environment: str) -> DeployResult:
        owns_workspace = bundle.workspace is None
        workspace = bundle.workspace or tempfile.mkdtemp(prefix="snapguard-deploy-")
        try:
            self.materialize(bundle, workspace)
            args = [
                self._config.sf_cli.executable,
                "project",
                "deploy",
                "start",
                "--source-dir",
                "force-app",
                "--target-org",
                environment,
                "--json",
            ]
            returncode, payload = _run_sf(
                args, self._config.sf_cli.timeout_seconds, cwd=workspace
            )
        finally:
            if owns_workspace:
                shutil.rmtree(workspace, ignore_errors=True)

        result = payload.get("result") or {}
        succeeded = (
            payload.get("status", returncode) == 0
            or result.get("status") == "Succeeded"
        )
        if returncode != 0 and not succeeded:
            logger.warning(
                "sf deploy to %s exited with %d: %s",
                environment,
                returncode,
                payload.get("message", ""),
            )
        return DeployResult(
            success=succeeded,
            id=result.get("id"),
            details={
                "status": result.get("status"),
                "message": payload.get("message"),
                "returncode": returncode,
            },
        )
