"""
Default Configuration
~~~~~~~~~~~~~~~~~~~~~

Sensible defaults for the rollback engine when no config file is provided.
"""

from __future__ import annotations

__all__ = ["DEFAULT_CONFIG"]

DEFAULT_CONFIG: dict = {
    "version": "1.0",
    "store": {
        "root_dir": "./snapshots",
        "history_file": "deployment-history.json",
        "rollback_log_file": "rollback-log.json",
        "history_max_entries": 100,
        "rollback_log_max_entries": 50,
    },
    "retention": {
        "max_snapshots_per_environment": 10,
        "enforce_after_capture": False,
    },
    "restore": {
        "workspace_dir": None,
        "default_api_version": "60.0",
    },
    "components": [
        {"group": "apex", "type": "ApexClass", "suffix": ".cls", "directory": "classes"},
        {
            "group": "triggers",
            "type": "ApexTrigger",
            "suffix": ".trigger",
            "directory": "triggers",
        },
        {"group": "metadata", "type": "CustomObject", "suffix": None, "directory": "objects"},
    ],
    "sf_cli": {
        "executable": "sf",
        "timeout_seconds": 600,
    },
}
