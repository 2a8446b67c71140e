"""Tests for configuration loading and validation."""

import pytest

from snapguard.config import DEFAULT_CONFIG, EngineConfig, load_config, load_config_from_dict
from snapguard.exceptions import ConfigFileNotFoundError, ConfigValidationError


class TestConfigLoading:
    def test_defaults(self):
        config = load_config_from_dict({})
        assert config.store.history_max_entries == 100
        assert config.store.rollback_log_max_entries == 50
        assert config.retention.max_snapshots_per_environment == 10
        assert config.retention.enforce_after_capture is False
        assert config.restore.default_api_version == "60.0"
        assert sorted(config.component_types()) == ["apex", "metadata", "triggers"]

    def test_default_dict_matches_model_defaults(self):
        assert load_config_from_dict(DEFAULT_CONFIG) == EngineConfig()

    def test_partial_override_keeps_other_defaults(self):
        config = load_config_from_dict({"retention": {"max_snapshots_per_environment": 3}})
        assert config.retention.max_snapshots_per_environment == 3
        assert config.retention.enforce_after_capture is False

    def test_invalid_retention_raises(self):
        with pytest.raises(ConfigValidationError):
            load_config_from_dict({"retention": {"max_snapshots_per_environment": 0}})

    def test_log_file_must_be_bare_name(self):
        with pytest.raises(ConfigValidationError):
            load_config_from_dict({"store": {"history_file": "../history.json"}})

    def test_duplicate_groups_raise(self):
        with pytest.raises(ConfigValidationError):
            load_config_from_dict(
                {
                    "components": [
                        {"group": "apex", "type": "ApexClass", "directory": "classes"},
                        {"group": "apex", "type": "ApexTrigger", "directory": "triggers"},
                    ]
                }
            )

    def test_suffix_must_start_with_dot(self):
        with pytest.raises(ConfigValidationError):
            load_config_from_dict(
                {
                    "components": [
                        {"group": "apex", "type": "ApexClass", "suffix": "cls", "directory": "c"}
                    ]
                }
            )

    def test_load_from_yaml(self, tmp_path):
        path = tmp_path / "snapguard.yaml"
        path.write_text(
            "store:\n"
            "  root_dir: /var/lib/snapguard\n"
            "retention:\n"
            "  max_snapshots_per_environment: 5\n"
            "  enforce_after_capture: true\n"
        )
        config = load_config(str(path))
        assert config.store.root_dir == "/var/lib/snapguard"
        assert config.retention.max_snapshots_per_environment == 5
        assert config.retention.enforce_after_capture is True

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(ConfigFileNotFoundError):
            load_config(str(tmp_path / "nope.yaml"))

    def test_invalid_yaml_raises(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("store: [unclosed\n")
        with pytest.raises(ConfigValidationError):
            load_config(str(path))

    def test_non_mapping_yaml_raises(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigValidationError):
            load_config(str(path))
