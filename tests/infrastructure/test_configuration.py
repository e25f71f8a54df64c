#!/usr/bin/env python3
"""Tests for the ConfigManager module."""

from pathlib import Path

import pytest

from silhouette.core.constants import ConfigKey, ErrorCode
from silhouette.infrastructure.config_manager import (
    ConfigError,
    ConfigManager,
    ConfigSource,
    ConfigValue,
    get_config_manager,
    set_global_config,
)


class TestConfigSource:
    """Tests for ConfigSource enum."""

    def test_precedence_order(self):
        """Test config source precedence ordering."""
        sources = [
            ConfigSource.COMPILED_DEFAULTS,
            ConfigSource.SYSTEM_CONFIG,
            ConfigSource.USER_CONFIG,
            ConfigSource.ENVIRONMENT,
            ConfigSource.CLI_ARGS,
            ConfigSource.RUNTIME,
        ]
        for i in range(len(sources) - 1):
            assert sources[i].value < sources[i + 1].value


class TestConfigValue:
    """Tests for ConfigValue dataclass."""

    def test_config_value_defaults(self):
        """Test config value defaults."""
        value = ConfigValue(value=42, source=ConfigSource.RUNTIME)
        assert value.value == 42
        assert value.timestamp > 0


class TestConfigManager:
    """Tests for ConfigManager."""

    def test_defaults(self):
        """Test compiled defaults."""
        manager = ConfigManager(load_environment=False)
        assert manager.get(ConfigKey.LOG_LEVEL) == "WARNING"
        assert manager.get(ConfigKey.COLLECTION_NAME) == "items"
        assert manager.get(ConfigKey.MAX_WORKERS) == 1
        assert manager.get(ConfigKey.SORT_KEYS) is False
        assert manager.get(ConfigKey.XML_ROOT) == "hash"

    def test_missing_key_default(self):
        """Test unknown keys return the default."""
        manager = ConfigManager(load_environment=False)
        assert manager.get("silhouette.unknown", "fallback") == "fallback"
        assert manager.get(ConfigKey.JSON_INDENT, 4) == 4

    def test_load_file(self, config_file: Path):
        """Test YAML files override defaults."""
        manager = ConfigManager(str(config_file), load_environment=False)
        assert manager.get(ConfigKey.COLLECTION_NAME) == "results"
        assert manager.get(ConfigKey.MAX_WORKERS) == 2
        assert manager.get_value(ConfigKey.MAX_WORKERS).source == ConfigSource.USER_CONFIG

    def test_missing_file(self, temp_dir: Path):
        """Test missing files raise ConfigError."""
        with pytest.raises(ConfigError) as exc_info:
            ConfigManager(str(temp_dir / "missing.yaml"), load_environment=False)
        assert exc_info.value.error_code == ErrorCode.NOT_FOUND

    def test_invalid_file(self, temp_dir: Path):
        """Test non-mapping files raise ConfigError."""
        path = temp_dir / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError):
            ConfigManager(str(path), load_environment=False)

    def test_malformed_yaml(self, temp_dir: Path):
        """Test parse errors raise ConfigError."""
        path = temp_dir / "bad.yaml"
        path.write_text("silhouette: [unclosed\n")
        with pytest.raises(ConfigError) as exc_info:
            ConfigManager(str(path), load_environment=False)
        assert exc_info.value.error_code == ErrorCode.INVALID_INPUT

    def test_environment(self, monkeypatch):
        """Test SILHOUETTE_* variables are read."""
        monkeypatch.setenv("SILHOUETTE_REPRESENTATION_MAX_WORKERS", "4")
        monkeypatch.setenv("SILHOUETTE_SERIALIZATION_SORT_KEYS", "true")
        monkeypatch.setenv("SILHOUETTE_LOGGING_LEVEL", "DEBUG")
        manager = ConfigManager()
        assert manager.get(ConfigKey.MAX_WORKERS) == 4
        assert manager.get(ConfigKey.SORT_KEYS) is True
        assert manager.get(ConfigKey.LOG_LEVEL) == "DEBUG"
        assert manager.get_value(ConfigKey.MAX_WORKERS).source == ConfigSource.ENVIRONMENT

    def test_parse_env_value(self):
        """Test environment value parsing."""
        manager = ConfigManager(load_environment=False)
        assert manager._parse_env_value("no") is False
        assert manager._parse_env_value("12") == 12
        assert manager._parse_env_value("1.5") == 1.5
        assert manager._parse_env_value("items") == "items"

    def test_runtime_set_wins(self, config_file: Path):
        """Test runtime values override files."""
        manager = ConfigManager(str(config_file), load_environment=False)
        manager.set(ConfigKey.MAX_WORKERS, 8)
        assert manager.get(ConfigKey.MAX_WORKERS) == 8

    def test_load_dict_and_get_all(self):
        """Test merged view of all sources."""
        manager = ConfigManager(load_environment=False)
        manager.load_dict({"silhouette": {"serialization": {"xml_root": "response"}}})
        merged = manager.get_all()
        assert merged["silhouette"]["serialization"]["xml_root"] == "response"
        assert merged["silhouette"]["serialization"]["sort_keys"] is False

    def test_clear(self):
        """Test clearing keeps compiled defaults."""
        manager = ConfigManager(load_environment=False)
        manager.set(ConfigKey.COLLECTION_NAME, "results")
        manager.clear()
        assert manager.get(ConfigKey.COLLECTION_NAME) == "items"

    def test_clear_single_source(self):
        """Test clearing one source."""
        manager = ConfigManager(load_environment=False)
        manager.set(ConfigKey.COLLECTION_NAME, "results", ConfigSource.CLI_ARGS)
        manager.set(ConfigKey.COLLECTION_NAME, "rows")
        manager.clear(ConfigSource.RUNTIME)
        assert manager.get(ConfigKey.COLLECTION_NAME) == "results"


class TestGlobalConfig:
    """Tests for the global configuration manager."""

    def test_set_and_get(self):
        """Test the global manager can be replaced."""
        manager = ConfigManager(load_environment=False)
        set_global_config(manager)
        assert get_config_manager() is manager

    def test_created_on_demand(self):
        """Test a manager is created when none is set."""
        set_global_config(None)
        manager = get_config_manager()
        assert isinstance(manager, ConfigManager)
        assert get_config_manager() is manager
