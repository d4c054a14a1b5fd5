#!/usr/bin/env python3
"""Tests for the ConfigManager module."""

import os

import pytest
import yaml

from overlayvfs.core.constants import ErrorCode
from overlayvfs.infrastructure.config_manager import ConfigError, ConfigManager, ConfigSource


class TestConfigSource:
    """Tests for ConfigSource enum."""

    def test_precedence_order(self):
        sources = [
            ConfigSource.COMPILED_DEFAULTS,
            ConfigSource.USER_CONFIG,
            ConfigSource.ENVIRONMENT,
            ConfigSource.CLI_ARGS,
            ConfigSource.RUNTIME,
        ]
        for i in range(len(sources) - 1):
            assert sources[i].value < sources[i + 1].value


class TestConfigError:
    """Tests for ConfigError exception."""

    def test_default_code(self):
        error = ConfigError("Test error")
        assert error.message == "Test error"
        assert error.error_code == ErrorCode.INVALID_INPUT


class TestConfigManagerDefaults:
    """Tests for compiled defaults."""

    def test_defaults(self):
        config = ConfigManager()
        assert config.get("overlayvfs.logging.level") == "INFO"
        assert config.get("overlayvfs.mount.allow_other") is False
        assert config.containers() == []

    def test_missing_key_returns_default(self):
        config = ConfigManager()
        assert config.get("overlayvfs.nope", default=7) == 7
        assert config.get("overlayvfs.logging.level.deeper") is None

    def test_defaults_are_not_shared(self):
        first = ConfigManager()
        first.get_all()["overlayvfs"]["containers"].append("leak")
        first._config[ConfigSource.COMPILED_DEFAULTS]["overlayvfs"]["containers"].append("leak")
        assert ConfigManager().containers() == []


class TestConfigManagerFiles:
    """Tests for YAML loading."""

    def test_load_file(self, config_file, temp_dir):
        config = ConfigManager(str(config_file))
        assert config.get("overlayvfs.logging.level") == "DEBUG"
        assert config.config_dir == temp_dir.resolve()

    def test_containers_resolved_relative_to_file(self, config_file, temp_dir):
        config = ConfigManager(str(config_file))
        assert config.containers() == [
            str(temp_dir.resolve() / "base"),
            str(temp_dir.resolve() / "mod.zip"),
        ]

    def test_absolute_container_kept(self, temp_dir):
        config_path = temp_dir / "abs.yaml"
        config_path.write_text(yaml.dump({"overlayvfs": {"containers": ["/srv/base"]}}))
        assert ConfigManager(str(config_path)).containers() == ["/srv/base"]

    def test_missing_file(self, temp_dir):
        with pytest.raises(ConfigError) as exc_info:
            ConfigManager(str(temp_dir / "missing.yaml"))
        assert exc_info.value.error_code == ErrorCode.NOT_FOUND

    def test_invalid_yaml(self, temp_dir):
        bad = temp_dir / "bad.yaml"
        bad.write_text("overlayvfs: [unclosed")
        with pytest.raises(ConfigError, match="YAML parse error"):
            ConfigManager(str(bad))

    def test_non_mapping_yaml(self, temp_dir):
        bad = temp_dir / "list.yaml"
        bad.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="Invalid config format"):
            ConfigManager(str(bad))

    def test_invalid_schema(self, temp_dir):
        bad = temp_dir / "schema.yaml"
        bad.write_text(yaml.dump({"overlayvfs": {"containers": "base"}}))
        with pytest.raises(ConfigError, match="Containers must be a list"):
            ConfigManager(str(bad))


class TestConfigManagerEnvironment:
    """Tests for OVERLAYVFS_* variables."""

    def test_environment_overrides_file(self, config_file, monkeypatch):
        monkeypatch.setenv("OVERLAYVFS_LOGGING_LEVEL", "ERROR")
        config = ConfigManager(str(config_file))
        assert config.get("overlayvfs.logging.level") == "ERROR"

    def test_key_with_underscore(self, monkeypatch):
        monkeypatch.setenv("OVERLAYVFS_MOUNT_ALLOW_OTHER", "true")
        config = ConfigManager()
        assert config.get("overlayvfs.mount.allow_other") is True

    def test_environment_can_be_disabled(self, monkeypatch):
        monkeypatch.setenv("OVERLAYVFS_LOGGING_LEVEL", "ERROR")
        config = ConfigManager(load_environment=False)
        assert config.get("overlayvfs.logging.level") == "INFO"

    @pytest.mark.parametrize(
        "raw,expected",
        [("true", True), ("No", False), ("42", 42), ("1.5", 1.5), ("DEBUG", "DEBUG")],
    )
    def test_parse_env_value(self, raw, expected):
        assert ConfigManager(load_environment=False)._parse_env_value(raw) == expected


class TestConfigManagerRuntime:
    """Tests for set/get_all/clear."""

    def test_cli_args_override_file(self, config_file):
        config = ConfigManager(str(config_file))
        config.load_dict({"overlayvfs": {"containers": ["/other"]}}, ConfigSource.CLI_ARGS)
        assert config.containers() == ["/other"]

    def test_set_runtime_value(self):
        config = ConfigManager()
        config.set("overlayvfs.logging.level", "WARNING")
        assert config.get("overlayvfs.logging.level") == "WARNING"

    def test_get_all_deep_merges(self, config_file):
        config = ConfigManager(str(config_file))
        config.set("overlayvfs.logging.file", "/tmp/vfs.log")
        merged = config.get_all()
        assert merged["overlayvfs"]["logging"] == {"level": "DEBUG", "file": "/tmp/vfs.log"}
        assert merged["overlayvfs"]["mount"] == {"allow_other": False}

    def test_validate_merged(self):
        config = ConfigManager()
        config.set("overlayvfs.logging.level", "LOUD")
        with pytest.raises(ConfigError, match="Invalid log level"):
            config.validate()

    def test_clear_keeps_defaults(self, config_file):
        config = ConfigManager(str(config_file))
        config.clear()
        assert config.get("overlayvfs.logging.level") == "INFO"

    def test_clear_single_source(self, config_file):
        config = ConfigManager(str(config_file))
        config.set("overlayvfs.logging.level", "ERROR")
        config.clear(ConfigSource.RUNTIME)
        assert config.get("overlayvfs.logging.level") == "DEBUG"
