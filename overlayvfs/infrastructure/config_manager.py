#!/usr/bin/env python3
"""Layered configuration manager for OverlayVFS.

Configuration is collected from several sources and merged by
precedence:

1. Compiled defaults (lowest)
2. User config file (YAML)
3. Environment variables (``OVERLAYVFS_*``)
4. CLI arguments
5. Runtime updates (highest)

Example:
    >>> config = ConfigManager()
    >>> config.load_file("overlay.yaml")
    >>> config.get("overlayvfs.logging.level", default="INFO")
    >>> config.containers()
    ['/srv/game/base', '/srv/game/mods/hd.zip']
"""

import copy
import os
import threading
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from overlayvfs.core.constants import DEFAULT_CONFIG, ConfigKey, ErrorCode
from overlayvfs.core.validators import ValidationError, validate_config

ENV_PREFIX = "OVERLAYVFS_"


class ConfigSource(Enum):
    """Configuration source precedence levels."""

    COMPILED_DEFAULTS = 1  # Lowest precedence
    USER_CONFIG = 2
    ENVIRONMENT = 3
    CLI_ARGS = 4
    RUNTIME = 5  # Highest precedence


class ConfigError(Exception):
    """Configuration error."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        self.message = message
        self.error_code = error_code
        super().__init__(message)


class ConfigManager:
    """Thread-safe layered configuration manager.

    Values are looked up from the highest precedence source down, and
    :meth:`get_all` deep-merges every source from the lowest up.
    """

    def __init__(self, config_file: Optional[str] = None, load_environment: bool = True):
        """Initialize configuration manager.

        Args:
            config_file: Optional YAML file to load as user configuration
            load_environment: Whether to read ``OVERLAYVFS_*`` variables
        """
        self._config: Dict[ConfigSource, Dict[str, Any]] = {}
        self._lock = threading.RLock()
        self.config_dir: Optional[Path] = None

        self._config[ConfigSource.COMPILED_DEFAULTS] = copy.deepcopy(DEFAULT_CONFIG)

        if config_file:
            self.load_file(config_file)

        if load_environment:
            self._load_environment()

    def load_file(self, file_path: str, source: ConfigSource = ConfigSource.USER_CONFIG) -> None:
        """Load configuration from YAML file.

        The directory holding the file becomes :attr:`config_dir`, the base
        against which relative container paths are resolved.

        Args:
            file_path: Path to YAML config file
            source: Configuration source level

        Raises:
            ConfigError: If file cannot be loaded, parsed or validated
        """
        path = Path(file_path).expanduser().resolve()

        if not path.exists():
            raise ConfigError(f"Config file not found: {file_path}", ErrorCode.NOT_FOUND)

        try:
            with open(path, "r", encoding="utf-8") as f:
                config_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"YAML parse error in {file_path}: {e}", ErrorCode.INVALID_INPUT)
        except OSError as e:
            raise ConfigError(f"Error loading config {file_path}: {e}", ErrorCode.INTERNAL_ERROR)

        if not isinstance(config_data, dict):
            raise ConfigError(f"Invalid config format in {file_path}", ErrorCode.INVALID_INPUT)

        try:
            validate_config(config_data.get(ConfigKey.ROOT, {}))
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration in {file_path}: {e}", e.error_code)

        with self._lock:
            self._config[source] = config_data
            self.config_dir = path.parent

    def load_dict(self, config_data: Dict[str, Any], source: ConfigSource = ConfigSource.RUNTIME) -> None:
        """Load configuration from dictionary.

        Args:
            config_data: Configuration dictionary
            source: Configuration source level
        """
        with self._lock:
            self._config[source] = copy.deepcopy(config_data)

    def _load_environment(self) -> None:
        """Load configuration from environment variables.

        Environment variables in format: OVERLAYVFS_SECTION_KEY=value, where
        only the first underscore separates the section from the key.
        Example: OVERLAYVFS_MOUNT_ALLOW_OTHER=true sets mount.allow_other
        """
        env_config: Dict[str, Any] = {}

        for key, value in os.environ.items():
            if not key.startswith(ENV_PREFIX):
                continue

            section, _, name = key[len(ENV_PREFIX):].lower().partition("_")
            if name:
                env_config.setdefault(section, {})[name] = self._parse_env_value(value)
            else:
                env_config[section] = self._parse_env_value(value)

        if env_config:
            with self._lock:
                self._config[ConfigSource.ENVIRONMENT] = {ConfigKey.ROOT: env_config}

    def _parse_env_value(self, value: str) -> Any:
        """Parse environment variable value into bool, int, float or str."""
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        return value

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key.

        Args:
            key: Dot-separated key path (e.g., "overlayvfs.logging.level")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        with self._lock:
            for source in sorted(self._config.keys(), key=lambda s: s.value, reverse=True):
                value = self._get_nested(self._config[source], key)
                if value is not None:
                    return value

            return default

    def _get_nested(self, config: Dict[str, Any], key: str) -> Optional[Any]:
        current: Any = config
        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return None
            current = current[part]
        return current

    def set(self, key: str, value: Any, source: ConfigSource = ConfigSource.RUNTIME) -> None:
        """Set configuration value.

        Args:
            key: Dot-separated key path
            value: Value to set
            source: Configuration source level
        """
        with self._lock:
            current = self._config.setdefault(source, {})

            parts = key.split(".")
            for part in parts[:-1]:
                current = current.setdefault(part, {})

            current[parts[-1]] = value

    def get_all(self) -> Dict[str, Any]:
        """Get merged configuration from all sources."""
        with self._lock:
            merged: Dict[str, Any] = {}

            for source in sorted(self._config.keys(), key=lambda s: s.value):
                merged = self._deep_merge(merged, self._config[source])

            return merged

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def containers(self) -> List[str]:
        """Return the ordered container paths, resolved against :attr:`config_dir`.

        Lists are not merged across sources: the highest precedence source
        that names containers wins outright.
        """
        entries = self.get(f"{ConfigKey.ROOT}.{ConfigKey.CONTAINERS}", default=[]) or []
        paths = []
        for entry in entries:
            path = entry[ConfigKey.CONTAINER_PATH] if isinstance(entry, dict) else entry
            path = os.path.expanduser(path)
            if self.config_dir is not None and not os.path.isabs(path):
                path = str(self.config_dir / path)
            paths.append(path)
        return paths

    def validate(self) -> bool:
        """Validate the merged configuration.

        Raises:
            ConfigError: If validation fails
        """
        try:
            return validate_config(self.get_all().get(ConfigKey.ROOT, {}))
        except ValidationError as e:
            raise ConfigError(str(e), e.error_code)

    def clear(self, source: Optional[ConfigSource] = None) -> None:
        """Clear configuration.

        Args:
            source: Specific source to clear, or None for all except defaults
        """
        with self._lock:
            if source:
                if source in self._config and source != ConfigSource.COMPILED_DEFAULTS:
                    del self._config[source]
            else:
                for s in [s for s in self._config if s != ConfigSource.COMPILED_DEFAULTS]:
                    del self._config[s]
