"""
OverlayVFS Core: Input Validators.

Validation of the configuration structure and of the paths it names.
"""
from typing import Any, Dict

from overlayvfs.core.constants import ConfigKey, ErrorCode, Limits

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ValidationError(Exception):
    """Base exception for validation errors."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        """Initialize ValidationError.

        Args:
            message: Error message
            error_code: Associated error code
        """
        super().__init__(message)
        self.error_code = error_code


def validate_config(config: Dict[str, Any]) -> bool:
    """Validate the ``overlayvfs`` configuration section.

    Args:
        config: Configuration dictionary (contents of the ``overlayvfs`` key)

    Returns:
        True if valid

    Raises:
        ValidationError: If configuration is invalid
    """
    if not isinstance(config, dict):
        raise ValidationError("Configuration must be a dictionary")

    if ConfigKey.CONTAINERS in config:
        containers = config[ConfigKey.CONTAINERS]
        if not isinstance(containers, list):
            raise ValidationError("Containers must be a list")

        for i, container in enumerate(containers):
            try:
                validate_container_config(container)
            except ValidationError as e:
                raise ValidationError(f"Invalid container configuration at index {i}: {e}")

    if ConfigKey.LOGGING in config:
        validate_logging_config(config[ConfigKey.LOGGING])

    if ConfigKey.MOUNT in config:
        mount = config[ConfigKey.MOUNT]
        if not isinstance(mount, dict):
            raise ValidationError("Mount configuration must be a dictionary")
        allow_other = mount.get(ConfigKey.MOUNT_ALLOW_OTHER, False)
        if not isinstance(allow_other, bool):
            raise ValidationError(f"Mount allow_other must be boolean: {allow_other}")

    return True


def validate_container_config(container: Any) -> bool:
    """Validate a single container entry.

    A container may be given either as a bare path string or as a
    dictionary with a ``path`` field.

    Raises:
        ValidationError: If the entry is invalid
    """
    if isinstance(container, str):
        return validate_path(container)

    if not isinstance(container, dict):
        raise ValidationError("Container must be a path or a dictionary")

    if ConfigKey.CONTAINER_PATH not in container:
        raise ValidationError("Container must have 'path' field")

    return validate_path(container[ConfigKey.CONTAINER_PATH])


def validate_logging_config(logging_config: Dict[str, Any]) -> bool:
    """Validate the logging section.

    Raises:
        ValidationError: If the section is invalid
    """
    if not isinstance(logging_config, dict):
        raise ValidationError("Logging configuration must be a dictionary")

    if ConfigKey.LOG_LEVEL in logging_config:
        validate_log_level(logging_config[ConfigKey.LOG_LEVEL])

    log_file = logging_config.get(ConfigKey.LOG_FILE)
    if log_file is not None:
        validate_path(log_file)

    return True


def validate_log_level(level: Any) -> bool:
    """Validate a log level name (case-insensitive)."""
    if not isinstance(level, str) or level.upper() not in VALID_LOG_LEVELS:
        raise ValidationError(f"Invalid log level: {level}. Must be one of {list(VALID_LOG_LEVELS)}")
    return True


def validate_path(path: Any) -> bool:
    """Validate that a filesystem path is well formed.

    Args:
        path: Path to validate

    Returns:
        True if valid

    Raises:
        ValidationError: If path is invalid
    """
    if not isinstance(path, str):
        raise ValidationError(f"Path must be string, got {type(path)}")

    if not path:
        raise ValidationError("Path cannot be empty")

    if len(path) > Limits.MAX_PATH_LENGTH:
        raise ValidationError(f"Path exceeds maximum length ({Limits.MAX_PATH_LENGTH})")

    if "\0" in path:
        raise ValidationError("Path contains null bytes")

    # Check for control characters
    if any(ord(c) < 32 and c not in "\t\n\r" for c in path):
        raise ValidationError("Path contains control characters")

    return True
