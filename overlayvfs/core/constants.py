"""
OverlayVFS Core: Constants and Type Definitions

This module provides system-wide constants, error codes, and type aliases
shared by the overlay index, the loaders and the application layer.
"""
from enum import Enum, IntEnum
from typing import TypeAlias

# Version information
OVERLAYVFS_VERSION = "1.0.0"

# Virtual path separator (also the folder suffix)
PATH_SEPARATOR = "/"
DEFAULT_ENCODING = "utf-8"


class ErrorCode(IntEnum):
    """Standardized error codes for OverlayVFS operations."""

    SUCCESS = 0  # Operation completed successfully
    INVALID_INPUT = 1  # Bad source path, malformed container or configuration
    NOT_FOUND = 2  # Virtual file or configuration file doesn't exist
    INTERNAL_ERROR = 3  # Backing storage failed underneath the overlay


# Type aliases for clarity
VirtualPath: TypeAlias = str
RealPath: TypeAlias = str


class Limits:
    """Resource limits and default values."""

    MAX_PATH_LENGTH = 4096

    # Rotating log file
    LOG_FILE_MAX_BYTES = 10 * 1024 * 1024  # 10MB
    LOG_FILE_BACKUP_COUNT = 5

    # Buffer size for copying stream contents
    READ_CHUNK_SIZE = 64 * 1024


class ContainerKind(Enum):
    """Kinds of root containers that can be layered into the overlay."""

    DIRECTORY = "directory"
    ARCHIVE = "archive"


# Configuration keys
class ConfigKey:
    """Configuration key constants."""

    # Top-level keys
    ROOT = "overlayvfs"
    CONTAINERS = "containers"
    LOGGING = "logging"
    MOUNT = "mount"

    # Container configuration
    CONTAINER_PATH = "path"

    # Logging configuration
    LOG_LEVEL = "level"
    LOG_FILE = "file"

    # Mount configuration
    MOUNT_ALLOW_OTHER = "allow_other"


# Default configuration values
DEFAULT_CONFIG = {
    ConfigKey.ROOT: {
        ConfigKey.CONTAINERS: [],
        ConfigKey.LOGGING: {
            ConfigKey.LOG_LEVEL: "INFO",
            ConfigKey.LOG_FILE: None,
        },
        ConfigKey.MOUNT: {
            ConfigKey.MOUNT_ALLOW_OTHER: False,
        },
    }
}
