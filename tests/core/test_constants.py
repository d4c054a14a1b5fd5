"""Tests for constants and type definitions."""

from overlayvfs.core.constants import (
    DEFAULT_CONFIG,
    OVERLAYVFS_VERSION,
    PATH_SEPARATOR,
    ConfigKey,
    ContainerKind,
    ErrorCode,
    Limits,
)


class TestErrorCodes:
    """Test error code definitions."""

    def test_error_codes_unique(self):
        """All error codes must have unique values."""
        codes = [e.value for e in ErrorCode]
        assert len(codes) == len(set(codes))

    def test_success_is_zero(self):
        assert ErrorCode.SUCCESS == 0

    def test_codes_are_ints(self):
        assert int(ErrorCode.NOT_FOUND) == 2


class TestConstants:
    """Test scalar constants."""

    def test_version_format(self):
        assert len(OVERLAYVFS_VERSION.split(".")) == 3

    def test_separator(self):
        assert PATH_SEPARATOR == "/"

    def test_limits(self):
        assert Limits.MAX_PATH_LENGTH == 4096
        assert Limits.READ_CHUNK_SIZE > 0
        assert Limits.LOG_FILE_BACKUP_COUNT > 0

    def test_container_kinds(self):
        assert {kind.value for kind in ContainerKind} == {"directory", "archive"}


class TestDefaultConfig:
    """Test the compiled default configuration."""

    def test_structure(self):
        section = DEFAULT_CONFIG[ConfigKey.ROOT]
        assert section[ConfigKey.CONTAINERS] == []
        assert section[ConfigKey.LOGGING][ConfigKey.LOG_LEVEL] == "INFO"
        assert section[ConfigKey.LOGGING][ConfigKey.LOG_FILE] is None
        assert section[ConfigKey.MOUNT][ConfigKey.MOUNT_ALLOW_OTHER] is False
