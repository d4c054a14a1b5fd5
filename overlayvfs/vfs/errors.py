"""
OverlayVFS: Error types raised by the overlay.

Every error carries an :class:`ErrorCode` so that callers (and the FUSE
adapter) can map failures without string matching.
"""
from typing import Optional

from overlayvfs.core.constants import ErrorCode


class VFSError(Exception):
    """Base exception for overlay failures."""

    error_code = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, error_code: Optional[ErrorCode] = None):
        """Initialize VFSError.

        Args:
            message: Error message
            error_code: Associated error code (class default if omitted)
        """
        super().__init__(message)
        self.message = message
        if error_code is not None:
            self.error_code = error_code


class InvalidSourcePathError(VFSError):
    """Root container path is neither an existing file nor a directory."""

    error_code = ErrorCode.INVALID_INPUT


class InvalidContainerError(VFSError):
    """Root container file exists but cannot be opened as an archive."""

    error_code = ErrorCode.INVALID_INPUT


class VirtualFileNotFoundError(VFSError):
    """No file is bound to the requested virtual path."""

    error_code = ErrorCode.NOT_FOUND

    def __init__(self, virtual_path: str):
        super().__init__(f"File not found in overlay: {virtual_path}")
        self.virtual_path = virtual_path


class ProviderError(VFSError):
    """The physical backing of a bound file disappeared after loading."""

    error_code = ErrorCode.INTERNAL_ERROR
