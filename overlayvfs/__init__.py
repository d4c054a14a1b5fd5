"""OverlayVFS - Layered read-only virtual file system over directories and zip archives."""

from overlayvfs.core.constants import OVERLAYVFS_VERSION as __version__
from overlayvfs.vfs import (
    InvalidContainerError,
    InvalidSourcePathError,
    ProviderError,
    VFSError,
    VirtualFileNotFoundError,
    VirtualFileSystem,
)

__all__ = [
    "VirtualFileSystem",
    "VFSError",
    "InvalidSourcePathError",
    "InvalidContainerError",
    "VirtualFileNotFoundError",
    "ProviderError",
]
