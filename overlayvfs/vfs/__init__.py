"""
OverlayVFS - Layered read-only file namespace.

Public API:
-----------

Facade:
    VirtualFileSystem: Owns an index, a loader and a query engine

Building blocks:
    OverlayIndex: Virtual path → locator mapping plus folder set
    ContainerLoader: Loads directories and zip archives into an index
    QueryEngine: Existence checks, content retrieval and listings
    DirectoryFile, ArchiveEntry: Content locators

Errors:
    VFSError, InvalidSourcePathError, InvalidContainerError,
    VirtualFileNotFoundError, ProviderError

Usage Example:
--------------

    from overlayvfs.vfs import VirtualFileSystem

    vfs = VirtualFileSystem()
    vfs.add_root_container("Data/base")
    vfs.add_root_container("Data/mod1.pak")

    vfs.get_files_in_folder("textures", recursive=True, extension="png")
"""

from overlayvfs.vfs.errors import (
    InvalidContainerError,
    InvalidSourcePathError,
    ProviderError,
    VFSError,
    VirtualFileNotFoundError,
)
from overlayvfs.vfs.index import OverlayIndex
from overlayvfs.vfs.loader import ContainerLoader
from overlayvfs.vfs.locators import ArchiveEntry, ContentLocator, DirectoryFile
from overlayvfs.vfs.manager import VirtualFileSystem
from overlayvfs.vfs.query import QueryEngine

__all__ = [
    # Facade
    "VirtualFileSystem",
    # Building blocks
    "OverlayIndex",
    "ContainerLoader",
    "QueryEngine",
    "ContentLocator",
    "DirectoryFile",
    "ArchiveEntry",
    # Errors
    "VFSError",
    "InvalidSourcePathError",
    "InvalidContainerError",
    "VirtualFileNotFoundError",
    "ProviderError",
]
