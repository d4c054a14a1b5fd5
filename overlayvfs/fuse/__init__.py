"""OverlayVFS FUSE Interface.

Read-only FUSE mount of a loaded overlay:
- OverlayFSOperations: FUSE callback implementations

Usage:
    from overlayvfs.fuse import OverlayFSOperations
    from overlayvfs.vfs import VirtualFileSystem

    vfs = VirtualFileSystem()
    vfs.add_root_container("Data/base")
    ops = OverlayFSOperations(vfs)
"""

from overlayvfs.fuse.operations import FileHandle, OverlayFSOperations

__all__ = [
    "OverlayFSOperations",
    "FileHandle",
]
