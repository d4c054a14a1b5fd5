"""
FUSE filesystem operations for OverlayVFS.

Exposes a loaded VirtualFileSystem as a read-only mount:
- Metadata operations (getattr, statfs)
- Directory listing (readdir)
- File operations (open, read, release)

Mutating operations fall through to fusepy's defaults, which refuse
them with EROFS.

The mount derives its directory tree from the file paths themselves:
every ancestor of a file is a directory. This keeps the tree navigable
where the overlay's folder index only records immediate parents.
"""

import errno
import os
import stat
import threading
import time
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Dict, List, Optional

from fuse import FuseOSError, Operations

from overlayvfs.core.constants import PATH_SEPARATOR, VirtualPath
from overlayvfs.core.path_utils import path_key
from overlayvfs.infrastructure.logger import Logger, get_logger
from overlayvfs.vfs.errors import ProviderError, VirtualFileNotFoundError
from overlayvfs.vfs.locators import stat_locator
from overlayvfs.vfs.manager import VirtualFileSystem

WRITE_FLAGS = os.O_WRONLY | os.O_RDWR | os.O_APPEND | os.O_CREAT | os.O_TRUNC


@dataclass
class FileHandle:
    """Represents an open file handle."""

    stream: BinaryIO  # Stream opened from the content locator
    virtual_path: VirtualPath  # Virtual path the stream belongs to
    lock: threading.Lock = field(default_factory=threading.Lock)


class OverlayFSOperations(Operations):
    """
    Read-only FUSE operations over a VirtualFileSystem.

    The overlay must be fully loaded before mounting; the directory tree
    is computed once at construction.

    Thread Safety:
    - The handle table is guarded by a lock
    - Each handle serializes its own seek/read pairs
    """

    def __init__(self, vfs: VirtualFileSystem, logger: Optional[Logger] = None):
        """
        Initialize FUSE operations.

        Args:
            vfs: Loaded overlay to expose
            logger: Optional logger (component logger by default)
        """
        self.vfs = vfs
        self.logger = logger if logger is not None else get_logger("overlayvfs.fuse")
        self.mount_time = time.time()

        # Directory tree: dir key -> {child key: display name}
        self._dirs: Dict[str, Dict[str, str]] = {"": {}}
        # File key -> virtual path bound in the overlay
        self._files: Dict[str, VirtualPath] = {}
        self._build_tree()

        # File handle tracking
        self.fds: Dict[int, FileHandle] = {}
        self.fd_counter = 0
        self.fd_lock = threading.Lock()

        self.logger.info("FUSE operations initialized", files=len(self._files), dirs=len(self._dirs))

    # =========================================================================
    # Tree
    # =========================================================================

    def _build_tree(self) -> None:
        """Derive directories from every file path in the overlay."""
        for virtual_path in self.vfs.entries():
            parts = [p for p in virtual_path.split(PATH_SEPARATOR) if p]
            if not parts:
                continue

            parent_key = ""
            for depth, part in enumerate(parts[:-1]):
                child_key = path_key(PATH_SEPARATOR.join(parts[: depth + 1]))
                if child_key in self._files:
                    self.logger.warning("Directory shadows file", path=virtual_path)
                    del self._files[child_key]
                    del self._dirs[parent_key][path_key(part)]
                self._dirs[parent_key].setdefault(path_key(part), part)
                self._dirs.setdefault(child_key, {})
                parent_key = child_key

            file_key = path_key(PATH_SEPARATOR.join(parts))
            if file_key in self._dirs:
                self.logger.warning("File hidden by directory", path=virtual_path)
                continue
            self._dirs[parent_key].setdefault(path_key(parts[-1]), parts[-1])
            self._files[file_key] = virtual_path

    def _key(self, path: str) -> str:
        return path_key(path.strip(PATH_SEPARATOR))

    # =========================================================================
    # FUSE Metadata Operations
    # =========================================================================

    def getattr(self, path: str, fh: Optional[int] = None) -> Dict[str, Any]:
        """
        Get file attributes (equivalent to stat()).

        Raises:
            FuseOSError: ENOENT if path doesn't exist, EIO if the backing is gone
        """
        key = self._key(path)

        if key in self._dirs:
            return {
                "st_mode": stat.S_IFDIR | 0o555,
                "st_nlink": 2,
                "st_size": 0,
                "st_ctime": self.mount_time,
                "st_mtime": self.mount_time,
                "st_atime": self.mount_time,
                "st_uid": os.getuid(),
                "st_gid": os.getgid(),
            }

        virtual_path = self._files.get(key)
        if virtual_path is None:
            raise FuseOSError(errno.ENOENT)

        try:
            info = stat_locator(self.vfs.resolve(virtual_path))
        except VirtualFileNotFoundError:
            raise FuseOSError(errno.ENOENT)
        except ProviderError as e:
            self.logger.error("Backing file missing", path=virtual_path, error=str(e))
            raise FuseOSError(errno.EIO)

        return {
            "st_mode": stat.S_IFREG | 0o444,
            "st_nlink": 1,
            "st_size": info.size,
            "st_ctime": info.mtime,
            "st_mtime": info.mtime,
            "st_atime": info.mtime,
            "st_uid": os.getuid(),
            "st_gid": os.getgid(),
        }

    def statfs(self, path: str) -> Dict[str, Any]:
        """Report filesystem statistics of the read-only overlay."""
        return {
            "f_bsize": 4096,
            "f_frsize": 4096,
            "f_blocks": 0,
            "f_bfree": 0,
            "f_bavail": 0,
            "f_files": len(self._files) + len(self._dirs),
            "f_ffree": 0,
            "f_favail": 0,
            "f_namemax": 255,
        }

    def readdir(self, path: str, fh: int) -> List[str]:
        """
        List directory contents.

        Raises:
            FuseOSError: ENOENT if directory doesn't exist, ENOTDIR for files
        """
        key = self._key(path)
        children = self._dirs.get(key)
        if children is None:
            if key in self._files:
                raise FuseOSError(errno.ENOTDIR)
            raise FuseOSError(errno.ENOENT)

        return [".", ".."] + list(children.values())

    # =========================================================================
    # FUSE File Operations
    # =========================================================================

    def open(self, path: str, flags: int) -> int:
        """
        Open file and return file handle.

        Raises:
            FuseOSError: EROFS for write access, ENOENT if file doesn't exist,
                EIO if the backing is gone
        """
        if flags & WRITE_FLAGS:
            raise FuseOSError(errno.EROFS)

        virtual_path = self._files.get(self._key(path))
        if virtual_path is None:
            raise FuseOSError(errno.ENOENT)

        try:
            stream = self.vfs.get_file_stream(virtual_path)
        except VirtualFileNotFoundError:
            raise FuseOSError(errno.ENOENT)
        except ProviderError as e:
            self.logger.error("Backing file missing", path=virtual_path, error=str(e))
            raise FuseOSError(errno.EIO)

        fh = self._allocate_file_handle(stream, virtual_path)
        self.logger.debug("Opened file", path=virtual_path, fh=fh)
        return fh

    def read(self, path: str, size: int, offset: int, fh: int) -> bytes:
        """
        Read file content.

        Raises:
            FuseOSError: EBADF if invalid handle, EIO on read failure
        """
        handle = self._get_file_handle(fh)

        with handle.lock:
            try:
                handle.stream.seek(offset)
                return handle.stream.read(size)
            except (OSError, ValueError) as e:
                self.logger.error("Read failed", path=handle.virtual_path, error=str(e))
                raise FuseOSError(errno.EIO)

    def release(self, path: str, fh: int) -> int:
        """Release (close) file handle."""
        handle = self._release_file_handle(fh)
        if handle is not None:
            handle.stream.close()
            self.logger.debug("Closed file", path=handle.virtual_path, fh=fh)
        return 0

    # =========================================================================
    # File Handle Management
    # =========================================================================

    def _allocate_file_handle(self, stream: BinaryIO, virtual_path: VirtualPath) -> int:
        with self.fd_lock:
            fh_id = self.fd_counter
            self.fds[fh_id] = FileHandle(stream=stream, virtual_path=virtual_path)
            self.fd_counter += 1
            return fh_id

    def _get_file_handle(self, fh: int) -> FileHandle:
        """
        Get file handle by ID.

        Raises:
            FuseOSError: EBADF if handle doesn't exist
        """
        with self.fd_lock:
            if fh not in self.fds:
                raise FuseOSError(errno.EBADF)
            return self.fds[fh]

    def _release_file_handle(self, fh: int) -> Optional[FileHandle]:
        with self.fd_lock:
            return self.fds.pop(fh, None)

    def get_stats(self) -> Dict[str, Any]:
        """
        Get filesystem statistics.

        Returns:
            Dictionary with statistics
        """
        return {
            "open_files": len(self.fds),
            "files": len(self._files),
            "directories": len(self._dirs),
            "containers": len(self.vfs.containers),
        }
