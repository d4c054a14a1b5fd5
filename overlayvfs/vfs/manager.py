"""
OverlayVFS: Virtual file system.

The VirtualFileSystem is the public entry point. It owns one overlay
index and wires a container loader (the only writer) and a query engine
(readers) to it. Several independent instances can coexist in a process.

Example:
    >>> with VirtualFileSystem() as vfs:
    ...     vfs.add_root_container("Data/base")
    ...     vfs.add_root_container("Data/mods/hd_textures.zip")
    ...     vfs.get_file_contents_as_text("config/settings.ini")
"""

from typing import BinaryIO, List, Optional

from overlayvfs.core.constants import DEFAULT_ENCODING, VirtualPath
from overlayvfs.infrastructure.config_manager import ConfigManager
from overlayvfs.infrastructure.logger import Logger, get_logger
from overlayvfs.vfs.index import OverlayIndex
from overlayvfs.vfs.loader import ContainerLoader
from overlayvfs.vfs.locators import ContentLocator
from overlayvfs.vfs.query import QueryEngine


class VirtualFileSystem:
    """
    Read-only overlay of directories and zip archives.

    Containers added later override files of earlier containers at the
    same (case-insensitive) virtual path. Containers cannot be removed;
    :meth:`close` tears down the whole overlay and releases archive
    handles.

    The overlay performs no locking. Adding containers while other
    threads query must be serialized by the caller.

    Attributes:
        index: The overlay index shared by loader and query engine
        loader: Container loader feeding the index
        query: Query engine reading the index
    """

    def __init__(self, logger: Optional[Logger] = None):
        self.logger = logger if logger is not None else get_logger("overlayvfs.vfs")
        self.index = OverlayIndex()
        self.loader = ContainerLoader(self.index, logger=self.logger)
        self.query = QueryEngine(self.index)
        self.containers: List[str] = []

    @classmethod
    def from_config(cls, config: ConfigManager, logger: Optional[Logger] = None) -> "VirtualFileSystem":
        """Create an overlay and load every configured container in order.

        Args:
            config: Configuration manager naming ``overlayvfs.containers``
            logger: Optional logger

        Raises:
            InvalidSourcePathError: If a configured container does not exist
            InvalidContainerError: If a configured archive cannot be opened
        """
        vfs = cls(logger=logger)
        try:
            for container in config.containers():
                vfs.add_root_container(container)
        except Exception:
            vfs.close()
            raise
        return vfs

    # =========================================================================
    # Mutation
    # =========================================================================

    def add_root_container(self, source: str) -> int:
        """Layer a directory or zip archive on top of the overlay.

        Returns:
            Number of files contributed by the container

        Raises:
            InvalidSourcePathError: If source is neither a file nor a directory
            InvalidContainerError: If source is a file that is not a readable archive
        """
        count = self.loader.add_root_container(source)
        self.containers.append(source)
        return count

    # =========================================================================
    # Queries
    # =========================================================================

    def file_exists(self, virtual_path: str) -> bool:
        return self.query.file_exists(virtual_path)

    def folder_exists(self, virtual_path: str) -> bool:
        return self.query.folder_exists(virtual_path)

    def resolve(self, virtual_path: str) -> ContentLocator:
        """Return the physical location currently serving a virtual path."""
        return self.query.resolve(virtual_path)

    def get_file_stream(self, virtual_path: str) -> BinaryIO:
        return self.query.get_file_stream(virtual_path)

    def get_file_contents(self, virtual_path: str) -> bytes:
        return self.query.get_file_contents(virtual_path)

    def get_file_contents_as_text(self, virtual_path: str, encoding: str = DEFAULT_ENCODING) -> str:
        return self.query.get_file_contents_as_text(virtual_path, encoding)

    def entries(self) -> List[VirtualPath]:
        """All file paths in the overlay."""
        return self.query.entries()

    def folders(self) -> List[VirtualPath]:
        """All registered folder paths in the overlay."""
        return self.query.folders()

    def get_files_in_folder(
        self, virtual_path: str, recursive: bool = False, extension: Optional[str] = None
    ) -> List[VirtualPath]:
        return self.query.get_files_in_folder(virtual_path, recursive=recursive, extension=extension)

    def get_folders_in_folder(self, virtual_path: str, recursive: bool = False) -> List[VirtualPath]:
        return self.query.get_folders_in_folder(virtual_path, recursive=recursive)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def close(self) -> None:
        """Release every archive handle held by the overlay.

        Archive-backed entries cannot be read after closing.
        """
        self.loader.close()

    def __enter__(self) -> "VirtualFileSystem":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __len__(self) -> int:
        return len(self.index)
