"""
OverlayVFS: Container loader.

Enumerates the files of a root container and feeds them into an
:class:`OverlayIndex`. A root container is either:

- a directory, walked recursively, or
- a regular file, opened as a zip archive.

Both kinds apply the same policy: every file's path is normalized,
bound in the index (overriding any earlier binding), and its immediate
parent folder is registered.
"""

import os
import zipfile
from typing import List, Optional, Tuple

from overlayvfs.core.constants import ContainerKind, VirtualPath
from overlayvfs.core.path_utils import normalize_path, parent_folder, relative_to_root
from overlayvfs.infrastructure.logger import Logger, get_logger
from overlayvfs.vfs.errors import InvalidContainerError, InvalidSourcePathError
from overlayvfs.vfs.index import OverlayIndex
from overlayvfs.vfs.locators import ArchiveEntry, ContentLocator, DirectoryFile


class ContainerLoader:
    """Loads root containers into an overlay index.

    The loader owns every archive handle it opens. Handles stay open for
    as long as the index may serve their entries and are released
    together by :meth:`close`.

    Attributes:
        index: Index receiving the bindings
        archives: Archive handles opened so far, in load order
    """

    def __init__(self, index: OverlayIndex, logger: Optional[Logger] = None):
        self.index = index
        self.archives: List[zipfile.ZipFile] = []
        self.logger = logger if logger is not None else get_logger("overlayvfs.loader")

    def add_root_container(self, source: str) -> int:
        """Add a directory or zip archive on top of the current overlay.

        Args:
            source: Path of a directory or of an archive file

        Returns:
            Number of files contributed by the container

        Raises:
            InvalidSourcePathError: If source is neither a file nor a directory
            InvalidContainerError: If source is a file that is not a readable archive
        """
        if os.path.isfile(source):
            kind = ContainerKind.ARCHIVE
            entries = self._enumerate_archive(source)
        elif os.path.isdir(source):
            kind = ContainerKind.DIRECTORY
            entries = self._enumerate_directory(source)
        else:
            raise InvalidSourcePathError(
                f"Incorrect path provided, not a file or directory: {source}"
            )

        overrides = 0
        with self.logger.add_context(source=source, kind=kind.value):
            for virtual_path, locator in entries:
                if self.index.insert(virtual_path, locator):
                    overrides += 1
                    self.logger.debug("Overriding file", path=virtual_path)

                folder = parent_folder(virtual_path)
                if folder is not None:
                    self.index.register_folder(folder)

            self.logger.info("Loaded container", files=len(entries), overrides=overrides)

        return len(entries)

    def _enumerate_archive(self, source: str) -> List[Tuple[VirtualPath, ContentLocator]]:
        """Open an archive and list (virtual path, locator) pairs for its files.

        Nothing is inserted here, so a corrupt archive leaves the index
        untouched.
        """
        try:
            archive = zipfile.ZipFile(source, "r")
        except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError, ValueError, EOFError) as e:
            raise InvalidContainerError(
                f"Incorrect container {source}. The container must be a folder or a zip archive: {e}"
            ) from e

        self.archives.append(archive)

        entries = []
        for info in archive.infolist():
            # Directory markers carry no content
            if info.filename.endswith("/"):
                continue
            entries.append((normalize_path(info.filename), ArchiveEntry(archive, info.filename)))
        return entries

    def _enumerate_directory(self, source: str) -> List[Tuple[VirtualPath, ContentLocator]]:
        """Walk a directory and list (virtual path, locator) pairs for its files.

        Files of a directory come before its subdirectories, each sorted
        by name.
        """
        root = os.path.abspath(source)
        entries = []

        for dirpath, dirnames, filenames in os.walk(source):
            dirnames.sort()
            for filename in sorted(filenames):
                file_path = os.path.join(dirpath, filename)
                if not os.path.isfile(file_path):
                    continue

                relative = relative_to_root(file_path, source)
                entries.append(
                    (normalize_path(relative), DirectoryFile(os.path.join(root, relative)))
                )

        return entries

    def close(self) -> None:
        """Close every archive opened by this loader."""
        while self.archives:
            self.archives.pop().close()
