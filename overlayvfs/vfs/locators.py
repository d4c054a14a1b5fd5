"""
OverlayVFS: Content locators.

A content locator records where the bytes of a virtual file physically
live. There are exactly two kinds:

- DirectoryFile: a regular file inside a directory container
- ArchiveEntry: a member of a zip archive container

Locators are immutable and opaque to the index; they are only opened on
demand through :func:`open_locator`.
"""

import os
import time
import zipfile
from dataclasses import dataclass
from typing import BinaryIO, Union

from overlayvfs.core.constants import RealPath
from overlayvfs.vfs.errors import ProviderError


@dataclass(frozen=True)
class DirectoryFile:
    """File stored in a directory container.

    Attributes:
        absolute_path: Physical path of the file (container root + "/" + relative path)
    """

    absolute_path: RealPath

    def __str__(self) -> str:
        return self.absolute_path


@dataclass(frozen=True)
class ArchiveEntry:
    """Member of a zip archive container.

    Attributes:
        archive: Open archive handle, shared by every entry loaded from it
        entry_name: Member name exactly as stored in the archive
    """

    archive: zipfile.ZipFile
    entry_name: str

    @property
    def archive_path(self) -> str:
        return self.archive.filename or "<archive>"

    def __str__(self) -> str:
        return f"{self.archive_path}!{self.entry_name}"


ContentLocator = Union[DirectoryFile, ArchiveEntry]


@dataclass(frozen=True)
class LocatorStat:
    """Size and modification time of a located file."""

    size: int
    mtime: float


def open_locator(locator: ContentLocator) -> BinaryIO:
    """Open a readable binary stream for a locator.

    Args:
        locator: Locator bound in the overlay index

    Returns:
        Binary stream positioned at the start of the content; the caller
        owns it and must close it

    Raises:
        ProviderError: If the physical file or archive member is gone
    """
    if isinstance(locator, DirectoryFile):
        try:
            return open(locator.absolute_path, "rb")
        except OSError as e:
            raise ProviderError(f"Cannot open {locator.absolute_path}: {e}") from e

    if isinstance(locator, ArchiveEntry):
        try:
            return locator.archive.open(locator.entry_name, "r")
        except KeyError as e:
            raise ProviderError(f"File does not exist in the archive: {locator}") from e
        except (ValueError, OSError, zipfile.BadZipFile) as e:
            raise ProviderError(f"Cannot read {locator}: {e}") from e

    raise TypeError(f"Unknown content locator: {locator!r}")


def stat_locator(locator: ContentLocator) -> LocatorStat:
    """Return size and modification time for a locator.

    Raises:
        ProviderError: If the physical file or archive member is gone
    """
    if isinstance(locator, DirectoryFile):
        try:
            st = os.stat(locator.absolute_path)
        except OSError as e:
            raise ProviderError(f"Cannot stat {locator.absolute_path}: {e}") from e
        return LocatorStat(size=st.st_size, mtime=st.st_mtime)

    if isinstance(locator, ArchiveEntry):
        try:
            info = locator.archive.getinfo(locator.entry_name)
        except KeyError as e:
            raise ProviderError(f"File does not exist in the archive: {locator}") from e
        mtime = time.mktime(info.date_time + (0, 0, -1))
        return LocatorStat(size=info.file_size, mtime=mtime)

    raise TypeError(f"Unknown content locator: {locator!r}")
