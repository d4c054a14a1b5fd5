"""
OverlayVFS: Query engine.

Read-only operations over an :class:`OverlayIndex`: existence checks,
content retrieval and folder listings. Queries never modify the index.

Listing rules:

- File listings of a non-root folder return nothing unless the folder is
  registered (some file sits directly inside it).
- Prefix matching is case-insensitive.
- Results follow index insertion order.
"""

import shutil
from io import BytesIO
from typing import BinaryIO, List, Optional

from overlayvfs.core.constants import DEFAULT_ENCODING, PATH_SEPARATOR, Limits, VirtualPath
from overlayvfs.core.path_utils import (
    ensure_trailing_slash,
    has_extension,
    normalize_path,
    path_key,
)
from overlayvfs.vfs.errors import VirtualFileNotFoundError
from overlayvfs.vfs.index import OverlayIndex
from overlayvfs.vfs.locators import ContentLocator, open_locator


class QueryEngine:
    """Stateless read operations over an overlay index."""

    def __init__(self, index: OverlayIndex):
        self.index = index

    # =========================================================================
    # Existence
    # =========================================================================

    def file_exists(self, path: str) -> bool:
        """Check if a file is bound to the given virtual path."""
        return self.index.contains_file(normalize_path(path))

    def folder_exists(self, path: str) -> bool:
        """Check if a folder is registered.

        A folder exists only when at least one file sits directly in it.
        """
        return self.index.contains_folder(normalize_path(ensure_trailing_slash(path)))

    # =========================================================================
    # Content
    # =========================================================================

    def resolve(self, path: str) -> ContentLocator:
        """Return the locator currently satisfying a virtual path.

        Raises:
            VirtualFileNotFoundError: If nothing is bound to the path
        """
        locator = self.index.lookup(normalize_path(path))
        if locator is None:
            raise VirtualFileNotFoundError(path)
        return locator

    def get_file_stream(self, path: str) -> BinaryIO:
        """Open a live binary stream for a virtual file.

        The caller owns the stream and must close it.

        Raises:
            VirtualFileNotFoundError: If nothing is bound to the path
            ProviderError: If the physical backing has disappeared
        """
        return open_locator(self.resolve(path))

    def get_file_contents(self, path: str) -> bytes:
        """Read the whole content of a virtual file.

        Raises:
            VirtualFileNotFoundError: If nothing is bound to the path
            ProviderError: If the physical backing has disappeared
        """
        buffer = BytesIO()
        with self.get_file_stream(path) as stream:
            shutil.copyfileobj(stream, buffer, Limits.READ_CHUNK_SIZE)
        return buffer.getvalue()

    def get_file_contents_as_text(self, path: str, encoding: str = DEFAULT_ENCODING) -> str:
        """Read a virtual file and decode it as text.

        Raises:
            VirtualFileNotFoundError: If nothing is bound to the path
            ProviderError: If the physical backing has disappeared
            UnicodeDecodeError: If the content is not valid in ``encoding``
        """
        return self.get_file_contents(path).decode(encoding)

    # =========================================================================
    # Listings
    # =========================================================================

    def entries(self) -> List[VirtualPath]:
        return self.index.files()

    def folders(self) -> List[VirtualPath]:
        return self.index.folders()

    def get_files_in_folder(
        self, path: str, recursive: bool = False, extension: Optional[str] = None
    ) -> List[VirtualPath]:
        """List files inside a folder.

        Args:
            path: Folder path; "" and "/" denote the root
            recursive: Include files of nested folders
            extension: Keep only files ending with "." + extension (no leading dot)

        Returns:
            Matching virtual paths; empty for an unregistered folder
        """
        folder = ensure_trailing_slash(normalize_path(path))

        if folder == PATH_SEPARATOR:
            if recursive:
                files = self.index.files()
            else:
                files = [f for f in self.index.files() if PATH_SEPARATOR not in f]
        elif not self.index.contains_folder(folder):
            return []
        else:
            prefix = path_key(folder)
            files = []
            for file_path in self.index.files():
                key = path_key(file_path)
                if not key.startswith(prefix):
                    continue
                if recursive or PATH_SEPARATOR not in key[len(prefix):]:
                    files.append(file_path)

        if extension is not None:
            files = [f for f in files if has_extension(f, extension)]

        return files

    def get_folders_in_folder(self, path: str, recursive: bool = False) -> List[VirtualPath]:
        """List registered folders below a folder.

        Args:
            path: Folder path; only "" denotes the root
            recursive: Include every deeper folder, not just direct children

        Returns:
            Matching folder paths, each ending with "/"
        """
        folder = normalize_path(path)
        if folder:
            folder = ensure_trailing_slash(folder)
        prefix = path_key(folder)

        result = []
        for candidate in self.index.folders():
            key = path_key(candidate)
            if not key.startswith(prefix) or key == prefix:
                continue
            if recursive or key[len(prefix):].count(PATH_SEPARATOR) == 1:
                result.append(candidate)
        return result
