"""
OverlayVFS: Overlay index.

The index maps virtual paths to content locators and keeps the derived
set of folder paths. Keys are compared case-insensitively; the spelling
under which a path was first registered is the one reported back.

Insertion overwrites: when a later container supplies a path that is
already bound, only the locator is replaced. The entry keeps its
original spelling and its position in insertion order.

Folders are derived locally. A folder is known only if some file sits
directly inside it; ancestors of that folder are not registered on its
behalf.
"""

from typing import Dict, Iterator, List, Optional, Tuple

from overlayvfs.core.constants import VirtualPath
from overlayvfs.core.path_utils import path_key
from overlayvfs.vfs.locators import ContentLocator


class OverlayIndex:
    """Mutable virtual path → locator mapping plus the folder set.

    The index has no removal operation and no internal locking.

    Attributes:
        _files: case-folded key → (virtual path, locator), in insertion order
        _folders: case-folded key → folder path (always ending with "/")
    """

    def __init__(self):
        self._files: Dict[str, Tuple[VirtualPath, ContentLocator]] = {}
        self._folders: Dict[str, VirtualPath] = {}

    def insert(self, path: VirtualPath, locator: ContentLocator) -> bool:
        """Bind a locator to a virtual path, replacing any previous binding.

        Args:
            path: Normalized virtual path
            locator: Where the file's bytes live

        Returns:
            True if an existing binding was overridden
        """
        key = path_key(path)
        existing = self._files.get(key)
        if existing is not None:
            self._files[key] = (existing[0], locator)
            return True

        self._files[key] = (path, locator)
        return False

    def lookup(self, path: VirtualPath) -> Optional[ContentLocator]:
        """Return the locator bound to a normalized path, if any."""
        entry = self._files.get(path_key(path))
        return entry[1] if entry is not None else None

    def register_folder(self, folder: VirtualPath) -> bool:
        """Record a folder path (ending with "/"); idempotent.

        Returns:
            True if the folder was not known before
        """
        key = path_key(folder)
        if key in self._folders:
            return False
        self._folders[key] = folder
        return True

    def contains_file(self, path: VirtualPath) -> bool:
        return path_key(path) in self._files

    def contains_folder(self, folder: VirtualPath) -> bool:
        return path_key(folder) in self._folders

    def files(self) -> List[VirtualPath]:
        """All registered file paths in insertion order."""
        return [path for path, _ in self._files.values()]

    def folders(self) -> List[VirtualPath]:
        """All registered folder paths in registration order."""
        return list(self._folders.values())

    def items(self) -> Iterator[Tuple[VirtualPath, ContentLocator]]:
        return iter(list(self._files.values()))

    def __len__(self) -> int:
        return len(self._files)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and self.contains_file(path)
