"""
OverlayVFS Core: Virtual Path Utilities.

Virtual paths use "/" as the separator and are compared without regard
to case. Normalization is deliberately minimal: backslashes become
forward slashes and nothing else changes. Leading and trailing slashes,
repeated separators and "."/".." segments are all kept verbatim.
"""
from typing import Optional

from overlayvfs.core.constants import PATH_SEPARATOR, VirtualPath


def normalize_path(path: str) -> VirtualPath:
    r"""Convert a path into its virtual form.

    Every doubled backslash is first reduced to a single one, then every
    backslash is replaced with a forward slash. Case is preserved.

    Args:
        path: Path as supplied by a caller or read from a container

    Returns:
        Normalized virtual path

    Example:
        >>> normalize_path("textures\\ui\\button.png")
        'textures/ui/button.png'
    """
    return path.replace("\\\\", "\\").replace("\\", PATH_SEPARATOR)


def path_key(path: VirtualPath) -> str:
    """Return the case-insensitive comparison key for a virtual path.

    Characters are lowered one at a time and the key keeps the length of
    the path: "straße.txt" and "STRASSE.txt" stay distinct.
    """
    key = path.lower()
    if len(key) == len(path):
        return key
    # Some characters (e.g. "\u0130") lower to more than one code point
    return "".join(_lower_char(c) for c in path)


def _lower_char(char: str) -> str:
    lowered = char.lower()
    return lowered if len(lowered) == 1 else char


def ensure_trailing_slash(path: str) -> str:
    """Append a separator unless the path already ends with one.

    An empty path becomes "/".
    """
    if not path.endswith(PATH_SEPARATOR):
        path += PATH_SEPARATOR
    return path


def parent_folder(path: VirtualPath) -> Optional[VirtualPath]:
    """Return the immediate parent folder of a virtual file path.

    The result always ends with a separator. Files at the root of the
    namespace have no parent folder and yield None.

    Example:
        >>> parent_folder("a/b/c.txt")
        'a/b/'
        >>> parent_folder("c.txt") is None
        True
    """
    parent, sep, _ = path.rpartition(PATH_SEPARATOR)
    if not sep or not parent:
        return None
    return parent + PATH_SEPARATOR


def has_extension(path: VirtualPath, extension: str) -> bool:
    """Check whether a path ends with "." + extension, ignoring case."""
    return path_key(path).endswith(path_key("." + extension))


def relative_to_root(file_path: str, root: str) -> str:
    """Strip a container root prefix from a physical file path.

    The root may or may not end with a separator; either way the
    separator between the root and the remainder is dropped.
    """
    root_length = len(root)
    if not root.endswith(("/", "\\")):
        root_length += 1
    return file_path[root_length:]
