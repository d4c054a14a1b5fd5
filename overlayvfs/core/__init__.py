"""OverlayVFS Core - Shared utilities.

Import specific functions from submodules:
    from overlayvfs.core import constants
    from overlayvfs.core import path_utils
    from overlayvfs.core import validators
"""

from overlayvfs.core import constants, path_utils, validators

__all__ = [
    "constants",
    "path_utils",
    "validators",
]
