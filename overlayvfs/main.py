#!/usr/bin/env python3
"""Mount entry point for OverlayVFS.

This module handles:
- Building the overlay from configuration
- FUSE filesystem mounting (read-only)
- Unmount-driven shutdown (libfuse owns SIGINT and SIGTERM)
- Releasing archive handles on exit

Example:
    >>> from overlayvfs.main import run_mount
    >>> run_mount(config, "/mnt/game", foreground=True, logger=logger)
"""

import sys
from typing import Dict, List, Optional

from fuse import FUSE

from overlayvfs.core.constants import ConfigKey
from overlayvfs.fuse.operations import OverlayFSOperations
from overlayvfs.infrastructure.config_manager import ConfigManager
from overlayvfs.infrastructure.logger import Logger
from overlayvfs.vfs.errors import VFSError
from overlayvfs.vfs.manager import VirtualFileSystem


class OverlayVFSMain:
    """
    Mount controller for OverlayVFS.

    Handles overlay lifecycle, FUSE mounting, and shutdown.

    No Python signal handlers are installed: fusepy restores the default
    SIGINT action and libfuse installs its own SIGINT/SIGTERM/SIGHUP
    handlers, which end the FUSE loop and unmount.
    """

    def __init__(
        self,
        config: ConfigManager,
        mount_point: str,
        logger: Logger,
        foreground: bool = False,
        fuse_options: Optional[List[str]] = None,
    ):
        """
        Initialize mount controller.

        Args:
            config: Configuration naming the containers
            mount_point: Directory to mount on
            logger: Logger instance
            foreground: Run FUSE in the foreground
            fuse_options: Extra FUSE options ("name" or "name=value")
        """
        self.config = config
        self.mount_point = mount_point
        self.logger = logger
        self.foreground = foreground
        self.fuse_options = fuse_options or []

        self.vfs: Optional[VirtualFileSystem] = None
        self.fuse_ops: Optional[OverlayFSOperations] = None

    def initialize_components(self) -> None:
        """
        Load every configured container and create the FUSE operations.

        Raises:
            VFSError: If a container cannot be loaded
        """
        self.logger.info("Loading containers...")
        self.vfs = VirtualFileSystem.from_config(self.config)
        self.logger.info(
            "Overlay ready",
            containers=len(self.vfs.containers),
            files=len(self.vfs),
        )

        self.fuse_ops = OverlayFSOperations(self.vfs)

    def _build_fuse_options(self) -> Dict:
        """
        Build FUSE mount options dictionary.

        The mount is always read-only.
        """
        options = {"ro": True}

        allow_other = self.config.get(f"{ConfigKey.ROOT}.{ConfigKey.MOUNT}.{ConfigKey.MOUNT_ALLOW_OTHER}")
        if allow_other:
            options["allow_other"] = True

        for opt in self.fuse_options:
            if "=" in opt:
                key, value = opt.split("=", 1)
                options[key] = value
            else:
                options[opt] = True

        return options

    def mount_filesystem(self) -> int:
        """
        Mount the FUSE filesystem (blocks until unmount).

        Returns:
            Exit code (0 for success, non-zero for failure)
        """
        self.logger.info(f"Mounting OverlayVFS at: {self.mount_point}")

        try:
            FUSE(
                self.fuse_ops,
                self.mount_point,
                foreground=self.foreground,
                nothreads=True,
                **self._build_fuse_options(),
            )
        except RuntimeError as e:
            self.logger.error(f"FUSE mount failed: {e}")
            return 1

        self.logger.info("FUSE unmounted successfully")
        return 0

    def cleanup(self) -> None:
        """Log final statistics and release archive handles."""
        self.logger.info("Cleaning up...")

        if self.fuse_ops is not None:
            self.logger.info(f"Final statistics: {self.fuse_ops.get_stats()}")

        if self.vfs is not None:
            self.vfs.close()
            self.logger.debug("Archive handles released")

        self.logger.info("Cleanup complete")

    def run(self) -> int:
        """
        Run the mount.

        Returns:
            Exit code (0 for success, non-zero for failure)
        """
        try:
            self.initialize_components()
            return self.mount_filesystem()

        except VFSError as e:
            self.logger.error(f"Cannot build overlay: {e}")
            return 1

        except KeyboardInterrupt:
            self.logger.info("Interrupted by user")
            return 130

        finally:
            self.cleanup()


def run_mount(
    config: ConfigManager,
    mount_point: str,
    logger: Logger,
    foreground: bool = False,
    fuse_options: Optional[List[str]] = None,
) -> int:
    """
    Mount an overlay described by configuration.

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    main = OverlayVFSMain(config, mount_point, logger, foreground=foreground, fuse_options=fuse_options)
    return main.run()


def main():
    """
    Entry point when run as standalone script.

    Delegates to the CLI for argument parsing.
    """
    from overlayvfs.cli import main as cli_main

    return cli_main()


if __name__ == "__main__":
    sys.exit(main())
