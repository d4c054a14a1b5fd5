#!/usr/bin/env python3
"""Command-line interface for OverlayVFS.

This module provides the CLI for inspecting and mounting overlays:
- Argument parsing and validation
- Configuration file loading
- Listing, reading and locating virtual files
- Read-only FUSE mounting

Example:
    >>> from overlayvfs.cli import parse_arguments
    >>> args = parse_arguments(['-s', 'base', '-s', 'mod1.zip', 'ls', '-r'])
"""

import argparse
import os
import sys
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import jinja2

from overlayvfs.core.constants import OVERLAYVFS_VERSION, ConfigKey
from overlayvfs.infrastructure.config_manager import ConfigError, ConfigManager, ConfigSource
from overlayvfs.infrastructure.logger import Logger, configure_logging
from overlayvfs.vfs.errors import VFSError, VirtualFileNotFoundError
from overlayvfs.vfs.manager import VirtualFileSystem

DESCRIPTION = "OverlayVFS - Layered read-only file namespace over directories and zip archives"
DEFAULT_FORMAT = "{{ path }}"


class CLIError(Exception):
    """Exception raised for CLI-related errors."""

    pass


def parse_arguments(args: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        args: Argument list to parse (defaults to sys.argv[1:])

    Returns:
        Parsed arguments namespace

    Raises:
        SystemExit: On invalid arguments or --help/--version
        CLIError: If argument validation fails
    """
    parser = argparse.ArgumentParser(
        prog="overlayvfs",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List root files of a base folder overridden by a zipped mod
  overlayvfs -s Data/base -s Data/mod1.zip ls

  # List every texture, showing which container serves it
  overlayvfs -s Data/base -s Data/mod1.zip ls textures -r -e png \\
      --format "{{ path }} <- {{ source }}"

  # Print a file through the overlay
  overlayvfs --config overlay.yaml cat config/settings.ini

  # Mount read-only
  overlayvfs --config overlay.yaml mount /mnt/game --foreground
        """,
    )

    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {OVERLAYVFS_VERSION}",
    )
    parser.add_argument(
        "-c",
        "--config",
        metavar="FILE",
        type=str,
        help="Configuration file path (YAML format)",
    )
    parser.add_argument(
        "-s",
        "--source",
        metavar="PATH",
        action="append",
        dest="sources",
        type=str,
        help="Container to layer (directory or zip archive); repeat in priority order, lowest first",
    )

    log_group = parser.add_argument_group("logging options")
    log_group.add_argument("--debug", action="store_true", help="Enable debug logging")
    log_group.add_argument("--log-file", metavar="FILE", type=str, help="Also log to this file")

    commands = parser.add_subparsers(dest="command", metavar="COMMAND")
    commands.required = True

    ls_parser = commands.add_parser("ls", help="List files or folders in a virtual folder")
    ls_parser.add_argument("path", nargs="?", default="", help="Virtual folder (default: root)")
    ls_parser.add_argument("-r", "--recursive", action="store_true", help="Descend into subfolders")
    ls_parser.add_argument("-e", "--extension", metavar="EXT", help="Only files with this extension (no dot)")
    ls_parser.add_argument("--folders", action="store_true", help="List folders instead of files")
    ls_parser.add_argument(
        "--format",
        metavar="TEMPLATE",
        default=DEFAULT_FORMAT,
        help="Jinja2 template per row; variables: path, kind, source",
    )

    cat_parser = commands.add_parser("cat", help="Print a virtual file")
    cat_parser.add_argument("path", help="Virtual file path")
    cat_parser.add_argument("--encoding", default="utf-8", help="Text encoding (default: utf-8)")

    exists_parser = commands.add_parser("exists", help="Exit 0 if a virtual file or folder exists")
    exists_parser.add_argument("path", help="Virtual path")

    which_parser = commands.add_parser("which", help="Show the physical source of a virtual file")
    which_parser.add_argument("path", help="Virtual file path")

    mount_parser = commands.add_parser("mount", help="Mount the overlay read-only via FUSE")
    mount_parser.add_argument("mount", metavar="MOUNTPOINT", help="Mount point directory")
    mount_parser.add_argument("--foreground", action="store_true", help="Run in foreground")
    mount_parser.add_argument("--allow-other", action="store_true", help="Allow other users to access the mount")
    mount_parser.add_argument(
        "--fuse-opt",
        metavar="OPT",
        action="append",
        dest="fuse_options",
        help="Additional FUSE options (can be specified multiple times)",
    )

    parsed = parser.parse_args(args)
    _validate_arguments(parsed)
    return parsed


def _validate_arguments(args: argparse.Namespace) -> None:
    """
    Validate parsed arguments.

    Raises:
        CLIError: If validation fails
    """
    if not args.config and not args.sources:
        raise CLIError(
            "Either --config or --source must be specified\n" "Use --help for usage information"
        )

    if args.config:
        config_path = Path(args.config)
        if not config_path.exists():
            raise CLIError(f"Configuration file does not exist: {args.config}")
        if not config_path.is_file():
            raise CLIError(f"Configuration path is not a file: {args.config}")

    if args.sources:
        for source in args.sources:
            if not os.path.exists(source):
                raise CLIError(f"Container does not exist: {source}")

    if args.command == "ls" and args.folders and args.extension is not None:
        raise CLIError("--extension cannot be combined with --folders")

    if args.command == "mount":
        mount_path = Path(args.mount)
        if not mount_path.exists():
            raise CLIError(f"Mount point does not exist: {args.mount}")
        if not mount_path.is_dir():
            raise CLIError(f"Mount point is not a directory: {args.mount}")
        if any(mount_path.iterdir()):
            raise CLIError(
                f"Mount point is not empty: {args.mount}\n"
                "For safety, OverlayVFS requires an empty mount point"
            )


def build_config(args: argparse.Namespace) -> ConfigManager:
    """
    Build the configuration from an optional file plus command-line arguments.

    Command-line sources replace the configured container list.

    Raises:
        CLIError: If the configuration file cannot be loaded
    """
    try:
        config = ConfigManager(args.config)
    except ConfigError as e:
        raise CLIError(str(e))

    overrides: Dict = {}
    if args.sources:
        overrides[ConfigKey.CONTAINERS] = [os.path.abspath(source) for source in args.sources]
    if args.debug or args.log_file:
        overrides[ConfigKey.LOGGING] = {}
        if args.debug:
            overrides[ConfigKey.LOGGING][ConfigKey.LOG_LEVEL] = "DEBUG"
        if args.log_file:
            overrides[ConfigKey.LOGGING][ConfigKey.LOG_FILE] = args.log_file
    if getattr(args, "allow_other", False):
        overrides[ConfigKey.MOUNT] = {ConfigKey.MOUNT_ALLOW_OTHER: True}

    if overrides:
        config.load_dict({ConfigKey.ROOT: overrides}, ConfigSource.CLI_ARGS)

    try:
        config.validate()
    except ConfigError as e:
        raise CLIError(f"Invalid configuration: {e}")

    return config


def setup_logging(config: ConfigManager) -> Logger:
    """
    Setup logging from the merged configuration.

    Returns:
        Configured logger instance
    """
    level = config.get(f"{ConfigKey.ROOT}.{ConfigKey.LOGGING}.{ConfigKey.LOG_LEVEL}", default="INFO")
    log_file = config.get(f"{ConfigKey.ROOT}.{ConfigKey.LOGGING}.{ConfigKey.LOG_FILE}")
    return configure_logging(level=level, log_file=log_file)


def render_rows(template_text: str, rows: Iterable[Dict[str, str]]) -> List[str]:
    """
    Render one output line per row with a Jinja2 template.

    Raises:
        CLIError: If the template is invalid or references unknown variables
    """
    env = jinja2.Environment(undefined=jinja2.StrictUndefined, autoescape=False)
    try:
        template = env.from_string(template_text)
        return [template.render(**row) for row in rows]
    except jinja2.TemplateError as e:
        raise CLIError(f"Invalid format template: {e}")


def validate_runtime_environment() -> None:
    """
    Validate that FUSE can be used for mounting.

    Raises:
        CLIError: If environment validation fails
    """
    try:
        import fuse
    except (ImportError, OSError) as e:
        raise CLIError(f"FUSE library not available: {e}\n" "Install fusepy and libfuse")

    if not hasattr(fuse, "FUSE"):
        raise CLIError("FUSE library is too old or incompatible\n" "Install fusepy: pip install fusepy")

    if not os.path.exists("/dev/fuse"):
        raise CLIError(
            "/dev/fuse not found\n" "FUSE kernel module may not be loaded\n" "Try: sudo modprobe fuse"
        )


# =============================================================================
# Commands
# =============================================================================


def cmd_ls(args: argparse.Namespace, vfs: VirtualFileSystem) -> int:
    if args.folders:
        rows = [
            {"path": folder, "kind": "folder", "source": ""}
            for folder in vfs.get_folders_in_folder(args.path, recursive=args.recursive)
        ]
    else:
        rows = [
            {"path": path, "kind": "file", "source": str(vfs.resolve(path))}
            for path in vfs.get_files_in_folder(
                args.path, recursive=args.recursive, extension=args.extension
            )
        ]

    for line in render_rows(args.format, rows):
        print(line)
    return 0


def cmd_cat(args: argparse.Namespace, vfs: VirtualFileSystem) -> int:
    sys.stdout.write(vfs.get_file_contents_as_text(args.path, encoding=args.encoding))
    return 0


def cmd_exists(args: argparse.Namespace, vfs: VirtualFileSystem) -> int:
    return 0 if vfs.file_exists(args.path) or vfs.folder_exists(args.path) else 1


def cmd_which(args: argparse.Namespace, vfs: VirtualFileSystem) -> int:
    print(vfs.resolve(args.path))
    return 0


COMMANDS = {
    "ls": cmd_ls,
    "cat": cmd_cat,
    "exists": cmd_exists,
    "which": cmd_which,
}


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Parses arguments, builds the overlay and dispatches the command.
    Mounting is delegated to overlayvfs.main.
    """
    try:
        args = parse_arguments(argv)
        config = build_config(args)
        logger = setup_logging(config)

        if args.command == "mount":
            validate_runtime_environment()

            from overlayvfs.main import run_mount

            return run_mount(
                config,
                args.mount,
                logger,
                foreground=args.foreground,
                fuse_options=args.fuse_options,
            )

        with VirtualFileSystem.from_config(config) as vfs:
            return COMMANDS[args.command](args, vfs)

    except CLIError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except VirtualFileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    except (VFSError, UnicodeDecodeError, LookupError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
