"""Tests for the OverlayVFS mount entry point.

This module tests the mount controller including:
- Component initialization
- Signal handling
- FUSE mounting
- Cleanup procedures
"""

import signal
from unittest.mock import MagicMock, patch

import pytest

try:
    import fuse  # noqa: F401
except (ImportError, OSError):
    pytest.skip("fusepy or libfuse not available", allow_module_level=True)

from overlayvfs.fuse.operations import OverlayFSOperations
from overlayvfs.infrastructure.config_manager import ConfigManager
from overlayvfs.infrastructure.logger import Logger
from overlayvfs.main import OverlayVFSMain, run_mount


@pytest.fixture
def mount_dir(temp_dir):
    mount = temp_dir / "mnt"
    mount.mkdir()
    return mount


@pytest.fixture
def config(base_dir, mod_zip):
    config = ConfigManager(load_environment=False)
    config.load_dict({"overlayvfs": {"containers": [str(base_dir), str(mod_zip)]}})
    return config


@pytest.fixture
def logger():
    """Create test logger."""
    return MagicMock(spec=Logger)


@pytest.fixture
def controller(config, mount_dir, logger):
    return OverlayVFSMain(config, str(mount_dir), logger, foreground=True)


class TestInitialization:
    """Test component initialization."""

    def test_initial_state(self, controller, mount_dir):
        assert controller.mount_point == str(mount_dir)
        assert controller.foreground
        assert controller.fuse_options == []
        assert controller.vfs is None
        assert controller.fuse_ops is None

    def test_initialize_components(self, controller):
        controller.initialize_components()
        try:
            assert len(controller.vfs) == 8
            assert isinstance(controller.fuse_ops, OverlayFSOperations)
            assert controller.fuse_ops.vfs is controller.vfs
        finally:
            controller.cleanup()


class TestSignalHandlers:
    """Test that signals are left to libfuse."""

    def test_run_installs_no_handlers(self, controller):
        sigterm = signal.getsignal(signal.SIGTERM)
        sigint = signal.getsignal(signal.SIGINT)

        with patch("overlayvfs.main.FUSE"), patch("signal.signal") as mock_signal:
            assert controller.run() == 0

        mock_signal.assert_not_called()
        assert signal.getsignal(signal.SIGTERM) is sigterm
        assert signal.getsignal(signal.SIGINT) is sigint


class TestFuseOptions:
    """Test FUSE mount options."""

    def test_always_read_only(self, controller):
        assert controller._build_fuse_options() == {"ro": True}

    def test_allow_other_from_config(self, controller, config):
        config.set("overlayvfs.mount.allow_other", True)
        assert controller._build_fuse_options()["allow_other"] is True

    def test_extra_options(self, config, mount_dir, logger):
        controller = OverlayVFSMain(
            config, str(mount_dir), logger, fuse_options=["debug", "max_read=4096"]
        )
        options = controller._build_fuse_options()
        assert options["debug"] is True
        assert options["max_read"] == "4096"
        assert options["ro"] is True


class TestMount:
    """Test mounting and cleanup."""

    def test_run_mounts_read_only(self, controller, mount_dir):
        with patch("overlayvfs.main.FUSE") as mock_fuse:
            assert controller.run() == 0

        args, kwargs = mock_fuse.call_args
        assert args == (controller.fuse_ops, str(mount_dir))
        assert kwargs["foreground"] is True
        assert kwargs["nothreads"] is True
        assert kwargs["ro"] is True

    def test_run_releases_archives(self, controller):
        with patch("overlayvfs.main.FUSE"):
            controller.run()

        assert controller.vfs.loader.archives == []

    def test_mount_failure(self, controller):
        with patch("overlayvfs.main.FUSE", side_effect=RuntimeError("1")):
            assert controller.run() == 1
        assert controller.vfs.loader.archives == []

    def test_interrupted(self, controller):
        with patch("overlayvfs.main.FUSE", side_effect=KeyboardInterrupt):
            assert controller.run() == 130

    def test_bad_container(self, temp_dir, mount_dir, logger):
        config = ConfigManager(load_environment=False)
        config.load_dict({"overlayvfs": {"containers": [str(temp_dir / "missing")]}})
        controller = OverlayVFSMain(config, str(mount_dir), logger)

        with patch("overlayvfs.main.FUSE") as mock_fuse:
            assert controller.run() == 1

        mock_fuse.assert_not_called()
        assert controller.vfs is None

    def test_run_mount(self, config, mount_dir, logger):
        with patch("overlayvfs.main.FUSE") as mock_fuse:
            assert run_mount(config, str(mount_dir), logger, fuse_options=["debug"]) == 0

        _, kwargs = mock_fuse.call_args
        assert kwargs["foreground"] is False
        assert kwargs["debug"] is True


class TestCliMount:
    """Test the mount subcommand dispatch."""

    def test_cli_mount(self, base_dir, mount_dir):
        from overlayvfs.cli import main
        from overlayvfs.infrastructure import logger as logger_module

        saved = logger_module._global_logger
        try:
            with patch("overlayvfs.cli.validate_runtime_environment"), patch(
                "overlayvfs.main.run_mount", return_value=0
            ) as mock_run:
                assert main(["-s", str(base_dir), "mount", str(mount_dir), "--fuse-opt", "debug"]) == 0
        finally:
            logger_module._global_logger = saved

        args, kwargs = mock_run.call_args
        assert args[0].containers() == [str(base_dir)]
        assert args[1] == str(mount_dir)
        assert kwargs["foreground"] is False
        assert kwargs["fuse_options"] == ["debug"]
