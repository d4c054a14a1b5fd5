"""Shared pytest fixtures for OverlayVFS tests."""
import os
import tempfile
import zipfile
from pathlib import Path
from typing import Any, Callable, Dict, Generator

import pytest
import yaml

from overlayvfs.vfs.manager import VirtualFileSystem


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def make_dir(temp_dir: Path) -> Callable[[str, Dict[str, str]], Path]:
    """Factory creating a directory container from {relative path: text}."""

    def _make_dir(name: str, files: Dict[str, str]) -> Path:
        root = temp_dir / name
        root.mkdir(parents=True)
        for relative, content in files.items():
            file_path = root / relative
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_text(content)
        return root

    return _make_dir


@pytest.fixture
def make_zip(temp_dir: Path) -> Callable[[str, Dict[str, str]], Path]:
    """Factory creating a zip container from {entry name: text}.

    Entry names ending with "/" are written as directory entries.
    """

    def _make_zip(name: str, entries: Dict[str, str]) -> Path:
        archive_path = temp_dir / name
        with zipfile.ZipFile(archive_path, "w") as zf:
            for entry_name, content in entries.items():
                zf.writestr(entry_name, content)
        return archive_path

    return _make_zip


@pytest.fixture
def base_dir(make_dir) -> Path:
    """Base content directory."""
    return make_dir(
        "base",
        {
            "file1.txt": "base file1",
            "file2.txt": "base file2",
            "readme.md": "# Base",
            "folder/file3.txt": "base file3",
            "folder/sub/deep.txt": "base deep",
            "a/b/c.txt": "base c",
        },
    )


@pytest.fixture
def mod_zip(make_zip) -> Path:
    """Override package shipped as a zip archive."""
    return make_zip(
        "mod.zip",
        {
            "textures/": "",
            "File1.TXT": "mod file1",
            "folder/file3.txt": "mod file3",
            "textures/grass.png": "png-bytes",
            "textures/ui/button.PNG": "button-bytes",
        },
    )


@pytest.fixture
def vfs(base_dir: Path, mod_zip: Path) -> Generator[VirtualFileSystem, None, None]:
    """Overlay of the base directory with the zip mod on top."""
    with VirtualFileSystem() as overlay:
        overlay.add_root_container(str(base_dir))
        overlay.add_root_container(str(mod_zip))
        yield overlay


@pytest.fixture
def sample_config() -> Dict[str, Any]:
    """Provide a sample OverlayVFS configuration."""
    return {
        "overlayvfs": {
            "containers": [
                {"path": "base"},
                "mod.zip",
            ],
            "logging": {
                "level": "DEBUG",
                "file": None,
            },
            "mount": {
                "allow_other": False,
            },
        }
    }


@pytest.fixture
def config_file(temp_dir: Path, sample_config: Dict[str, Any]) -> Path:
    """Create a configuration file next to the containers."""
    config_path = temp_dir / "overlay.yaml"
    with open(config_path, "w") as f:
        yaml.dump(sample_config, f)
    return config_path


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep OVERLAYVFS_* variables of the host out of the tests."""
    for key in list(os.environ):
        if key.startswith("OVERLAYVFS_"):
            monkeypatch.delenv(key)
    yield
