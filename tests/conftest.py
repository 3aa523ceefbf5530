"""Shared fixtures for the test suite."""

import sys
from pathlib import Path

# Add src to Python path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest

from appdata_backup.config.settings import HostPaths
from appdata_backup.sync.mirror import PythonMirror


@pytest.fixture
def host_paths(tmp_path):
    """Host paths rooted in a temporary directory."""
    home = tmp_path / "home"
    return HostPaths(
        cloud_root=tmp_path / "OneDrive",
        local_app_data=home / "AppData" / "Local",
        roaming_app_data=home / "AppData" / "Roaming",
        user_home=home,
        machine_name="WORKSTATION"
    )


@pytest.fixture
def backup_root(host_paths):
    return host_paths.cloud_root / "Backups" / "AppData" / host_paths.machine_name


@pytest.fixture
def mirror():
    return PythonMirror()


@pytest.fixture
def write_file():
    """Create a file (and its parents) with the given content."""
    def _write(path: Path, content="data") -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, str):
            content = content.encode("utf-8")
        path.write_bytes(content)
        return path
    return _write


def snapshot(directory: Path) -> dict:
    """Map every file under ``directory`` to its content."""
    return {
        str(p.relative_to(directory)): p.read_bytes()
        for p in sorted(directory.rglob("*")) if p.is_file()
    }


@pytest.fixture
def tree_snapshot():
    return snapshot
