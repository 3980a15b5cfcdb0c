"""Shared test fixtures."""

import subprocess
import sys
from pathlib import Path

import pytest

# Add project root to path for package imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

FIXTURES_DIR = Path(__file__).parent / "fixtures"

# 2023-11-14 22:13:20 UTC
NOW = 1700000000.0


class MockContext:
    """Mock Context for testing probes without real system access."""

    def __init__(
        self,
        command_outputs: dict[tuple, str | Exception | subprocess.CompletedProcess] | None = None,
        file_contents: dict[str, str | Exception] | None = None,
        directories: list[str] | None = None,
        executables: list[str] | None = None,
        mtimes: dict[str, float] | None = None,
        now: float = NOW,
    ):
        self.command_outputs = command_outputs or {}
        self.file_contents = file_contents or {}
        self.directories = set(directories or [])
        self.mtimes = mtimes or {}
        self._now = now
        self.commands_run: list[list[str]] = []
        # Files are executable unless a list is given
        self.executables = set(executables) if executables is not None else None

    def run(
        self,
        cmd: list[str],
        check: bool = False,
        **kwargs,
    ) -> subprocess.CompletedProcess:
        """Return mocked command output."""
        self.commands_run.append(cmd)
        key = tuple(cmd)
        if key not in self.command_outputs:
            raise KeyError(f"No mock output for command: {cmd}")

        output = self.command_outputs[key]
        if isinstance(output, Exception):
            raise output

        # Allow passing CompletedProcess directly for more control (e.g., non-zero returncode)
        if isinstance(output, subprocess.CompletedProcess):
            return output

        return subprocess.CompletedProcess(
            cmd,
            returncode=0,
            stdout=output,
            stderr="",
        )

    def read_file(self, path: str) -> str:
        """Return mocked file content."""
        if path not in self.file_contents:
            raise FileNotFoundError(f"No mock content for: {path}")
        content = self.file_contents[path]
        # An Exception marks a file that exists but cannot be read
        if isinstance(content, Exception):
            raise content
        return content

    def file_exists(self, path: str) -> bool:
        """Check if path is in mocked files or directories."""
        return path in self.file_contents or path in self.directories

    def is_dir(self, path: str) -> bool:
        """Check if path is a mocked directory."""
        return path in self.directories

    def is_executable(self, path: str) -> bool:
        """Check if path is mocked as executable."""
        if not self.file_exists(path):
            return False
        if self.executables is None:
            return True
        return path in self.executables

    def get_mtime(self, path: str) -> float:
        """Return mocked modification time."""
        if path not in self.mtimes:
            raise FileNotFoundError(f"No mock mtime for: {path}")
        return self.mtimes[path]

    def now(self) -> float:
        """Return the mocked clock."""
        return self._now


@pytest.fixture
def mock_context():
    """Factory fixture for creating MockContext instances."""
    def _create(**kwargs) -> MockContext:
        return MockContext(**kwargs)
    return _create


def load_fixture(category: str, name: str) -> str:
    """Load a fixture file by category and name."""
    fixture_path = FIXTURES_DIR / category / name
    if not fixture_path.exists():
        raise FileNotFoundError(f"Fixture not found: {fixture_path}")
    return fixture_path.read_text()


def host_files(os_release: str = "ubuntu_2204", getenforce: bool = False) -> dict[str, str]:
    """Files every healthy host has, keyed for MockContext.file_contents."""
    files = {
        "/usr/bin/uname": "",
        "/usr/bin/systemctl": "",
        "/etc/os-release": load_fixture("os-release", os_release),
    }
    if getenforce:
        files["/usr/sbin/getenforce"] = ""
    return files


def unit_files(*names: str, unit_dir: str = "/usr/lib/systemd/system") -> dict[str, str]:
    """Unit files present on disk."""
    return {f"{unit_dir}/{name}": "" for name in names}
