"""Execution context for testability."""

import os
import subprocess
import time
from pathlib import Path


class Context:
    """
    Wraps external calls for testability.

    In production: executes real commands and touches the real filesystem
    In tests: can be replaced with MockContext
    """

    def run(
        self,
        cmd: list[str],
        check: bool = False,
        timeout: int | None = 10,
        **kwargs,
    ) -> subprocess.CompletedProcess:
        """
        Run a command and return result.

        Bytes that are not valid in the locale encoding are replaced
        rather than raising.

        Args:
            cmd: Command and arguments as list
            check: Raise on non-zero exit code
            timeout: Timeout in seconds
            **kwargs: Additional subprocess.run arguments

        Returns:
            CompletedProcess with stdout, stderr, returncode
        """
        return subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            errors="replace",
            check=check,
            timeout=timeout,
            **kwargs,
        )

    def read_file(self, path: str) -> str:
        """Read file contents."""
        return Path(path).read_text()

    def file_exists(self, path: str) -> bool:
        """Check if file exists."""
        return Path(path).exists()

    def is_dir(self, path: str) -> bool:
        """Check if path is a directory."""
        return Path(path).is_dir()

    def is_executable(self, path: str) -> bool:
        """Check if path is executable by the current process."""
        return os.access(path, os.X_OK)

    def get_mtime(self, path: str) -> float:
        """Get last modification time as a Unix timestamp."""
        return Path(path).stat().st_mtime

    def now(self) -> float:
        """Current time as a Unix timestamp."""
        return time.time()
