"""Shared utility library for secposture probes."""

from secposture.lib.filesystem import FileError, first_existing, read_file
from secposture.lib.process import CommandError, require_executable, run_command

__all__ = [
    "CommandError",
    "FileError",
    "first_existing",
    "read_file",
    "require_executable",
    "run_command",
]
