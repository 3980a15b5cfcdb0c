"""Monitoring exit codes and check failures."""

from enum import IntEnum


class Status(IntEnum):
    """Exit codes shared by every monitoring plugin."""

    OK = 0
    WARNING = 1
    CRITICAL = 2
    UNKNOWN = 3


class CheckError(Exception):
    """A failure that ends the check with a non-OK status."""

    status = Status.UNKNOWN

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def diagnostic(self) -> str:
        """One-line diagnostic printed in place of the summary."""
        return f"{self.status.name}: {self.message}"


class PreconditionFailure(CheckError):
    """A required tool or file is missing or not executable."""

    status = Status.CRITICAL


class UnsupportedPlatform(CheckError):
    """The host is not running Linux."""

    status = Status.CRITICAL


class OutputFileError(CheckError):
    """The result cache could not be read, written or removed."""

    status = Status.UNKNOWN


class ProbeTimeout(CheckError):
    """An external command did not finish in time."""

    status = Status.UNKNOWN
