"""Core secposture functionality."""

from secposture.core.context import Context
from secposture.core.logging import CheckLogger
from secposture.core.output import Output
from secposture.core.status import (
    CheckError,
    OutputFileError,
    PreconditionFailure,
    ProbeTimeout,
    Status,
    UnsupportedPlatform,
)

__all__ = [
    "CheckError",
    "CheckLogger",
    "Context",
    "Output",
    "OutputFileError",
    "PreconditionFailure",
    "ProbeTimeout",
    "Status",
    "UnsupportedPlatform",
]
