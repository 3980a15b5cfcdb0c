"""Filesystem utilities for probes."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from secposture.core.context import Context


class FileError(Exception):
    """Error accessing a file."""

    pass


def read_file(path: str, context: "Context | None" = None) -> str:
    """
    Read file contents.

    Args:
        path: Path to file
        context: Execution context (for testing)

    Returns:
        File contents

    Raises:
        FileError: If the file is missing, unreadable or not text
    """
    if context is None:
        from secposture.core.context import Context
        context = Context()

    try:
        return context.read_file(path)
    except FileNotFoundError as e:
        raise FileError(f"File not found: {path}") from e
    except OSError as e:
        raise FileError(f"cannot read {path}: {e.strerror}") from e
    except UnicodeDecodeError as e:
        raise FileError(f"cannot decode {path}: {e.reason}") from e


def first_existing(
    paths: list[str] | tuple[str, ...],
    context: "Context | None" = None,
) -> str | None:
    """
    Return the first path that exists.

    Args:
        paths: Candidate paths, in order of preference
        context: Execution context (for testing)

    Returns:
        The first existing path, or None
    """
    if context is None:
        from secposture.core.context import Context
        context = Context()

    for path in paths:
        if context.file_exists(path):
            return path
    return None
