"""
Single-slot result cache.

The last summary line is kept in one file. A file younger than the
expiry window is replayed instead of probing the host again; an older
one is deleted. A new result is only written when no file exists, so
within a window the first writer wins.
"""

import os
import tempfile
from pathlib import Path

from secposture.core.status import OutputFileError


DEFAULT_MAX_AGE = 24 * 60 * 60


def check_cache(path: Path, now: float, max_age: int = DEFAULT_MAX_AGE) -> str | None:
    """
    Return the cached summary line if it is still valid.

    Args:
        path: Cache file location
        now: Current Unix timestamp
        max_age: Seconds after which the cache is expired

    Returns:
        The cached line without surrounding whitespace, or None

    Raises:
        OutputFileError: If the file exists but cannot be read or removed
    """
    try:
        mtime = path.stat().st_mtime
    except FileNotFoundError:
        return None
    except OSError as e:
        raise OutputFileError(f"cannot stat cache file {path}: {e.strerror}") from e

    if now - mtime >= max_age:
        _discard(path, "expired")
        return None

    try:
        with open(path) as f:
            content = f.read().strip()
    except FileNotFoundError:
        return None
    except OSError as e:
        raise OutputFileError(f"cannot read cache file {path}: {e.strerror}") from e

    # A blank file would otherwise block every write until it expires.
    if not content:
        _discard(path, "empty")
        return None
    return content


def _discard(path: Path, reason: str) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        raise OutputFileError(f"cannot remove {reason} cache file {path}: {e.strerror}") from e


def write_cache(path: Path, summary: str) -> bool:
    """
    Store a summary line unless a cache file already exists.

    The content is written to a private temporary file first and then
    hard-linked into place, so readers never see a partial line and a
    concurrent writer cannot overwrite an existing cache.

    Returns:
        True if this call created the cache file

    Raises:
        OutputFileError: If the cache directory is not writable
    """
    if not summary.endswith("\n"):
        summary += "\n"

    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    except OSError as e:
        raise OutputFileError(f"cannot write cache file {path}: {e.strerror}") from e

    try:
        with os.fdopen(fd, "w") as f:
            f.write(summary)
        os.chmod(tmp_name, 0o644)
        os.link(tmp_name, path)
    except FileExistsError:
        return False
    except OSError as e:
        raise OutputFileError(f"cannot write cache file {path}: {e.strerror}") from e
    finally:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass

    return True
