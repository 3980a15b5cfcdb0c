"""Tests for the result cache."""

import os

import pytest

from secposture.cache import DEFAULT_MAX_AGE, check_cache, write_cache
from secposture.core.status import OutputFileError, Status
from tests.conftest import NOW


LINE = "linux_version:RHEL8.9 days_since_patch:3 | days_since_patch=3;;;;\n"


def age_file(path, seconds: float) -> None:
    """Set the file mtime to `seconds` before NOW."""
    os.utime(path, (NOW - seconds, NOW - seconds))


class TestCheckCache:
    """Tests for check_cache."""

    def test_absent(self, tmp_path):
        """No cache file is a miss."""
        assert check_cache(tmp_path / "posture.cache", NOW) is None

    def test_fresh_hit(self, tmp_path):
        """A young cache file is returned trimmed."""
        path = tmp_path / "posture.cache"
        path.write_text(LINE)
        age_file(path, 3600)

        assert check_cache(path, NOW) == LINE.strip()
        assert path.exists()

    def test_expired_is_deleted(self, tmp_path):
        """A cache at least a day old is removed."""
        path = tmp_path / "posture.cache"
        path.write_text(LINE)
        age_file(path, DEFAULT_MAX_AGE)

        assert check_cache(path, NOW) is None
        assert not path.exists()

    def test_custom_max_age(self, tmp_path):
        """The expiry window is configurable."""
        path = tmp_path / "posture.cache"
        path.write_text(LINE)
        age_file(path, 120)

        assert check_cache(path, NOW, max_age=60) is None

    def test_empty_file_is_a_miss(self, tmp_path):
        """An empty cache does not replay a blank line."""
        path = tmp_path / "posture.cache"
        path.write_text("")
        age_file(path, 10)

        assert check_cache(path, NOW) is None
        assert not path.exists()
        assert write_cache(path, "fresh | days_since_patch=1;;;;") is True
        assert path.read_text() == "fresh | days_since_patch=1;;;;\n"

    def test_whitespace_file_is_removed(self, tmp_path):
        """A file holding only whitespace is treated like an empty one."""
        path = tmp_path / "posture.cache"
        path.write_text("  \n\n")
        age_file(path, 10)

        assert check_cache(path, NOW) is None
        assert not path.exists()

    def test_unreadable_is_unknown(self, tmp_path):
        """A cache path that cannot be read raises OutputFileError."""
        path = tmp_path / "posture.cache"
        path.mkdir()
        age_file(path, 10)

        with pytest.raises(OutputFileError) as excinfo:
            check_cache(path, NOW)

        assert excinfo.value.status is Status.UNKNOWN


class TestWriteCache:
    """Tests for write_cache."""

    def test_creates_file(self, tmp_path):
        """The summary is written verbatim."""
        path = tmp_path / "posture.cache"

        assert write_cache(path, LINE) is True
        assert path.read_text() == LINE

    def test_appends_newline(self, tmp_path):
        """The stored line always ends with a newline."""
        path = tmp_path / "posture.cache"

        write_cache(path, LINE.strip())

        assert path.read_text() == LINE

    def test_first_writer_wins(self, tmp_path):
        """An existing cache is never overwritten."""
        path = tmp_path / "posture.cache"
        write_cache(path, "first\n")

        assert write_cache(path, "second\n") is False
        assert path.read_text() == "first\n"

    def test_no_temporary_files_left(self, tmp_path):
        """Only the cache file remains after writing."""
        path = tmp_path / "posture.cache"
        write_cache(path, LINE)
        write_cache(path, LINE)

        assert [p.name for p in tmp_path.iterdir()] == ["posture.cache"]

    def test_missing_directory_is_unknown(self, tmp_path):
        """An unwritable location raises OutputFileError."""
        with pytest.raises(OutputFileError, match="cannot write cache file"):
            write_cache(tmp_path / "missing" / "posture.cache", LINE)
