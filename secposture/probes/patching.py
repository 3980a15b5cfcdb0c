"""
Work out how long ago the host was last patched.

Two sources are tried in order:

- APT: the mtime of the package cache, which apt refreshes on every
  update run.
- RPM: the install time of the most recently installed package, taken
  from ``rpm -qa --last``.

When neither is available the day count is the 9999 sentinel and the
date stays uncomputed.
"""

import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime

from secposture.core.context import Context
from secposture.core.logging import CheckLogger, null_logger
from secposture.lib.process import DEFAULT_TIMEOUT, run_command
from secposture.probes.environment import Environment


SECONDS_PER_DAY = 86400
UNKNOWN_DAYS = 9999

MONTHS = {
    "Jan": 1, "Feb": 2, "Mar": 3, "Apr": 4, "May": 5, "Jun": 6,
    "Jul": 7, "Aug": 8, "Sep": 9, "Oct": 10, "Nov": 11, "Dec": 12,
}

# kernel-4.18.0-513.el8.x86_64   Tue 14 Nov 2023 10:01:02 AM EST
RPM_LAST_DMY = re.compile(
    r"(?P<weekday>[A-Z][a-z]{2})\s+(?P<day>\d{1,2})\s+(?P<month>[A-Za-z]+)\s+"
    r"(?P<year>\d{4})\s+(?P<hour>\d{1,2}):(?P<minute>\d{2}):(?P<second>\d{2})"
    r"(?:\s+(?P<ampm>AM|PM))?(?:\s+(?P<tz>[A-Za-z][A-Za-z0-9+-]*))?\s*$"
)
# kernel-4.18.0-513.el8.x86_64   Tue Nov 14 10:01:02 2023
RPM_LAST_CTIME = re.compile(
    r"(?P<weekday>[A-Z][a-z]{2})\s+(?P<month>[A-Za-z]+)\s+(?P<day>\d{1,2})\s+"
    r"(?P<hour>\d{1,2}):(?P<minute>\d{2}):(?P<second>\d{2})\s+(?P<year>\d{4})\s*$"
)


@dataclass
class PatchDate:
    """Calendar date of the last patch; parts stay None until known."""

    year: int | None = None
    month: int | None = None
    day: int | None = None

    @classmethod
    def from_timestamp(cls, timestamp: float) -> "PatchDate":
        d = date.fromtimestamp(timestamp)
        return cls(d.year, d.month, d.day)

    def render(self) -> str:
        """YYYY-MM-DD, with uncomputed parts as a bare 0."""
        year = f"{self.year:04d}" if self.year is not None else "0"
        month = f"{self.month:02d}" if self.month is not None else "0"
        day = f"{self.day:02d}" if self.day is not None else "0"
        return f"{year}-{month}-{day}"


@dataclass
class PatchInfo:
    """Result of the patch-recency calculation."""

    days: int = UNKNOWN_DAYS
    date: PatchDate = field(default_factory=PatchDate)
    source: str = "none"


def round_days(elapsed_seconds: float) -> int:
    """Convert seconds to whole days, rounding half up."""
    return math.floor(elapsed_seconds / SECONDS_PER_DAY + 0.5)


def apt_patch_info(path: str, context: Context) -> PatchInfo:
    """Use the APT package cache mtime as the last patch instant."""
    mtime = context.get_mtime(path)
    elapsed = context.now() - mtime
    # A future-dated cache would otherwise print as a negative day count.
    days = round_days(abs(elapsed))
    return PatchInfo(days=days, date=PatchDate.from_timestamp(mtime), source="apt")


def parse_rpm_last(line: str) -> tuple[PatchDate, datetime | None]:
    """
    Parse the timestamp trailing one line of ``rpm -qa --last``.

    Returns:
        The calendar date (parts left None when unparseable) and the
        local-time instant, or None when it could not be built
    """
    match = RPM_LAST_DMY.search(line) or RPM_LAST_CTIME.search(line)
    if not match:
        return PatchDate(), None

    year = int(match.group("year"))
    day = int(match.group("day"))
    month = MONTHS.get(match.group("month")[:3].title())
    if month is None:
        return PatchDate(year=year, day=day), None

    hour = int(match.group("hour"))
    ampm = match.groupdict().get("ampm")
    if ampm == "PM" and hour < 12:
        hour += 12
    elif ampm == "AM" and hour == 12:
        hour = 0

    try:
        instant = datetime(
            year, month, day, hour, int(match.group("minute")), int(match.group("second"))
        )
    except ValueError:
        return PatchDate(year=year, month=month, day=day), None

    return PatchDate(year=year, month=month, day=day), instant


def rpm_patch_info(
    env: Environment,
    context: Context,
    timeout: int = DEFAULT_TIMEOUT,
    logger: CheckLogger | None = None,
) -> PatchInfo:
    """Use the newest installed package from rpm as the last patch."""
    logger = logger or null_logger()
    result = run_command([env.rpm, "-qa", "--last"], context, timeout=timeout)

    first = next((line for line in result.stdout.splitlines() if line.strip()), None)
    if first is None:
        logger.warning("rpm returned no packages")
        return PatchInfo(source="rpm")

    patch_date, instant = parse_rpm_last(first)
    if instant is None:
        logger.warning("could not parse rpm install time", line=first.strip())
        return PatchInfo(date=patch_date, source="rpm")

    days = round_days(context.now() - instant.timestamp())
    if days < 0:
        logger.warning("newest rpm install time is in the future", days=days)
    return PatchInfo(days=days, date=patch_date, source="rpm")


def compute_patch_info(
    env: Environment,
    context: Context,
    timeout: int = DEFAULT_TIMEOUT,
    logger: CheckLogger | None = None,
) -> PatchInfo:
    """Pick the patch source for this host and compute recency."""
    if env.apt_cache is not None:
        return apt_patch_info(env.apt_cache, context)
    if env.rpm is not None:
        return rpm_patch_info(env, context, timeout=timeout, logger=logger)
    return PatchInfo()
