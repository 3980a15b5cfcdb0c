"""
Identify the kernel and Linux distribution.

The distribution is reduced to a short tag such as RHEL8.9 or
Ubuntu22.04 by matching PRETTY_NAME from os-release against an ordered
table of patterns. Each row turns its match into a (family, version)
pair; the tag is the two joined with all whitespace removed.
"""

import re
from dataclasses import dataclass
from typing import Callable

from secposture.core.context import Context
from secposture.core.status import UnsupportedPlatform
from secposture.lib.filesystem import read_file
from secposture.lib.process import DEFAULT_TIMEOUT, run_command
from secposture.probes.environment import Environment


SUPPORTED_KERNELS = {"Linux"}
KNOWN_KERNELS = {"AIX", "HP-UX", "SunOS", "FreeBSD", "NetBSD", "OpenBSD", "Darwin"}

UNKNOWN_TAG = "unknown"


@dataclass(frozen=True)
class Distribution:
    """A classified distribution release."""

    name: str
    version: str
    family: str

    @property
    def tag(self) -> str:
        return re.sub(r"\s+", "", f"{self.name}{self.version}")


Canonicalizer = Callable[[re.Match], Distribution]

# Order matters: the first row matching a line classifies that line.
DISTRIBUTION_PATTERNS: list[tuple[re.Pattern, Canonicalizer]] = [
    (
        re.compile(r"CentOS Linux (\d+)"),
        lambda m: Distribution("CentOS", m.group(1), "rhel"),
    ),
    (
        re.compile(r"CentOS Stream (\d+)"),
        lambda m: Distribution("CentOS", m.group(1), "rhel"),
    ),
    (
        re.compile(r"Ubuntu (\d+\.\d+)"),
        lambda m: Distribution("Ubuntu", m.group(1), "debian"),
    ),
    (
        re.compile(r"Debian GNU/Linux (\d+)"),
        lambda m: Distribution("Debian", m.group(1), "debian"),
    ),
    (
        re.compile(r"Oracle Linux(?: Server)? (\d+(?:\.\d+)?)"),
        lambda m: Distribution("OL", m.group(1), "rhel"),
    ),
    (
        re.compile(r"Red Hat Enterprise Linux(?: Server| Workstation)? (\d+(?:\.\d+)?)"),
        lambda m: Distribution("RHEL", m.group(1), "rhel"),
    ),
    (
        re.compile(r"Rocky Linux (\d+(?:\.\d+)?)"),
        lambda m: Distribution("Rocky Linux", m.group(1), "rhel"),
    ),
    (
        re.compile(r"AlmaLinux (\d+(?:\.\d+)?)"),
        lambda m: Distribution("AlmaLinux", m.group(1), "rhel"),
    ),
]


def check_kernel(env: Environment, context: Context, timeout: int = DEFAULT_TIMEOUT) -> str:
    """
    Confirm the host runs Linux.

    Returns:
        The kernel name reported by uname

    Raises:
        UnsupportedPlatform: For any kernel other than Linux
    """
    result = run_command([env.uname], context, timeout=timeout)
    kernel = result.stdout.strip()

    if kernel in SUPPORTED_KERNELS:
        return kernel
    if kernel in KNOWN_KERNELS:
        raise UnsupportedPlatform(f"{kernel} is not supported, this check runs on Linux only")
    raise UnsupportedPlatform(f"unrecognized kernel name '{kernel}'")


def classify_pretty_name(value: str) -> Distribution | None:
    """Match one PRETTY_NAME value against the pattern table."""
    for pattern, canonicalize in DISTRIBUTION_PATTERNS:
        match = pattern.search(value)
        if match:
            return canonicalize(match)
    return None


def identify_distribution(os_release: str) -> Distribution | None:
    """
    Classify an os-release document.

    Every PRETTY_NAME line is examined, so when a malformed file holds
    several the last recognised one wins.
    """
    found = None
    for line in os_release.splitlines():
        line = line.replace('"', "").replace("'", "").strip()
        if not line.startswith("PRETTY_NAME="):
            continue
        distribution = classify_pretty_name(line[len("PRETTY_NAME="):])
        if distribution is not None:
            found = distribution
    return found


def read_distribution(env: Environment, context: Context) -> Distribution | None:
    """Read os-release from the host and classify it."""
    return identify_distribution(read_file(env.os_release, context))
