"""Locate the OS utilities the check depends on."""

from dataclasses import dataclass

from secposture.core.context import Context
from secposture.core.status import PreconditionFailure
from secposture.lib.filesystem import first_existing
from secposture.lib.process import require_executable


UNAME_PATHS = ("/bin/uname", "/usr/bin/uname")
SYSTEMCTL_PATH = "/usr/bin/systemctl"
GETENFORCE_PATH = "/usr/sbin/getenforce"
RPM_PATH = "/usr/bin/rpm"
OS_RELEASE_PATH = "/etc/os-release"
APT_CACHE_PATH = "/var/cache/apt/pkgcache.bin"


@dataclass
class Environment:
    """Where the external tools live on this host."""

    uname: str
    systemctl: str
    getenforce: str | None = None
    rpm: str | None = None
    apt_cache: str | None = None
    os_release: str = OS_RELEASE_PATH


def probe_environment(context: Context) -> Environment:
    """
    Verify every precondition of the check.

    Raises:
        PreconditionFailure: uname, systemctl or /etc/os-release is
            unusable, or getenforce exists without execute permission
    """
    uname = first_existing(UNAME_PATHS, context)
    if uname is None:
        raise PreconditionFailure(f"uname not found in {', '.join(UNAME_PATHS)}")
    require_executable(uname, context, label="uname")

    if not context.file_exists(OS_RELEASE_PATH):
        raise PreconditionFailure(f"{OS_RELEASE_PATH} not found")

    require_executable(SYSTEMCTL_PATH, context, label="systemctl")

    getenforce = None
    if context.file_exists(GETENFORCE_PATH):
        getenforce = require_executable(GETENFORCE_PATH, context, label="getenforce")

    return Environment(
        uname=uname,
        systemctl=SYSTEMCTL_PATH,
        getenforce=getenforce,
        rpm=RPM_PATH if context.file_exists(RPM_PATH) else None,
        apt_cache=APT_CACHE_PATH if context.file_exists(APT_CACHE_PATH) else None,
    )
