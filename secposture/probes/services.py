"""
Security service state registry.

SELinux and AIDE are probed directly. Everything else is a systemd
unit: the catalog lists candidate units per service, only those whose
unit file exists on this host are queried, and a single
``systemctl list-units`` call supplies the ACTIVE column for all of them.
"""

import re
from dataclasses import dataclass

from secposture.core.context import Context
from secposture.core.logging import CheckLogger, null_logger
from secposture.lib.process import DEFAULT_TIMEOUT, run_command
from secposture.probes.environment import Environment


NOT_INSTALLED = "no"
UNKNOWN = "unknown"

SELINUX_MODES = ("Permissive", "Enforcing", "Disabled")
SELINUX_NOT_INSTALLED = "NotInstalled"

AIDE_DB_DIR = "/var/lib/aide"

UNIT_DIRS = ("/etc/systemd/system", "/usr/lib/systemd/system", "/lib/systemd/system")

LISTING_HEADER = re.compile(r"^\s*UNIT\s+LOAD\s+ACTIVE\s+SUB\b")
STATUS_BULLETS = "●○↻×*"


@dataclass(frozen=True)
class Unit:
    """A systemd unit and the file that defines it."""

    name: str
    unit_file: str | None = None

    @property
    def filename(self) -> str:
        return self.unit_file or self.name


# RHEL-family names come first where the distributions differ.
SERVICE_CATALOG: dict[str, tuple[Unit, ...]] = {
    "cron": (Unit("crond.service"), Unit("cron.service")),
    "ntp": (
        Unit("chronyd.service"),
        Unit("chrony.service"),
        Unit("ntpd.service"),
        Unit("ntp.service"),
        Unit("systemd-timesyncd.service"),
    ),
    "firewall": (
        Unit("firewalld.service"),
        Unit("ufw.service"),
        Unit("nftables.service"),
        Unit("iptables.service"),
    ),
    "fail2ban": (Unit("fail2ban.service"),),
    "auditd": (Unit("auditd.service"),),
    "fapolicyd": (Unit("fapolicyd.service"),),
    "arcticwolf": (Unit("arcticwolfagent.service"),),
    "sentinelone": (Unit("sentinelone.service"),),
    "crowdstrike": (Unit("falcon-sensor.service"),),
    "clamav": (
        Unit("clamd@scan.service", "clamd@.service"),
        Unit("clamav-daemon.service"),
    ),
    "msdefender": (Unit("mdatp.service"),),
}


def probe_selinux(env: Environment, context: Context, timeout: int = DEFAULT_TIMEOUT) -> str:
    """Report the SELinux mode from getenforce."""
    if env.getenforce is None:
        return SELINUX_NOT_INSTALLED

    result = run_command([env.getenforce], context, timeout=timeout)
    state = UNKNOWN
    for line in result.stdout.splitlines():
        for mode in SELINUX_MODES:
            if mode in line:
                state = mode
                break
    return state


def probe_aide(context: Context) -> str:
    """
    Report whether the AIDE database directory exists.

    Whether aide actually runs on a schedule cannot be confirmed
    without root, since its database directory is not world-readable.
    """
    return "yes" if context.is_dir(AIDE_DB_DIR) else NOT_INSTALLED


def discover_units(context: Context) -> list[tuple[str, Unit]]:
    """List (service key, unit) pairs whose unit file is on disk."""
    found = []
    for key, units in SERVICE_CATALOG.items():
        for unit in units:
            if any(context.file_exists(f"{d}/{unit.filename}") for d in UNIT_DIRS):
                found.append((key, unit))
    return found


def normalize_listing_line(line: str) -> str:
    """Drop status bullets and collapse whitespace runs."""
    line = line.strip().lstrip(STATUS_BULLETS)
    return re.sub(r"\s+", " ", line).strip()


def parse_unit_listing(stdout: str, units: list[Unit]) -> dict[str, str]:
    """
    Extract the ACTIVE column for the given units.

    Returns:
        Mapping of unit name to active state, for units that were listed
    """
    patterns = {
        unit.name: re.compile(rf"^{re.escape(unit.name)} (\S+) (\S+) (\S+)(?: .*)?$")
        for unit in units
    }
    states: dict[str, str] = {}

    for raw in stdout.splitlines():
        if LISTING_HEADER.match(raw):
            continue
        line = normalize_listing_line(raw)
        if not line:
            continue
        for name, pattern in patterns.items():
            match = pattern.match(line)
            if match:
                states[name] = match.group(2)

    return states


def query_units(
    env: Environment,
    probe_list: list[tuple[str, Unit]],
    context: Context,
    timeout: int = DEFAULT_TIMEOUT,
    logger: CheckLogger | None = None,
) -> dict[str, str]:
    """
    Query systemd once for every discovered unit.

    A service with several installed candidates is active if any of
    them is; otherwise it takes the state of its first listed candidate.
    Services whose units are not listed at all stay unknown.
    """
    logger = logger or null_logger()
    states = {key: UNKNOWN for key, _ in probe_list}
    if not probe_list:
        return states

    result = run_command(
        [env.systemctl, "list-units", "--all", "--no-pager"],
        context,
        timeout=timeout,
    )
    if result.returncode != 0:
        logger.warning("systemctl list-units failed", returncode=result.returncode)
        return states

    unit_states = parse_unit_listing(result.stdout, [unit for _, unit in probe_list])
    running = 0
    for key, unit in probe_list:
        active = unit_states.get(unit.name)
        if active is None:
            continue
        if active == "active":
            running += 1
        if states[key] == UNKNOWN or active == "active":
            states[key] = active

    logger.debug("matched units", listed=len(unit_states), running=running)
    return states


def collect_service_states(
    env: Environment,
    context: Context,
    timeout: int = DEFAULT_TIMEOUT,
    logger: CheckLogger | None = None,
) -> dict[str, str]:
    """Build the full registry for every service key."""
    states = {key: NOT_INSTALLED for key in SERVICE_CATALOG}
    states["selinux"] = probe_selinux(env, context, timeout=timeout)
    states["aide"] = probe_aide(context)

    probe_list = discover_units(context)
    states.update(query_units(env, probe_list, context, timeout=timeout, logger=logger))
    return states
