"""Host facts and the single-line summary rendered from them."""

from dataclasses import asdict, dataclass, field

from secposture.probes.distribution import UNKNOWN_TAG
from secposture.probes.patching import UNKNOWN_DAYS, PatchDate


# Field order is part of the output contract.
SERVICE_FIELDS = (
    "selinux",
    "firewall",
    "fail2ban",
    "auditd",
    "fapolicyd",
    "aide",
    "arcticwolf",
    "sentinelone",
    "crowdstrike",
    "clamav",
    "msdefender",
)


@dataclass
class HostFacts:
    """Everything one probe run learned about the host."""

    distribution: str = UNKNOWN_TAG
    days_since_patch: int = UNKNOWN_DAYS
    last_patch_date: PatchDate = field(default_factory=PatchDate)
    service_states: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return asdict(self)


def format_summary(facts: HostFacts) -> str:
    """
    Render the status line, including its trailing newline.

    Every service field is always present so the schema stays fixed.
    Absent units arrive as ``no`` from the registry; a key missing from
    ``service_states`` altogether renders as ``unknown``.
    """
    fields = [
        f"linux_version:{facts.distribution}",
        f"days_since_patch:{facts.days_since_patch}",
        f"date_of_last_patch:{facts.last_patch_date.render()}",
    ]
    for key in SERVICE_FIELDS:
        fields.append(f"{key}:{facts.service_states.get(key, 'unknown')}")

    perfdata = f"days_since_patch={facts.days_since_patch};;;;"
    return f"{' '.join(fields)} | {perfdata}\n"
