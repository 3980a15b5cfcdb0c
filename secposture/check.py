#!/usr/bin/env python3
"""
Report the security posture of a Linux host on one line.

Prints the distribution, days since the last patch, the patch date and
the state of SELinux, the firewall, fail2ban, auditd, fapolicyd, AIDE
and the supported EDR/antivirus agents, followed by performance data.
Results are cached for a day so frequent polls do not re-probe.

Exit codes:
    0 - Summary produced (fresh or cached)
    2 - A required tool or file is missing, or the host is not Linux
    3 - Usage error, timeout, or the cache file is unusable
"""

import argparse
import sys
from pathlib import Path
from typing import Any

from secposture.cache import check_cache, write_cache
from secposture.core.config import load_config
from secposture.core.context import Context
from secposture.core.logging import CheckLogger, get_log_path
from secposture.core.output import Output
from secposture.core.status import CheckError, Status
from secposture.lib.filesystem import FileError
from secposture.lib.process import CommandError
from secposture.probes.distribution import check_kernel, read_distribution
from secposture.probes.environment import probe_environment
from secposture.probes.patching import compute_patch_info
from secposture.probes.services import collect_service_states
from secposture.summary import HostFacts, format_summary


CHECK_NAME = "security_posture"


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="check_security_posture",
        description="Report patch recency and security service state for this host",
        add_help=False,
    )
    parser.add_argument("-h", "--help", action="store_true", help="Show this help and exit")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log probe details to stderr"
    )
    parser.add_argument(
        "-w",
        "--warn",
        type=int,
        metavar="DAYS",
        help="Days since patch considered a warning (default: 180)",
    )
    parser.add_argument(
        "-c",
        "--critical",
        type=int,
        metavar="DAYS",
        help="Days since patch considered critical (default: 365)",
    )
    parser.add_argument("--config", type=Path, help="Read settings from this YAML file")
    parser.add_argument("--cache-file", type=Path, help="Result cache location")
    parser.add_argument(
        "--no-cache", action="store_true", help="Neither read nor write the result cache"
    )
    parser.add_argument(
        "--timeout", type=int, help="Seconds allowed per external command (default: 10)"
    )
    return parser


def resolve_settings(opts: argparse.Namespace, config: dict[str, Any]) -> dict[str, Any]:
    """Overlay command-line flags on the loaded configuration."""
    settings = dict(config)
    overrides = {
        "warn_days": opts.warn,
        "critical_days": opts.critical,
        "cache_file": opts.cache_file,
        "command_timeout": opts.timeout,
    }
    for key, value in overrides.items():
        if value is not None:
            settings[key] = value
    settings["cache_file"] = Path(settings["cache_file"])
    return settings


def make_logger(opts: argparse.Namespace, settings: dict[str, Any]) -> CheckLogger:
    """Logger writing to the configured log dir and, if verbose, stderr."""
    log_path = None
    if settings.get("log_dir"):
        log_path = get_log_path(CHECK_NAME, Path(settings["log_dir"]))
    return CheckLogger(
        CHECK_NAME,
        log_path=log_path,
        stream=sys.stderr if opts.verbose else None,
        min_level="debug" if opts.verbose else "info",
    )


def collect_facts(context: Context, timeout: int, logger: CheckLogger) -> HostFacts:
    """Run every probe in order and gather the results."""
    env = probe_environment(context)
    logger.debug("environment", uname=env.uname, getenforce=env.getenforce, rpm=env.rpm)

    check_kernel(env, context, timeout=timeout)

    facts = HostFacts()
    distribution = read_distribution(env, context)
    if distribution is None:
        logger.warning("distribution not recognised")
    else:
        facts.distribution = distribution.tag
        logger.debug("distribution", tag=distribution.tag, family=distribution.family)

    patch = compute_patch_info(env, context, timeout=timeout, logger=logger)
    facts.days_since_patch = patch.days
    facts.last_patch_date = patch.date
    logger.debug("patch recency", source=patch.source, days=patch.days)

    facts.service_states = collect_service_states(env, context, timeout=timeout, logger=logger)
    return facts


def run(
    args: list[str],
    output: Output,
    context: Context,
    config: dict[str, Any] | None = None,
) -> int:
    """
    Main entry point.

    Args:
        args: Command-line arguments
        output: Output helper
        context: Execution context
        config: Settings to use instead of the config files

    Returns:
        Monitoring exit code
    """
    parser = create_parser()
    try:
        opts = parser.parse_args(args)
    except SystemExit:
        return Status.UNKNOWN

    if opts.help:
        parser.print_help(sys.stdout)
        return Status.UNKNOWN

    if config is None:
        config = load_config(opts.config)
    settings = resolve_settings(opts, config)
    cache_file = settings["cache_file"]

    with make_logger(opts, settings) as logger:
        # Thresholds are accepted for plugin compatibility only.
        logger.debug(
            "thresholds",
            warn_days=settings["warn_days"],
            critical_days=settings["critical_days"],
        )
        try:
            if not opts.no_cache:
                cached = check_cache(cache_file, context.now(), settings["cache_max_age"])
                if cached is not None:
                    logger.info("serving cached result", cache_file=str(cache_file))
                    output.set_summary(cached)
                    output.render()
                    return Status.OK

            facts = collect_facts(context, settings["command_timeout"], logger)
            summary = format_summary(facts)
            output.emit(facts.to_dict())

            if not opts.no_cache and not write_cache(cache_file, summary):
                logger.info("cache already written by another run", cache_file=str(cache_file))

            output.set_summary(summary)
            output.render()
        except CheckError as e:
            logger.error(e.message, status=e.status.name)
            output.error(e.diagnostic)
            output.render()
            return e.status
        except (CommandError, FileError) as e:
            logger.error(str(e))
            output.error(f"UNKNOWN: {e}")
            output.render()
            return Status.UNKNOWN

        logger.info("posture collected", summary=summary.strip())
    return Status.OK


if __name__ == "__main__":
    sys.exit(run(sys.argv[1:], Output(), Context()))
