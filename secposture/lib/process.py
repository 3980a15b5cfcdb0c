"""Process utilities for probes."""

import subprocess
from typing import TYPE_CHECKING

from secposture.core.status import PreconditionFailure, ProbeTimeout

if TYPE_CHECKING:
    from secposture.core.context import Context


DEFAULT_TIMEOUT = 10


class CommandError(Exception):
    """Error running a command."""

    pass


def run_command(
    cmd: list[str],
    context: "Context | None" = None,
    timeout: int = DEFAULT_TIMEOUT,
) -> subprocess.CompletedProcess:
    """
    Run a command with a bounded runtime.

    Args:
        cmd: Command and arguments
        context: Execution context (for testing)
        timeout: Seconds before the command is abandoned

    Returns:
        CompletedProcess; a non-zero exit is not an error here

    Raises:
        ProbeTimeout: If the command outlives the timeout
        CommandError: If the command cannot be started
    """
    if context is None:
        from secposture.core.context import Context
        context = Context()

    try:
        return context.run(cmd, check=False, timeout=timeout)
    except subprocess.TimeoutExpired as e:
        raise ProbeTimeout(f"{cmd[0]} timed out after {timeout}s") from e
    except OSError as e:
        raise CommandError(f"Command failed: {cmd}") from e
    except UnicodeDecodeError as e:
        raise CommandError(f"{cmd[0]} produced undecodable output") from e


def require_executable(
    path: str,
    context: "Context | None" = None,
    label: str | None = None,
) -> str:
    """
    Ensure a binary exists and may be executed by this process.

    Args:
        path: Absolute path of the binary
        context: Execution context (for testing)
        label: Name used in the diagnostic (default: the path)

    Returns:
        The path, for chaining

    Raises:
        PreconditionFailure: If the binary is missing or not executable
    """
    if context is None:
        from secposture.core.context import Context
        context = Context()

    name = label or path
    if not context.file_exists(path):
        raise PreconditionFailure(f"{name} not found at {path}")
    if not context.is_executable(path):
        raise PreconditionFailure(f"{name} at {path} is not executable")
    return path
