"""JSONL logging for check execution."""

import json
from datetime import date, datetime, timezone
from pathlib import Path
from typing import IO, Any


# Log level ordering
LOG_LEVELS = {"debug": 0, "info": 1, "warning": 2, "error": 3}


def get_log_path(check_name: str, base_path: Path) -> Path:
    """
    Get the log file path for a check.

    Args:
        check_name: Name of the check
        base_path: Base directory for logs

    Returns:
        Path to the log file: {base}/{date}/{check}.jsonl
    """
    today = date.today().isoformat()
    return base_path / today / f"{check_name}.jsonl"


class CheckLogger:
    """
    JSONL logger for check execution.

    Writes structured log entries to a JSONL file, a stream, both, or
    nowhere. Stdout is reserved for the status line, so the stream is
    expected to be stderr.
    """

    def __init__(
        self,
        check_name: str,
        log_path: Path | None = None,
        stream: IO[str] | None = None,
        min_level: str = "info",
    ):
        """
        Initialize logger.

        Args:
            check_name: Name of the check being logged
            log_path: Path to log file (default: no file)
            stream: Open text stream to mirror entries to
            min_level: Lowest level that is written
        """
        self.check_name = check_name
        self.log_path = log_path
        self.stream = stream
        self.min_level = LOG_LEVELS.get(min_level, 1)
        self._file = None

    def _ensure_file(self) -> None:
        """Ensure log file is open."""
        if self._file is None and self.log_path is not None:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)
            self._file = open(self.log_path, "a")

    def _log(self, level: str, message: str, **extra: Any) -> None:
        """Write a log entry."""
        if LOG_LEVELS[level] < self.min_level:
            return
        if self.log_path is None and self.stream is None:
            return
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": level,
            "check": self.check_name,
            "message": message,
            **extra,
        }
        line = json.dumps(entry, default=str) + "\n"
        self._ensure_file()
        for target in (self._file, self.stream):
            if target is not None:
                target.write(line)
                target.flush()

    def debug(self, message: str, **extra: Any) -> None:
        """Log debug message."""
        self._log("debug", message, **extra)

    def info(self, message: str, **extra: Any) -> None:
        """Log info message."""
        self._log("info", message, **extra)

    def warning(self, message: str, **extra: Any) -> None:
        """Log warning message."""
        self._log("warning", message, **extra)

    def error(self, message: str, **extra: Any) -> None:
        """Log error message."""
        self._log("error", message, **extra)

    def close(self) -> None:
        """Close the log file."""
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self) -> "CheckLogger":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()


def null_logger() -> CheckLogger:
    """Logger that discards everything."""
    return CheckLogger("secposture")
