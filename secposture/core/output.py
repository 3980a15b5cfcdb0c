"""Structured output helper for the posture check."""

from typing import Any


class Output:
    """
    Collects what the check found and prints its single status line.

    Monitoring pollers read exactly one line from stdout, so render()
    prints either the summary or the first error and never both.
    """

    def __init__(self):
        self.data: dict[str, Any] = {}
        self.errors: list[str] = []
        self._summary: str | None = None
        self._printed: bool = False

    def emit(self, data: dict[str, Any]) -> None:
        """Store structured output data."""
        self.data.update(data)

    def error(self, message: str) -> None:
        """Record an error message."""
        self.errors.append(message)

    def set_summary(self, summary: str) -> None:
        """Set the one-line summary."""
        self._summary = summary.rstrip("\n")

    @property
    def summary(self) -> str:
        """Get summary, falling back to the first error."""
        if self.errors:
            return self.errors[0]
        if self._summary:
            return self._summary
        return "UNKNOWN: no output produced"

    def render(self) -> None:
        """Print the status line once."""
        if self._printed:
            return
        self._printed = True
        print(self.summary)
