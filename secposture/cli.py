"""Command-line interface for secposture."""

import sys

from secposture.check import run
from secposture.core.context import Context
from secposture.core.output import Output


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    if argv is None:
        argv = sys.argv[1:]
    return int(run(argv, Output(), Context()))


if __name__ == "__main__":
    sys.exit(main())
