"""secposture - one-line security posture check for Linux hosts."""

__version__ = "0.1.0"
