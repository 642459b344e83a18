"""Shared utilities used across the booking core."""

from typing import Any


def pad_time(value: str) -> str:
    """Pad every ``:``-separated component of a time string to two digits.

    Examples:
        >>> pad_time("9:5")
        '09:05'
        >>> pad_time("14:30")
        '14:30'
    """
    return ":".join(part.strip().zfill(2) for part in value.strip().split(":"))


def is_blank(value: Any) -> bool:
    """True for None and for strings that are empty after stripping."""
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()
