"""
Utility functions for the match clock application.

This module contains time helpers used throughout the application.
"""
import time
from typing import Union


def fmt_mmss(seconds: int) -> str:
    """
    Format seconds as MM:SS string.

    Args:
        seconds: Number of seconds to format

    Returns:
        Formatted time string in MM:SS format

    Example:
        >>> fmt_mmss(90)
        '01:30'
        >>> fmt_mmss(3661)
        '61:01'
    """
    seconds = max(0, int(seconds))
    m = seconds // 60
    s = seconds % 60
    return f"{m:02d}:{s:02d}"


def parse_mmss(value: Union[str, int, float]) -> int:
    """
    Parse a time-remaining value into whole seconds.

    Accepts plain seconds (``300``), ``"MM:SS"`` or ``"HH:MM:SS"`` strings.

    Raises:
        ValueError: If the value cannot be parsed or is negative
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid time value: {value!r}")
    if isinstance(value, (int, float)):
        seconds = int(value)
    else:
        text = str(value).strip()
        if not text:
            raise ValueError("Time value is empty")
        parts = text.split(":")
        if len(parts) > 3 or not all(part.strip().isdigit() for part in parts):
            raise ValueError(f"Invalid time value: {value!r}")
        seconds = 0
        for part in parts:
            seconds = seconds * 60 + int(part)
    if seconds < 0:
        raise ValueError("Time value cannot be negative")
    return seconds


def now_ts() -> float:
    """
    Get current timestamp in epoch seconds.

    Returns:
        Current time as floating point epoch seconds
    """
    return time.time()
