"""
Utilities package for the match clock application.

This package contains utility functions and constants used throughout the
application.
"""
from .time_utils import fmt_mmss, parse_mmss, now_ts
from .constants import (
    APP_TITLE, DEFAULT_PERIOD_DURATION_SEC, DEFAULT_NUMBER_OF_PERIODS,
    DEFAULT_OVERTIME_PERIOD_DURATION_SEC, DEFAULT_MAX_OVERTIME_PERIODS,
    MIN_NUMBER_OF_PERIODS, MAX_NUMBER_OF_PERIODS,
    SUBSTITUTION_REASONS, DEFAULT_SUBSTITUTION_REASON,
    CLOCK_WRITE_ATTEMPTS,
)

__all__ = [
    "fmt_mmss", "parse_mmss", "now_ts", "APP_TITLE",
    "DEFAULT_PERIOD_DURATION_SEC", "DEFAULT_NUMBER_OF_PERIODS",
    "DEFAULT_OVERTIME_PERIOD_DURATION_SEC", "DEFAULT_MAX_OVERTIME_PERIODS",
    "MIN_NUMBER_OF_PERIODS", "MAX_NUMBER_OF_PERIODS",
    "SUBSTITUTION_REASONS", "DEFAULT_SUBSTITUTION_REASON",
    "CLOCK_WRITE_ATTEMPTS",
]
