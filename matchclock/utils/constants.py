"""
Constants for the match clock application.

This module contains configuration defaults and bounds used throughout the
application.
"""

# Application metadata
APP_TITLE = "Korfball Match Clock"

# Clock defaults (a scheduled match starts stopped with 4 x 10 minutes)
DEFAULT_PERIOD_DURATION_SEC = 10 * 60
DEFAULT_NUMBER_OF_PERIODS = 4
MIN_NUMBER_OF_PERIODS = 1
MAX_NUMBER_OF_PERIODS = 10
MIN_PERIOD_DURATION_MIN = 1
MAX_PERIOD_DURATION_MIN = 60

# Overtime defaults
DEFAULT_OVERTIME_PERIOD_DURATION_SEC = 5 * 60
DEFAULT_MAX_OVERTIME_PERIODS = 2
MIN_OVERTIME_DURATION_MIN = 1
MAX_OVERTIME_DURATION_MIN = 30
MIN_OVERTIME_PERIODS = 1
MAX_OVERTIME_PERIODS = 10

# Substitution reasons accepted by the live match console
SUBSTITUTION_REASONS = ("tactical", "injury", "fatigue", "disciplinary")
DEFAULT_SUBSTITUTION_REASON = "tactical"

# Fatigue thresholds (percent of total game time / percentage points of fg% drop)
FATIGUE_FRESH_MAX_PERCENT = 40
FATIGUE_NORMAL_MAX_PERCENT = 70
FATIGUE_NORMAL_MAX_DEGRADATION = 10
FATIGUE_TIRED_MAX_PERCENT = 85
FATIGUE_TIRED_MAX_DEGRADATION = 15

# Number of attempts for a compare-and-set clock write (first try + one retry)
CLOCK_WRITE_ATTEMPTS = 2
