"""
Models package for the match clock application.

This package contains the core data models used throughout the application.
"""
from .clock_state import (
    ClockState, PeriodConfig, TimerState, TimerPhase, Stopped, Running, Paused
)
from .substitution import (
    SubstitutionEvent, SubstitutionType, PlayerSubstitution, RosterEntry, segment_number
)
from .possession import Possession, PossessionResult
from .match_report import (
    ClockReading, PlayTimeReport, PeriodShooting, FatigueLevel, FatigueAssessment
)
from .match_template import MatchTemplate, SYSTEM_TEMPLATES, get_template

__all__ = [
    "ClockState", "PeriodConfig", "TimerState", "TimerPhase", "Stopped", "Running", "Paused",
    "SubstitutionEvent", "SubstitutionType", "PlayerSubstitution", "RosterEntry",
    "segment_number", "Possession", "PossessionResult",
    "ClockReading", "PlayTimeReport", "PeriodShooting", "FatigueLevel", "FatigueAssessment",
    "MatchTemplate", "SYSTEM_TEMPLATES", "get_template",
]
