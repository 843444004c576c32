"""
Korfball Match Clock

A server-authoritative live match clock with play-time reconstruction,
fatigue classification and possession tracking.

This package provides the clock and analytics services and a Flask web API
for the live match console.
"""
from .models import ClockState, PeriodConfig, SubstitutionEvent, RosterEntry, Possession
from .services import (
    ClockService, MatchStore, PlayTimeService, PossessionService, ServiceFactory,
    reconstruct_play_time, classify_fatigue,
)
from .ui import create_app, run_web_app
from .utils import fmt_mmss, now_ts, APP_TITLE

__version__ = "1.0.0"

__all__ = [
    "ClockState", "PeriodConfig", "SubstitutionEvent", "RosterEntry", "Possession",
    "ClockService", "MatchStore", "PlayTimeService", "PossessionService", "ServiceFactory",
    "reconstruct_play_time", "classify_fatigue",
    "create_app", "run_web_app", "fmt_mmss", "now_ts", "APP_TITLE",
]
