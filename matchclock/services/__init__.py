"""
Services package for the match clock application.

This package contains service classes that handle business logic.
Includes a factory that wires them around one shared store.
"""
from .exceptions import (
    MatchClockError, InvalidTransition, NotFound, ConcurrencyConflict, ValidationError,
    DuplicateGame,
)
from .persistence_service import MatchStore
from .clock_controller import AdvanceOutcome, PeriodAdvance, derive_remaining
from .clock_service import ClockService
from .roster_service import RosterService
from .substitution_service import SubstitutionService
from .play_time import PlayTimeService, reconstruct_play_time, period_durations
from .fatigue_service import (
    FatigueService, classify_fatigue, period_shooting, performance_degradation
)
from .possession_service import PossessionService
from .service_factory import ServiceFactory

__all__ = [
    "MatchClockError", "InvalidTransition", "NotFound", "ConcurrencyConflict", "DuplicateGame",
    "ValidationError", "MatchStore", "AdvanceOutcome", "PeriodAdvance",
    "derive_remaining", "ClockService", "RosterService", "SubstitutionService",
    "PlayTimeService", "reconstruct_play_time", "period_durations",
    "FatigueService", "classify_fatigue", "period_shooting", "performance_degradation",
    "PossessionService", "ServiceFactory",
]
