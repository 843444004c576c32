"""Dataclasses describing derived match read-outs and analytics results."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from ..utils.time_utils import fmt_mmss


@dataclass(frozen=True)
class ClockReading:
    """Freshly derived view of a match clock. Never cached."""

    game_id: int
    state: str
    current_period: int
    derived_remaining_seconds: int
    is_overtime: bool
    overtime_period_number: int
    period_duration: int
    number_of_periods: int

    def to_dict(self) -> dict:
        return {
            "game_id": self.game_id,
            "state": self.state,
            "current_period": self.current_period,
            "derived_remaining_seconds": self.derived_remaining_seconds,
            "display": fmt_mmss(self.derived_remaining_seconds),
            "is_overtime": self.is_overtime,
            "overtime_period_number": self.overtime_period_number,
            "period_duration": self.period_duration,
            "number_of_periods": self.number_of_periods,
        }


@dataclass
class PlayTimeReport:
    """Reconstructed on-court time of one player in one game."""

    play_time_seconds: int
    total_game_seconds: int
    play_time_percent: float
    stints: List[Tuple[int, int]] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    game_id: Optional[int] = None
    player_id: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "game_id": self.game_id,
            "player_id": self.player_id,
            "play_time_seconds": self.play_time_seconds,
            "play_time_minutes": round(self.play_time_seconds / 60, 1),
            "play_time_percent": round(self.play_time_percent, 1),
            "total_game_seconds": self.total_game_seconds,
            "stints": [{"start": start, "end": end} for start, end in self.stints],
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class PeriodShooting:
    """Shots and goals of one player in one period."""

    period: int
    shots: int
    goals: int

    @property
    def fg_percentage(self) -> float:
        if self.shots <= 0:
            return 0.0
        return round(self.goals / self.shots * 100, 2)

    def to_dict(self) -> dict:
        return {
            "period": self.period,
            "shots": self.shots,
            "goals": self.goals,
            "fg_percentage": self.fg_percentage,
        }


class FatigueLevel(str, Enum):
    FRESH = "fresh"
    NORMAL = "normal"
    TIRED = "tired"
    EXHAUSTED = "exhausted"


@dataclass
class FatigueAssessment:
    """Fatigue label of a player for one game and the figures behind it."""

    game_id: int
    player_id: int
    play_time: PlayTimeReport
    degradation: float
    fatigue_level: FatigueLevel
    period_performance: List[PeriodShooting] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "game_id": self.game_id,
            "player_id": self.player_id,
            "play_time_seconds": self.play_time.play_time_seconds,
            "play_time_minutes": round(self.play_time.play_time_seconds / 60, 1),
            "play_time_percent": round(self.play_time.play_time_percent, 1),
            "performance_degradation": round(self.degradation, 2),
            "fatigue_level": self.fatigue_level.value,
            "period_performance": [p.to_dict() for p in self.period_performance],
        }
