"""Built-in match templates: common period and overtime set-ups."""

from dataclasses import dataclass
from typing import Dict, List, Optional

from .clock_state import PeriodConfig


@dataclass(frozen=True)
class MatchTemplate:
    """A named match configuration that can be applied to a game clock."""

    key: str
    name: str
    description: str
    competition_type: str
    number_of_periods: int
    period_duration_minutes: int
    overtime_enabled: bool = False
    overtime_period_duration_minutes: int = 5
    max_overtime_periods: int = 2
    golden_goal: bool = False

    def to_config(self) -> PeriodConfig:
        return PeriodConfig(
            period_duration=self.period_duration_minutes * 60,
            number_of_periods=self.number_of_periods,
            overtime_enabled=self.overtime_enabled,
            overtime_period_duration=self.overtime_period_duration_minutes * 60,
            max_overtime_periods=self.max_overtime_periods,
            golden_goal=self.golden_goal,
        )

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "name": self.name,
            "description": self.description,
            "competition_type": self.competition_type,
            "number_of_periods": self.number_of_periods,
            "period_duration_minutes": self.period_duration_minutes,
            "overtime_enabled": self.overtime_enabled,
            "overtime_period_duration_minutes": self.overtime_period_duration_minutes,
            "max_overtime_periods": self.max_overtime_periods,
            "golden_goal": self.golden_goal,
        }


SYSTEM_TEMPLATES: List[MatchTemplate] = [
    MatchTemplate(
        "standard-league", "Standard League Match",
        "Standard korfball league match with 4 periods of 10 minutes each",
        "league", 4, 10,
    ),
    MatchTemplate(
        "cup-overtime", "Cup Match with Overtime",
        "Cup match with 4 periods of 10 minutes plus overtime (up to 2 periods of 5 minutes each)",
        "cup", 4, 10, overtime_enabled=True,
    ),
    MatchTemplate(
        "cup-golden-goal", "Cup Match Golden Goal",
        "Cup match with golden goal overtime",
        "cup", 4, 10, overtime_enabled=True, golden_goal=True,
    ),
    MatchTemplate(
        "tournament-short", "Tournament Short Match",
        "Short format for tournaments (2 periods of 7 minutes)",
        "tournament", 2, 7, overtime_period_duration_minutes=3,
    ),
    MatchTemplate(
        "friendly", "Friendly Match",
        "Flexible friendly match (2 periods of 15 minutes)",
        "friendly", 2, 15, max_overtime_periods=1,
    ),
    MatchTemplate(
        "youth", "Youth Match",
        "Youth match with shorter periods (4 periods of 7 minutes)",
        "league", 4, 7, max_overtime_periods=1,
    ),
    MatchTemplate(
        "indoor-league", "Indoor League Match",
        "Indoor korfball league match (4 periods of 8 minutes)",
        "league", 4, 8, overtime_period_duration_minutes=4,
    ),
]

_TEMPLATES_BY_KEY: Dict[str, MatchTemplate] = {t.key: t for t in SYSTEM_TEMPLATES}


def get_template(key: str) -> Optional[MatchTemplate]:
    return _TEMPLATES_BY_KEY.get(key)
