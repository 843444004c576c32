"""Fatigue classification from play time and late-game shooting decline."""

import logging
import math
from collections import defaultdict
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from ..models import FatigueAssessment, FatigueLevel, PeriodShooting
from ..utils.constants import (
    FATIGUE_FRESH_MAX_PERCENT,
    FATIGUE_NORMAL_MAX_DEGRADATION,
    FATIGUE_NORMAL_MAX_PERCENT,
    FATIGUE_TIRED_MAX_DEGRADATION,
    FATIGUE_TIRED_MAX_PERCENT,
)
from .exceptions import ValidationError
from .play_time import PlayTimeService

logger = logging.getLogger(__name__)


def classify_fatigue(play_time_percent: float, degradation: float) -> FatigueLevel:
    """First matching rule wins; the order of the checks matters."""
    if play_time_percent < FATIGUE_FRESH_MAX_PERCENT:
        return FatigueLevel.FRESH
    if play_time_percent < FATIGUE_NORMAL_MAX_PERCENT and degradation < FATIGUE_NORMAL_MAX_DEGRADATION:
        return FatigueLevel.NORMAL
    if play_time_percent < FATIGUE_TIRED_MAX_PERCENT or degradation < FATIGUE_TIRED_MAX_DEGRADATION:
        return FatigueLevel.TIRED
    return FatigueLevel.EXHAUSTED


def period_shooting(shots: Iterable[Mapping]) -> List[PeriodShooting]:
    """
    Aggregate raw shots into per-period shooting lines.

    Args:
        shots: Mappings with ``period`` and ``result`` keys; a result of
            ``"goal"`` counts as a made shot

    Returns:
        One :class:`PeriodShooting` per period with at least one shot,
        ordered by period

    Raises:
        ValidationError: If a shot lacks a valid period
    """
    attempts: Dict[int, int] = defaultdict(int)
    goals: Dict[int, int] = defaultdict(int)
    for shot in shots:
        try:
            period = int(shot["period"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ValidationError(f"Shot is missing a valid period: {shot!r}") from exc
        if period < 1:
            raise ValidationError(f"Shot period must be positive: {shot!r}")
        attempts[period] += 1
        if shot.get("result") == "goal":
            goals[period] += 1
    return [PeriodShooting(p, attempts[p], goals[p]) for p in sorted(attempts)]


def performance_degradation(periods: Sequence[PeriodShooting]) -> float:
    """
    Mean fg% of the first half of the periods played minus the second half.

    With an odd number of periods the middle one belongs to the first half.
    Fewer than two periods means no measurable decline.
    """
    if len(periods) < 2:
        return 0.0
    split = math.ceil(len(periods) / 2)
    first, second = periods[:split], periods[split:]
    first_avg = sum(p.fg_percentage for p in first) / len(first)
    second_avg = sum(p.fg_percentage for p in second) / len(second)
    return first_avg - second_avg


class FatigueService:
    """Combines reconstructed play time with shooting decline."""

    def __init__(self, play_time_service: PlayTimeService) -> None:
        self.play_time_service = play_time_service

    def assess(
        self,
        game_id: int,
        player_id: int,
        shots: Iterable[Mapping] = (),
        degradation: Optional[float] = None,
    ) -> FatigueAssessment:
        """
        Assess a player's fatigue for one game.

        Either pass the player's raw ``shots`` for the game or a precomputed
        ``degradation``; an explicit degradation takes precedence.

        Raises:
            NotFound: If the game does not exist
            ValidationError: If a shot is malformed
        """
        report = self.play_time_service.play_time(game_id, player_id)
        periods = period_shooting(shots)
        if degradation is None:
            degradation = performance_degradation(periods)

        level = classify_fatigue(report.play_time_percent, degradation)
        logger.info(
            "Game %s player %s: %.1f%% play time, %.2f degradation -> %s",
            game_id, player_id, report.play_time_percent, degradation, level.value,
        )
        return FatigueAssessment(
            game_id=game_id,
            player_id=player_id,
            play_time=report,
            degradation=degradation,
            fatigue_level=level,
            period_performance=periods,
        )
