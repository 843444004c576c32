"""
Clock transitions for the match clock application.

Every function here is pure: it takes a :class:`ClockState` plus the current
wall time and returns a new value. Nothing ticks in the background; the
remaining time shown to clients is recomputed from the persisted fields on
every read by :func:`derive_remaining`.
"""
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from ..models import ClockState, Paused, PeriodConfig, Running, Stopped, TimerState
from .exceptions import InvalidTransition, ValidationError

logger = logging.getLogger(__name__)


class AdvanceOutcome(str, Enum):
    """What an advance-period call did to the match."""

    NEXT_PERIOD = "next_period"
    OVERTIME = "overtime"
    COMPLETED = "completed"
    NO_CHANGE = "no_change"


@dataclass(frozen=True)
class PeriodAdvance:
    """
    Result of :func:`advance_period`.

    ``golden_goal`` is only meaningful for :attr:`AdvanceOutcome.OVERTIME`:
    the match ends on the first overtime goal instead of time expiry, which
    the match-completion logic outside the clock has to enforce.
    """

    clock: ClockState
    outcome: AdvanceOutcome
    golden_goal: bool = False

    @property
    def match_completed(self) -> bool:
        return self.outcome is AdvanceOutcome.COMPLETED

    def to_dict(self) -> dict:
        return {
            "outcome": self.outcome.value,
            "match_completed": self.match_completed,
            "golden_goal": self.golden_goal,
            "current_period": self.clock.current_period,
            "is_overtime": self.clock.is_overtime,
            "overtime_period_number": self.clock.overtime_period_number,
        }


def derive_remaining(clock: ClockState, now: float) -> int:
    """
    Remaining seconds on the clock at wall time ``now``.

    Stopped and paused clocks report their baseline; a running clock counts
    down from its baseline by the whole seconds elapsed since it started.
    """
    phase = clock.phase
    if isinstance(phase, Running):
        elapsed = max(0, int(now - phase.started_at))
        return max(0, phase.remaining_baseline - elapsed)
    return phase.remaining_baseline


def start(clock: ClockState, now: float) -> ClockState:
    """Start or resume the clock. Starting a running clock changes nothing."""
    if isinstance(clock.phase, Running):
        logger.debug("Game %s: start ignored, clock already running", clock.game_id)
        return clock

    baseline = clock.phase.remaining_baseline
    logger.info("Game %s: clock started with %ss remaining", clock.game_id, baseline)
    return replace(clock, phase=Running(started_at=now, remaining_baseline=baseline))


def pause(clock: ClockState, now: float) -> ClockState:
    """
    Pause a running clock, folding the elapsed time into the baseline.

    Raises:
        InvalidTransition: If the clock is stopped
    """
    phase = clock.phase
    if isinstance(phase, Paused):
        logger.debug("Game %s: pause ignored, clock already paused", clock.game_id)
        return clock
    if isinstance(phase, Stopped):
        raise InvalidTransition("Timer is not running", current_state=clock.state.value)

    remaining = derive_remaining(clock, now)
    logger.info("Game %s: clock paused with %ss remaining", clock.game_id, remaining)
    return replace(clock, phase=Paused(remaining_baseline=remaining, paused_at=now))


def stop(clock: ClockState, now: float) -> ClockState:
    """Stop the clock from any state, freezing the currently derived time."""
    if isinstance(clock.phase, Stopped):
        return clock

    remaining = derive_remaining(clock, now)
    logger.info("Game %s: clock stopped with %ss remaining", clock.game_id, remaining)
    return replace(clock, phase=Stopped(remaining_baseline=remaining))


def advance_period(
    clock: ClockState,
    now: float,
    *,
    force: bool = False,
    scores_level: bool = False,
) -> PeriodAdvance:
    """
    Move the match to its next period, into overtime, or to completion.

    Args:
        clock: Current clock state
        now: Current wall time
        force: Advance even though time is left on the clock
        scores_level: Whether the scores are tied; only then is overtime played

    Returns:
        :class:`PeriodAdvance` with the new clock, which is always stopped

    Raises:
        InvalidTransition: If time remains and ``force`` is not set
    """
    remaining = derive_remaining(clock, now)
    if remaining > 0 and not force:
        raise InvalidTransition(
            f"Cannot advance period with {remaining}s remaining",
            current_state=clock.state.value,
        )

    config = clock.config
    if not clock.is_overtime and clock.current_period < config.number_of_periods:
        new_clock = replace(
            clock,
            current_period=clock.current_period + 1,
            phase=Stopped(remaining_baseline=config.period_duration),
        )
        logger.info("Game %s: advanced to period %s", clock.game_id, new_clock.current_period)
        return PeriodAdvance(new_clock, AdvanceOutcome.NEXT_PERIOD)

    overtime_left = clock.overtime_period_number < config.max_overtime_periods
    if config.overtime_enabled and scores_level and overtime_left:
        new_clock = replace(
            clock,
            is_overtime=True,
            overtime_period_number=clock.overtime_period_number + 1,
            phase=Stopped(remaining_baseline=config.overtime_period_duration),
        )
        logger.info(
            "Game %s: overtime period %s (golden goal: %s)",
            clock.game_id, new_clock.overtime_period_number, config.golden_goal,
        )
        return PeriodAdvance(new_clock, AdvanceOutcome.OVERTIME, golden_goal=config.golden_goal)

    logger.info("Game %s: periods exhausted, match completed", clock.game_id)
    return PeriodAdvance(
        replace(clock, phase=Stopped(remaining_baseline=0)),
        AdvanceOutcome.COMPLETED,
    )


def set_period(clock: ClockState, period: int) -> ClockState:
    """
    Jump to a regulation period, leaving the clock stopped at full length.

    Raises:
        ValidationError: If the period is outside the configured range
    """
    if not 1 <= period <= clock.config.number_of_periods:
        raise ValidationError(
            f"Period must be between 1 and {clock.config.number_of_periods}"
        )
    logger.info("Game %s: period set to %s", clock.game_id, period)
    return replace(
        clock,
        current_period=period,
        is_overtime=False,
        overtime_period_number=0,
        phase=Stopped(remaining_baseline=clock.config.period_duration),
    )


def configure(clock: ClockState, config: PeriodConfig) -> ClockState:
    """
    Replace the period configuration of a stopped clock.

    A clock still at the full length of its period picks up the new length;
    otherwise the remaining time is clamped to it.

    Raises:
        InvalidTransition: If the clock is not stopped
        ValidationError: If the current period or overtime period no longer
                         fits the configuration
    """
    if clock.state is not TimerState.STOPPED:
        raise InvalidTransition(
            "Cannot configure the clock while it is running or paused",
            current_state=clock.state.value,
        )
    if clock.current_period > config.number_of_periods:
        raise ValidationError(
            f"Current period {clock.current_period} exceeds {config.number_of_periods} periods"
        )
    if clock.is_overtime and (
        not config.overtime_enabled
        or config.max_overtime_periods < clock.overtime_period_number
    ):
        raise ValidationError(
            f"Overtime period {clock.overtime_period_number} is in progress; "
            f"the configuration must allow at least {clock.overtime_period_number} overtime periods"
        )

    old_duration = clock.active_period_duration
    reconfigured = replace(clock, config=config)
    new_duration = reconfigured.active_period_duration
    baseline = clock.phase.remaining_baseline
    if baseline == old_duration:
        baseline = new_duration
    else:
        baseline = min(baseline, new_duration)
    return replace(reconfigured, phase=Stopped(remaining_baseline=baseline))


def reset(clock: ClockState, config: Optional[PeriodConfig] = None) -> ClockState:
    """Return the clock of the same game as freshly scheduled."""
    fresh = ClockState.scheduled(clock.game_id, config or clock.config)
    logger.info("Game %s: clock reset", clock.game_id)
    return replace(fresh, version=clock.version)
