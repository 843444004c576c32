"""
Play-time reconstruction.

A player's on-court time is rebuilt after the fact from whether they started
and their chronologically ordered substitution events. Each event is mapped
onto one continuous game timeline (absolute elapsed seconds across all
periods played), so period boundaries need no special handling: the whole
reconstruction is a single left fold over the events.
"""
import logging
from dataclasses import dataclass
from functools import reduce
from itertools import accumulate
from typing import Iterable, List, Optional, Sequence, Tuple

from ..models import (
    PeriodConfig, PlayerSubstitution, PlayTimeReport, SubstitutionType, segment_number
)
from .exceptions import NotFound
from .persistence_service import MatchStore
from .substitution_service import SubstitutionService

logger = logging.getLogger(__name__)


def period_durations(config: PeriodConfig, overtime_periods_played: int = 0) -> List[int]:
    """Durations of every period played: regulation first, then overtime."""
    overtime = max(0, min(overtime_periods_played, config.max_overtime_periods))
    return (
        [config.period_duration] * config.number_of_periods
        + [config.overtime_period_duration] * overtime
    )


@dataclass(frozen=True)
class _Timeline:
    durations: Tuple[int, ...]
    starts: Tuple[int, ...]
    number_of_periods: int

    @property
    def total(self) -> int:
        return sum(self.durations)

    def absolute_time(self, event: PlayerSubstitution) -> Tuple[Optional[int], Optional[str]]:
        """Absolute elapsed seconds of an event, plus a data-quality note."""
        segment = segment_number(event.period, event.overtime_period_number, self.number_of_periods)
        if not 1 <= segment <= len(self.durations):
            return None, (
                f"{event.type.value} event in period {event.period} "
                f"(overtime {event.overtime_period_number}) is outside the periods played; ignored"
            )

        duration = self.durations[segment - 1]
        remaining = event.time_remaining
        note = None
        if remaining > duration:
            note = (
                f"{event.type.value} event in period {event.period} has {remaining}s remaining, "
                f"more than the {duration}s period; clamped"
            )
            remaining = duration
        return self.starts[segment - 1] + (duration - remaining), note


@dataclass(frozen=True)
class _FoldState:
    on_court: bool
    cursor: int
    accumulated: int = 0
    stints: Tuple[Tuple[int, int], ...] = ()
    warnings: Tuple[str, ...] = ()

    def warn(self, message: str) -> "_FoldState":
        return _FoldState(self.on_court, self.cursor, self.accumulated, self.stints,
                          self.warnings + (message,))


def _step(timeline: _Timeline, state: _FoldState, event: PlayerSubstitution) -> _FoldState:
    t, note = timeline.absolute_time(event)
    if note:
        state = state.warn(note)
    if t is None:
        return state
    if t < state.cursor:
        state = state.warn(
            f"{event.type.value} event at {t}s precedes the previous event at {state.cursor}s; "
            f"treated as simultaneous"
        )
        t = state.cursor

    if event.type is SubstitutionType.IN:
        if state.on_court:
            # Keep the earlier entry time: the player never left.
            return state.warn(f"in event at {t}s while already on court; ignored")
        return _FoldState(True, t, state.accumulated, state.stints, state.warnings)

    if not state.on_court:
        state = state.warn(f"out event at {t}s while not on court; no time credited")
        return _FoldState(False, t, state.accumulated, state.stints, state.warnings)
    return _FoldState(
        False,
        t,
        state.accumulated + (t - state.cursor),
        state.stints + ((state.cursor, t),),
        state.warnings,
    )


def reconstruct_play_time(
    is_starting: bool,
    events: Iterable[PlayerSubstitution],
    durations: Sequence[int],
    number_of_periods: Optional[int] = None,
) -> PlayTimeReport:
    """
    Reconstruct the on-court seconds of one player.

    Args:
        is_starting: Whether the player was on court when period 1 started
        events: The player's in/out events, ordered by period ascending and
            time remaining descending
        durations: Length of every period played, in order
        number_of_periods: Number of regulation periods; defaults to
            ``len(durations)``. Overtime events are placed after them.

    Returns:
        :class:`PlayTimeReport` with seconds, percent, stints and any
        data-quality warnings raised while folding
    """
    durations = tuple(durations)
    starts = tuple(accumulate((0,) + durations[:-1])) if durations else ()
    timeline = _Timeline(
        durations=durations,
        starts=starts,
        number_of_periods=number_of_periods if number_of_periods is not None else len(durations),
    )

    final = reduce(
        lambda state, event: _step(timeline, state, event),
        events,
        _FoldState(on_court=is_starting, cursor=0),
    )

    total = timeline.total
    accumulated, stints = final.accumulated, final.stints
    if final.on_court and total > final.cursor:
        accumulated += total - final.cursor
        stints += ((final.cursor, total),)

    for warning in final.warnings:
        logger.warning("Play-time data quality: %s", warning)

    percent = 100.0 * accumulated / total if total else 0.0
    return PlayTimeReport(
        play_time_seconds=accumulated,
        total_game_seconds=total,
        play_time_percent=percent,
        stints=list(stints),
        warnings=list(final.warnings),
    )


class PlayTimeService:
    """Reconstructs play time for stored games."""

    def __init__(self, store: MatchStore, substitutions: Optional[SubstitutionService] = None) -> None:
        self.store = store
        self.substitutions = substitutions or SubstitutionService(store)

    def play_time(self, game_id: int, player_id: int) -> PlayTimeReport:
        """
        Raises:
            NotFound: If the game does not exist
        """
        clock = self.store.get_clock(game_id)
        if clock is None:
            raise NotFound(f"Game {game_id} not found")

        entry = self.store.get_roster_entry(game_id, player_id)
        is_starting = bool(entry and entry.is_starting)
        events = self.substitutions.player_events(game_id, player_id)

        overtime_played = max(
            [clock.overtime_period_number] + [e.overtime_period_number for e in events]
        )
        durations = period_durations(clock.config, overtime_played)

        report = reconstruct_play_time(
            is_starting, events, durations, clock.config.number_of_periods
        )
        report.game_id = game_id
        report.player_id = player_id
        return report
