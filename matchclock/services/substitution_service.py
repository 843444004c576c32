"""
Substitution service for the match clock application.

Substitutions are appended to the game log during the match. Who is on court
at any time is never stored; it is derived from the starting roster plus the
log in chronological order.
"""
import logging
from typing import Dict, Iterable, List, Optional, Tuple, Union

from ..models import (
    ClockState, PlayerSubstitution, RosterEntry, SubstitutionEvent, segment_number
)
from ..utils import DEFAULT_SUBSTITUTION_REASON, SUBSTITUTION_REASONS, now_ts, parse_mmss
from .clock_controller import derive_remaining
from .exceptions import NotFound, ValidationError
from .persistence_service import MatchStore

logger = logging.getLogger(__name__)


def chronological_key(event: SubstitutionEvent, number_of_periods: int) -> Tuple[int, int, float, int]:
    """Sort key: period ascending, then time remaining descending."""
    segment = segment_number(event.period, event.overtime_period_number, number_of_periods)
    return (segment, -event.time_remaining, event.created_at, event.id)


def in_chronological_order(
    events: Iterable[SubstitutionEvent], number_of_periods: int
) -> List[SubstitutionEvent]:
    return sorted(events, key=lambda e: chronological_key(e, number_of_periods))


class SubstitutionService:
    """Service for recording and querying substitutions."""

    def __init__(self, store: MatchStore) -> None:
        self.store = store

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------
    def record_substitution(
        self,
        game_id: int,
        club_id: int,
        player_in: int,
        player_out: int,
        *,
        period: Optional[int] = None,
        time_remaining: Optional[Union[str, int]] = None,
        overtime_period_number: Optional[int] = None,
        reason: Optional[str] = None,
    ) -> SubstitutionEvent:
        """
        Record a substitution during a live match.

        Period, overtime period and time remaining default to the live clock
        reading when omitted.

        Raises:
            NotFound: If the game does not exist
            ValidationError: If the substitution is not consistent with the
                             roster or the players' current on-court status
        """
        if player_in == player_out:
            raise ValidationError("Player in and player out must be different")

        reason = reason or DEFAULT_SUBSTITUTION_REASON
        if reason not in SUBSTITUTION_REASONS:
            raise ValidationError(
                f"Reason must be one of: {', '.join(SUBSTITUTION_REASONS)}"
            )

        with self.store.transaction():
            clock = self._get_clock(game_id)
            now = now_ts()

            if period is None:
                period = clock.current_period
                if overtime_period_number is None:
                    overtime_period_number = clock.overtime_period_number
            overtime_period_number = overtime_period_number or 0
            self._validate_period(clock, period, overtime_period_number)

            if time_remaining is None:
                remaining = derive_remaining(clock, now)
            else:
                try:
                    remaining = parse_mmss(time_remaining)
                except ValueError as exc:
                    raise ValidationError(str(exc)) from exc
            duration = (
                clock.config.overtime_period_duration
                if overtime_period_number
                else clock.config.period_duration
            )
            if remaining > duration:
                raise ValidationError(
                    f"Time remaining {remaining}s exceeds period duration {duration}s"
                )

            entries = {e.player_id: e for e in self.store.list_roster(game_id)}
            for player_id in (player_in, player_out):
                entry = entries.get(player_id)
                if entry is None:
                    raise ValidationError(
                        f"Player {player_id} must be in the game roster before substituting"
                    )
                if entry.club_id != club_id:
                    raise ValidationError(
                        f"Player {player_id} does not belong to club {club_id}"
                    )

            on_court = self._on_court_map(clock, entries.values(), self.store.list_substitutions(game_id))
            if on_court.get(player_in):
                raise ValidationError(f"Player {player_in} coming in is already on the court")
            if not on_court.get(player_out):
                raise ValidationError(f"Player {player_out} going out is not currently on the court")

            event = self.store.append_substitution(
                SubstitutionEvent(
                    id=0,
                    game_id=game_id,
                    club_id=club_id,
                    player_in=player_in,
                    player_out=player_out,
                    period=period,
                    time_remaining=remaining,
                    overtime_period_number=overtime_period_number,
                    reason=reason,
                    created_at=now,
                )
            )

        logger.info(
            "Game %s: substitution %s -> %s (period %s, %ss left, %s)",
            game_id, player_out, player_in, period, remaining, reason,
        )
        return event

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def list_substitutions(
        self,
        game_id: int,
        *,
        club_id: Optional[int] = None,
        period: Optional[int] = None,
        overtime_period_number: Optional[int] = None,
        player_id: Optional[int] = None,
    ) -> List[SubstitutionEvent]:
        """
        All substitutions of a game, most recent first, optionally filtered.

        A ``period`` filter alone selects regulation time of that period; pass
        ``overtime_period_number`` to select an overtime period instead.
        """
        self._get_clock(game_id)
        events = self.store.list_substitutions(game_id)
        if club_id is not None:
            events = [e for e in events if e.club_id == club_id]
        if period is not None:
            events = [e for e in events if e.period == period]
            if overtime_period_number is None:
                overtime_period_number = 0
        if overtime_period_number is not None:
            events = [e for e in events if e.overtime_period_number == overtime_period_number]
        if player_id is not None:
            events = [e for e in events if e.involves(player_id)]
        return sorted(events, key=lambda e: (e.created_at, e.id), reverse=True)

    def player_events(self, game_id: int, player_id: int) -> List[PlayerSubstitution]:
        """Chronologically ordered in/out events of one player."""
        clock = self._get_clock(game_id)
        events = [e for e in self.store.list_substitutions(game_id) if e.involves(player_id)]
        ordered = in_chronological_order(events, clock.config.number_of_periods)
        return [PlayerSubstitution.for_player(e, player_id) for e in ordered]

    def active_players(self, game_id: int) -> Dict[int, Dict[str, List[int]]]:
        """
        Current on-court and bench players per club.

        Raises:
            NotFound: If the game does not exist or has no roster
        """
        clock = self._get_clock(game_id)
        entries = self.store.list_roster(game_id)
        if not entries:
            raise NotFound(f"No roster found for game {game_id}")

        on_court = self._on_court_map(clock, entries, self.store.list_substitutions(game_id))
        result: Dict[int, Dict[str, List[int]]] = {}
        for entry in entries:
            bucket = result.setdefault(entry.club_id, {"active": [], "bench": []})
            key = "active" if on_court.get(entry.player_id) else "bench"
            bucket[key].append(entry.player_id)
        return result

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _get_clock(self, game_id: int) -> ClockState:
        clock = self.store.get_clock(game_id)
        if clock is None:
            raise NotFound(f"Game {game_id} not found")
        return clock

    @staticmethod
    def _validate_period(clock: ClockState, period: int, overtime_period_number: int) -> None:
        config = clock.config
        if not 1 <= period <= config.number_of_periods:
            raise ValidationError(f"Period must be between 1 and {config.number_of_periods}")
        if overtime_period_number < 0:
            raise ValidationError("Overtime period number cannot be negative")
        if overtime_period_number:
            if not config.overtime_enabled:
                raise ValidationError("Overtime is not enabled for this game")
            if overtime_period_number > config.max_overtime_periods:
                raise ValidationError(
                    f"Overtime period must be between 1 and {config.max_overtime_periods}"
                )

    @staticmethod
    def _on_court_map(
        clock: ClockState,
        entries: Iterable[RosterEntry],
        events: Iterable[SubstitutionEvent],
    ) -> Dict[int, bool]:
        on_court = {entry.player_id: entry.is_starting for entry in entries}
        for event in in_chronological_order(events, clock.config.number_of_periods):
            on_court[event.player_out] = False
            on_court[event.player_in] = True
        return on_court
