"""Clock service: reads and compare-and-set writes of match clocks."""

import logging
from typing import Callable, Optional, Tuple, TypeVar

from ..models import ClockReading, ClockState, PeriodConfig
from ..utils import CLOCK_WRITE_ATTEMPTS, now_ts
from . import clock_controller
from .clock_controller import AdvanceOutcome, PeriodAdvance
from .exceptions import ConcurrencyConflict, DuplicateGame, NotFound
from .persistence_service import MatchStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ClockService:
    """
    Service for reading and mutating match clocks.

    Reads always derive the remaining time from the stored row. Writes load
    the row, apply a pure transition and store it only if the row is still
    unchanged; a lost race is retried once against the fresh row.
    """

    def __init__(self, store: MatchStore) -> None:
        self.store = store

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def create_clock(self, game_id: int, config: Optional[PeriodConfig] = None) -> ClockState:
        """
        Schedule a clock for a game: stopped, period 1, full period length.

        Raises:
            DuplicateGame: If the game already has a clock
        """
        try:
            clock = self.store.insert_clock(ClockState.scheduled(game_id, config))
        except ValueError as exc:
            raise DuplicateGame(f"Game {game_id} already exists") from exc
        logger.info("Game %s: clock scheduled (%s)", game_id, clock.config)
        return clock

    def get_clock(self, game_id: int) -> ClockState:
        """
        Raises:
            NotFound: If the game has no clock
        """
        clock = self.store.get_clock(game_id)
        if clock is None:
            raise NotFound(f"Game {game_id} not found")
        return clock

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def read(self, game_id: int) -> ClockReading:
        """Return the clock with a freshly derived remaining time."""
        clock = self.get_clock(game_id)
        return self.reading_for(clock, now_ts())

    @staticmethod
    def reading_for(clock: ClockState, now: float) -> ClockReading:
        return ClockReading(
            game_id=clock.game_id,
            state=clock.state.value,
            current_period=clock.current_period,
            derived_remaining_seconds=clock_controller.derive_remaining(clock, now),
            is_overtime=clock.is_overtime,
            overtime_period_number=clock.overtime_period_number,
            period_duration=clock.active_period_duration,
            number_of_periods=clock.config.number_of_periods,
        )

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def start(self, game_id: int) -> ClockReading:
        clock = self._write(game_id, lambda c, now: (clock_controller.start(c, now), None))[0]
        return self.reading_for(clock, now_ts())

    def pause(self, game_id: int) -> ClockReading:
        """
        Raises:
            InvalidTransition: If the clock is stopped
        """
        clock = self._write(game_id, lambda c, now: (clock_controller.pause(c, now), None))[0]
        return self.reading_for(clock, now_ts())

    def stop(self, game_id: int) -> ClockReading:
        clock = self._write(game_id, lambda c, now: (clock_controller.stop(c, now), None))[0]
        return self.reading_for(clock, now_ts())

    def advance_period(
        self,
        game_id: int,
        *,
        force: bool = False,
        scores_level: bool = False,
    ) -> PeriodAdvance:
        """
        Advance to the next period, overtime or completion.

        When a concurrent writer already moved the match on, the call becomes
        a no-op and reports :attr:`AdvanceOutcome.NO_CHANGE`.

        Raises:
            InvalidTransition: If time remains and ``force`` is not set
        """
        seen = {}

        def transition(clock: ClockState, now: float) -> Tuple[ClockState, PeriodAdvance]:
            position = (clock.current_period, clock.is_overtime, clock.overtime_period_number)
            if "position" in seen and seen["position"] != position:
                logger.debug("Game %s: period already advanced concurrently", game_id)
                return clock, PeriodAdvance(clock, AdvanceOutcome.NO_CHANGE)
            seen["position"] = position
            result = clock_controller.advance_period(
                clock, now, force=force, scores_level=scores_level
            )
            return result.clock, result

        stored, result = self._write(game_id, transition)
        return PeriodAdvance(stored, result.outcome, result.golden_goal)

    def set_period(self, game_id: int, period: int) -> ClockReading:
        clock = self._write(
            game_id, lambda c, now: (clock_controller.set_period(c, period), None)
        )[0]
        return self.reading_for(clock, now_ts())

    def configure(self, game_id: int, config: PeriodConfig) -> ClockReading:
        clock = self._write(
            game_id, lambda c, now: (clock_controller.configure(c, config), None)
        )[0]
        return self.reading_for(clock, now_ts())

    def reset(self, game_id: int) -> ClockReading:
        clock = self._write(game_id, lambda c, now: (clock_controller.reset(c), None))[0]
        return self.reading_for(clock, now_ts())

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _write(
        self,
        game_id: int,
        transition: Callable[[ClockState, float], Tuple[ClockState, T]],
    ) -> Tuple[ClockState, T]:
        for attempt in range(CLOCK_WRITE_ATTEMPTS):
            current = self.get_clock(game_id)
            new_clock, result = transition(current, now_ts())
            if new_clock == current:
                return current, result

            stored = self.store.compare_and_set_clock(
                new_clock, expected_version=current.version, expected_state=current.state
            )
            if stored is not None:
                return stored, result
            logger.debug("Game %s: clock write conflict (attempt %d)", game_id, attempt + 1)

        logger.warning("Game %s: clock write still conflicting after retry", game_id)
        raise ConcurrencyConflict(f"Clock of game {game_id} was modified concurrently")
