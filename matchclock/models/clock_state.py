"""
ClockState model for the match clock application.

A match clock is stored as a period configuration plus a timer phase. The
phase is a tagged union of :class:`Stopped`, :class:`Running` and
:class:`Paused`; only :class:`Running` carries a start timestamp, so the
remaining time while running can only ever be derived from it.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from ..utils.constants import (
    DEFAULT_MAX_OVERTIME_PERIODS,
    DEFAULT_NUMBER_OF_PERIODS,
    DEFAULT_OVERTIME_PERIOD_DURATION_SEC,
    DEFAULT_PERIOD_DURATION_SEC,
    MAX_NUMBER_OF_PERIODS,
    MAX_OVERTIME_DURATION_MIN,
    MAX_OVERTIME_PERIODS,
    MAX_PERIOD_DURATION_MIN,
    MIN_NUMBER_OF_PERIODS,
    MIN_OVERTIME_DURATION_MIN,
    MIN_OVERTIME_PERIODS,
    MIN_PERIOD_DURATION_MIN,
)


class TimerState(str, Enum):
    """Persisted timer state names."""

    STOPPED = "stopped"
    RUNNING = "running"
    PAUSED = "paused"


@dataclass(frozen=True)
class Stopped:
    """Clock is stopped; ``remaining_baseline`` is authoritative."""

    remaining_baseline: int


@dataclass(frozen=True)
class Running:
    """Clock is running; remaining time counts down from ``started_at``."""

    started_at: float
    remaining_baseline: int


@dataclass(frozen=True)
class Paused:
    """Clock is paused; ``remaining_baseline`` is authoritative."""

    remaining_baseline: int
    paused_at: float


TimerPhase = Union[Stopped, Running, Paused]


@dataclass(frozen=True)
class PeriodConfig:
    """
    Period and overtime configuration of a match.

    Attributes:
        period_duration: Length of a regulation period in seconds
        number_of_periods: Number of regulation periods (1-10)
        overtime_enabled: Whether overtime is played when scores are level
        overtime_period_duration: Length of one overtime period in seconds
        max_overtime_periods: Upper bound on overtime periods played
        golden_goal: First goal in overtime ends the match
    """

    period_duration: int = DEFAULT_PERIOD_DURATION_SEC
    number_of_periods: int = DEFAULT_NUMBER_OF_PERIODS
    overtime_enabled: bool = False
    overtime_period_duration: int = DEFAULT_OVERTIME_PERIOD_DURATION_SEC
    max_overtime_periods: int = DEFAULT_MAX_OVERTIME_PERIODS
    golden_goal: bool = False

    def __post_init__(self) -> None:
        if not MIN_NUMBER_OF_PERIODS <= self.number_of_periods <= MAX_NUMBER_OF_PERIODS:
            raise ValueError(
                f"number_of_periods must be between {MIN_NUMBER_OF_PERIODS} "
                f"and {MAX_NUMBER_OF_PERIODS}"
            )
        if not MIN_PERIOD_DURATION_MIN * 60 <= self.period_duration <= MAX_PERIOD_DURATION_MIN * 60:
            raise ValueError(
                f"period_duration must be between {MIN_PERIOD_DURATION_MIN} "
                f"and {MAX_PERIOD_DURATION_MIN} minutes"
            )
        if not MIN_OVERTIME_DURATION_MIN * 60 <= self.overtime_period_duration <= MAX_OVERTIME_DURATION_MIN * 60:
            raise ValueError(
                f"overtime_period_duration must be between {MIN_OVERTIME_DURATION_MIN} "
                f"and {MAX_OVERTIME_DURATION_MIN} minutes"
            )
        if not MIN_OVERTIME_PERIODS <= self.max_overtime_periods <= MAX_OVERTIME_PERIODS:
            raise ValueError(
                f"max_overtime_periods must be between {MIN_OVERTIME_PERIODS} "
                f"and {MAX_OVERTIME_PERIODS}"
            )

    def to_json(self) -> dict:
        return {
            "period_duration": self.period_duration,
            "number_of_periods": self.number_of_periods,
            "overtime_enabled": self.overtime_enabled,
            "overtime_period_duration": self.overtime_period_duration,
            "max_overtime_periods": self.max_overtime_periods,
            "golden_goal": self.golden_goal,
        }

    @staticmethod
    def from_json(data: dict) -> "PeriodConfig":
        defaults = PeriodConfig()
        return PeriodConfig(
            period_duration=int(data.get("period_duration", defaults.period_duration)),
            number_of_periods=int(data.get("number_of_periods", defaults.number_of_periods)),
            overtime_enabled=bool(data.get("overtime_enabled", defaults.overtime_enabled)),
            overtime_period_duration=int(
                data.get("overtime_period_duration", defaults.overtime_period_duration)
            ),
            max_overtime_periods=int(
                data.get("max_overtime_periods", defaults.max_overtime_periods)
            ),
            golden_goal=bool(data.get("golden_goal", defaults.golden_goal)),
        )


@dataclass(frozen=True)
class ClockState:
    """
    Persisted timer record of one match.

    Attributes:
        game_id: Identifier of the game this clock belongs to
        phase: Current timer phase (stopped, running or paused)
        config: Period and overtime configuration
        current_period: Active regulation period (1-based)
        is_overtime: Whether the match is in overtime
        overtime_period_number: Active overtime period (0 in regulation)
        version: Row version used for compare-and-set writes
    """

    game_id: int
    phase: TimerPhase
    config: PeriodConfig = field(default_factory=PeriodConfig)
    current_period: int = 1
    is_overtime: bool = False
    overtime_period_number: int = 0
    version: int = 0

    @staticmethod
    def scheduled(game_id: int, config: Optional[PeriodConfig] = None) -> "ClockState":
        """Create the clock of a newly scheduled match: stopped at full length."""
        config = config or PeriodConfig()
        return ClockState(
            game_id=game_id,
            phase=Stopped(remaining_baseline=config.period_duration),
            config=config,
        )

    @property
    def state(self) -> TimerState:
        if isinstance(self.phase, Running):
            return TimerState.RUNNING
        if isinstance(self.phase, Paused):
            return TimerState.PAUSED
        return TimerState.STOPPED

    @property
    def active_period_duration(self) -> int:
        """Length of the period currently on the clock."""
        if self.is_overtime:
            return self.config.overtime_period_duration
        return self.config.period_duration

    def to_json(self) -> dict:
        """
        Convert ClockState to the flat, persisted row layout.

        Returns:
            Dictionary representation suitable for JSON serialization
        """
        phase = self.phase
        data = {
            "game_id": self.game_id,
            "state": self.state.value,
            "started_at": phase.started_at if isinstance(phase, Running) else None,
            "paused_at": phase.paused_at if isinstance(phase, Paused) else None,
            "remaining_baseline": phase.remaining_baseline,
            "current_period": self.current_period,
            "is_overtime": self.is_overtime,
            "overtime_period_number": self.overtime_period_number,
            "version": self.version,
        }
        data.update(self.config.to_json())
        return data

    @staticmethod
    def from_json(data: dict) -> "ClockState":
        """
        Create ClockState from a persisted row.

        Raises:
            ValueError: If the row holds an unknown state or a running clock
                        without a start timestamp
        """
        config = PeriodConfig.from_json(data)
        state = TimerState(data.get("state", TimerState.STOPPED.value))
        baseline = int(data.get("remaining_baseline", config.period_duration))

        phase: TimerPhase
        if state is TimerState.RUNNING:
            if data.get("started_at") is None:
                raise ValueError("Running clock requires started_at")
            phase = Running(started_at=float(data["started_at"]), remaining_baseline=baseline)
        elif state is TimerState.PAUSED:
            paused_at = data.get("paused_at")
            phase = Paused(
                remaining_baseline=baseline,
                paused_at=float(paused_at) if paused_at is not None else 0.0,
            )
        else:
            phase = Stopped(remaining_baseline=baseline)

        return ClockState(
            game_id=int(data["game_id"]),
            phase=phase,
            config=config,
            current_period=int(data.get("current_period", 1)),
            is_overtime=bool(data.get("is_overtime", False)),
            overtime_period_number=int(data.get("overtime_period_number", 0)),
            version=int(data.get("version", 0)),
        )
