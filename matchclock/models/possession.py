"""Ball possession model for the match clock application."""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional


class PossessionResult(str, Enum):
    """How a possession ended."""

    GOAL = "goal"
    TURNOVER = "turnover"
    OUT_OF_BOUNDS = "out_of_bounds"
    TIMEOUT = "timeout"
    PERIOD_END = "period_end"


@dataclass(frozen=True)
class Possession:
    """
    A continuous interval during which one club controls the ball.

    ``ended_at`` is ``None`` while the possession is open.
    """

    id: int
    game_id: int
    club_id: int
    period: int
    started_at: float
    player_id: Optional[int] = None
    ended_at: Optional[float] = None
    duration_seconds: Optional[int] = None
    shots_taken: int = 0
    result: Optional[PossessionResult] = None

    @property
    def is_open(self) -> bool:
        return self.ended_at is None

    def close(self, ended_at: float, result: PossessionResult) -> "Possession":
        """Return the closed possession; the duration is fixed at close time."""
        duration = max(0, int(ended_at - self.started_at))
        return replace(self, ended_at=ended_at, duration_seconds=duration, result=result)

    def with_shot(self) -> "Possession":
        return replace(self, shots_taken=self.shots_taken + 1)

    def to_json(self) -> dict:
        return {
            "id": self.id,
            "game_id": self.game_id,
            "club_id": self.club_id,
            "player_id": self.player_id,
            "period": self.period,
            "started_at": self.started_at,
            "ended_at": self.ended_at,
            "duration_seconds": self.duration_seconds,
            "shots_taken": self.shots_taken,
            "result": self.result.value if self.result else None,
        }

    @staticmethod
    def from_json(data: dict) -> "Possession":
        result = data.get("result")
        ended_at = data.get("ended_at")
        duration = data.get("duration_seconds")
        player_id = data.get("player_id")
        return Possession(
            id=int(data["id"]),
            game_id=int(data["game_id"]),
            club_id=int(data["club_id"]),
            period=int(data["period"]),
            started_at=float(data["started_at"]),
            player_id=int(player_id) if player_id is not None else None,
            ended_at=float(ended_at) if ended_at is not None else None,
            duration_seconds=int(duration) if duration is not None else None,
            shots_taken=int(data.get("shots_taken", 0)),
            result=PossessionResult(result) if result else None,
        )
