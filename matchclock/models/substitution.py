"""
Substitution and roster models for the match clock application.

Substitution events are immutable once written; a player's on-court history
is rebuilt from them after the fact.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class SubstitutionType(str, Enum):
    """Direction of a substitution from one player's point of view."""

    IN = "in"
    OUT = "out"


def segment_number(period: int, overtime_period_number: int, number_of_periods: int) -> int:
    """
    Position of a period in the continuous sequence of played periods.

    Regulation periods keep their number; overtime period ``k`` follows the
    last regulation period as ``number_of_periods + k``.
    """
    if overtime_period_number > 0:
        return number_of_periods + overtime_period_number
    return period


@dataclass(frozen=True)
class SubstitutionEvent:
    """
    A recorded substitution: ``player_out`` leaves the court for ``player_in``.

    Attributes:
        id: Sequence number assigned by the store
        game_id: Game the substitution belongs to
        club_id: Club making the substitution
        player_in: Player entering the court
        player_out: Player going to the bench
        period: Regulation period in which it happened
        time_remaining: Seconds left on the period clock at the event
        overtime_period_number: Overtime period (0 during regulation)
        reason: tactical, injury, fatigue or disciplinary
        created_at: Wall timestamp when it was recorded (epoch seconds)
    """

    id: int
    game_id: int
    club_id: int
    player_in: int
    player_out: int
    period: int
    time_remaining: int
    overtime_period_number: int = 0
    reason: str = "tactical"
    created_at: float = 0.0

    def __post_init__(self) -> None:
        if self.player_in == self.player_out:
            raise ValueError("Player in and player out must be different")
        if self.period < 1:
            raise ValueError("Period must be a positive integer")
        if self.time_remaining < 0:
            raise ValueError("Time remaining cannot be negative")

    def involves(self, player_id: int) -> bool:
        return player_id in (self.player_in, self.player_out)

    def to_json(self) -> dict:
        return {
            "id": self.id,
            "game_id": self.game_id,
            "club_id": self.club_id,
            "player_in": self.player_in,
            "player_out": self.player_out,
            "period": self.period,
            "time_remaining": self.time_remaining,
            "overtime_period_number": self.overtime_period_number,
            "reason": self.reason,
            "created_at": self.created_at,
        }

    @staticmethod
    def from_json(data: dict) -> "SubstitutionEvent":
        return SubstitutionEvent(
            id=int(data["id"]),
            game_id=int(data["game_id"]),
            club_id=int(data["club_id"]),
            player_in=int(data["player_in"]),
            player_out=int(data["player_out"]),
            period=int(data["period"]),
            time_remaining=int(data["time_remaining"]),
            overtime_period_number=int(data.get("overtime_period_number", 0)),
            reason=data.get("reason", "tactical"),
            created_at=float(data.get("created_at", 0.0)),
        )


@dataclass(frozen=True)
class PlayerSubstitution:
    """One substitution seen from a single player: they came in or went out."""

    player_id: int
    type: SubstitutionType
    period: int
    time_remaining: int
    overtime_period_number: int = 0

    @staticmethod
    def for_player(event: SubstitutionEvent, player_id: int) -> "PlayerSubstitution":
        if player_id == event.player_in:
            kind = SubstitutionType.IN
        elif player_id == event.player_out:
            kind = SubstitutionType.OUT
        else:
            raise ValueError(f"Player {player_id} is not part of substitution {event.id}")
        return PlayerSubstitution(
            player_id=player_id,
            type=kind,
            period=event.period,
            time_remaining=event.time_remaining,
            overtime_period_number=event.overtime_period_number,
        )

    def to_dict(self) -> dict:
        return {
            "player_id": self.player_id,
            "type": self.type.value,
            "period": self.period,
            "time_remaining": self.time_remaining,
            "overtime_period_number": self.overtime_period_number,
        }


@dataclass(frozen=True)
class RosterEntry:
    """Per-game roster line: whether the player starts on court."""

    game_id: int
    club_id: int
    player_id: int
    is_starting: bool = False
    starting_position: Optional[str] = None

    def to_json(self) -> dict:
        return {
            "game_id": self.game_id,
            "club_id": self.club_id,
            "player_id": self.player_id,
            "is_starting": self.is_starting,
            "starting_position": self.starting_position,
        }

    @staticmethod
    def from_json(data: dict) -> "RosterEntry":
        return RosterEntry(
            game_id=int(data["game_id"]),
            club_id=int(data["club_id"]),
            player_id=int(data["player_id"]),
            is_starting=bool(data.get("is_starting", False)),
            starting_position=data.get("starting_position"),
        )
