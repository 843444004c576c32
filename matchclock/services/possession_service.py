"""
Possession service for the match clock application.

A game has at most one open possession. Opening a new one closes the
previous possession first, all under the store lock.
"""
import logging
from collections import defaultdict
from typing import Dict, List, Optional, Union

from ..models import Possession, PossessionResult
from ..utils import now_ts
from .exceptions import NotFound, ValidationError
from .persistence_service import MatchStore

logger = logging.getLogger(__name__)


def _to_result(result: Union[str, PossessionResult]) -> PossessionResult:
    try:
        return PossessionResult(result)
    except ValueError as exc:
        allowed = ", ".join(r.value for r in PossessionResult)
        raise ValidationError(f"Result must be one of: {allowed}") from exc


class PossessionService:
    """Service for tracking ball possessions."""

    def __init__(self, store: MatchStore) -> None:
        self.store = store

    def start_possession(
        self,
        game_id: int,
        club_id: int,
        period: int,
        player_id: Optional[int] = None,
    ) -> Possession:
        """
        Open a possession for ``club_id``, closing any open one as a turnover.

        Raises:
            NotFound: If the game does not exist
            ValidationError: If the period is not positive
        """
        if period < 1:
            raise ValidationError("Period must be a positive integer")

        with self.store.transaction():
            self._ensure_game(game_id)
            now = now_ts()
            current = self.store.find_open_possession(game_id)
            if current is not None:
                self.store.update_possession(current.close(now, PossessionResult.TURNOVER))
                logger.debug("Game %s: possession %s closed by new possession", game_id, current.id)

            possession = self.store.add_possession(
                Possession(
                    id=0,
                    game_id=game_id,
                    club_id=club_id,
                    period=period,
                    started_at=now,
                    player_id=player_id,
                )
            )
        logger.info("Game %s: possession %s opened for club %s", game_id, possession.id, club_id)
        return possession

    def end_possession(
        self,
        game_id: int,
        possession_id: int,
        result: Union[str, PossessionResult],
    ) -> Possession:
        """
        Close an open possession.

        Raises:
            NotFound: If the possession does not exist or already ended
            ValidationError: If the result is unknown
        """
        outcome = _to_result(result)
        with self.store.transaction():
            possession = self.store.get_possession(game_id, possession_id)
            if possession is None or not possession.is_open:
                raise NotFound("Possession not found or already ended")
            closed = self.store.update_possession(possession.close(now_ts(), outcome))
        logger.info(
            "Game %s: possession %s ended (%s, %ss)",
            game_id, possession_id, outcome.value, closed.duration_seconds,
        )
        return closed

    def close_open_possession(
        self,
        game_id: int,
        result: Union[str, PossessionResult] = PossessionResult.PERIOD_END,
    ) -> Optional[Possession]:
        """Close the open possession of a game, if any."""
        outcome = _to_result(result)
        with self.store.transaction():
            possession = self.store.find_open_possession(game_id)
            if possession is None:
                return None
            return self.store.update_possession(possession.close(now_ts(), outcome))

    def record_shot(self, game_id: int) -> Optional[Possession]:
        """Attribute a shot to the open possession; ``None`` when there is none."""
        with self.store.transaction():
            possession = self.store.find_open_possession(game_id)
            if possession is None:
                return None
            return self.store.update_possession(possession.with_shot())

    def increment_shots(self, game_id: int, possession_id: int) -> Possession:
        """
        Raises:
            NotFound: If the possession does not exist
        """
        with self.store.transaction():
            possession = self.store.get_possession(game_id, possession_id)
            if possession is None:
                raise NotFound("Possession not found")
            return self.store.update_possession(possession.with_shot())

    def active_possession(self, game_id: int) -> Optional[dict]:
        """The open possession with its running duration, or ``None``."""
        self._ensure_game(game_id)
        possession = self.store.find_open_possession(game_id)
        if possession is None:
            return None
        data = possession.to_json()
        data["current_duration_seconds"] = max(0, int(now_ts() - possession.started_at))
        return data

    def list_possessions(
        self,
        game_id: int,
        *,
        club_id: Optional[int] = None,
        period: Optional[int] = None,
    ) -> List[Possession]:
        """Possessions of a game, most recent first."""
        self._ensure_game(game_id)
        possessions = self.store.list_possessions(game_id)
        if club_id is not None:
            possessions = [p for p in possessions if p.club_id == club_id]
        if period is not None:
            possessions = [p for p in possessions if p.period == period]
        return sorted(possessions, key=lambda p: (p.started_at, p.id), reverse=True)

    def possession_stats(self, game_id: int) -> List[Dict[str, object]]:
        """Per-club statistics over closed possessions."""
        closed = [p for p in self.list_possessions(game_id) if not p.is_open]
        by_club: Dict[int, List[Possession]] = defaultdict(list)
        for possession in closed:
            by_club[possession.club_id].append(possession)

        stats = []
        for club_id in sorted(by_club):
            rows = by_club[club_id]
            count = len(rows)
            stats.append(
                {
                    "club_id": club_id,
                    "total_possessions": count,
                    "avg_duration_seconds": round(
                        sum(p.duration_seconds or 0 for p in rows) / count, 1
                    ),
                    "avg_shots_per_possession": round(sum(p.shots_taken for p in rows) / count, 2),
                    "possessions_with_goal": sum(
                        1 for p in rows if p.result is PossessionResult.GOAL
                    ),
                    "turnovers": sum(1 for p in rows if p.result is PossessionResult.TURNOVER),
                }
            )
        return stats

    def _ensure_game(self, game_id: int) -> None:
        if self.store.get_clock(game_id) is None:
            raise NotFound(f"Game {game_id} not found")
