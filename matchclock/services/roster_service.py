"""Roster service: who is on the game sheet and who starts on court."""

import logging
from typing import List, Optional

from ..models import RosterEntry
from .exceptions import NotFound, ValidationError
from .persistence_service import MatchStore

logger = logging.getLogger(__name__)


class RosterService:
    """Service for managing per-game roster entries."""

    def __init__(self, store: MatchStore) -> None:
        self.store = store

    def add_player(
        self,
        game_id: int,
        club_id: int,
        player_id: int,
        *,
        is_starting: bool = False,
        starting_position: Optional[str] = None,
    ) -> RosterEntry:
        """
        Add or update a player on a game roster.

        Raises:
            NotFound: If the game does not exist
            ValidationError: If the player is already listed for another club
        """
        if self.store.get_clock(game_id) is None:
            raise NotFound(f"Game {game_id} not found")

        existing = self.store.get_roster_entry(game_id, player_id)
        if existing is not None and existing.club_id != club_id:
            raise ValidationError(
                f"Player {player_id} is already on the roster of club {existing.club_id}"
            )

        entry = RosterEntry(
            game_id=game_id,
            club_id=club_id,
            player_id=player_id,
            is_starting=is_starting,
            starting_position=starting_position,
        )
        logger.debug("Game %s: roster entry %s", game_id, entry)
        return self.store.upsert_roster_entry(entry)

    def is_starting(self, game_id: int, player_id: int) -> bool:
        """Whether the player was on court at the start of period 1.

        Players missing from the roster count as bench players.
        """
        entry = self.store.get_roster_entry(game_id, player_id)
        return bool(entry and entry.is_starting)

    def list_roster(self, game_id: int, club_id: Optional[int] = None) -> List[RosterEntry]:
        entries = self.store.list_roster(game_id)
        if club_id is not None:
            entries = [e for e in entries if e.club_id == club_id]
        return entries
