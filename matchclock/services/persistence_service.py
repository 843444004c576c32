"""
Persistence service for the match clock application.

This module keeps match rows (clocks, rosters, substitutions, possessions)
and optionally mirrors them to a JSON snapshot file so they survive a
process restart.
"""
import json
import logging
import os
import threading
from contextlib import contextmanager
from dataclasses import replace
from typing import Dict, Iterator, List, Optional, Tuple

from ..models import ClockState, Possession, RosterEntry, SubstitutionEvent, TimerState

logger = logging.getLogger(__name__)


class MatchStore:
    """
    Thread-safe row store for match data.

    Clock rows are only ever replaced through :meth:`compare_and_set_clock`;
    substitutions are append-only. Every mutation is written through to the
    snapshot file when one is configured.
    """

    def __init__(self, file_path: Optional[str] = None) -> None:
        """
        Initialize the store.

        Args:
            file_path: Optional JSON snapshot path. Existing data is loaded.

        Raises:
            json.JSONDecodeError: If the snapshot file contains invalid JSON
            ValueError: If the snapshot structure is invalid
        """
        self.file_path = file_path
        self._lock = threading.RLock()
        self._clocks: Dict[int, ClockState] = {}
        self._rosters: Dict[Tuple[int, int], RosterEntry] = {}
        self._substitutions: List[SubstitutionEvent] = []
        self._possessions: Dict[int, Possession] = {}
        self._next_substitution_id = 1
        self._next_possession_id = 1

        if file_path and os.path.exists(file_path):
            self._load(file_path)

    @contextmanager
    def transaction(self) -> Iterator["MatchStore"]:
        """Hold the store lock across a read-check-write sequence."""
        with self._lock:
            yield self

    @contextmanager
    def _mutation(self) -> Iterator[None]:
        """
        Apply a change and write the snapshot, all under the lock.

        When the change or the snapshot write fails, the rows are restored to
        what they were before, so readers never see an unsaved change.
        """
        with self._lock:
            saved = (
                dict(self._clocks),
                dict(self._rosters),
                list(self._substitutions),
                dict(self._possessions),
                self._next_substitution_id,
                self._next_possession_id,
            )
            try:
                yield
                self._save()
            except Exception:
                (
                    self._clocks,
                    self._rosters,
                    self._substitutions,
                    self._possessions,
                    self._next_substitution_id,
                    self._next_possession_id,
                ) = saved
                raise

    # ------------------------------------------------------------------
    # Clocks
    # ------------------------------------------------------------------
    def get_clock(self, game_id: int) -> Optional[ClockState]:
        with self._lock:
            return self._clocks.get(game_id)

    def insert_clock(self, clock: ClockState) -> ClockState:
        """
        Store the clock of a newly scheduled game.

        Raises:
            ValueError: If the game already has a clock
        """
        with self._mutation():
            if clock.game_id in self._clocks:
                raise ValueError(f"Game {clock.game_id} already has a clock")
            stored = replace(clock, version=0)
            self._clocks[clock.game_id] = stored
            return stored

    def compare_and_set_clock(
        self,
        new_clock: ClockState,
        expected_version: int,
        expected_state: TimerState,
    ) -> Optional[ClockState]:
        """
        Replace a clock row only if it is still the one the caller read.

        Returns:
            The stored clock with its version bumped, or ``None`` when the row
            changed in the meantime
        """
        with self._lock:
            current = self._clocks.get(new_clock.game_id)
            if (
                current is None
                or current.version != expected_version
                or current.state is not expected_state
            ):
                return None
            with self._mutation():
                stored = replace(new_clock, version=expected_version + 1)
                self._clocks[new_clock.game_id] = stored
                return stored

    # ------------------------------------------------------------------
    # Rosters
    # ------------------------------------------------------------------
    def upsert_roster_entry(self, entry: RosterEntry) -> RosterEntry:
        with self._mutation():
            self._rosters[(entry.game_id, entry.player_id)] = entry
            return entry

    def get_roster_entry(self, game_id: int, player_id: int) -> Optional[RosterEntry]:
        with self._lock:
            return self._rosters.get((game_id, player_id))

    def list_roster(self, game_id: int) -> List[RosterEntry]:
        with self._lock:
            entries = [e for (gid, _), e in self._rosters.items() if gid == game_id]
        return sorted(entries, key=lambda e: (e.club_id, e.player_id))

    # ------------------------------------------------------------------
    # Substitutions
    # ------------------------------------------------------------------
    def append_substitution(self, event: SubstitutionEvent) -> SubstitutionEvent:
        """Append a substitution, assigning the next sequence id."""
        with self._mutation():
            stored = replace(event, id=self._next_substitution_id)
            self._next_substitution_id += 1
            self._substitutions.append(stored)
            return stored

    def list_substitutions(self, game_id: int) -> List[SubstitutionEvent]:
        """Substitutions of a game in insertion order."""
        with self._lock:
            return [s for s in self._substitutions if s.game_id == game_id]

    # ------------------------------------------------------------------
    # Possessions
    # ------------------------------------------------------------------
    def add_possession(self, possession: Possession) -> Possession:
        with self._mutation():
            stored = replace(possession, id=self._next_possession_id)
            self._next_possession_id += 1
            self._possessions[stored.id] = stored
            return stored

    def update_possession(self, possession: Possession) -> Possession:
        """
        Replace an existing possession row.

        Raises:
            KeyError: If the possession does not exist
        """
        with self._mutation():
            if possession.id not in self._possessions:
                raise KeyError(possession.id)
            self._possessions[possession.id] = possession
            return possession

    def get_possession(self, game_id: int, possession_id: int) -> Optional[Possession]:
        with self._lock:
            possession = self._possessions.get(possession_id)
        if possession is None or possession.game_id != game_id:
            return None
        return possession

    def list_possessions(self, game_id: int) -> List[Possession]:
        with self._lock:
            return [p for p in self._possessions.values() if p.game_id == game_id]

    def find_open_possession(self, game_id: int) -> Optional[Possession]:
        with self._lock:
            for possession in self._possessions.values():
                if possession.game_id == game_id and possession.is_open:
                    return possession
        return None

    # ------------------------------------------------------------------
    # Snapshot file
    # ------------------------------------------------------------------
    def to_json(self) -> dict:
        with self._lock:
            return {
                "clocks": [c.to_json() for c in self._clocks.values()],
                "rosters": [r.to_json() for r in self._rosters.values()],
                "substitutions": [s.to_json() for s in self._substitutions],
                "possessions": [p.to_json() for p in self._possessions.values()],
                "next_substitution_id": self._next_substitution_id,
                "next_possession_id": self._next_possession_id,
            }

    def _save(self) -> None:
        if not self.file_path:
            return

        directory = os.path.dirname(self.file_path)
        if directory and not os.path.exists(directory):
            os.makedirs(directory)

        tmp_path = f"{self.file_path}.tmp"
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(self.to_json(), f, indent=2)
            os.replace(tmp_path, self.file_path)
        except Exception:
            logger.error("Could not write match snapshot to %s", self.file_path)
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def _load(self, file_path: str) -> None:
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Invalid match snapshot: {file_path}")

        for row in data.get("clocks", []):
            clock = ClockState.from_json(row)
            self._clocks[clock.game_id] = clock
        for row in data.get("rosters", []):
            entry = RosterEntry.from_json(row)
            self._rosters[(entry.game_id, entry.player_id)] = entry
        self._substitutions = [SubstitutionEvent.from_json(row) for row in data.get("substitutions", [])]
        for row in data.get("possessions", []):
            possession = Possession.from_json(row)
            self._possessions[possession.id] = possession

        self._next_substitution_id = int(
            data.get("next_substitution_id", len(self._substitutions) + 1)
        )
        self._next_possession_id = int(
            data.get("next_possession_id", len(self._possessions) + 1)
        )
        logger.info(
            "Loaded %d clocks, %d substitutions, %d possessions from %s",
            len(self._clocks), len(self._substitutions), len(self._possessions), file_path,
        )
