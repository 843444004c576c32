"""
Service Factory for dependency injection.

This module builds the match services around one shared :class:`MatchStore`.
"""
from typing import Optional

from .clock_service import ClockService
from .fatigue_service import FatigueService
from .persistence_service import MatchStore
from .play_time import PlayTimeService
from .possession_service import PossessionService
from .roster_service import RosterService
from .substitution_service import SubstitutionService


class ServiceFactory:
    """
    Factory for creating service instances that share a single store.

    Services are created lazily and cached, so every caller of the factory
    talks to the same store.
    """

    def __init__(self, store: Optional[MatchStore] = None, data_file: Optional[str] = None):
        """
        Initialize the factory.

        Args:
            store: Existing store to use
            data_file: JSON snapshot path used when no store is given
        """
        self.store = store or MatchStore(data_file)
        self._clock_service: Optional[ClockService] = None
        self._roster_service: Optional[RosterService] = None
        self._substitution_service: Optional[SubstitutionService] = None
        self._play_time_service: Optional[PlayTimeService] = None
        self._fatigue_service: Optional[FatigueService] = None
        self._possession_service: Optional[PossessionService] = None

    def create_clock_service(self) -> ClockService:
        if self._clock_service is None:
            self._clock_service = ClockService(self.store)
        return self._clock_service

    def create_roster_service(self) -> RosterService:
        if self._roster_service is None:
            self._roster_service = RosterService(self.store)
        return self._roster_service

    def create_substitution_service(self) -> SubstitutionService:
        if self._substitution_service is None:
            self._substitution_service = SubstitutionService(self.store)
        return self._substitution_service

    def create_play_time_service(self) -> PlayTimeService:
        if self._play_time_service is None:
            self._play_time_service = PlayTimeService(
                self.store, self.create_substitution_service()
            )
        return self._play_time_service

    def create_fatigue_service(self) -> FatigueService:
        if self._fatigue_service is None:
            self._fatigue_service = FatigueService(self.create_play_time_service())
        return self._fatigue_service

    def create_possession_service(self) -> PossessionService:
        if self._possession_service is None:
            self._possession_service = PossessionService(self.store)
        return self._possession_service

