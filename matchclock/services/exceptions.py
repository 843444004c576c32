"""Exceptions raised by the match clock services."""


class MatchClockError(Exception):
    """Base class for all match clock service errors."""
    pass


class InvalidTransition(MatchClockError):
    """The requested clock transition is not allowed from the current state."""

    def __init__(self, message: str, current_state: str = "") -> None:
        super().__init__(message)
        self.current_state = current_state


class NotFound(MatchClockError):
    """The referenced game, possession or other record does not exist."""
    pass


class ConcurrencyConflict(MatchClockError):
    """A clock write kept losing the compare-and-set race."""
    pass


class ValidationError(MatchClockError):
    """Input was rejected by validation (substitutions, roster, possessions)."""
    pass


class DuplicateGame(MatchClockError):
    """A clock is already scheduled for the game."""
    pass
