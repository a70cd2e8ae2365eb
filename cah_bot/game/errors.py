"""
Game Rejections

Every rule violation raised by the engine is a GameError subclass carrying
a message that can be shown to the acting player as-is. Rejections are
raised before any session state is touched.
"""


class GameError(Exception):
    """Base class for all recoverable, user-facing game rejections."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotAuthorized(GameError):
    """Action restricted to the judge, or to the acting player only."""


class InvalidPhase(GameError):
    """Action attempted outside the phase it belongs to."""


class AlreadyActed(GameError):
    """Duplicate submission by the same player in the same round."""


class PreconditionFailed(GameError):
    """Not enough players, not enough cards, or a malformed pick."""


class NotFound(GameError):
    """Unknown session, unknown winner, or a stale round reference."""
