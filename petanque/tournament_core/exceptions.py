"""
Typed failures raised by the tournament engine.

Every command either returns its result or raises one of these. Callers can
catch ``TournamentError`` to handle all engine failures in one place.
"""

from typing import List, Optional


class TournamentError(Exception):
    """Base class for all engine failures."""

    pass


class InvalidConfig(TournamentError, ValueError):
    """Bad bracket size, too few teams, inconsistent advancement settings, or
    an operation that the current tournament state does not allow."""

    pass


class BracketAlreadyExists(InvalidConfig):
    """Brackets were already generated; use regeneration instead."""

    pass


class RoundNotComplete(TournamentError):
    """A round still has unscored games."""

    def __init__(self, message: str, missing: Optional[List] = None):
        super().__init__(message)
        self.missing = missing or []


class InvalidScore(TournamentError, ValueError):
    """A score is outside the allowed range."""

    pass


class TiedScore(TournamentError):
    """Both sides were given the same score; a game always has a winner."""

    pass


class MissingTeam(TournamentError):
    """A game or match slot has no team yet."""

    pass


class MissingScore(TournamentError):
    """A score was expected but not provided."""

    pass


class InvalidMatch(TournamentError):
    """The match does not accept a score (unknown match or a bye)."""

    pass


class EditLocked(TournamentError):
    """A retroactive edit would silently invalidate a downstream result."""

    pass


class DeleteBlocked(TournamentError):
    """Rounds cannot be deleted once any score is recorded."""

    pass


class PairingExhausted(UserWarning):
    """Every pairing constraint had to be relaxed; a repeat was forced.

    This is a warning, not a failure: a playable round is still produced.
    """

    pass
