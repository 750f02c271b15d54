from __future__ import annotations


class PokerError(Exception):
    """Base class for every error raised by the rules core."""


class IllegalAction(PokerError, ValueError):
    """An intent the rules reject. Raised before any state is touched."""

    def __init__(self, code: str, msg: str) -> None:
        super().__init__(msg)
        self.code = code
        self.msg = msg


class EmptyDeckError(PokerError, RuntimeError):
    pass


class InvariantViolation(PokerError, RuntimeError):
    """Chip accounting or seat state went inconsistent. Always a bug."""


class TournamentOver(PokerError):
    pass


class ConfigError(PokerError, ValueError):
    pass
