"""Error taxonomy shared across the portfolio, storage and identity layers."""
from __future__ import annotations


class GoalfolioError(Exception):
    """Base class for recoverable application errors."""

    pass


class ValidationError(GoalfolioError):
    """Input is incomplete or out of range; the action is blocked."""

    pass


class DuplicateError(GoalfolioError):
    """A unique value is already taken, or a storage quota is exhausted."""

    pass


class NotFoundError(GoalfolioError):
    """A referenced formation, ticker, preset or holding does not exist."""

    pass


class CorruptDataError(GoalfolioError):
    """Persisted data could not be parsed."""

    def __init__(self, key: str, reason: str):
        super().__init__(f"Corrupt data under {key!r}: {reason}")
        self.key = key
        self.reason = reason
