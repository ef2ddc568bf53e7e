"""Exception types raised by the repository and snapshot store."""

from __future__ import annotations


class PulseError(Exception):
    pass


class ValidationError(PulseError, ValueError):
    """Caller supplied input the repository refuses to store."""


class SessionNotFoundError(PulseError, LookupError):
    def __init__(self, code: str) -> None:
        super().__init__(f"Session code not found: {code}")
        self.code = code


class PersistenceError(PulseError, OSError):
    """The snapshot write failed after the in-memory state was changed."""


class SnapshotError(PulseError):
    """The snapshot file exists but could not be parsed."""
