"""
Error kinds raised by the progress engine.

The API layer maps them onto HTTP status codes:
- NotFound -> 404
- InvalidInput -> 400
- StorageUnavailable -> 503 (retryable)

Conflict never leaves the engine; it marks a lost race on a uniqueness
guard and is turned into a no-op that returns the stored record.
"""


class ProgressError(Exception):
    """Base class for progress engine errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(ProgressError, LookupError):
    """Unknown user, module, section, question or content item."""


class InvalidInput(ProgressError, ValueError):
    """Request rejected before any state change."""


class Conflict(ProgressError):
    """A concurrent writer already claimed the row or the XP for it."""


class StorageUnavailable(ProgressError):
    """Storage collaborator failed; nothing from the unit of work was applied."""
