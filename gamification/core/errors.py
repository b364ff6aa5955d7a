"""Error taxonomy shared by the gamification services.

A repeated submission is reported as ``SubmissionStatus.ALREADY_SUBMITTED``
and never raised.
"""

from typing import Any


class GamificationError(Exception):
    """Base class for every error raised by the engine."""

    code = "unknown"

    def __init__(self, message: str, *, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}


class NotFound(GamificationError):
    """A quiz (or the content item it hangs off) does not exist."""

    code = "not_found"


class ValidationFailure(GamificationError):
    """Malformed input: bad quiz definition, out-of-range index, unknown badge."""

    code = "validation"


class PersistenceFailure(GamificationError):
    """A storage collaborator read or write failed."""

    code = "db"


class Conflict(GamificationError):
    """A client-supplied key is already taken by another user."""

    code = "conflict"
