"""
Error taxonomy for the task tracker.

Every failure the core can report is a ``TrackerError`` carrying the HTTP
status code and a message that is safe to show to the client.  Internal
detail (driver errors, hashing failures) is logged where the error is
raised and never placed in ``message``.
"""

from __future__ import annotations


class TrackerError(Exception):
    """Base class for errors rendered as ``{"error": message}`` responses."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(TrackerError):
    """Malformed or out-of-range request data."""

    status_code = 400
    default_message = "Invalid inputs"


class Unauthorized(TrackerError):
    """Missing, invalid or expired token, or failed login."""

    status_code = 401
    default_message = "Unauthorized"


class UnknownEmail(Unauthorized):
    """Login attempted for an email with no account."""

    default_message = "Invalid email or password"
    reason = "email does not exist"


class WrongPassword(Unauthorized):
    """Login attempted with the wrong password."""

    default_message = "Invalid email or password"
    reason = "wrong password"


class InvalidSignature(Unauthorized):
    default_message = "Invalid token"


class TokenExpired(Unauthorized):
    default_message = "Token has expired"


class NotFound(TrackerError):
    """Resource absent, or present but owned by another user."""

    status_code = 404
    default_message = "Resource not found"


class Conflict(TrackerError):
    status_code = 409
    default_message = "Conflict"


class InternalError(TrackerError):
    """Server-side failure; the client only ever sees the generic message."""

    status_code = 500


class HashingError(InternalError):
    default_message = "Failed to process the password"


class StoreError(InternalError):
    default_message = "Database operation failed"
