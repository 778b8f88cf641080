"""
Backend error taxonomy.

Every failure coming out of a BackendClient is one of these, so callers
never need to know about requests or HTTP status codes.
"""

from typing import Optional


class BackendError(Exception):
    """
    Base class for all backend failures.

    Attributes:
        message: Human-readable message (from the service when available).
        code: HTTP status code, or 0 when no response was received.
        type: Service error type (e.g. "user_invalid_credentials"), if known.
    """

    def __init__(self, message: str, code: int = 0, type: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.type = type

    def __str__(self) -> str:
        if self.code:
            return f"{self.message} (HTTP {self.code})"
        return self.message


class TransportFailure(BackendError):
    """Network error, timeout, rate limit, or server-side failure."""


class AuthFailure(BackendError):
    """Invalid credentials, missing session, or insufficient permissions."""


class ValidationFailure(BackendError):
    """Request rejected by the backend (bad input, duplicate account, ...)."""


class NotFoundFailure(ValidationFailure):
    """The referenced account, session or document does not exist."""


def error_for_status(code: int, message: str, type: Optional[str] = None) -> BackendError:
    """
    Map an HTTP error status to the matching BackendError subclass.

    Args:
        code: HTTP status code of the failed response.
        message: Error message to carry.
        type: Optional service error type.

    Returns:
        A BackendError instance (not raised).
    """
    if code in (401, 403):
        return AuthFailure(message, code, type)
    if code == 404:
        return NotFoundFailure(message, code, type)
    if code == 429 or code >= 500:
        return TransportFailure(message, code, type)
    if 400 <= code < 500:
        return ValidationFailure(message, code, type)
    return TransportFailure(message, code, type)
