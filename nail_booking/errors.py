"""Exception hierarchy for the booking client."""
from typing import Any, Optional


class BookingError(Exception):
    """Base class for every error raised by nail_booking."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ApiError(BookingError):
    """The booking API answered with a non-2xx status.

    ``message`` is the server's ``error`` field when present, otherwise the
    fallback text chosen by the caller.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        payload: Optional[Any] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class ApiUnavailable(ApiError):
    """Connection refused, timeout, or the circuit breaker is open."""


class AuthenticationRequired(BookingError):
    """An operation needs a logged-in user."""


class PermissionDenied(BookingError):
    """The logged-in user is not allowed to do this (admin only)."""


class FormValidationError(BookingError):
    """User input rejected before reaching the API."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class InvalidTransition(BookingError):
    """Illegal booking step or appointment status change."""
