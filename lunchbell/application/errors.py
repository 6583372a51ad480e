"""Errors raised by application use cases.

Routes translate them into HTTP responses with
:func:`lunchbell.interfaces.api.routes_helpers.raise_http_error`.
"""

from __future__ import annotations


class NotificationError(Exception):
    """Base class for failures surfaced to the caller of a use case."""

    default_message = "Notification request failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class ValidationError(NotificationError, ValueError):
    """Malformed input such as an invalid identifier."""

    default_message = "Invalid request"


class UnauthorizedError(NotificationError):
    """No valid caller identity."""

    default_message = "Unauthorized"


class ForbiddenError(NotificationError):
    """The caller may not act on the requested resource."""

    default_message = "Forbidden"


class NotFoundError(NotificationError):
    """A notification or user identifier does not resolve."""

    default_message = "Resource not found"


__all__ = [
    "ForbiddenError",
    "NotFoundError",
    "NotificationError",
    "UnauthorizedError",
    "ValidationError",
]
