"""Helper utilities shared across API route handlers."""

from typing import NoReturn

from fastapi import HTTPException, status

from lunchbell.application.errors import (
    ForbiddenError,
    NotFoundError,
    NotificationError,
    UnauthorizedError,
    ValidationError,
)

_STATUS_BY_ERROR: tuple[tuple[type[NotificationError], int], ...] = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (UnauthorizedError, status.HTTP_401_UNAUTHORIZED),
    (ForbiddenError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
)


def raise_http_error(exc: NotificationError) -> NoReturn:
    """Translate an application error into the matching ``HTTPException``."""

    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            headers = (
                {"WWW-Authenticate": "Bearer"}
                if status_code == status.HTTP_401_UNAUTHORIZED
                else None
            )
            raise HTTPException(
                status_code=status_code, detail=str(exc), headers=headers
            ) from exc
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)
    ) from exc
