"""FastAPI dependency utilities."""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from lunchbell.domain.entities import User
from lunchbell.infrastructure import database
from lunchbell.infrastructure.database import get_db
from lunchbell.infrastructure.notifications import StreamRegistry
from lunchbell.infrastructure.repositories import UserRepository
from lunchbell.infrastructure.security import decode_access_token, password_signature

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/token", auto_error=False)


def _credentials_error(detail: str = "Invalid credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def resolve_current_user(token: str | None, db: Session) -> User:
    """Resolve the authenticated user for the provided token."""

    if not token:
        raise _credentials_error("Unauthorized")

    try:
        payload = decode_access_token(token)
    except ValueError as exc:
        raise _credentials_error() from exc

    email = payload.get("sub")
    signature_claim = payload.get("pwd_sig")
    if not isinstance(email, str) or not isinstance(signature_claim, str):
        raise _credentials_error()

    user = UserRepository(db).get_by_email(email)
    if user is None:
        raise _credentials_error("User not found")

    if signature_claim != password_signature(user.password, user.is_active):
        raise _credentials_error()

    return user


def get_current_user(
    token: str | None = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Return the authenticated user from the bearer token."""

    return resolve_current_user(token, db)


def get_current_active_user(current_user: User = Depends(get_current_user)) -> User:
    """Ensure the authenticated user is active."""

    if not current_user.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Inactive user",
        )
    return current_user


def get_stream_user(
    request: Request,
    token: str | None = Depends(oauth2_scheme),
) -> User:
    """Authenticate a stream request from the bearer header or ``?token=``.

    Browsers' ``EventSource`` cannot send headers, so the query parameter is
    accepted here only. The lookup uses its own session, closed before the
    response starts, so an open stream holds no pooled connection.
    """

    with database.SessionLocal() as db:
        user = resolve_current_user(token or request.query_params.get("token"), db)
    return get_current_active_user(user)


def require_admin(current_user: User = Depends(get_current_active_user)) -> User:
    """Ensure the authenticated user has administrator privileges."""

    if not current_user.is_admin():
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden",
        )
    return current_user


def get_stream_registry(request: Request) -> StreamRegistry:
    """Return the registry created for this application in the lifespan."""

    registry = getattr(request.app.state, "stream_registry", None)
    if registry is None:
        msg = "Stream registry is not initialised; start the app through its lifespan"
        raise RuntimeError(msg)
    return registry
