"""Routes for user accounts and their notification preferences."""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from lunchbell.application.errors import NotificationError
from lunchbell.application.use_cases.notifications import (
    get_preferences,
    update_preferences,
)
from lunchbell.application.use_cases.users import create_user as create_user_uc
from lunchbell.domain.entities import NotificationPreferences, User
from lunchbell.infrastructure.database import get_db
from lunchbell.interfaces.api.dependencies import get_current_active_user, require_admin
from lunchbell.interfaces.api.routes_helpers import raise_http_error
from lunchbell.interfaces.api.schemas import (
    NotificationPreferencesPayload,
    UserCreate,
    UserRead,
)

router = APIRouter(prefix="/users", tags=["users"])
logger = logging.getLogger(__name__)


def _to_read_model(user: User) -> UserRead:
    return UserRead.model_validate(user)


def _preferences_to_payload(
    preferences: NotificationPreferences,
) -> NotificationPreferencesPayload:
    return NotificationPreferencesPayload.model_validate(preferences)


@router.post("/", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def register_user(
    user_in: UserCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Create a user with the given role. Only administrators may do this."""

    try:
        user = create_user_uc(
            db,
            name=user_in.name,
            email=user_in.email,
            password=user_in.password,
            role=user_in.role,
        )
    except NotificationError as exc:
        raise_http_error(exc)

    logger.info("User %s created by %s with role %s", user.id, current_user.id, user.role)
    return _to_read_model(user)


@router.get("/me", response_model=UserRead)
def read_current_user(current_user: User = Depends(get_current_active_user)):
    """Return the authenticated user."""

    return _to_read_model(current_user)


@router.get("/me/preferences", response_model=NotificationPreferencesPayload)
def read_preferences(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    try:
        preferences = get_preferences(db, current_user.id)
    except NotificationError as exc:
        raise_http_error(exc)
    return _preferences_to_payload(preferences)


@router.put("/me/preferences", response_model=NotificationPreferencesPayload)
def replace_preferences(
    payload: NotificationPreferencesPayload,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    """Replace the caller's preferences; they apply to the next dispatch and fetch."""

    try:
        preferences = update_preferences(
            db,
            current_user.id,
            NotificationPreferences(**payload.model_dump()),
        )
    except NotificationError as exc:
        raise_http_error(exc)
    return _preferences_to_payload(preferences)
