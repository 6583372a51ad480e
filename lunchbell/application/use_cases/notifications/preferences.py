"""Use cases for reading and replacing notification preferences."""

from sqlalchemy.orm import Session

from lunchbell.application.errors import NotFoundError
from lunchbell.domain.entities import NotificationPreferences
from lunchbell.infrastructure.repositories import UserRepository

from .listing import load_preferences


def get_preferences(session: Session, user_id: int) -> NotificationPreferences:
    return load_preferences(session, user_id)


def update_preferences(
    session: Session, user_id: int, preferences: NotificationPreferences
) -> NotificationPreferences:
    """Replace the stored preferences of ``user_id`` with ``preferences``."""

    try:
        return UserRepository(session).update_preferences(user_id, preferences)
    except ValueError as exc:
        raise NotFoundError("User not found") from exc


__all__ = ["get_preferences", "update_preferences"]
