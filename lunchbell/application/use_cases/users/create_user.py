"""Use case for creating users."""

from sqlalchemy.orm import Session

from lunchbell.application.errors import ValidationError
from lunchbell.domain.entities import ROLES, ROLE_USER, NotificationPreferences, User
from lunchbell.infrastructure.repositories import UserRepository
from lunchbell.infrastructure.security import get_password_hash
from lunchbell.utils import now_in_app_timezone


def create_user(
    session: Session,
    *,
    name: str,
    email: str,
    password: str,
    role: str = ROLE_USER,
) -> User:
    """Create a new user with default notification preferences."""

    repository = UserRepository(session)

    if repository.get_by_email(email):
        raise ValidationError("Email is already registered")

    role_alias = role.lower()
    if role_alias not in ROLES:
        raise ValidationError("Role not allowed")

    user = User(
        id=None,
        name=name,
        email=email.lower(),
        password=get_password_hash(password),
        role=role_alias,
        is_active=True,
        created_at=now_in_app_timezone(),
        notification_preferences=NotificationPreferences(),
    )

    return repository.create(user)
