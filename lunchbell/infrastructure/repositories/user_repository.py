"""Persistence layer for user data."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import func
from sqlalchemy.orm import Session

from lunchbell.domain.entities import NotificationPreferences, User
from lunchbell.infrastructure.models import UserModel
from lunchbell.utils import ensure_app_naive_datetime


class UserRepository:
    """Provide CRUD operations for user entities and their embedded preferences."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_active(self) -> Sequence[User]:
        query = (
            self.session.query(UserModel)
            .filter(UserModel.is_active.is_(True))
            .order_by(UserModel.id.asc())
        )
        return [self._to_entity(model) for model in query.all()]

    def list_ids_by_roles(self, roles: Sequence[str]) -> list[int]:
        lowered = [role.lower() for role in roles]
        query = (
            self.session.query(UserModel.id)
            .filter(func.lower(UserModel.role).in_(lowered))
            .filter(UserModel.is_active.is_(True))
            .order_by(UserModel.id.asc())
        )
        return [user_id for (user_id,) in query.all()]

    def get(self, user_id: int) -> User | None:
        model = self.session.get(UserModel, user_id)
        return self._to_entity(model) if model else None

    def get_by_email(self, email: str) -> User | None:
        model = (
            self.session.query(UserModel)
            .filter(func.lower(UserModel.email) == email.lower())
            .first()
        )
        return self._to_entity(model) if model else None

    def create(self, user: User) -> User:
        model = UserModel()
        self._apply_entity_to_model(model, user)
        if user.created_at is not None:
            model.created_at = ensure_app_naive_datetime(user.created_at)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def update(self, user: User) -> User:
        model = self.session.get(UserModel, user.id)
        if not model:
            msg = f"User with id {user.id} not found"
            raise ValueError(msg)
        self._apply_entity_to_model(model, user)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def get_preferences(self, user_id: int) -> NotificationPreferences | None:
        model = self.session.get(UserModel, user_id)
        if model is None:
            return None
        return NotificationPreferences.from_dict(model.notification_preferences)

    def update_preferences(
        self, user_id: int, preferences: NotificationPreferences
    ) -> NotificationPreferences:
        """Overwrite the stored preferences for ``user_id`` wholesale."""

        model = self.session.get(UserModel, user_id)
        if model is None:
            msg = f"User with id {user_id} not found"
            raise ValueError(msg)
        model.notification_preferences = preferences.to_dict()
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return NotificationPreferences.from_dict(model.notification_preferences)

    @staticmethod
    def _to_entity(model: UserModel) -> User:
        return User(
            id=model.id,
            name=model.name,
            email=model.email,
            password=model.password,
            role=model.role,
            is_active=model.is_active,
            created_at=model.created_at,
            last_login=model.last_login,
            notification_preferences=NotificationPreferences.from_dict(
                model.notification_preferences
            ),
        )

    @staticmethod
    def _apply_entity_to_model(model: UserModel, user: User) -> None:
        model.name = user.name
        model.email = user.email
        model.password = user.password
        model.role = user.role
        model.is_active = user.is_active
        model.last_login = ensure_app_naive_datetime(user.last_login)
        model.notification_preferences = user.notification_preferences.to_dict()


__all__ = ["UserRepository"]
