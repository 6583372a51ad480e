"""Persistence helpers for notification entities."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime

from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Query, Session

from lunchbell.domain.entities import Notification, NotificationCategory
from lunchbell.infrastructure.models import NotificationModel
from lunchbell.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_timezone,
)


class NotificationRepository:
    """Provide create, read and read-state operations for :class:`Notification`."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, notification_id: str) -> Notification | None:
        model = self.session.get(NotificationModel, notification_id)
        return self._to_entity(model) if model else None

    def list_for_recipient(
        self,
        user_id: int,
        *,
        broadcast_categories: Iterable[NotificationCategory] = (),
        unread_only: bool = False,
        limit: int | None = 50,
        since: datetime | None = None,
        ascending: bool = False,
    ) -> Sequence[Notification]:
        """Return records scoped to ``user_id`` plus the allowed broadcasts.

        ``since`` keeps only records created strictly after it.
        """

        query = self._recipient_query(
            user_id, broadcast_categories=broadcast_categories, unread_only=unread_only
        )
        if since is not None:
            query = query.filter(
                NotificationModel.created_at > ensure_app_naive_datetime(since)
            )
        if ascending:
            query = query.order_by(
                NotificationModel.created_at.asc(), NotificationModel.id.asc()
            )
        else:
            query = query.order_by(
                NotificationModel.created_at.desc(), NotificationModel.id.desc()
            )
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def count_for_recipient(
        self,
        user_id: int,
        *,
        broadcast_categories: Iterable[NotificationCategory] = (),
        unread_only: bool = False,
    ) -> int:
        query = self._recipient_query(
            user_id, broadcast_categories=broadcast_categories, unread_only=unread_only
        )
        return query.count()

    def list_recent(self, *, limit: int = 10) -> Sequence[Notification]:
        query = (
            self.session.query(NotificationModel)
            .order_by(NotificationModel.created_at.desc(), NotificationModel.id.desc())
            .limit(limit)
        )
        return [self._to_entity(model) for model in query.all()]

    def count_all(self) -> int:
        return self.session.query(func.count(NotificationModel.id)).scalar() or 0

    def count_broadcast(self) -> int:
        return (
            self.session.query(func.count(NotificationModel.id))
            .filter(NotificationModel.user_id.is_(None))
            .scalar()
            or 0
        )

    def count_unread(self) -> int:
        return (
            self.session.query(func.count(NotificationModel.id))
            .filter(NotificationModel.read.is_(False))
            .scalar()
            or 0
        )

    def exists_in_range(
        self, category: NotificationCategory, *, start: datetime, end: datetime
    ) -> bool:
        """Return ``True`` when a ``category`` record exists in ``[start, end)``."""

        query = self.session.query(NotificationModel.id).filter(
            NotificationModel.category == NotificationCategory(category).value,
            NotificationModel.created_at >= ensure_app_naive_datetime(start),
            NotificationModel.created_at < ensure_app_naive_datetime(end),
        )
        return query.first() is not None

    def create(self, notification: Notification) -> Notification:
        model = NotificationModel()
        self._apply_entity_to_model(model, notification)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def set_read(self, notification_id: str, read: bool) -> Notification:
        model = self.session.get(NotificationModel, notification_id)
        if model is None:
            msg = f"Notification with id {notification_id} not found"
            raise ValueError(msg)
        if model.read != read:
            model.read = read
            self.session.add(model)
            self.session.commit()
            self.session.refresh(model)
        return self._to_entity(model)

    def delete(self, notification_id: str) -> None:
        model = self.session.get(NotificationModel, notification_id)
        if model is None:
            msg = f"Notification with id {notification_id} not found"
            raise ValueError(msg)
        self.session.delete(model)
        self.session.commit()

    def delete_older_than(self, cutoff: datetime) -> int:
        deleted = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.created_at < ensure_app_naive_datetime(cutoff))
            .delete(synchronize_session=False)
        )
        self.session.commit()
        return int(deleted or 0)

    def _recipient_query(
        self,
        user_id: int,
        *,
        broadcast_categories: Iterable[NotificationCategory],
        unread_only: bool,
    ) -> Query:
        categories = sorted(NotificationCategory(c).value for c in broadcast_categories)
        scope = NotificationModel.user_id == user_id
        if categories:
            scope = or_(
                scope,
                and_(
                    NotificationModel.user_id.is_(None),
                    NotificationModel.category.in_(categories),
                ),
            )
        query = self.session.query(NotificationModel).filter(scope)
        if unread_only:
            query = query.filter(NotificationModel.read.is_(False))
        return query

    @staticmethod
    def _apply_entity_to_model(model: NotificationModel, notification: Notification) -> None:
        if notification.id:
            model.id = notification.id
        model.user_id = notification.user_id
        model.category = NotificationCategory(notification.category).value
        model.message = notification.message
        model.read = bool(notification.read)
        model.created_at = ensure_app_naive_datetime(
            notification.created_at or now_in_app_timezone()
        )

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            user_id=model.user_id,
            category=NotificationCategory(model.category),
            message=model.message,
            read=bool(model.read),
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = ["NotificationRepository"]
