"""SQLAlchemy model for persisted notifications."""

from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.sql import expression

from lunchbell.infrastructure.database import Base
from lunchbell.utils import now_in_app_naive_datetime


def _new_notification_id() -> str:
    return uuid4().hex


class NotificationModel(Base):
    """Database representation for notifications.

    ``user_id`` is ``NULL`` for broadcast notifications.
    """

    __tablename__ = "notification"

    id = Column(String(32), primary_key=True, default=_new_notification_id)
    user_id = Column(
        Integer, ForeignKey("user.id", ondelete="CASCADE"), nullable=True, index=True
    )
    category = Column(String(30), nullable=False, index=True)
    message = Column(Text, nullable=False)
    read = Column(Boolean, nullable=False, default=False, server_default=expression.false())
    created_at = Column(
        DateTime(), nullable=False, default=now_in_app_naive_datetime, index=True
    )

    __table_args__ = (
        Index("ix_notification_user_created", "user_id", "created_at"),
        Index("ix_notification_user_read", "user_id", "read"),
    )


__all__ = ["NotificationModel"]
