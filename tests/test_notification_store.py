"""Tests for listing, counting and cleaning up stored notifications."""

from __future__ import annotations

from datetime import timedelta

import pytest

from lunchbell.application.errors import NotFoundError, ValidationError
from lunchbell.application.use_cases.notifications import (
    cleanup_old_notifications,
    get_notification_counts,
    get_system_stats,
    list_notifications,
    list_notifications_since,
)
from lunchbell.domain.entities import (
    NotificationCategory,
    NotificationFrequency,
    NotificationPreferences,
)
from lunchbell.infrastructure.repositories import NotificationRepository


def test_list_returns_own_and_visible_broadcasts_newest_first(
    session, make_user, add_notification
):
    alice = make_user()
    bob = make_user()
    oldest = add_notification(user_id=alice.id, minutes_ago=30)
    broadcast = add_notification(
        user_id=None, category=NotificationCategory.MENU_UPDATED, minutes_ago=20
    )
    add_notification(user_id=bob.id, minutes_ago=10)
    newest = add_notification(user_id=alice.id, minutes_ago=1)

    listed = list_notifications(session, alice.id)

    assert [n.id for n in listed] == [newest.id, broadcast.id, oldest.id]


def test_limit_is_applied_after_broadcast_filtering(session, make_user, add_notification):
    user = make_user(
        preferences=NotificationPreferences(frequency=NotificationFrequency.IMPORTANT_ONLY)
    )
    for minutes in range(1, 6):
        add_notification(
            user_id=None, category=NotificationCategory.MENU_UPDATED, minutes_ago=minutes
        )
    visible = [
        add_notification(
            user_id=None, category=NotificationCategory.ORDER_REMINDER, minutes_ago=10 + i
        )
        for i in range(2)
    ]

    listed = list_notifications(session, user.id, limit=2)

    assert [n.id for n in listed] == [v.id for v in visible]


def test_unread_only_filter(session, make_user, add_notification):
    user = make_user()
    add_notification(user_id=user.id, read=True, minutes_ago=2)
    unread = add_notification(user_id=user.id, minutes_ago=1)

    assert [n.id for n in list_notifications(session, user.id, unread_only=True)] == [
        unread.id
    ]


def test_list_rejects_non_positive_limit(session, make_user):
    user = make_user()

    with pytest.raises(ValidationError):
        list_notifications(session, user.id, limit=0)


def test_list_for_unknown_user_is_not_found(session):
    with pytest.raises(NotFoundError):
        list_notifications(session, 12345)


def test_list_since_is_strict_and_ascending(session, make_user, add_notification):
    user = make_user()
    first = add_notification(user_id=user.id, minutes_ago=3)
    second = add_notification(user_id=user.id, minutes_ago=2)
    third = add_notification(user_id=user.id, minutes_ago=1)

    listed = list_notifications_since(session, user.id, since=first.created_at)

    assert [n.id for n in listed] == [second.id, third.id]
    assert third.created_at > first.created_at


def test_counts_cover_the_visible_set(session, make_user, add_notification):
    user = make_user(preferences=NotificationPreferences(menu_updates=False))
    add_notification(user_id=user.id, read=True)
    add_notification(user_id=user.id)
    add_notification(user_id=None, category=NotificationCategory.ORDER_REMINDER)
    add_notification(user_id=None, category=NotificationCategory.MENU_UPDATED)

    counts = get_notification_counts(session, user.id)

    assert (counts.total, counts.unread) == (3, 2)


def test_system_stats(session, make_user, add_notification):
    user = make_user()
    add_notification(user_id=user.id, read=True, minutes_ago=5)
    add_notification(user_id=None, minutes_ago=4)
    newest = add_notification(user_id=None, minutes_ago=1)

    stats = get_system_stats(session, recent_limit=2)

    assert (stats.total, stats.system, stats.unread) == (3, 2, 2)
    assert [n.id for n in stats.recent][0] == newest.id
    assert len(stats.recent) == 2


def test_cleanup_removes_records_past_retention(session, make_user, add_notification):
    user = make_user()
    add_notification(user_id=user.id, minutes_ago=60 * 24 * 31)
    recent = add_notification(user_id=user.id, minutes_ago=60 * 24 * 29)

    deleted = cleanup_old_notifications(session)

    assert deleted == 1
    remaining = NotificationRepository(session).list_recent(limit=10)
    assert [n.id for n in remaining] == [recent.id]


def test_cleanup_honours_custom_window(session, make_user, add_notification):
    user = make_user()
    add_notification(user_id=user.id, minutes_ago=60 * 24 * 3)

    assert cleanup_old_notifications(session, days_old=7) == 0
    assert cleanup_old_notifications(session, days_old=2) == 1


def test_exists_in_range(session, make_user, add_notification):
    reminder = add_notification(user_id=None, category=NotificationCategory.ORDER_REMINDER)
    repository = NotificationRepository(session)
    start = reminder.created_at - timedelta(minutes=1)
    end = reminder.created_at + timedelta(minutes=1)

    assert repository.exists_in_range(NotificationCategory.ORDER_REMINDER, start=start, end=end)
    assert not repository.exists_in_range(NotificationCategory.MENU_UPDATED, start=start, end=end)
