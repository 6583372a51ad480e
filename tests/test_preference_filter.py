"""Tests for the delivery rules applied to notification preferences."""

from __future__ import annotations

import itertools
from dataclasses import replace

import pytest

from lunchbell.domain.entities import (
    DeliveryMethod,
    Notification,
    NotificationCategory,
    NotificationFrequency,
    NotificationPreferences,
)
from lunchbell.domain.preference_filter import (
    category_enabled,
    is_visible,
    should_deliver,
    visible_broadcast_categories,
)

TOGGLES = ("order_reminders", "order_confirmations", "order_modifications", "menu_updates")
TOGGLE_BY_CATEGORY = {
    NotificationCategory.ORDER_REMINDER: "order_reminders",
    NotificationCategory.ORDER_CONFIRMED: "order_confirmations",
    NotificationCategory.ORDER_MODIFIED: "order_modifications",
    NotificationCategory.MENU_UPDATED: "menu_updates",
}


def _all_preferences(frequency: NotificationFrequency):
    for values in itertools.product((True, False), repeat=len(TOGGLES)):
        for method in DeliveryMethod:
            yield NotificationPreferences(
                **dict(zip(TOGGLES, values)),
                delivery_method=method,
                frequency=frequency,
            )


@pytest.mark.parametrize("category", list(NotificationCategory))
def test_frequency_none_blocks_every_category(category):
    for preferences in _all_preferences(NotificationFrequency.NONE):
        assert should_deliver(preferences, category) is False


def test_important_only_never_delivers_menu_updates():
    for preferences in _all_preferences(NotificationFrequency.IMPORTANT_ONLY):
        assert should_deliver(preferences, NotificationCategory.MENU_UPDATED) is False


@pytest.mark.parametrize(
    "frequency", [NotificationFrequency.ALL, NotificationFrequency.IMPORTANT_ONLY]
)
@pytest.mark.parametrize("category", list(NotificationCategory))
def test_other_pairs_follow_the_category_toggle(frequency, category):
    if frequency is NotificationFrequency.IMPORTANT_ONLY and category is NotificationCategory.MENU_UPDATED:
        pytest.skip("menu updates are never important")
    for preferences in _all_preferences(frequency):
        expected = getattr(preferences, TOGGLE_BY_CATEGORY[category])
        assert should_deliver(preferences, category) is expected
        assert category_enabled(preferences, category) is expected


def test_delivery_method_does_not_affect_the_decision():
    base = NotificationPreferences(order_reminders=False)
    for method in DeliveryMethod:
        prefs = replace(base, delivery_method=method)
        assert should_deliver(prefs, NotificationCategory.ORDER_REMINDER) is False
        assert should_deliver(prefs, NotificationCategory.MENU_UPDATED) is True


def test_visible_broadcast_categories_match_should_deliver():
    for frequency in NotificationFrequency:
        for preferences in _all_preferences(frequency):
            visible = visible_broadcast_categories(preferences)
            for category in NotificationCategory:
                assert (category in visible) is should_deliver(preferences, category)


def test_is_visible_checks_broadcasts_only():
    preferences = NotificationPreferences(frequency=NotificationFrequency.NONE)
    scoped = Notification(
        id="a", user_id=1, category=NotificationCategory.MENU_UPDATED, message="m"
    )
    broadcast = Notification(
        id="b", user_id=None, category=NotificationCategory.MENU_UPDATED, message="m"
    )

    assert is_visible(preferences, scoped) is True
    assert is_visible(preferences, broadcast) is False


def test_preferences_round_trip_through_storage_format():
    preferences = NotificationPreferences(
        menu_updates=False,
        delivery_method=DeliveryMethod.BOTH,
        frequency=NotificationFrequency.IMPORTANT_ONLY,
    )

    stored = preferences.to_dict()

    assert stored["delivery_method"] == "both"
    assert stored["frequency"] == "important_only"
    assert NotificationPreferences.from_dict(stored) == preferences


def test_missing_stored_preferences_fall_back_to_defaults():
    assert NotificationPreferences.from_dict(None) == NotificationPreferences()
    partial = NotificationPreferences.from_dict({"menu_updates": False})
    assert partial.menu_updates is False
    assert partial.order_reminders is True
    assert partial.delivery_method is DeliveryMethod.IN_APP
