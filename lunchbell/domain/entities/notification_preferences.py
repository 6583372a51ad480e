"""Per-user notification settings embedded in the user record."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Mapping


class DeliveryMethod(str, Enum):
    """Channels through which a notification may be delivered."""

    IN_APP = "in_app"
    EMAIL = "email"
    BOTH = "both"

    @property
    def includes_in_app(self) -> bool:
        return self in (DeliveryMethod.IN_APP, DeliveryMethod.BOTH)

    @property
    def includes_email(self) -> bool:
        return self in (DeliveryMethod.EMAIL, DeliveryMethod.BOTH)


class NotificationFrequency(str, Enum):
    """How many notifications the user wants to receive."""

    ALL = "all"
    IMPORTANT_ONLY = "important_only"
    NONE = "none"


@dataclass(frozen=True)
class NotificationPreferences:
    """Category toggles plus delivery channel and frequency tier."""

    order_reminders: bool = True
    order_confirmations: bool = True
    order_modifications: bool = True
    menu_updates: bool = True
    delivery_method: DeliveryMethod = DeliveryMethod.IN_APP
    frequency: NotificationFrequency = NotificationFrequency.ALL

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable representation for storage."""

        data = asdict(self)
        data["delivery_method"] = self.delivery_method.value
        data["frequency"] = self.frequency.value
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "NotificationPreferences":
        """Build preferences from stored data, filling gaps with defaults."""

        if not data:
            return cls()
        defaults = cls()
        return cls(
            order_reminders=bool(data.get("order_reminders", defaults.order_reminders)),
            order_confirmations=bool(
                data.get("order_confirmations", defaults.order_confirmations)
            ),
            order_modifications=bool(
                data.get("order_modifications", defaults.order_modifications)
            ),
            menu_updates=bool(data.get("menu_updates", defaults.menu_updates)),
            delivery_method=DeliveryMethod(
                data.get("delivery_method", defaults.delivery_method.value)
            ),
            frequency=NotificationFrequency(
                data.get("frequency", defaults.frequency.value)
            ),
        )


__all__ = ["DeliveryMethod", "NotificationFrequency", "NotificationPreferences"]
