"""Deliver notification emails through SendGrid."""

from __future__ import annotations

import html
import json
import logging
from typing import Any

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from lunchbell.config import get_settings
from lunchbell.domain.entities import NotificationCategory, User

logger = logging.getLogger(__name__)

_SUBJECTS: dict[NotificationCategory, str] = {
    NotificationCategory.ORDER_REMINDER: "Daily Lunch Order Reminder",
    NotificationCategory.ORDER_CONFIRMED: "Your Lunch Order is Confirmed",
    NotificationCategory.ORDER_MODIFIED: "Your Lunch Order has been Modified",
    NotificationCategory.MENU_UPDATED: "New Menu Available",
}
_DEFAULT_SUBJECT = "Lunch Ordering Notification"


def _describe_sendgrid_body(body: Any) -> str | None:
    """Return a readable summary of a SendGrid error payload."""

    if body in (None, "", b""):
        return None
    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            return None
    if isinstance(body, str):
        text = body.strip()
        if not text:
            return None
        try:
            body = json.loads(text)
        except json.JSONDecodeError:
            return text

    if isinstance(body, dict):
        errors = body.get("errors")
        if isinstance(errors, list):
            messages = []
            for item in errors:
                if not isinstance(item, dict) or not item.get("message"):
                    continue
                message = str(item["message"])
                if item.get("help"):
                    message = f"{message} (help: {item['help']})"
                messages.append(message)
            if messages:
                return "; ".join(messages)
        try:
            return json.dumps(body)
        except (TypeError, ValueError):
            return None

    if isinstance(body, list):
        return "; ".join(str(item) for item in body)
    return None


def _log_sendgrid_failure(source: Any, *, prefix: str) -> None:
    status_code = getattr(source, "status_code", None)
    details = _describe_sendgrid_body(getattr(source, "body", None))

    if status_code and details:
        logger.error("%s with status %s: %s", prefix, status_code, details)
    elif status_code:
        logger.error("%s with status %s", prefix, status_code)
    elif details:
        logger.error("%s: %s", prefix, details)
    else:
        logger.error("%s: %r", prefix, source)


def send_email(subject: str, html_content: str, recipient: str) -> bool:
    """Send an email using the configured SendGrid credentials."""

    settings = get_settings()
    if not (settings.sendgrid_api_key and settings.sendgrid_sender):
        logger.info("SendGrid configuration incomplete; skipping email delivery")
        return False

    message = Mail(
        from_email=settings.sendgrid_sender,
        to_emails=recipient,
        subject=subject,
        html_content=html_content,
    )

    try:
        client = SendGridAPIClient(settings.sendgrid_api_key)
        response = client.send(message)
    except Exception as exc:  # pragma: no cover - network failures depend on environment
        _log_sendgrid_failure(exc, prefix="SendGrid API request failed")
        return False

    status_code = getattr(response, "status_code", None)
    if not isinstance(status_code, int) or not 200 <= status_code < 300:
        _log_sendgrid_failure(response, prefix="SendGrid API responded")
        return False

    return True


def notification_subject(category: NotificationCategory) -> str:
    """Return the email subject used for ``category``."""

    return _SUBJECTS.get(NotificationCategory(category), _DEFAULT_SUBJECT)


def format_notification_body(message: str, user_name: str) -> str:
    """Wrap ``message`` in the greeting used by every notification email."""

    paragraphs = [
        f"<p>Hi {html.escape(user_name)},</p>",
        f"<p>{html.escape(message)}</p>",
        "<p>Best regards,<br>Lunch Ordering Team</p>",
    ]
    return "".join(paragraphs)


def send_notification_email(
    user: User, category: NotificationCategory, message: str
) -> bool:
    """Email ``message`` to ``user``; returns ``True`` when SendGrid accepted it."""

    return send_email(
        notification_subject(category),
        format_notification_body(message, user.name),
        user.email,
    )


__all__ = [
    "format_notification_body",
    "notification_subject",
    "send_email",
    "send_notification_email",
]
