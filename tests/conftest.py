"""Shared fixtures: a throwaway SQLite database, users and an API client."""

from __future__ import annotations

import os
import sys
import tempfile
from datetime import datetime, timedelta
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

TEST_DB_PATH = Path(tempfile.gettempdir()) / "lunchbell_test.db"
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB_PATH}"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["ACCESS_TOKEN_EXPIRE_MINUTES"] = "30"
os.environ["APP_TIMEZONE"] = "UTC"
os.environ.pop("SENDGRID_API_KEY", None)
os.environ.pop("SENDGRID_SENDER", None)

from lunchbell.config import reset_settings_cache  # noqa: E402

reset_settings_cache()

from lunchbell.application.use_cases.users import create_user  # noqa: E402
from lunchbell.domain.entities import (  # noqa: E402
    Notification,
    NotificationCategory,
    NotificationPreferences,
)
from lunchbell.infrastructure.database import (  # noqa: E402
    Base,
    SessionLocal,
    engine,
    initialize_database,
)
from lunchbell.infrastructure.repositories import (  # noqa: E402
    NotificationRepository,
    UserRepository,
)
from lunchbell.utils import now_in_app_timezone  # noqa: E402

DEFAULT_PASSWORD = "secret123"


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def reset_database():
    """Give each test empty tables."""

    Base.metadata.drop_all(bind=engine)
    initialize_database()
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def make_user(session):
    """Create a user, optionally with custom preferences or inactive."""

    counter = {"value": 0}

    def _make_user(
        *,
        name: str | None = None,
        email: str | None = None,
        role: str = "user",
        preferences: NotificationPreferences | None = None,
        is_active: bool = True,
        password: str = DEFAULT_PASSWORD,
    ):
        counter["value"] += 1
        index = counter["value"]
        user = create_user(
            session,
            name=name or f"User {index}",
            email=email or f"user{index}@example.com",
            password=password,
            role=role,
        )
        repository = UserRepository(session)
        if preferences is not None:
            repository.update_preferences(user.id, preferences)
        if not is_active:
            stored = repository.get(user.id)
            stored.is_active = False
            repository.update(stored)
        return repository.get(user.id)

    return _make_user


@pytest.fixture
def add_notification(session):
    """Store a record directly, with control over its timestamp."""

    def _add_notification(
        *,
        user_id: int | None,
        category: NotificationCategory = NotificationCategory.ORDER_CONFIRMED,
        message: str = "Hello",
        read: bool = False,
        created_at: datetime | None = None,
        minutes_ago: float | None = None,
    ) -> Notification:
        if created_at is None:
            created_at = now_in_app_timezone()
            if minutes_ago is not None:
                created_at -= timedelta(minutes=minutes_ago)
        return NotificationRepository(session).create(
            Notification(
                id=None,
                user_id=user_id,
                category=category,
                message=message,
                read=read,
                created_at=created_at,
            )
        )

    return _add_notification


@pytest.fixture
def email_outbox():
    """Email sender double that records calls and reports success."""

    class Outbox(list):
        succeed = True

        def __call__(self, user, category, message):
            self.append((user.id, NotificationCategory(category), message))
            return self.succeed

    return Outbox()


@pytest.fixture
def client():
    pytest.importorskip("fastapi")
    from fastapi.testclient import TestClient

    from main import create_app

    app = create_app()
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def login(client):
    """Return bearer headers for ``email``."""

    def _login(email: str, password: str = DEFAULT_PASSWORD) -> dict[str, str]:
        response = client.post(
            "/auth/token", data={"username": email, "password": password}
        )
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    return _login
