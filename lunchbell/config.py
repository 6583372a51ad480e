"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    secret_key: str = Field(
        description="Secret key for signing JWT tokens", min_length=1
    )
    access_token_expire_minutes: int = Field(
        default=60 * 12,
        description="Number of minutes before access tokens expire",
        gt=0,
    )
    sendgrid_api_key: str | None = Field(
        default=None,
        description="SendGrid API key used for sending notification emails via the REST API",
    )
    sendgrid_sender: str | None = Field(
        default=None,
        description="Email address that will appear as the sender of notification emails",
        min_length=3,
    )
    app_timezone: str = Field(
        default="America/Bogota",
        description="IANA timezone name (or UTC offset such as UTC-05:00) used for timestamps",
    )
    log_level: str = Field(default="INFO", description="Root logging level")
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        description="Origins allowed to call the API from a browser",
    )
    notification_poll_interval_seconds: float = Field(
        default=30.0,
        description="Interval used by clients that fall back to polling the list endpoint",
        gt=0,
    )
    stream_tick_seconds: float = Field(
        default=5.0,
        description="Interval between incremental queries on an open notification stream",
        gt=0,
    )
    stream_initial_limit: int = Field(
        default=10,
        description="Number of records sent in the first frame of a notification stream",
        gt=0,
    )
    notification_list_limit: int = Field(
        default=50,
        description="Default page size for the notification list endpoint",
        gt=0,
        le=200,
    )
    notification_retention_days: int = Field(
        default=30,
        description="Notifications older than this many days are removed by the cleanup job",
        gt=0,
    )
    daily_reminder_hour: int = Field(default=10, ge=0, le=23)
    daily_reminder_minute: int = Field(default=30, ge=0, le=59)

    @model_validator(mode="after")
    def _validate_sendgrid_pair(self) -> "Settings":
        if bool(self.sendgrid_api_key) ^ bool(self.sendgrid_sender):
            raise ValueError(
                "SENDGRID_API_KEY and SENDGRID_SENDER must both be provided to enable email"
            )
        if self.sendgrid_sender and "@" not in self.sendgrid_sender:
            raise ValueError("SENDGRID_SENDER must be a valid email address")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
