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
    app_timezone: str = Field(
        default="UTC",
        description="IANA timezone name (or UTC±HH:MM offset) used for timestamps and quiet hours",
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL backing the delivery queue",
    )
    notification_queue_name: str = Field(
        default="notifications",
        description="Name of the RQ queue that receives email/SMS delivery jobs",
        min_length=1,
    )
    delivery_max_retries: int = Field(
        default=3,
        description="Number of times a failed delivery job is retried by the worker",
        ge=0,
    )
    client_url: str = Field(
        default="",
        description="Public URL of the web client, prefixed to action links in email and SMS",
    )
    notification_retention_days: int = Field(
        default=90,
        description="Age in days after which notifications are removed by the cleanup task",
        gt=0,
    )
    log_level: str = Field(
        default="INFO",
        description="Log level applied by the command line entrypoints",
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
    twilio_account_sid: str | None = Field(
        default=None, description="Twilio account SID used for SMS delivery"
    )
    twilio_auth_token: str | None = Field(
        default=None, description="Twilio auth token used for SMS delivery"
    )
    twilio_phone_number: str | None = Field(
        default=None, description="Twilio phone number SMS messages are sent from"
    )

    @model_validator(mode="after")
    def _validate_sendgrid_pair(self) -> "Settings":
        if bool(self.sendgrid_api_key) ^ bool(self.sendgrid_sender):
            raise ValueError(
                "SENDGRID_API_KEY and SENDGRID_SENDER must both be provided to enable email"
            )
        if self.sendgrid_sender and "@" not in self.sendgrid_sender:
            raise ValueError("SENDGRID_SENDER must be a valid email address")
        return self

    def sms_enabled(self) -> bool:
        """Return ``True`` when every Twilio credential is configured."""

        return bool(
            self.twilio_account_sid
            and self.twilio_auth_token
            and self.twilio_phone_number
        )


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
