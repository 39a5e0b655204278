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
        default="sqlite:///./notifyhub.db",
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    app_timezone: str = Field(
        default="UTC",
        description="Timezone assumed for recipients whose profile does not declare one",
    )
    sendgrid_api_key: str | None = Field(
        default=None,
        description="SendGrid API key used for delivering the email channel",
    )
    sendgrid_sender: str | None = Field(
        default=None,
        description="Email address that will appear as the sender of notifications",
        min_length=3,
    )
    email_default_subject: str = Field(
        default="You have a new notification",
        description="Subject used when a queued email carries none",
    )
    chat_webhook_url: str | None = Field(
        default=None,
        description="Webhook of the chat provider used for the chat channel",
    )
    sms_gateway_url: str | None = Field(
        default=None,
        description="HTTP endpoint of the SMS gateway",
    )
    sms_gateway_token: str | None = Field(
        default=None,
        description="Bearer token sent to the SMS gateway",
    )
    send_timeout_seconds: float = Field(
        default=10.0,
        description="Upper bound for a single channel sender call",
        gt=0,
    )
    dispatch_batch_size: int = Field(
        default=100,
        description="Maximum number of entries claimed per dispatcher run",
        gt=0,
    )
    claim_lease_minutes: int = Field(
        default=10,
        description="Minutes a claimed entry stays reserved for the claiming run",
        gt=0,
    )
    disabled_channel_recheck_hours: int = Field(
        default=24,
        description="Delay before re-checking an entry whose channel was disabled",
        gt=0,
    )
    stale_notification_days: int = Field(
        default=7,
        description="Age after which an entry for a disabled channel is cancelled",
        gt=0,
    )
    analytics_window_days: int = Field(
        default=30,
        description="Number of days of engagement events scanned by the aggregator",
        gt=0,
    )
    log_level: str = Field(default="INFO", description="Root log level for scripts")
    cors_allow_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:4200"],
        description="Origins allowed to call the API from a browser",
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


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
