"""FastAPI dependency utilities."""

from collections.abc import Mapping

from fastapi import Depends

from notifyhub.config import Settings, get_settings
from notifyhub.infrastructure.channels import ChannelSender, build_channel_senders


def get_app_settings() -> Settings:
    """Return the cached application settings."""

    return get_settings()


def get_channel_senders(
    settings: Settings = Depends(get_app_settings),
) -> Mapping[str, ChannelSender]:
    """Return the outbound sender of every channel."""

    return build_channel_senders(settings)


__all__ = ["get_app_settings", "get_channel_senders"]
