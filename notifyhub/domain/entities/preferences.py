"""Typed notification preferences resolved from a user profile."""

from __future__ import annotations

from dataclasses import dataclass, field

FREQUENCY_INSTANT = "instant"
FREQUENCY_DAILY = "daily"
FREQUENCY_WEEKLY = "weekly"
VALID_FREQUENCIES = (FREQUENCY_INSTANT, FREQUENCY_DAILY, FREQUENCY_WEEKLY)

PREFERENCES_SCHEMA_VERSION = 1


@dataclass(frozen=True)
class QuietHours:
    """Do-not-disturb window expressed as ``HH:MM`` local clock strings."""

    start: str = "22:00"
    end: str = "08:00"


@dataclass(frozen=True)
class ChannelPreferences:
    """Delivery preferences for a single channel."""

    enabled: bool = False
    frequency: str = FREQUENCY_WEEKLY
    quiet_hours: QuietHours = field(default_factory=QuietHours)


@dataclass(frozen=True)
class NotificationPreferences:
    """Complete preferences with one entry per supported channel."""

    channels: dict[str, ChannelPreferences]
    schema_version: int = PREFERENCES_SCHEMA_VERSION

    def for_channel(self, channel: str) -> ChannelPreferences:
        """Return the preferences of ``channel`` or disabled defaults."""

        return self.channels.get(channel) or ChannelPreferences()


__all__ = [
    "QuietHours",
    "ChannelPreferences",
    "NotificationPreferences",
    "FREQUENCY_INSTANT",
    "FREQUENCY_DAILY",
    "FREQUENCY_WEEKLY",
    "VALID_FREQUENCIES",
    "PREFERENCES_SCHEMA_VERSION",
]
