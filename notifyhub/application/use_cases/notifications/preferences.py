"""Resolution of raw preference blobs into typed channel preferences."""

from __future__ import annotations

import re
from typing import Any, Mapping

from notifyhub.domain.entities import (
    FREQUENCY_WEEKLY,
    PREFERENCES_SCHEMA_VERSION,
    SUPPORTED_CHANNELS,
    VALID_FREQUENCIES,
    ChannelPreferences,
    NotificationPreferences,
    QuietHours,
)

_CLOCK_PATTERN = re.compile(r"^(?P<hour>[01]?\d|2[0-3]):(?P<minute>[0-5]\d)$")
_DEFAULT_QUIET_HOURS = QuietHours()

# Keys used by earlier profile schemas for the same channel.
_LEGACY_CHANNEL_KEYS = {
    "chat": ("chat", "whatsapp"),
    "email": ("email",),
    "sms": ("sms",),
}
_TRUE_STRINGS = {"1", "true", "yes", "on"}
_FALSE_STRINGS = {"0", "false", "no", "off", ""}


def resolve_preferences(raw: Any) -> NotificationPreferences:
    """Return complete preferences for every channel from a raw profile blob.

    ``raw`` may be ``None``, a legacy blob without ``schemaVersion``, a blob
    missing channels, or one with malformed fields. Each missing or malformed
    field falls back to its default (disabled, ``weekly``, 22:00-08:00), so
    this function never raises.
    """

    source: Mapping[str, Any] = raw if isinstance(raw, Mapping) else {}
    channels = {
        channel: _resolve_channel(_lookup_channel(source, channel))
        for channel in SUPPORTED_CHANNELS
    }
    return NotificationPreferences(
        channels=channels, schema_version=PREFERENCES_SCHEMA_VERSION
    )


def normalize_clock(value: Any) -> str | None:
    """Return ``value`` as a zero padded ``HH:MM`` string or ``None``."""

    if not isinstance(value, str):
        return None
    match = _CLOCK_PATTERN.match(value.strip())
    if match is None:
        return None
    return f"{int(match.group('hour')):02d}:{match.group('minute')}"


def _lookup_channel(source: Mapping[str, Any], channel: str) -> Any:
    for key in _LEGACY_CHANNEL_KEYS.get(channel, (channel,)):
        if key in source:
            return source[key]
    return None


def _resolve_channel(raw: Any) -> ChannelPreferences:
    if not isinstance(raw, Mapping):
        return ChannelPreferences()

    return ChannelPreferences(
        enabled=_coerce_bool(raw.get("enabled")),
        frequency=_coerce_frequency(raw.get("frequency")),
        quiet_hours=_coerce_quiet_hours(raw.get("quietHours", raw.get("quiet_hours"))),
    )


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    return False


def _coerce_frequency(value: Any) -> str:
    if isinstance(value, str) and value.strip().lower() in VALID_FREQUENCIES:
        return value.strip().lower()
    return FREQUENCY_WEEKLY


def _coerce_quiet_hours(value: Any) -> QuietHours:
    if not isinstance(value, Mapping):
        return _DEFAULT_QUIET_HOURS
    start = normalize_clock(value.get("start"))
    end = normalize_clock(value.get("end"))
    if start is None or end is None:
        return _DEFAULT_QUIET_HOURS
    return QuietHours(start=start, end=end)


__all__ = ["resolve_preferences", "normalize_clock"]
