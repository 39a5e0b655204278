"""Helpers for working with timezone-aware datetimes."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone, tzinfo
from functools import lru_cache
from typing import Final

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from notifyhub.config import get_settings

_DEFAULT_TIMEZONE: Final[str] = "UTC"
_OFFSET_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^(?:UTC|GMT)(?P<sign>[+-])(?P<hours>\d{1,2})(?::?(?P<minutes>\d{2}))?$",
    re.IGNORECASE,
)


@lru_cache(maxsize=1)
def get_app_timezone() -> tzinfo:
    """Return the timezone assumed for recipients without one of their own.

    The timezone is resolved using the ``APP_TIMEZONE`` environment variable (via
    the ``Settings`` object). If the provided value cannot be resolved, UTC is used.
    """

    settings = get_settings()
    tz_name = (settings.app_timezone or "").strip() or _DEFAULT_TIMEZONE
    return resolve_timezone(tz_name)


def now_utc() -> datetime:
    """Return the current instant as an aware UTC datetime."""

    return datetime.now(tz=timezone.utc)


def now_utc_naive() -> datetime:
    """Return the current UTC instant without ``tzinfo`` for DB defaults."""

    return now_utc().replace(tzinfo=None)


def ensure_utc(value: datetime | None) -> datetime | None:
    """Normalize ``value`` to an aware UTC datetime.

    Naive values are the representation used by the database columns and are
    therefore interpreted as UTC.
    """

    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def ensure_utc_naive(value: datetime | None) -> datetime | None:
    """Return ``value`` expressed in UTC but without ``tzinfo``."""

    normalized = ensure_utc(value)
    if normalized is None:
        return None
    return normalized.replace(tzinfo=None)


def to_local(value: datetime, tz_name: str | None = None) -> datetime:
    """Express ``value`` in the recipient timezone ``tz_name``.

    When ``tz_name`` is empty the application default timezone is used.
    """

    tz = resolve_timezone(tz_name) if tz_name else get_app_timezone()
    return ensure_utc(value).astimezone(tz)


def resolve_timezone(tz_name: str) -> tzinfo:
    """Resolve ``tz_name`` into a ``timezone`` instance."""

    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        match = _OFFSET_PATTERN.match(tz_name)
        if match:
            sign = -1 if match.group("sign") == "-" else 1
            hours = int(match.group("hours"))
            minutes = int(match.group("minutes") or 0)
            offset = timedelta(hours=hours, minutes=minutes)
            return timezone(sign * offset)
    return ZoneInfo(_DEFAULT_TIMEZONE)
