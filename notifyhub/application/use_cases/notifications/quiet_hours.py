"""Time-window arithmetic for per-channel quiet hours.

Both helpers operate on the wall clock of the ``now`` value they receive;
callers convert instants to the recipient's local time first.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from notifyhub.domain.entities import QuietHours


def _minutes_since_midnight(clock: str) -> int:
    hours, minutes = clock.split(":")
    return int(hours) * 60 + int(minutes)


def is_in_quiet_hours(window: QuietHours, now: datetime) -> bool:
    """Return ``True`` when ``now`` falls inside ``window``.

    A window whose start is after its end wraps past midnight.
    """

    start = _minutes_since_midnight(window.start)
    end = _minutes_since_midnight(window.end)
    current = now.hour * 60 + now.minute

    if start > end:
        return current >= start or current < end
    return start <= current < end


def next_available_instant(window: QuietHours, now: datetime) -> datetime:
    """Return the first instant at the end of ``window`` strictly after ``now``."""

    end_hour, end_minute = (int(part) for part in window.end.split(":"))
    candidate = now.replace(hour=end_hour, minute=end_minute, second=0, microsecond=0)
    if candidate <= now:
        candidate += timedelta(days=1)
    return candidate


__all__ = ["is_in_quiet_hours", "next_available_instant"]
