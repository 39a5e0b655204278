"""Use cases exposed to collaborators that enqueue notifications."""

from __future__ import annotations

import logging
import random
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

from sqlalchemy.orm import Session

from notifyhub.domain.entities import (
    DEFAULT_PRIORITY,
    NOTIFICATION_STATUSES,
    STATUS_PENDING,
    SUPPORTED_CHANNELS,
    NotificationQueueEntry,
)
from notifyhub.infrastructure.repositories import (
    NotificationQueueRepository,
    UserProfileRepository,
)
from notifyhub.utils import ensure_utc, now_utc, to_local

from .preferences import resolve_preferences
from .quiet_hours import is_in_quiet_hours, next_available_instant
from .scheduling import choose_send_hour, next_local_occurrence

logger = logging.getLogger(__name__)


@dataclass
class QueueOutcome:
    """Result seen by the caller of :func:`queue_notification`."""

    entry_id: int | None
    reason: str | None = None
    scheduled_for: datetime | None = None

    @property
    def queued(self) -> bool:
        return self.entry_id is not None


@dataclass
class NotificationStats:
    user_id: str
    window_days: int
    total: int = 0
    by_status: dict[str, int] = field(default_factory=dict)
    by_channel: dict[str, int] = field(default_factory=dict)


def queue_notification(
    session: Session,
    *,
    user_id: str,
    channel: str,
    body: str,
    type: str = "general",
    subject: str | None = None,
    metadata: dict[str, Any] | None = None,
    priority: int = DEFAULT_PRIORITY,
    scheduled_for: datetime | None = None,
    optimize_send_time: bool = False,
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> QueueOutcome:
    """Queue a notification for ``user_id`` unless it cannot be delivered.

    A missing profile, an unsupported or disabled channel and invalid data
    never raise: the outcome is returned as not queued with a reason.
    Immediate notifications queued during the recipient's quiet hours are
    scheduled for the end of the window.
    """

    current = ensure_utc(now) or now_utc()

    profile = UserProfileRepository(session).get(user_id) if user_id else None
    if profile is None:
        return _not_queued(user_id, channel, "recipient profile not found")
    if channel not in SUPPORTED_CHANNELS:
        return _not_queued(user_id, channel, f"unsupported channel '{channel}'")

    preferences = resolve_preferences(profile.notification_preferences).for_channel(channel)
    if not preferences.enabled:
        return _not_queued(user_id, channel, f"channel '{channel}' is disabled for the recipient")

    target = ensure_utc(scheduled_for)
    if optimize_send_time and (target is None or target <= current):
        hour = choose_send_hour(
            session, profile, today=to_local(current, profile.timezone).date(), rng=rng
        )
        target = next_local_occurrence(hour, current, profile.timezone)
    if target is None or target < current:
        target = current

    if target == current:
        local_now = to_local(current, profile.timezone)
        if is_in_quiet_hours(preferences.quiet_hours, local_now):
            local_target = next_available_instant(preferences.quiet_hours, local_now)
            target = local_target.astimezone(timezone.utc)

    entry = NotificationQueueEntry(
        id=None,
        user_id=user_id,
        channel=channel,
        type=type,
        body=body,
        status=STATUS_PENDING,
        priority=priority,
        subject=subject,
        metadata=metadata or {},
        scheduled_for=target,
    )
    try:
        saved = NotificationQueueRepository(session).enqueue(entry, now=current)
    except ValueError as exc:
        return _not_queued(user_id, channel, str(exc))

    logger.info(
        "Queued %s notification %s for user %s at %s",
        channel,
        saved.id,
        user_id,
        saved.scheduled_for.isoformat(),
    )
    return QueueOutcome(entry_id=saved.id, scheduled_for=saved.scheduled_for)


def cancel_notification(
    session: Session,
    entry_id: int,
    *,
    reason: str | None = None,
    now: datetime | None = None,
) -> bool:
    """Cancel a pending entry.

    Raises ``ValueError`` when the entry does not exist. Returns ``False``
    when the entry is no longer pending or is being delivered.
    """

    repository = NotificationQueueRepository(session)
    if repository.get(entry_id) is None:
        raise ValueError(f"Notification {entry_id} not found")
    cancelled = repository.cancel(entry_id, reason=reason, now=now)
    if cancelled:
        logger.info("Cancelled notification %s", entry_id)
    return cancelled


def get_notification_stats(
    session: Session,
    user_id: str,
    *,
    window_days: int = 30,
    now: datetime | None = None,
) -> NotificationStats:
    """Count the entries queued for ``user_id`` in the last ``window_days``."""

    if window_days <= 0:
        raise ValueError("window_days must be positive")

    since = (ensure_utc(now) or now_utc()) - timedelta(days=window_days)
    entries = NotificationQueueRepository(session).list_for_user_since(user_id, since)

    by_status = {status: 0 for status in NOTIFICATION_STATUSES}
    by_status.update(Counter(entry.status for entry in entries))
    return NotificationStats(
        user_id=user_id,
        window_days=window_days,
        total=len(entries),
        by_status=by_status,
        by_channel=dict(Counter(entry.channel for entry in entries)),
    )


def _not_queued(user_id: str, channel: str, reason: str) -> QueueOutcome:
    logger.info("Notification for user %s on %s not queued: %s", user_id, channel, reason)
    return QueueOutcome(entry_id=None, reason=reason)


__all__ = [
    "QueueOutcome",
    "NotificationStats",
    "queue_notification",
    "cancel_notification",
    "get_notification_stats",
]
