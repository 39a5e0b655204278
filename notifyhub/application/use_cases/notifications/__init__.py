"""Use cases of the notification delivery pipeline."""

from .dispatcher import DispatchSummary, dispatch_due_notifications
from .preferences import resolve_preferences
from .queue import (
    NotificationStats,
    QueueOutcome,
    cancel_notification,
    get_notification_stats,
    queue_notification,
)
from .quiet_hours import is_in_quiet_hours, next_available_instant
from .retry import RetryDecision, next_retry
from .scheduling import choose_send_hour, next_local_occurrence

__all__ = [
    "DispatchSummary",
    "dispatch_due_notifications",
    "resolve_preferences",
    "NotificationStats",
    "QueueOutcome",
    "cancel_notification",
    "get_notification_stats",
    "queue_notification",
    "is_in_quiet_hours",
    "next_available_instant",
    "RetryDecision",
    "next_retry",
    "choose_send_hour",
    "next_local_occurrence",
]
