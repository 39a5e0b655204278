"""Aggregate application use cases."""

from .notifications import (
    cancel_notification,
    dispatch_due_notifications,
    get_notification_stats,
    queue_notification,
)
from .send_time import (
    get_send_time_report,
    record_engagement,
    run_send_time_analysis,
    set_optimization_enabled,
)

__all__ = [
    "cancel_notification",
    "dispatch_due_notifications",
    "get_notification_stats",
    "queue_notification",
    "get_send_time_report",
    "record_engagement",
    "run_send_time_analysis",
    "set_optimization_enabled",
]
