"""Domain entity representing a queued notification."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

CHANNEL_EMAIL = "email"
CHANNEL_CHAT = "chat"
CHANNEL_SMS = "sms"
SUPPORTED_CHANNELS = (CHANNEL_EMAIL, CHANNEL_CHAT, CHANNEL_SMS)

STATUS_PENDING = "pending"
STATUS_SENT = "sent"
STATUS_FAILED = "failed"
STATUS_CANCELLED = "cancelled"
NOTIFICATION_STATUSES = (STATUS_PENDING, STATUS_SENT, STATUS_FAILED, STATUS_CANCELLED)

DEFAULT_PRIORITY = 5
MIN_PRIORITY = 1
MAX_PRIORITY = 10
MAX_RETRY_COUNT = 3


@dataclass
class NotificationQueueEntry:
    """One attempted notification and its delivery state."""

    id: int | None
    user_id: str
    channel: str
    type: str
    body: str
    status: str = STATUS_PENDING
    priority: int = DEFAULT_PRIORITY
    subject: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    scheduled_for: datetime | None = None
    sent_at: datetime | None = None
    failed_at: datetime | None = None
    failure_reason: str | None = None
    retry_count: int = 0
    created_at: datetime | None = None
    claim_token: str | None = None
    claimed_until: datetime | None = None


__all__ = [
    "NotificationQueueEntry",
    "CHANNEL_EMAIL",
    "CHANNEL_CHAT",
    "CHANNEL_SMS",
    "SUPPORTED_CHANNELS",
    "STATUS_PENDING",
    "STATUS_SENT",
    "STATUS_FAILED",
    "STATUS_CANCELLED",
    "NOTIFICATION_STATUSES",
    "DEFAULT_PRIORITY",
    "MIN_PRIORITY",
    "MAX_PRIORITY",
    "MAX_RETRY_COUNT",
]
