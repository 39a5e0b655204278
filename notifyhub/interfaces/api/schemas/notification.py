"""Pydantic models describing queue payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from notifyhub.domain.entities import DEFAULT_PRIORITY, MAX_PRIORITY, MIN_PRIORITY


class NotificationQueueRequest(BaseModel):
    """Payload used to queue a notification for one recipient."""

    user_id: str = Field(..., min_length=1, description="Recipient identifier")
    channel: str = Field(..., description="email, chat or sms")
    type: str = Field("general", min_length=1, max_length=50)
    subject: str | None = Field(None, max_length=255)
    body: str = Field(..., min_length=1)
    metadata: dict[str, Any] = Field(default_factory=dict)
    priority: int = Field(
        DEFAULT_PRIORITY,
        ge=MIN_PRIORITY,
        le=MAX_PRIORITY,
        description="1 is the most urgent",
    )
    scheduled_for: datetime | None = None
    optimize_send_time: bool = False


class NotificationQueueResponse(BaseModel):
    queued: bool
    id: int | None = None
    reason: str | None = None
    scheduled_for: datetime | None = None


class NotificationCancelRequest(BaseModel):
    reason: str | None = Field(None, max_length=255)


class NotificationCancelResponse(BaseModel):
    id: int
    cancelled: bool


class NotificationStatsRead(BaseModel):
    """Counts of the entries queued for a user within a window."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    window_days: int
    total: int
    by_status: dict[str, int]
    by_channel: dict[str, int]


class DispatchSummaryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    claimed: int
    sent: int
    deferred: int
    rescheduled: int
    retried: int
    failed: int
    cancelled: int
    skipped: int
    errors: int


__all__ = [
    "NotificationQueueRequest",
    "NotificationQueueResponse",
    "NotificationCancelRequest",
    "NotificationCancelResponse",
    "NotificationStatsRead",
    "DispatchSummaryRead",
]
