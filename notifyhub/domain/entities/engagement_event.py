"""Domain entity recording the engagement outcome of a sent notification."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

ENGAGEMENT_EVENT_SCHEMA_VERSION = 1


@dataclass
class EngagementEvent:
    """Send-time snapshot of a delivered notification and how the user reacted."""

    id: int | None
    user_id: str
    notification_id: int | None
    channel: str
    notification_type: str
    sent_at: datetime
    send_hour: int
    send_day_of_week: int
    cohort_name: str | None = None
    age_bracket: str | None = None
    income_bracket: str | None = None
    industry: str | None = None
    opened: bool = False
    opened_at: datetime | None = None
    clicked: bool = False
    clicked_at: datetime | None = None
    converted: bool = False
    converted_at: datetime | None = None
    time_to_open: int | None = None
    time_to_click: int | None = None
    time_to_convert: int | None = None
    schema_version: int = ENGAGEMENT_EVENT_SCHEMA_VERSION
    scoring_policy_version: int = 1
    created_at: datetime | None = None


__all__ = ["EngagementEvent", "ENGAGEMENT_EVENT_SCHEMA_VERSION"]
