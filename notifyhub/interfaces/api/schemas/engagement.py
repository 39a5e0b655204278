"""Schemas for engagement callbacks."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class EngagementSignalRequest(BaseModel):
    occurred_at: datetime | None = None


class EngagementEventRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    notification_id: int | None
    user_id: str
    channel: str
    send_hour: int
    send_day_of_week: int
    cohort_name: str | None = None
    opened: bool
    clicked: bool
    converted: bool
    time_to_open: int | None = None
    time_to_click: int | None = None
    time_to_convert: int | None = None


__all__ = ["EngagementSignalRequest", "EngagementEventRead"]
