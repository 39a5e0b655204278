"""Aggregated send-time performance summaries."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

SEGMENT_AGE = "age"
SEGMENT_INCOME = "income"
SEGMENT_INDUSTRY = "industry"
SEGMENT_TYPES = (SEGMENT_AGE, SEGMENT_INCOME, SEGMENT_INDUSTRY)


@dataclass
class SendTimeAnalytics:
    """Engagement metrics for one hour of day on one analysis date."""

    id: int | None
    analysis_date: date
    send_hour: int
    emails_sent: int = 0
    emails_opened: int = 0
    emails_clicked: int = 0
    emails_converted: int = 0
    open_rate: float = 0.0
    click_rate: float = 0.0
    conversion_rate: float = 0.0
    avg_time_to_open: int | None = None
    avg_time_to_click: int | None = None
    avg_time_to_convert: int | None = None
    engagement_score: float | None = None
    sample_size: int = 0
    variance: float | None = None
    optimization_enabled: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class DemographicPerformance:
    """Engagement metrics for one demographic segment on one analysis date."""

    id: int | None
    analysis_date: date
    segment_type: str
    segment_value: str
    emails_sent: int = 0
    emails_clicked: int = 0
    click_rate: float = 0.0
    avg_time_to_click: int | None = None
    optimal_send_hour: int | None = None
    optimal_hour_click_rate: float | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


__all__ = [
    "SendTimeAnalytics",
    "DemographicPerformance",
    "SEGMENT_AGE",
    "SEGMENT_INCOME",
    "SEGMENT_INDUSTRY",
    "SEGMENT_TYPES",
]
