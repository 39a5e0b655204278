"""Send-time A/B testing cohorts."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class CohortDefinition:
    """Named hour range used to bucket users for send-time experiments."""

    name: str
    hour_min: int
    hour_max: int
    label: str


COHORT_CONTROL = "control"

SEND_TIME_COHORTS: dict[str, CohortDefinition] = {
    "morning": CohortDefinition("morning", 8, 11, "Morning (8am-11am)"),
    "lunch": CohortDefinition("lunch", 12, 13, "Lunch (12pm-1pm)"),
    "afternoon": CohortDefinition("afternoon", 14, 16, "Afternoon (2pm-4pm)"),
    "evening": CohortDefinition("evening", 18, 20, "Evening (6pm-8pm)"),
    "night": CohortDefinition("night", 21, 23, "Night (9pm-11pm)"),
    COHORT_CONTROL: CohortDefinition(COHORT_CONTROL, 0, 23, "Control (Random)"),
}


@dataclass
class SendTimeCohort:
    """Cohort assignment of a user plus its running engagement counters."""

    id: int | None
    user_id: str
    cohort_name: str
    send_hour_min: int
    send_hour_max: int
    assigned_at: datetime | None = None
    emails_sent: int = 0
    emails_clicked: int = 0
    click_rate: float | None = None
    avg_time_to_click: int | None = None
    last_updated: datetime | None = None


__all__ = [
    "CohortDefinition",
    "COHORT_CONTROL",
    "SEND_TIME_COHORTS",
    "SendTimeCohort",
]
