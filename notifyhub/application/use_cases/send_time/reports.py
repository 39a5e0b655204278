"""Read-side helpers exposing send-time analytics to operators."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date

from sqlalchemy.orm import Session

from notifyhub.domain.entities import (
    SEND_TIME_COHORTS,
    DemographicPerformance,
    SendTimeAnalytics,
)
from notifyhub.domain.policies import DEFAULT_OPTIMIZATION_POLICY, OptimizationPolicy
from notifyhub.infrastructure.repositories import (
    DemographicPerformanceRepository,
    SendTimeAnalyticsRepository,
    SendTimeCohortRepository,
)

from .optimization import Recommendation, recommend_from_click_rates

logger = logging.getLogger(__name__)


@dataclass
class CohortSummary:
    """Engagement of all users assigned to one cohort."""

    cohort_name: str
    label: str
    users: int
    emails_sent: int
    emails_clicked: int
    click_rate: float
    avg_time_to_click: int | None


@dataclass
class SendTimeReport:
    """Everything the analytics dashboard shows for one analysis date."""

    analysis_date: date
    variance: float
    optimization_enabled: bool
    recommendation: Recommendation
    hourly: list[SendTimeAnalytics]
    demographics: list[DemographicPerformance]
    cohorts: list[CohortSummary]


def get_send_time_report(
    session: Session,
    analysis_date: date,
    *,
    policy: OptimizationPolicy = DEFAULT_OPTIMIZATION_POLICY,
) -> SendTimeReport:
    """Return the hourly, demographic and cohort tables for ``analysis_date``."""

    analytics_repo = SendTimeAnalyticsRepository(session)
    hourly = list(analytics_repo.list_for_date(analysis_date))
    recommendation = recommend_from_click_rates(
        [(row.click_rate, row.sample_size) for row in hourly], policy
    )
    demographics = list(DemographicPerformanceRepository(session).list_for_date(analysis_date))

    return SendTimeReport(
        analysis_date=analysis_date,
        variance=recommendation.variance,
        optimization_enabled=bool(hourly and hourly[0].optimization_enabled),
        recommendation=recommendation,
        hourly=hourly,
        demographics=demographics,
        cohorts=_summarize_cohorts(session),
    )


def set_optimization_enabled(session: Session, analysis_date: date, enabled: bool) -> int:
    """Record the operator's decision for ``analysis_date``.

    Raises ``ValueError`` when the date has not been analysed yet.
    """

    updated = SendTimeAnalyticsRepository(session).set_optimization_enabled(
        analysis_date, enabled
    )
    if not updated:
        raise ValueError(f"No send-time analytics stored for {analysis_date.isoformat()}")
    logger.info(
        "Send-time optimization %s for %s",
        "enabled" if enabled else "disabled",
        analysis_date.isoformat(),
    )
    return updated


def _summarize_cohorts(session: Session) -> list[CohortSummary]:
    totals: dict[str, list[int]] = defaultdict(lambda: [0, 0, 0, 0, 0])
    for cohort in SendTimeCohortRepository(session).list(with_sends_only=True):
        entry = totals[cohort.cohort_name]
        entry[0] += 1
        entry[1] += cohort.emails_sent
        entry[2] += cohort.emails_clicked
        if cohort.avg_time_to_click is not None and cohort.emails_clicked:
            entry[3] += cohort.avg_time_to_click * cohort.emails_clicked
            entry[4] += cohort.emails_clicked

    summaries = []
    for name, (users, sent, clicked, weighted_minutes, weight) in totals.items():
        definition = SEND_TIME_COHORTS.get(name)
        summaries.append(
            CohortSummary(
                cohort_name=name,
                label=definition.label if definition else name,
                users=users,
                emails_sent=sent,
                emails_clicked=clicked,
                click_rate=round(clicked / sent, 4) if sent else 0.0,
                avg_time_to_click=int(round(weighted_minutes / weight)) if weight else None,
            )
        )
    summaries.sort(key=lambda summary: summary.click_rate, reverse=True)
    return summaries


__all__ = [
    "CohortSummary",
    "SendTimeReport",
    "get_send_time_report",
    "set_optimization_enabled",
]
