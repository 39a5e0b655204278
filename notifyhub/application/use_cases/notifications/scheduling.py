"""Choice of a send hour for notifications queued with optimized timing."""

from __future__ import annotations

import logging
import random
from datetime import date, datetime, timedelta, timezone

from sqlalchemy.orm import Session

from notifyhub.domain.entities import COHORT_CONTROL, SEGMENT_INDUSTRY, UserProfile
from notifyhub.domain.policies import DEFAULT_OPTIMIZATION_POLICY, OptimizationPolicy
from notifyhub.infrastructure.repositories import (
    DemographicPerformanceRepository,
    SendTimeAnalyticsRepository,
)
from notifyhub.application.use_cases.send_time.cohorts import assign_cohort
from notifyhub.application.use_cases.send_time.engagement import demographic_snapshot
from notifyhub.utils import ensure_utc, now_utc, to_local

logger = logging.getLogger(__name__)


def choose_send_hour(
    session: Session,
    recipient: UserProfile | None,
    *,
    today: date | None = None,
    rng: random.Random | None = None,
    policy: OptimizationPolicy = DEFAULT_OPTIMIZATION_POLICY,
) -> int:
    """Return the local hour of day at which ``recipient`` should be contacted.

    Falls back to a random hour within the default window when optimization
    is switched off, the recipient is unknown or belongs to the control
    cohort. Otherwise the industry segment's optimal hour is used when it
    falls inside the recipient's cohort range, and a random hour of that
    range when it does not.
    """

    rng = rng or random.Random()
    current_date = today or now_utc().date()
    default_hour = rng.randint(policy.default_hour_min, policy.default_hour_max)

    # The latest decision taken on or before today applies.
    enabled = SendTimeAnalyticsRepository(session).latest_optimization_flag(
        before=current_date + timedelta(days=1)
    )
    if not enabled or recipient is None:
        return default_hour

    cohort = assign_cohort(session, recipient.id)
    if cohort.cohort_name == COHORT_CONTROL:
        return default_hour

    industry = demographic_snapshot(recipient).get("industry")
    if industry:
        segment = DemographicPerformanceRepository(session).latest_segment(
            SEGMENT_INDUSTRY, industry, on_or_before=current_date
        )
        optimal = segment.optimal_send_hour if segment else None
        if optimal is not None and cohort.send_hour_min <= optimal <= cohort.send_hour_max:
            logger.debug(
                "Using optimal hour %s of industry '%s' for user %s",
                optimal,
                industry,
                recipient.id,
            )
            return optimal

    return rng.randint(cohort.send_hour_min, cohort.send_hour_max)


def next_local_occurrence(hour: int, now: datetime, tz_name: str | None = None) -> datetime:
    """Return the next instant, in UTC, at which the local clock reads ``hour``:00."""

    local_now = to_local(now, tz_name)
    candidate = local_now.replace(hour=hour, minute=0, second=0, microsecond=0)
    if candidate <= local_now:
        candidate += timedelta(days=1)
    return ensure_utc(candidate.astimezone(timezone.utc))


__all__ = ["choose_send_hour", "next_local_occurrence"]
