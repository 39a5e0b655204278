"""Tests for the send hour chosen for optimized notifications."""

from __future__ import annotations

import random
from datetime import date, datetime, timezone

from notifyhub.application.use_cases.notifications import (
    choose_send_hour,
    next_local_occurrence,
)
from notifyhub.domain.entities import DemographicPerformance, SendTimeAnalytics, SendTimeCohort
from notifyhub.infrastructure.repositories import (
    DemographicPerformanceRepository,
    SendTimeAnalyticsRepository,
    SendTimeCohortRepository,
)

TODAY = date(2024, 5, 6)


def _enable_optimization(session, *, enabled: bool = True, on: date = date(2024, 5, 5)) -> None:
    SendTimeAnalyticsRepository(session).upsert(
        SendTimeAnalytics(id=None, analysis_date=on, send_hour=0, optimization_enabled=enabled)
    )
    session.commit()


def _assign(session, user_id: str, name: str, low: int, high: int) -> None:
    SendTimeCohortRepository(session).create_if_absent(
        SendTimeCohort(id=None, user_id=user_id, cohort_name=name, send_hour_min=low, send_hour_max=high)
    )


def _industry_optimum(session, hour: int) -> None:
    DemographicPerformanceRepository(session).upsert(
        DemographicPerformance(
            id=None,
            analysis_date=date(2024, 5, 5),
            segment_type="industry",
            segment_value="retail",
            emails_sent=400,
            emails_clicked=60,
            click_rate=0.15,
            optimal_send_hour=hour,
            optimal_hour_click_rate=0.3,
        )
    )
    session.commit()


def test_disabled_optimization_picks_default_window(session, make_profile) -> None:
    profile = make_profile()
    rng = random.Random(7)

    hours = {choose_send_hour(session, profile, today=TODAY, rng=rng) for _ in range(50)}

    assert hours <= set(range(8, 21))


def test_unknown_recipient_picks_default_window(session) -> None:
    _enable_optimization(session)

    assert 8 <= choose_send_hour(session, None, today=TODAY, rng=random.Random(1)) <= 20


def test_industry_optimum_inside_cohort_range_is_used(session, make_profile) -> None:
    profile = make_profile(demographics={"industry": "retail"}, analytics_consent=True)
    _enable_optimization(session)
    _assign(session, profile.id, "morning", 8, 11)
    _industry_optimum(session, 9)

    assert choose_send_hour(session, profile, today=TODAY, rng=random.Random(1)) == 9


def test_industry_optimum_outside_cohort_range_is_ignored(session, make_profile) -> None:
    profile = make_profile(demographics={"industry": "retail"}, analytics_consent=True)
    _enable_optimization(session)
    _assign(session, profile.id, "evening", 18, 20)
    _industry_optimum(session, 9)

    rng = random.Random(4)
    hours = {choose_send_hour(session, profile, today=TODAY, rng=rng) for _ in range(20)}

    assert hours <= {18, 19, 20}


def test_control_cohort_keeps_default_window(session, make_profile) -> None:
    profile = make_profile()
    _enable_optimization(session)
    _assign(session, profile.id, "control", 0, 23)

    rng = random.Random(2)
    hours = {choose_send_hour(session, profile, today=TODAY, rng=rng) for _ in range(50)}

    assert hours <= set(range(8, 21))


def test_operator_decision_carries_forward(session, make_profile) -> None:
    """A later date without its own decision inherits the latest one."""

    profile = make_profile(demographics={"industry": "retail"}, analytics_consent=True)
    _enable_optimization(session, enabled=True, on=date(2024, 5, 1))
    _assign(session, profile.id, "morning", 8, 11)
    _industry_optimum(session, 10)

    assert choose_send_hour(session, profile, today=TODAY, rng=random.Random(1)) == 10


def test_next_local_occurrence_rolls_over_to_tomorrow() -> None:
    now = datetime(2024, 5, 6, 15, 30, tzinfo=timezone.utc)

    assert next_local_occurrence(9, now, "UTC") == datetime(2024, 5, 7, 9, tzinfo=timezone.utc)
    assert next_local_occurrence(18, now, "UTC") == datetime(2024, 5, 6, 18, tzinfo=timezone.utc)


def test_next_local_occurrence_honours_offset() -> None:
    now = datetime(2024, 5, 6, 12, 0, tzinfo=timezone.utc)

    assert next_local_occurrence(9, now, "UTC-05:00") == datetime(
        2024, 5, 6, 14, tzinfo=timezone.utc
    )
