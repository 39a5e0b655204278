"""Tests for the engagement event collector."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from notifyhub.application.use_cases.send_time import record_engagement, record_send
from notifyhub.domain.entities import NotificationQueueEntry
from notifyhub.domain.policies import CURRENT_SCORING_POLICY_VERSION
from notifyhub.infrastructure.repositories import (
    NotificationQueueRepository,
    SendTimeCohortRepository,
)

NOW = datetime(2024, 5, 6, 12, 0, tzinfo=timezone.utc)
DEMOGRAPHICS = {"ageBracket": "25-34", "income_bracket": "50-75k", "industry": "retail"}


def _sent_entry(session, user_id: str = "user-1") -> NotificationQueueEntry:
    return NotificationQueueRepository(session).enqueue(
        NotificationQueueEntry(
            id=None, user_id=user_id, channel="email", type="digest", body="Weekly digest"
        ),
        now=NOW,
    )


def test_send_snapshot_uses_recipient_local_time(session, make_profile) -> None:
    profile = make_profile(timezone_name="UTC-05:00")
    entry = _sent_entry(session)

    event = record_send(session, notification=entry, recipient=profile, sent_at=NOW)

    assert event.send_hour == 7
    assert event.send_day_of_week == 1
    assert event.notification_id == entry.id
    assert event.notification_type == "digest"
    assert event.scoring_policy_version == CURRENT_SCORING_POLICY_VERSION
    assert event.cohort_name == SendTimeCohortRepository(session).get_by_user("user-1").cohort_name


def test_demographics_require_analytics_consent(session, make_profile) -> None:
    entry = _sent_entry(session)
    without = make_profile(demographics=DEMOGRAPHICS, analytics_consent=False)

    event = record_send(session, notification=entry, recipient=without, sent_at=NOW)

    assert (event.age_bracket, event.income_bracket, event.industry) == (None, None, None)


def test_demographic_snapshot_is_taken_at_send_time(session, make_profile) -> None:
    profile = make_profile(demographics=DEMOGRAPHICS, analytics_consent=True)
    entry = _sent_entry(session)

    event = record_send(session, notification=entry, recipient=profile, sent_at=NOW)
    make_profile(demographics={"industry": "finance"}, analytics_consent=True)
    clicked = record_engagement(session, entry.id, "click", occurred_at=NOW + timedelta(minutes=5))

    assert (event.age_bracket, event.income_bracket, event.industry) == ("25-34", "50-75k", "retail")
    assert clicked.industry == "retail"


@pytest.mark.parametrize("demographics", [["retail"], "retail", None])
def test_non_object_demographics_are_ignored(session, make_profile, demographics) -> None:
    profile = replace(make_profile(analytics_consent=True), demographics=demographics)
    entry = _sent_entry(session)

    event = record_send(session, notification=entry, recipient=profile, sent_at=NOW)

    assert event is not None
    assert (event.age_bracket, event.income_bracket, event.industry) == (None, None, None)


def test_engagement_records_first_occurrence_only(session, make_profile) -> None:
    profile = make_profile()
    entry = _sent_entry(session)
    record_send(session, notification=entry, recipient=profile, sent_at=NOW)

    first = record_engagement(session, entry.id, "open", occurred_at=NOW + timedelta(minutes=30))
    repeat = record_engagement(session, entry.id, "open", occurred_at=NOW + timedelta(hours=5))
    converted = record_engagement(
        session, entry.id, "convert", occurred_at=NOW + timedelta(hours=2)
    )

    assert first.opened is True
    assert first.time_to_open == 30
    assert repeat.time_to_open == 30
    assert repeat.opened_at == NOW + timedelta(minutes=30)
    assert converted.converted is True
    assert converted.time_to_convert == 120
    assert converted.clicked is False


def test_unknown_stage_is_rejected(session, make_profile) -> None:
    profile = make_profile()
    entry = _sent_entry(session)
    record_send(session, notification=entry, recipient=profile, sent_at=NOW)

    with pytest.raises(ValueError):
        record_engagement(session, entry.id, "share")


def test_engagement_without_tracked_send_is_rejected(session) -> None:
    with pytest.raises(ValueError):
        record_engagement(session, 12345, "click")
