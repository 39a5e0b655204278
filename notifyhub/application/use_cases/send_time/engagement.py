"""Collection of send and engagement events for delivered notifications."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime

from sqlalchemy.orm import Session

from notifyhub.domain.entities import (
    ENGAGEMENT_EVENT_SCHEMA_VERSION,
    EngagementEvent,
    NotificationQueueEntry,
    UserProfile,
)
from notifyhub.domain.policies import CURRENT_SCORING_POLICY_VERSION
from notifyhub.infrastructure.repositories import EngagementEventRepository
from notifyhub.utils import ensure_utc, now_utc, to_local

from .cohorts import assign_cohort

logger = logging.getLogger(__name__)

STAGE_OPEN = "open"
STAGE_CLICK = "click"
STAGE_CONVERT = "convert"
ENGAGEMENT_STAGES = (STAGE_OPEN, STAGE_CLICK, STAGE_CONVERT)

_DEMOGRAPHIC_KEYS = {
    "age_bracket": ("age_bracket", "ageBracket", "ageRange"),
    "income_bracket": ("income_bracket", "incomeBracket", "incomeRange"),
    "industry": ("industry",),
}


def record_send(
    session: Session,
    *,
    notification: NotificationQueueEntry,
    recipient: UserProfile,
    sent_at: datetime,
) -> EngagementEvent:
    """Record the send-time snapshot of a delivered ``notification``.

    Send hour and weekday are taken in the recipient's local time. The
    demographic snapshot is captured only when the recipient consented to
    analytics and is never re-derived afterwards.
    """

    local_sent = to_local(sent_at, recipient.timezone)
    cohort = assign_cohort(session, recipient.id, now=sent_at)
    snapshot = demographic_snapshot(recipient)

    event = EngagementEvent(
        id=None,
        user_id=recipient.id,
        notification_id=notification.id,
        channel=notification.channel,
        notification_type=notification.type,
        sent_at=ensure_utc(sent_at),
        send_hour=local_sent.hour,
        send_day_of_week=local_sent.isoweekday() % 7,
        cohort_name=cohort.cohort_name,
        schema_version=ENGAGEMENT_EVENT_SCHEMA_VERSION,
        scoring_policy_version=CURRENT_SCORING_POLICY_VERSION,
        **snapshot,
    )
    saved = EngagementEventRepository(session).create(event)
    logger.info(
        "Tracked %s send for user %s at local hour %s",
        notification.channel,
        recipient.id,
        saved.send_hour,
    )
    return saved


def record_engagement(
    session: Session,
    notification_id: int,
    stage: str,
    *,
    occurred_at: datetime | None = None,
) -> EngagementEvent:
    """Record that the recipient reached ``stage`` for ``notification_id``.

    Only the first occurrence of each stage is kept. Raises ``ValueError``
    when the stage is unknown or no send was tracked for the notification.
    """

    if stage not in ENGAGEMENT_STAGES:
        raise ValueError(f"Unknown engagement stage '{stage}'")

    repository = EngagementEventRepository(session)
    event = repository.get_by_notification(notification_id)
    if event is None:
        raise ValueError(f"No send event tracked for notification {notification_id}")

    moment = ensure_utc(occurred_at) or now_utc()
    minutes = max(int((moment - event.sent_at).total_seconds() // 60), 0)
    if repository.record_engagement(
        event.id, stage=stage, occurred_at=moment, minutes=minutes
    ):
        logger.info(
            "Tracked %s for notification %s (%s minutes after send)",
            stage,
            notification_id,
            minutes,
        )
    else:
        logger.debug("Ignored repeated %s for notification %s", stage, notification_id)
    return repository.get(event.id)


def demographic_snapshot(recipient: UserProfile) -> dict[str, str | None]:
    """Return the consented age, income and industry brackets of ``recipient``."""

    snapshot: dict[str, str | None] = {key: None for key in _DEMOGRAPHIC_KEYS}
    if not recipient.analytics_consent:
        return snapshot

    demographics = recipient.demographics
    if not isinstance(demographics, Mapping):
        if demographics:
            logger.warning(
                "Ignoring demographics of user %s: expected an object, got %s",
                recipient.id,
                type(demographics).__name__,
            )
        return snapshot
    for field_name, candidates in _DEMOGRAPHIC_KEYS.items():
        for key in candidates:
            value = demographics.get(key)
            if isinstance(value, str) and value.strip():
                snapshot[field_name] = value.strip()
                break
    return snapshot


__all__ = [
    "demographic_snapshot",
    "record_send",
    "record_engagement",
    "ENGAGEMENT_STAGES",
    "STAGE_OPEN",
    "STAGE_CLICK",
    "STAGE_CONVERT",
]
