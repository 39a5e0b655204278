"""Write-once assignment of users to send-time test cohorts."""

from __future__ import annotations

import logging
from datetime import datetime
from hashlib import sha256

from sqlalchemy.orm import Session

from notifyhub.domain.entities import SEND_TIME_COHORTS, CohortDefinition, SendTimeCohort
from notifyhub.infrastructure.repositories import SendTimeCohortRepository

logger = logging.getLogger(__name__)

_COHORT_ORDER = tuple(SEND_TIME_COHORTS)


def cohort_for_user(user_id: str) -> CohortDefinition:
    """Return the bucket ``user_id`` deterministically hashes to."""

    digest = sha256(user_id.encode("utf-8")).hexdigest()
    return SEND_TIME_COHORTS[_COHORT_ORDER[int(digest, 16) % len(_COHORT_ORDER)]]


def assign_cohort(
    session: Session, user_id: str, *, now: datetime | None = None
) -> SendTimeCohort:
    """Return the cohort of ``user_id``, creating it on first call.

    An existing assignment is returned unchanged, so a user never moves
    between buckets while an experiment is running.
    """

    repository = SendTimeCohortRepository(session)
    existing = repository.get_by_user(user_id)
    if existing is not None:
        return existing

    definition = cohort_for_user(user_id)
    cohort = repository.create_if_absent(
        SendTimeCohort(
            id=None,
            user_id=user_id,
            cohort_name=definition.name,
            send_hour_min=definition.hour_min,
            send_hour_max=definition.hour_max,
            assigned_at=now,
        )
    )
    logger.info("Assigned user %s to send-time cohort %s", user_id, cohort.cohort_name)
    return cohort


__all__ = ["assign_cohort", "cohort_for_user"]
