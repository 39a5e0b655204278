"""Persistence helpers for the notification delivery queue."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from datetime import datetime, timedelta

from sqlalchemy import or_
from sqlalchemy.orm import Session

from notifyhub.domain.entities import (
    DEFAULT_PRIORITY,
    MAX_PRIORITY,
    MIN_PRIORITY,
    STATUS_CANCELLED,
    STATUS_FAILED,
    STATUS_PENDING,
    STATUS_SENT,
    SUPPORTED_CHANNELS,
    NotificationQueueEntry,
)
from notifyhub.infrastructure.models import NotificationQueueModel
from notifyhub.utils import ensure_utc, ensure_utc_naive, now_utc

logger = logging.getLogger(__name__)


class NotificationQueueRepository:
    """Store queue entries and apply guarded status transitions.

    Every transition is a conditional ``UPDATE`` that only matches ``pending``
    rows, so a transition attempted on an entry in any other state affects no
    rows and is reported as ``False`` instead of raising.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def enqueue(
        self, entry: NotificationQueueEntry, *, now: datetime | None = None
    ) -> NotificationQueueEntry:
        if not entry.user_id:
            raise ValueError("user_id is required")
        if entry.channel not in SUPPORTED_CHANNELS:
            raise ValueError(f"Unsupported channel '{entry.channel}'")
        if not entry.body:
            raise ValueError("body is required")
        priority = DEFAULT_PRIORITY if entry.priority is None else entry.priority
        if (
            not isinstance(priority, int)
            or isinstance(priority, bool)
            or not MIN_PRIORITY <= priority <= MAX_PRIORITY
        ):
            raise ValueError(
                f"priority must be between {MIN_PRIORITY} and {MAX_PRIORITY}, got {priority!r}"
            )

        current = ensure_utc(now) or now_utc()
        scheduled_for = ensure_utc(entry.scheduled_for)
        if scheduled_for is None or scheduled_for < current:
            scheduled_for = current

        model = NotificationQueueModel(
            user_id=entry.user_id,
            channel=entry.channel,
            type=entry.type or "general",
            status=STATUS_PENDING,
            priority=priority,
            subject=entry.subject,
            body=entry.body,
            metadata_json=entry.metadata or None,
            scheduled_for=ensure_utc_naive(scheduled_for),
            retry_count=0,
            created_at=ensure_utc_naive(current),
        )
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def get(self, entry_id: int) -> NotificationQueueEntry | None:
        model = self.session.get(NotificationQueueModel, entry_id)
        if model is None:
            return None
        return self._to_entity(model)

    def claim_due(
        self,
        limit: int,
        *,
        now: datetime | None = None,
        lease: timedelta = timedelta(minutes=10),
    ) -> tuple[str, list[NotificationQueueEntry]]:
        """Reserve up to ``limit`` due entries for the calling run.

        The reservation is a single conditional ``UPDATE`` that stamps a fresh
        claim token on rows that are still ``pending`` and not held by another
        live lease. Only rows carrying that token are returned, so two
        overlapping runs never receive the same entry.
        """

        current = ensure_utc_naive(now or now_utc())
        token = str(uuid.uuid4())
        if limit <= 0:
            return token, []

        lease_free = or_(
            NotificationQueueModel.claimed_until.is_(None),
            NotificationQueueModel.claimed_until <= current,
        )
        candidate_ids = [
            row_id
            for (row_id,) in self.session.query(NotificationQueueModel.id)
            .filter(NotificationQueueModel.status == STATUS_PENDING)
            .filter(NotificationQueueModel.scheduled_for <= current)
            .filter(lease_free)
            .order_by(
                NotificationQueueModel.priority.asc(),
                NotificationQueueModel.scheduled_for.asc(),
                NotificationQueueModel.id.asc(),
            )
            .limit(limit)
            .all()
        ]
        if not candidate_ids:
            self.session.rollback()
            return token, []

        claimed = (
            self.session.query(NotificationQueueModel)
            .filter(
                NotificationQueueModel.id.in_(candidate_ids),
                NotificationQueueModel.status == STATUS_PENDING,
                lease_free,
            )
            .update(
                {
                    NotificationQueueModel.claim_token: token,
                    NotificationQueueModel.claimed_until: current + lease,
                },
                synchronize_session=False,
            )
        )
        self.session.commit()
        if claimed != len(candidate_ids):
            logger.info(
                "Claimed %s of %s due entries; the rest were taken by another run",
                claimed,
                len(candidate_ids),
            )

        models = (
            self.session.query(NotificationQueueModel)
            .filter(NotificationQueueModel.claim_token == token)
            .order_by(
                NotificationQueueModel.priority.asc(),
                NotificationQueueModel.scheduled_for.asc(),
                NotificationQueueModel.id.asc(),
            )
            .all()
        )
        return token, [self._to_entity(model) for model in models]

    def mark_sent(
        self,
        entry_id: int,
        *,
        sent_at: datetime | None = None,
        claim_token: str | None = None,
    ) -> bool:
        return self._transition(
            entry_id,
            {
                NotificationQueueModel.status: STATUS_SENT,
                NotificationQueueModel.sent_at: ensure_utc_naive(sent_at or now_utc()),
            },
            claim_token=claim_token,
            action="mark_sent",
        )

    def mark_failed(
        self,
        entry_id: int,
        reason: str,
        *,
        failed_at: datetime | None = None,
        claim_token: str | None = None,
    ) -> bool:
        return self._transition(
            entry_id,
            {
                NotificationQueueModel.status: STATUS_FAILED,
                NotificationQueueModel.failed_at: ensure_utc_naive(failed_at or now_utc()),
                NotificationQueueModel.failure_reason: reason,
            },
            claim_token=claim_token,
            action="mark_failed",
        )

    def reschedule(
        self,
        entry_id: int,
        new_instant: datetime,
        reason: str,
        *,
        now: datetime | None = None,
        retry_count: int | None = None,
        claim_token: str | None = None,
    ) -> bool:
        current = ensure_utc(now) or now_utc()
        target = ensure_utc(new_instant)
        if target < current:
            target = current

        values = {
            NotificationQueueModel.scheduled_for: ensure_utc_naive(target),
            NotificationQueueModel.failure_reason: reason,
        }
        extra_filters = []
        if retry_count is not None:
            values[NotificationQueueModel.retry_count] = retry_count
            extra_filters.append(NotificationQueueModel.retry_count <= retry_count)
        return self._transition(
            entry_id,
            values,
            claim_token=claim_token,
            action="reschedule",
            extra_filters=extra_filters,
        )

    def cancel(
        self,
        entry_id: int,
        *,
        reason: str | None = None,
        now: datetime | None = None,
        claim_token: str | None = None,
    ) -> bool:
        values = {NotificationQueueModel.status: STATUS_CANCELLED}
        if reason:
            values[NotificationQueueModel.failure_reason] = reason
        extra_filters = []
        if claim_token is None:
            current = ensure_utc_naive(now or now_utc())
            extra_filters.append(
                or_(
                    NotificationQueueModel.claimed_until.is_(None),
                    NotificationQueueModel.claimed_until <= current,
                )
            )
        return self._transition(
            entry_id,
            values,
            claim_token=claim_token,
            action="cancel",
            extra_filters=extra_filters,
        )

    def release(self, entry_id: int, *, claim_token: str) -> bool:
        """Drop the lease on ``entry_id`` without changing its state."""

        return self._transition(entry_id, {}, claim_token=claim_token, action="release")

    def list_for_user_since(
        self, user_id: str, since: datetime
    ) -> Sequence[NotificationQueueEntry]:
        query = (
            self.session.query(NotificationQueueModel)
            .filter(NotificationQueueModel.user_id == user_id)
            .filter(NotificationQueueModel.created_at >= ensure_utc_naive(since))
            .order_by(NotificationQueueModel.created_at.desc(), NotificationQueueModel.id.desc())
        )
        return [self._to_entity(model) for model in query.all()]

    def _transition(
        self,
        entry_id: int,
        values: dict,
        *,
        claim_token: str | None,
        action: str,
        extra_filters: list | None = None,
    ) -> bool:
        query = self.session.query(NotificationQueueModel).filter(
            NotificationQueueModel.id == entry_id,
            NotificationQueueModel.status == STATUS_PENDING,
        )
        if claim_token is not None:
            query = query.filter(NotificationQueueModel.claim_token == claim_token)
        for condition in extra_filters or ():
            query = query.filter(condition)

        updated = query.update(
            {
                **values,
                NotificationQueueModel.claim_token: None,
                NotificationQueueModel.claimed_until: None,
            },
            synchronize_session=False,
        )
        self.session.commit()
        if updated != 1:
            logger.warning(
                "Ignored %s on notification %s: entry is not a pending entry held by the caller",
                action,
                entry_id,
            )
            return False
        return True

    @staticmethod
    def _to_entity(model: NotificationQueueModel) -> NotificationQueueEntry:
        return NotificationQueueEntry(
            id=model.id,
            user_id=model.user_id,
            channel=model.channel,
            type=model.type,
            body=model.body,
            status=model.status,
            priority=model.priority,
            subject=model.subject,
            metadata=model.metadata_json or {},
            scheduled_for=ensure_utc(model.scheduled_for),
            sent_at=ensure_utc(model.sent_at),
            failed_at=ensure_utc(model.failed_at),
            failure_reason=model.failure_reason,
            retry_count=model.retry_count,
            created_at=ensure_utc(model.created_at),
            claim_token=model.claim_token,
            claimed_until=ensure_utc(model.claimed_until),
        )


__all__ = ["NotificationQueueRepository"]
