"""Batch delivery of due notifications through their channel senders."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Mapping

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from notifyhub.config import Settings, get_settings
from notifyhub.domain.entities import NotificationQueueEntry, UserProfile
from notifyhub.domain.policies import DEFAULT_RETRY_POLICY, RetryPolicy
from notifyhub.infrastructure.channels import (
    ChannelSendError,
    ChannelSender,
    build_channel_senders,
    send_with_timeout,
)
from notifyhub.infrastructure.repositories import (
    NotificationQueueRepository,
    UserProfileRepository,
)
from notifyhub.application.use_cases.send_time.engagement import record_send
from notifyhub.utils import ensure_utc, now_utc, to_local

from .preferences import resolve_preferences
from .quiet_hours import is_in_quiet_hours, next_available_instant
from .retry import next_retry

logger = logging.getLogger(__name__)

OUTCOME_SENT = "sent"
OUTCOME_DEFERRED = "deferred"
OUTCOME_RESCHEDULED = "rescheduled"
OUTCOME_RETRIED = "retried"
OUTCOME_FAILED = "failed"
OUTCOME_CANCELLED = "cancelled"
OUTCOME_SKIPPED = "skipped"


@dataclass
class DispatchSummary:
    """Counters describing one dispatcher run.

    ``deferred`` counts quiet-hours postponements and ``rescheduled`` the
    entries whose channel was disabled after they were queued.
    """

    claimed: int = 0
    sent: int = 0
    deferred: int = 0
    rescheduled: int = 0
    retried: int = 0
    failed: int = 0
    cancelled: int = 0
    skipped: int = 0
    errors: int = 0


def dispatch_due_notifications(
    session: Session,
    *,
    senders: Mapping[str, ChannelSender] | None = None,
    settings: Settings | None = None,
    now: datetime | None = None,
    limit: int | None = None,
    retry_policy: RetryPolicy = DEFAULT_RETRY_POLICY,
) -> DispatchSummary:
    """Claim due entries and try to deliver each of them once.

    Every entry ends the run sent, failed, cancelled or pending again with a
    new ``scheduled_for``. Faults are contained per entry so one broken row
    never stops the batch.
    """

    settings = settings or get_settings()
    if senders is None:
        senders = build_channel_senders(settings)
    current = ensure_utc(now) or now_utc()
    repository = NotificationQueueRepository(session)

    token, entries = repository.claim_due(
        limit or settings.dispatch_batch_size,
        now=current,
        lease=timedelta(minutes=settings.claim_lease_minutes),
    )
    summary = DispatchSummary(claimed=len(entries))

    for entry in entries:
        try:
            outcome = _dispatch_entry(
                session,
                entry,
                claim_token=token,
                senders=senders,
                settings=settings,
                now=current,
                retry_policy=retry_policy,
            )
        except Exception:
            summary.errors += 1
            logger.exception("Unexpected error while dispatching notification %s", entry.id)
            session.rollback()
            _release_claim(repository, entry.id, token)
            continue
        setattr(summary, outcome, getattr(summary, outcome) + 1)

    logger.info(
        "Dispatch run finished: claimed=%s sent=%s deferred=%s rescheduled=%s "
        "retried=%s failed=%s cancelled=%s skipped=%s errors=%s",
        summary.claimed,
        summary.sent,
        summary.deferred,
        summary.rescheduled,
        summary.retried,
        summary.failed,
        summary.cancelled,
        summary.skipped,
        summary.errors,
    )
    return summary


def _release_claim(
    repository: NotificationQueueRepository, entry_id: int | None, token: str
) -> None:
    """Hand a claimed entry back to the queue before its lease runs out."""

    if entry_id is None:
        return
    try:
        repository.release(entry_id, claim_token=token)
    except SQLAlchemyError:
        repository.session.rollback()
        logger.exception("Failed to release the claim on notification %s", entry_id)


def _dispatch_entry(
    session: Session,
    entry: NotificationQueueEntry,
    *,
    claim_token: str,
    senders: Mapping[str, ChannelSender],
    settings: Settings,
    now: datetime,
    retry_policy: RetryPolicy,
) -> str:
    repository = NotificationQueueRepository(session)

    recipient = UserProfileRepository(session).get(entry.user_id)
    if recipient is None:
        marked = repository.mark_failed(
            entry.id, "recipient profile not found", failed_at=now, claim_token=claim_token
        )
        return OUTCOME_FAILED if marked else OUTCOME_SKIPPED

    preferences = resolve_preferences(recipient.notification_preferences).for_channel(
        entry.channel
    )
    if not preferences.enabled:
        return _handle_disabled_channel(repository, entry, claim_token, settings, now)

    local_now = to_local(now, recipient.timezone)
    if is_in_quiet_hours(preferences.quiet_hours, local_now):
        resume_at = next_available_instant(preferences.quiet_hours, local_now)
        moved = repository.reschedule(
            entry.id,
            resume_at.astimezone(timezone.utc),
            "quiet hours",
            now=now,
            claim_token=claim_token,
        )
        return OUTCOME_DEFERRED if moved else OUTCOME_SKIPPED

    failure = _send(senders.get(entry.channel), entry, recipient, settings)
    if failure is None:
        return _handle_success(session, repository, entry, recipient, claim_token, now)
    return _handle_failure(repository, entry, failure, claim_token, now, retry_policy)


def _send(
    sender: ChannelSender | None,
    entry: NotificationQueueEntry,
    recipient: UserProfile,
    settings: Settings,
) -> str | None:
    """Deliver ``entry`` and return the failure reason, or ``None`` on success."""

    if sender is None:
        return f"no sender configured for channel '{entry.channel}'"
    try:
        send_with_timeout(sender, entry, recipient, timeout=settings.send_timeout_seconds)
    except ChannelSendError as exc:
        return exc.reason
    except Exception as exc:
        logger.warning(
            "Sender for %s raised while delivering notification %s",
            entry.channel,
            entry.id,
            exc_info=True,
        )
        return f"{type(exc).__name__}: {exc}"
    return None


def _handle_success(
    session: Session,
    repository: NotificationQueueRepository,
    entry: NotificationQueueEntry,
    recipient: UserProfile,
    claim_token: str,
    now: datetime,
) -> str:
    if not repository.mark_sent(entry.id, sent_at=now, claim_token=claim_token):
        return OUTCOME_SKIPPED

    logger.info("Sent %s notification %s to user %s", entry.channel, entry.id, entry.user_id)
    try:
        record_send(session, notification=entry, recipient=recipient, sent_at=now)
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Could not record send event for notification %s", entry.id)
    return OUTCOME_SENT


def _handle_failure(
    repository: NotificationQueueRepository,
    entry: NotificationQueueEntry,
    reason: str,
    claim_token: str,
    now: datetime,
    retry_policy: RetryPolicy,
) -> str:
    decision = next_retry(entry.retry_count + 1, retry_policy)
    if decision.terminal:
        marked = repository.mark_failed(
            entry.id, reason, failed_at=now, claim_token=claim_token
        )
        if marked:
            logger.warning(
                "Notification %s failed permanently after %s retries: %s",
                entry.id,
                entry.retry_count,
                reason,
            )
            return OUTCOME_FAILED
        return OUTCOME_SKIPPED

    moved = repository.reschedule(
        entry.id,
        now + decision.delay,
        reason,
        now=now,
        retry_count=decision.attempt,
        claim_token=claim_token,
    )
    if moved:
        logger.info(
            "Notification %s failed (%s); retry %s in %s",
            entry.id,
            reason,
            decision.attempt,
            decision.delay,
        )
        return OUTCOME_RETRIED
    return OUTCOME_SKIPPED


def _handle_disabled_channel(
    repository: NotificationQueueRepository,
    entry: NotificationQueueEntry,
    claim_token: str,
    settings: Settings,
    now: datetime,
) -> str:
    reason = f"channel '{entry.channel}' disabled for recipient"
    created_at = entry.created_at or now
    if now - created_at >= timedelta(days=settings.stale_notification_days):
        cancelled = repository.cancel(entry.id, reason=reason, claim_token=claim_token)
        return OUTCOME_CANCELLED if cancelled else OUTCOME_SKIPPED

    moved = repository.reschedule(
        entry.id,
        now + timedelta(hours=settings.disabled_channel_recheck_hours),
        reason,
        now=now,
        claim_token=claim_token,
    )
    if moved:
        logger.warning("Notification %s postponed: %s", entry.id, reason)
        return OUTCOME_RESCHEDULED
    return OUTCOME_SKIPPED


__all__ = ["DispatchSummary", "dispatch_due_notifications"]
