"""Tests for the notification queue repository and its guarded transitions."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.orm import Query

from notifyhub.domain.entities import NotificationQueueEntry
from notifyhub.infrastructure.repositories import NotificationQueueRepository

NOW = datetime(2024, 5, 6, 12, 0, tzinfo=timezone.utc)


def _entry(user_id: str = "user-1", **overrides) -> NotificationQueueEntry:
    values = {
        "id": None,
        "user_id": user_id,
        "channel": "email",
        "type": "reminder",
        "body": "Your report is ready",
    }
    values.update(overrides)
    return NotificationQueueEntry(**values)


def test_enqueue_applies_defaults(session) -> None:
    saved = NotificationQueueRepository(session).enqueue(_entry(priority=None), now=NOW)

    assert saved.id is not None
    assert saved.status == "pending"
    assert saved.priority == 5
    assert saved.retry_count == 0
    assert saved.scheduled_for == NOW


def test_enqueue_keeps_future_schedule_and_clamps_past_one(session) -> None:
    repository = NotificationQueueRepository(session)

    future = repository.enqueue(_entry(scheduled_for=NOW + timedelta(hours=2)), now=NOW)
    past = repository.enqueue(_entry(scheduled_for=NOW - timedelta(hours=2)), now=NOW)

    assert future.scheduled_for == NOW + timedelta(hours=2)
    assert past.scheduled_for == NOW


@pytest.mark.parametrize(
    "overrides",
    [
        {"user_id": ""},
        {"channel": "pager"},
        {"body": ""},
        {"priority": 0},
        {"priority": 11},
    ],
)
def test_enqueue_rejects_invalid_fields(session, overrides) -> None:
    with pytest.raises(ValueError):
        NotificationQueueRepository(session).enqueue(_entry(**overrides), now=NOW)


def test_claim_due_only_returns_due_pending_entries(session) -> None:
    repository = NotificationQueueRepository(session)
    due = repository.enqueue(_entry(), now=NOW)
    repository.enqueue(_entry(scheduled_for=NOW + timedelta(hours=1)), now=NOW)
    sent = repository.enqueue(_entry(), now=NOW)
    repository.mark_sent(sent.id, sent_at=NOW)

    token, claimed = repository.claim_due(10, now=NOW)

    assert [entry.id for entry in claimed] == [due.id]
    assert claimed[0].claim_token == token
    assert claimed[0].status == "pending"


def test_claim_due_orders_by_priority_and_honours_limit(session) -> None:
    repository = NotificationQueueRepository(session)
    low = repository.enqueue(_entry(priority=9), now=NOW)
    urgent = repository.enqueue(_entry(priority=1), now=NOW)
    repository.enqueue(_entry(priority=5), now=NOW)

    _, claimed = repository.claim_due(2, now=NOW)

    assert [entry.id for entry in claimed][0] == urgent.id
    assert low.id not in [entry.id for entry in claimed]


def test_overlapping_claims_never_share_entries(session_factory) -> None:
    """Two runs claiming before either finishes get disjoint batches."""

    setup = session_factory()
    repository = NotificationQueueRepository(setup)
    ids = {repository.enqueue(_entry(), now=NOW).id for _ in range(5)}
    setup.close()

    first_run = session_factory()
    second_run = session_factory()
    try:
        _, first = NotificationQueueRepository(first_run).claim_due(3, now=NOW)
        _, second = NotificationQueueRepository(second_run).claim_due(10, now=NOW)
    finally:
        first_run.close()
        second_run.close()

    first_ids = {entry.id for entry in first}
    second_ids = {entry.id for entry in second}
    assert len(first_ids) == 3
    assert first_ids.isdisjoint(second_ids)
    assert first_ids | second_ids == ids


def test_claim_made_between_select_and_update_is_respected(session_factory, monkeypatch) -> None:
    """A run that selected candidates only keeps those still free at UPDATE time."""

    setup = session_factory()
    ids = {NotificationQueueRepository(setup).enqueue(_entry(), now=NOW).id for _ in range(5)}
    setup.close()

    first_run = session_factory()
    second_run = session_factory()
    original_update = Query.update
    interleaved: dict[str, list] = {}

    def _update_after_other_run(self, *args, **kwargs):
        if "second" not in interleaved:
            interleaved["second"] = []
            _, interleaved["second"] = NotificationQueueRepository(second_run).claim_due(
                10, now=NOW
            )
        return original_update(self, *args, **kwargs)

    monkeypatch.setattr(Query, "update", _update_after_other_run)
    try:
        _, first = NotificationQueueRepository(first_run).claim_due(3, now=NOW)
    finally:
        monkeypatch.undo()
        first_run.close()
        second_run.close()

    first_ids = {entry.id for entry in first}
    second_ids = {entry.id for entry in interleaved["second"]}
    assert second_ids == ids
    assert first_ids.isdisjoint(second_ids)


def test_expired_lease_makes_entry_claimable_again(session) -> None:
    repository = NotificationQueueRepository(session)
    saved = repository.enqueue(_entry(), now=NOW)
    repository.claim_due(10, now=NOW, lease=timedelta(minutes=10))

    _, while_leased = repository.claim_due(10, now=NOW + timedelta(minutes=5))
    _, after_expiry = repository.claim_due(10, now=NOW + timedelta(minutes=11))

    assert while_leased == []
    assert [entry.id for entry in after_expiry] == [saved.id]


def test_transitions_only_apply_to_pending_entries(session, caplog) -> None:
    repository = NotificationQueueRepository(session)
    saved = repository.enqueue(_entry(), now=NOW)

    assert repository.mark_sent(saved.id, sent_at=NOW) is True
    with caplog.at_level("WARNING"):
        assert repository.mark_failed(saved.id, "boom", failed_at=NOW) is False
        assert repository.cancel(saved.id, now=NOW) is False
        assert repository.reschedule(saved.id, NOW + timedelta(hours=1), "later", now=NOW) is False

    assert repository.get(saved.id).status == "sent"
    assert "Ignored mark_failed" in caplog.text


def test_transition_requires_the_current_claim_token(session) -> None:
    repository = NotificationQueueRepository(session)
    saved = repository.enqueue(_entry(), now=NOW)
    token, _ = repository.claim_due(10, now=NOW)

    assert repository.mark_sent(saved.id, sent_at=NOW, claim_token="stale-token") is False
    assert repository.mark_sent(saved.id, sent_at=NOW, claim_token=token) is True

    stored = repository.get(saved.id)
    assert stored.status == "sent"
    assert stored.claim_token is None
    assert stored.claimed_until is None


def test_cancel_is_refused_while_entry_is_being_delivered(session) -> None:
    repository = NotificationQueueRepository(session)
    saved = repository.enqueue(_entry(), now=NOW)
    repository.claim_due(10, now=NOW)

    assert repository.cancel(saved.id, now=NOW) is False
    assert repository.get(saved.id).status == "pending"


def test_reschedule_records_reason_and_retry_count(session) -> None:
    repository = NotificationQueueRepository(session)
    saved = repository.enqueue(_entry(), now=NOW)

    moved = repository.reschedule(
        saved.id, NOW + timedelta(minutes=15), "smtp down", now=NOW, retry_count=1
    )

    stored = repository.get(saved.id)
    assert moved is True
    assert stored.status == "pending"
    assert stored.retry_count == 1
    assert stored.failure_reason == "smtp down"
    assert stored.scheduled_for == NOW + timedelta(minutes=15)


def test_release_drops_lease_without_state_change(session) -> None:
    repository = NotificationQueueRepository(session)
    saved = repository.enqueue(_entry(), now=NOW)
    token, _ = repository.claim_due(10, now=NOW)

    assert repository.release(saved.id, claim_token=token) is True
    _, reclaimed = repository.claim_due(10, now=NOW)
    assert [entry.id for entry in reclaimed] == [saved.id]
