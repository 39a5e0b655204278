"""Tests for the HTTP endpoints of the delivery pipeline and analytics."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

from main import create_app
from notifyhub.domain.entities import EngagementEvent
from notifyhub.infrastructure.database import get_db
from notifyhub.infrastructure.models import NotificationQueueModel
from notifyhub.infrastructure.repositories import EngagementEventRepository
from notifyhub.interfaces.api.dependencies import get_channel_senders


class RecordingSender:
    def __init__(self, channel: str) -> None:
        self.channel = channel
        self.delivered: list[int] = []

    def send(self, notification, recipient) -> None:
        self.delivered.append(notification.id)


@pytest.fixture()
def email_sender() -> RecordingSender:
    return RecordingSender("email")


@pytest.fixture()
def client(session, email_sender):
    """Return a test client whose requests use the test session."""

    def _get_db():
        yield session

    app = create_app()
    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_channel_senders] = lambda: {"email": email_sender}
    with TestClient(app) as test_client:
        yield test_client


def _quiet_free_preferences(channel_preferences, **channels):
    return channel_preferences(quiet_start="00:00", quiet_end="00:01", **channels)


def test_queue_returns_created_entry(client, make_profile, channel_preferences) -> None:
    make_profile(preferences=_quiet_free_preferences(channel_preferences))

    response = client.post(
        "/notifications/",
        json={"user_id": "user-1", "channel": "email", "subject": "Hi", "body": "Hello"},
    )

    assert response.status_code == 201
    payload = response.json()
    assert payload["queued"] is True
    assert isinstance(payload["id"], int)


def test_disabled_channel_is_not_queued(client, session, make_profile, channel_preferences) -> None:
    make_profile(preferences=channel_preferences(email=False))

    response = client.post(
        "/notifications/", json={"user_id": "user-1", "channel": "email", "body": "Hello"}
    )

    assert response.status_code == 200
    assert response.json()["queued"] is False
    assert "disabled" in response.json()["reason"]
    assert session.query(NotificationQueueModel).count() == 0


def test_queue_validates_payload(client) -> None:
    response = client.post("/notifications/", json={"user_id": "user-1", "channel": "email"})

    assert response.status_code == 422


def test_cancel_flow(client, make_profile, channel_preferences) -> None:
    make_profile(preferences=_quiet_free_preferences(channel_preferences))
    entry_id = client.post(
        "/notifications/", json={"user_id": "user-1", "channel": "email", "body": "Hello"}
    ).json()["id"]

    first = client.post(f"/notifications/{entry_id}/cancel", json={"reason": "duplicate"})
    second = client.post(f"/notifications/{entry_id}/cancel")
    missing = client.post("/notifications/9999/cancel")

    assert first.status_code == 200
    assert first.json() == {"id": entry_id, "cancelled": True}
    assert second.status_code == 409
    assert missing.status_code == 404


def test_dispatch_and_stats(client, email_sender, make_profile, channel_preferences) -> None:
    make_profile(preferences=_quiet_free_preferences(channel_preferences))
    entry_id = client.post(
        "/notifications/", json={"user_id": "user-1", "channel": "email", "body": "Hello"}
    ).json()["id"]

    dispatch = client.post("/notifications/dispatch")
    stats = client.get("/notifications/stats/user-1", params={"window_days": 7})

    assert dispatch.status_code == 200
    assert dispatch.json()["sent"] == 1
    assert email_sender.delivered == [entry_id]
    assert stats.json()["by_status"]["sent"] == 1
    assert stats.json()["by_channel"] == {"email": 1}


def test_engagement_callback(client, make_profile, channel_preferences) -> None:
    make_profile(preferences=_quiet_free_preferences(channel_preferences))
    entry_id = client.post(
        "/notifications/", json={"user_id": "user-1", "channel": "email", "body": "Hello"}
    ).json()["id"]
    client.post("/notifications/dispatch")

    clicked = client.post(f"/engagement/{entry_id}/click")
    unknown_stage = client.post(f"/engagement/{entry_id}/share")
    untracked = client.post("/engagement/9999/open")

    assert clicked.status_code == 200
    assert clicked.json()["clicked"] is True
    assert unknown_stage.status_code == 422
    assert untracked.status_code == 404


def test_analysis_report_and_toggle(client, session) -> None:
    analysis_date = date(2024, 5, 6)
    EngagementEventRepository(session).create(
        EngagementEvent(
            id=None,
            user_id="user-1",
            notification_id=None,
            channel="email",
            notification_type="digest",
            sent_at=datetime(2024, 5, 6, 9, tzinfo=timezone.utc),
            send_hour=9,
            send_day_of_week=1,
        )
    )

    run = client.post(
        "/send-time/analysis", json={"analysis_date": analysis_date.isoformat(), "window_days": 1}
    )
    toggle = client.put(
        "/send-time/optimization",
        json={"analysis_date": analysis_date.isoformat(), "enabled": True},
    )
    report = client.get("/send-time/analytics", params={"analysis_date": analysis_date.isoformat()})
    missing = client.put(
        "/send-time/optimization",
        json={"analysis_date": (analysis_date - timedelta(days=30)).isoformat(), "enabled": True},
    )

    assert run.status_code == 200
    assert run.json()["events_processed"] == 1
    assert run.json()["recommendation"]["decision"] == "insufficient_data"
    assert toggle.json()["rows_updated"] == 24
    body = report.json()
    assert body["optimization_enabled"] is True
    assert len(body["hourly"]) == 24
    assert body["hourly"][9]["emails_sent"] == 1
    assert missing.status_code == 404
