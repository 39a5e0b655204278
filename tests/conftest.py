"""Shared fixtures backed by an in-memory SQLite database."""

from __future__ import annotations

import os
from typing import Any

import pytest

os.environ["DATABASE_URL"] = "sqlite://"

from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from notifyhub.config import reset_settings_cache  # noqa: E402
from notifyhub.domain.entities import UserProfile  # noqa: E402
from notifyhub.infrastructure.database import initialize_database  # noqa: E402
from notifyhub.infrastructure.repositories import UserProfileRepository  # noqa: E402

reset_settings_cache()


@pytest.fixture()
def engine():
    """Return an engine whose sessions all share one in-memory database."""

    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    initialize_database(test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


def _channel_preferences(
    *,
    email: bool = True,
    chat: bool = False,
    sms: bool = False,
    quiet_start: str = "22:00",
    quiet_end: str = "08:00",
) -> dict[str, Any]:
    """Build a preference blob in the current profile schema."""

    def _channel(enabled: bool) -> dict[str, Any]:
        return {
            "enabled": enabled,
            "frequency": "instant",
            "quietHours": {"start": quiet_start, "end": quiet_end},
        }

    return {
        "schemaVersion": 1,
        "email": _channel(email),
        "chat": _channel(chat),
        "sms": _channel(sms),
    }


@pytest.fixture()
def make_profile(session):
    """Persist a recipient profile and return it."""

    def _make(
        user_id: str = "user-1",
        *,
        preferences: Any = None,
        timezone_name: str | None = "UTC",
        demographics: dict[str, Any] | None = None,
        analytics_consent: bool = False,
        email: str | None = "user@example.com",
    ) -> UserProfile:
        profile = UserProfile(
            id=user_id,
            email=email,
            phone="+15550100",
            chat_handle="@user",
            timezone=timezone_name,
            notification_preferences=(
                _channel_preferences() if preferences is None else preferences
            ),
            demographics=demographics or {},
            analytics_consent=analytics_consent,
        )
        return UserProfileRepository(session).save(profile)

    return _make


@pytest.fixture()
def channel_preferences():
    """Return the preference blob builder."""

    return _channel_preferences
