"""Tests for environment-driven application settings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from notifyhub.config import Settings, get_settings, reset_settings_cache


@pytest.fixture()
def fresh_settings():
    reset_settings_cache()
    yield
    reset_settings_cache()


def test_settings_are_cached_until_reset(monkeypatch, fresh_settings) -> None:
    monkeypatch.setenv("DISPATCH_BATCH_SIZE", "25")
    first = get_settings()

    monkeypatch.setenv("DISPATCH_BATCH_SIZE", "50")
    assert get_settings() is first
    assert get_settings().dispatch_batch_size == 25

    reset_settings_cache()
    assert get_settings().dispatch_batch_size == 50


def test_sendgrid_key_requires_sender() -> None:
    with pytest.raises(ValidationError, match="SENDGRID_SENDER"):
        Settings(database_url="sqlite://", sendgrid_api_key="SG.key")


def test_sendgrid_sender_must_be_an_address() -> None:
    with pytest.raises(ValidationError, match="valid email address"):
        Settings(database_url="sqlite://", sendgrid_api_key="SG.key", sendgrid_sender="noreply")
