"""Unit tests for the outbound channel senders."""

from __future__ import annotations

import json
import time
import types

import pytest

from notifyhub.config import Settings
from notifyhub.domain.entities import NotificationQueueEntry, UserProfile
from notifyhub.infrastructure.channels import (
    ChannelSendError,
    build_channel_senders,
    send_with_timeout,
)
from notifyhub.infrastructure.channels import email as email_module
from notifyhub.infrastructure.channels import webhooks as webhooks_module

NOTIFICATION = NotificationQueueEntry(
    id=11, user_id="user-1", channel="email", type="digest", body="<p>Body</p>", subject="Subject"
)
RECIPIENT = UserProfile(
    id="user-1", email="user@example.com", phone="+15550100", chat_handle="@user"
)


class _StubSendGridAPIClient:
    """Default stub client that returns a successful response."""

    def __init__(self, api_key: str):
        self.api_key = api_key

    def send(self, message):
        return types.SimpleNamespace(status_code=202, body=None)


@pytest.fixture()
def sendgrid_settings() -> Settings:
    return Settings(sendgrid_api_key="SG.fake", sendgrid_sender="sender@example.com")


def test_email_without_configuration_fails() -> None:
    """When SendGrid settings are missing the sender refuses to deliver."""

    sender = email_module.SendGridEmailSender(Settings(sendgrid_api_key=None, sendgrid_sender=None))

    with pytest.raises(ChannelSendError, match="configuration incomplete"):
        sender.send(NOTIFICATION, RECIPIENT)


def test_email_without_address_fails(sendgrid_settings) -> None:
    sender = email_module.SendGridEmailSender(sendgrid_settings)

    with pytest.raises(ChannelSendError, match="no email address"):
        sender.send(NOTIFICATION, UserProfile(id="user-1"))


def test_email_success(monkeypatch: pytest.MonkeyPatch, sendgrid_settings) -> None:
    """A 2xx SendGrid response counts as delivered."""

    sent: list = []

    class SuccessfulClient(_StubSendGridAPIClient):
        def send(self, message):
            sent.append(message)
            return types.SimpleNamespace(status_code=202, body=None)

    monkeypatch.setattr(email_module, "SendGridAPIClient", SuccessfulClient)

    email_module.SendGridEmailSender(sendgrid_settings).send(NOTIFICATION, RECIPIENT)

    assert len(sent) == 1


def test_email_forbidden_error_is_described(
    monkeypatch: pytest.MonkeyPatch, sendgrid_settings, caplog
) -> None:
    """Forbidden responses from SendGrid surface meaningful details."""

    class FakeForbiddenError(Exception):
        status_code = 403
        body = json.dumps(
            {"errors": [{"message": "The provided authorization grant is invalid."}]}
        ).encode()

    class FailingClient(_StubSendGridAPIClient):
        def send(self, message):
            raise FakeForbiddenError()

    monkeypatch.setattr(email_module, "SendGridAPIClient", FailingClient)

    with caplog.at_level("ERROR"), pytest.raises(ChannelSendError) as excinfo:
        email_module.SendGridEmailSender(sendgrid_settings).send(NOTIFICATION, RECIPIENT)

    assert "status 403" in excinfo.value.reason
    assert "authorization grant is invalid" in caplog.text


def test_email_non_success_status_fails(monkeypatch: pytest.MonkeyPatch, sendgrid_settings) -> None:
    class RejectingClient(_StubSendGridAPIClient):
        def send(self, message):
            return types.SimpleNamespace(
                status_code=400,
                body='{"errors": [{"message": "Invalid email", "field": "to"}]}',
            )

    monkeypatch.setattr(email_module, "SendGridAPIClient", RejectingClient)

    with pytest.raises(ChannelSendError) as excinfo:
        email_module.SendGridEmailSender(sendgrid_settings).send(NOTIFICATION, RECIPIENT)

    assert excinfo.value.reason == (
        "SendGrid request failed with status 400: Invalid email (field: to)"
    )


def test_chat_webhook_posts_handle_and_text(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[dict] = []

    def fake_post(url, json=None, headers=None, timeout=None):
        calls.append({"url": url, "json": json, "timeout": timeout})
        return types.SimpleNamespace(status_code=200, text="ok")

    monkeypatch.setattr(webhooks_module.requests, "post", fake_post)
    settings = Settings(chat_webhook_url="https://chat.example.com/hook", send_timeout_seconds=3)

    webhooks_module.ChatWebhookSender(settings).send(NOTIFICATION, RECIPIENT)

    assert calls[0]["url"] == "https://chat.example.com/hook"
    assert calls[0]["json"]["to"] == "@user"
    assert calls[0]["json"]["text"].startswith("*Subject*")
    assert calls[0]["timeout"] == 3


def test_sms_gateway_error_status_fails(monkeypatch: pytest.MonkeyPatch) -> None:
    headers_seen: list[dict] = []

    def fake_post(url, json=None, headers=None, timeout=None):
        headers_seen.append(headers)
        return types.SimpleNamespace(status_code=503, text="unavailable")

    monkeypatch.setattr(webhooks_module.requests, "post", fake_post)
    settings = Settings(sms_gateway_url="https://sms.example.com", sms_gateway_token="tok")

    with pytest.raises(ChannelSendError, match="503"):
        webhooks_module.SmsGatewaySender(settings).send(NOTIFICATION, RECIPIENT)
    assert headers_seen[0]["Authorization"] == "Bearer tok"


def test_unconfigured_webhooks_fail() -> None:
    settings = Settings(chat_webhook_url=None, sms_gateway_url=None)

    with pytest.raises(ChannelSendError):
        webhooks_module.ChatWebhookSender(settings).send(NOTIFICATION, RECIPIENT)
    with pytest.raises(ChannelSendError):
        webhooks_module.SmsGatewaySender(settings).send(NOTIFICATION, RECIPIENT)


def test_build_channel_senders_covers_every_channel() -> None:
    assert set(build_channel_senders(Settings())) == {"email", "chat", "sms"}


def test_send_with_timeout_gives_up() -> None:
    class SlowSender:
        channel = "sms"

        def send(self, notification, recipient) -> None:
            time.sleep(1)

    with pytest.raises(ChannelSendError, match="timed out"):
        send_with_timeout(SlowSender(), NOTIFICATION, RECIPIENT, timeout=0.05)


def test_send_with_timeout_propagates_sender_errors() -> None:
    class BrokenSender:
        channel = "chat"

        def send(self, notification, recipient) -> None:
            raise ChannelSendError("handle unknown")

    with pytest.raises(ChannelSendError, match="handle unknown"):
        send_with_timeout(BrokenSender(), NOTIFICATION, RECIPIENT, timeout=1)


def test_sendgrid_settings_must_come_in_pairs() -> None:
    with pytest.raises(ValueError):
        Settings(sendgrid_api_key="SG.fake", sendgrid_sender=None)
