"""Chat and SMS channels delivered through HTTP webhooks."""

from __future__ import annotations

import logging

import requests

from notifyhub.config import Settings, get_settings
from notifyhub.domain.entities import (
    CHANNEL_CHAT,
    CHANNEL_SMS,
    NotificationQueueEntry,
    UserProfile,
)

from .base import ChannelSendError

logger = logging.getLogger(__name__)


def _post_json(url: str, payload: dict, *, headers: dict[str, str], timeout: float, label: str) -> None:
    try:
        resp = requests.post(url, json=payload, headers=headers, timeout=timeout)
    except requests.RequestException as exc:
        raise ChannelSendError(f"{label} request failed: {exc}") from exc
    if resp.status_code >= 400:
        raise ChannelSendError(
            f"{label} responded with {resp.status_code}: {resp.text[:120]}"
        )


class ChatWebhookSender:
    """Send the ``chat`` channel to the configured chat provider webhook."""

    channel = CHANNEL_CHAT

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings

    def send(self, notification: NotificationQueueEntry, recipient: UserProfile) -> None:
        settings = self._settings or get_settings()
        if not settings.chat_webhook_url:
            raise ChannelSendError("Chat webhook not configured")
        if not recipient.chat_handle:
            raise ChannelSendError(f"User {recipient.id} has no chat handle")

        text = notification.body
        if notification.subject:
            text = f"*{notification.subject}*\n{notification.body}"
        payload = {"to": recipient.chat_handle, "text": text}
        _post_json(
            settings.chat_webhook_url,
            payload,
            headers={"Content-Type": "application/json"},
            timeout=settings.send_timeout_seconds,
            label="Chat webhook",
        )
        logger.info("Sent chat notification %s to %s", notification.id, recipient.chat_handle)


class SmsGatewaySender:
    """Send the ``sms`` channel through an HTTP SMS gateway."""

    channel = CHANNEL_SMS

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings

    def send(self, notification: NotificationQueueEntry, recipient: UserProfile) -> None:
        settings = self._settings or get_settings()
        if not settings.sms_gateway_url:
            raise ChannelSendError("SMS gateway not configured")
        if not recipient.phone:
            raise ChannelSendError(f"User {recipient.id} has no phone number")

        headers = {"Content-Type": "application/json"}
        if settings.sms_gateway_token:
            headers["Authorization"] = f"Bearer {settings.sms_gateway_token}"
        _post_json(
            settings.sms_gateway_url,
            {"to": recipient.phone, "message": notification.body},
            headers=headers,
            timeout=settings.send_timeout_seconds,
            label="SMS gateway",
        )
        logger.info("Sent sms notification %s to %s", notification.id, recipient.phone)


__all__ = ["ChatWebhookSender", "SmsGatewaySender"]
