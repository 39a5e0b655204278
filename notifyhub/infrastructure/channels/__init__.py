"""Outbound channel senders used by the delivery dispatcher."""

from __future__ import annotations

from notifyhub.config import Settings

from .base import ChannelSendError, ChannelSender, send_with_timeout
from .email import SendGridEmailSender
from .webhooks import ChatWebhookSender, SmsGatewaySender


def build_channel_senders(settings: Settings | None = None) -> dict[str, ChannelSender]:
    """Return the default sender for every supported channel."""

    senders: list[ChannelSender] = [
        SendGridEmailSender(settings),
        ChatWebhookSender(settings),
        SmsGatewaySender(settings),
    ]
    return {sender.channel: sender for sender in senders}


__all__ = [
    "ChannelSendError",
    "ChannelSender",
    "send_with_timeout",
    "SendGridEmailSender",
    "ChatWebhookSender",
    "SmsGatewaySender",
    "build_channel_senders",
]
