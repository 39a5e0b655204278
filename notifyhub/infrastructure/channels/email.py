"""Email channel delivered through the SendGrid REST API."""

from __future__ import annotations

import json
import logging
from typing import Any

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from notifyhub.config import Settings, get_settings
from notifyhub.domain.entities import CHANNEL_EMAIL, NotificationQueueEntry, UserProfile

from .base import ChannelSendError

logger = logging.getLogger(__name__)


def _extract_sendgrid_error_details(body: Any) -> str | None:
    """Return a human readable description for a SendGrid error payload."""

    if body in (None, ""):
        return None

    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            return None

    if isinstance(body, str):
        body = body.strip()
        if not body:
            return None
        try:
            parsed = json.loads(body)
        except json.JSONDecodeError:
            return body
    else:
        parsed = body

    if isinstance(parsed, dict):
        errors = parsed.get("errors")
        if isinstance(errors, list):
            messages: list[str] = []
            for item in errors:
                if not isinstance(item, dict):
                    continue
                message = item.get("message")
                field = item.get("field")
                if message and field:
                    messages.append(f"{message} (field: {field})")
                elif message:
                    messages.append(str(message))
            if messages:
                return "; ".join(messages)
        try:
            return json.dumps(parsed)
        except (TypeError, ValueError):
            return None

    if isinstance(parsed, list):
        return "; ".join(str(item) for item in parsed)

    return None


def _describe_failure(status_code: Any, body: Any) -> str:
    details = _extract_sendgrid_error_details(body)
    if status_code and details:
        return f"SendGrid request failed with status {status_code}: {details}"
    if status_code:
        return f"SendGrid request failed with status {status_code}"
    if details:
        return f"SendGrid request failed: {details}"
    return "SendGrid request failed"


class SendGridEmailSender:
    """Send the ``email`` channel with the configured SendGrid credentials."""

    channel = CHANNEL_EMAIL

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings

    @property
    def settings(self) -> Settings:
        return self._settings or get_settings()

    def send(self, notification: NotificationQueueEntry, recipient: UserProfile) -> None:
        settings = self.settings
        if not (settings.sendgrid_api_key and settings.sendgrid_sender):
            raise ChannelSendError("SendGrid configuration incomplete")
        if not recipient.email:
            raise ChannelSendError(f"User {recipient.id} has no email address")

        message = Mail(
            from_email=settings.sendgrid_sender,
            to_emails=recipient.email,
            subject=notification.subject or settings.email_default_subject,
            html_content=notification.body,
        )

        try:
            client = SendGridAPIClient(settings.sendgrid_api_key)
            response = client.send(message)
        except Exception as exc:
            reason = _describe_failure(
                getattr(exc, "status_code", None), getattr(exc, "body", None)
            )
            if reason == "SendGrid request failed":
                reason = f"SendGrid request failed: {exc}"
            logger.error("Email notification %s not delivered: %s", notification.id, reason)
            raise ChannelSendError(reason) from exc

        status_code = getattr(response, "status_code", None)
        if not isinstance(status_code, int) or not 200 <= status_code < 300:
            reason = _describe_failure(status_code, getattr(response, "body", None))
            logger.error("Email notification %s not delivered: %s", notification.id, reason)
            raise ChannelSendError(reason)

        logger.info("Sent email notification %s to %s", notification.id, recipient.email)


__all__ = ["SendGridEmailSender"]
