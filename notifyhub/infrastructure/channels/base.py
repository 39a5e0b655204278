"""Common contract shared by every channel sender."""

from __future__ import annotations

from functools import partial
from typing import Protocol

import anyio

from notifyhub.domain.entities import NotificationQueueEntry, UserProfile


class ChannelSendError(Exception):
    """Raised by a sender when a notification could not be delivered."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class ChannelSender(Protocol):
    """Deliver a queued notification through one channel."""

    channel: str

    def send(self, notification: NotificationQueueEntry, recipient: UserProfile) -> None:
        """Deliver ``notification`` or raise :class:`ChannelSendError`."""


def send_with_timeout(
    sender: ChannelSender,
    notification: NotificationQueueEntry,
    recipient: UserProfile,
    *,
    timeout: float,
) -> None:
    """Invoke ``sender`` in a worker thread and give up after ``timeout`` seconds.

    A timed out call is reported as :class:`ChannelSendError`; the worker thread
    is abandoned and its eventual result ignored.
    """

    async def _deliver() -> None:
        with anyio.fail_after(timeout):
            await anyio.to_thread.run_sync(
                partial(sender.send, notification, recipient),
                abandon_on_cancel=True,
            )

    try:
        anyio.run(_deliver)
    except TimeoutError as exc:
        raise ChannelSendError(
            f"{sender.channel} sender timed out after {timeout:g}s"
        ) from exc


__all__ = ["ChannelSendError", "ChannelSender", "send_with_timeout"]
