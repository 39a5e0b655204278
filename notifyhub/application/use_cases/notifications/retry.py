"""Bounded retry policy for failed deliveries."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from notifyhub.domain.policies import DEFAULT_RETRY_POLICY, RetryPolicy


@dataclass(frozen=True)
class RetryDecision:
    """Outcome of the retry policy for a given attempt number."""

    attempt: int
    delay: timedelta | None
    terminal: bool


def next_retry(retry_count: int, policy: RetryPolicy = DEFAULT_RETRY_POLICY) -> RetryDecision:
    """Return the backoff for retry attempt ``retry_count``.

    Attempt ``n`` waits ``growth_factor ** n * base_delay_minutes`` minutes
    (15, 45 and 135 minutes with the default policy). Once ``retry_count``
    exceeds ``policy.max_retries`` the decision is terminal.
    """

    if retry_count > policy.max_retries:
        return RetryDecision(attempt=retry_count, delay=None, terminal=True)

    attempt = max(retry_count, 0)
    minutes = policy.growth_factor**attempt * policy.base_delay_minutes
    return RetryDecision(attempt=attempt, delay=timedelta(minutes=minutes), terminal=False)


__all__ = ["RetryDecision", "next_retry"]
