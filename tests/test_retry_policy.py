"""Tests for the bounded geometric retry policy."""

from __future__ import annotations

from datetime import timedelta

import pytest

from notifyhub.application.use_cases.notifications import next_retry
from notifyhub.domain.policies import RetryPolicy


@pytest.mark.parametrize(("attempt", "minutes"), [(1, 15), (2, 45), (3, 135)])
def test_delays_grow_geometrically(attempt: int, minutes: int) -> None:
    decision = next_retry(attempt)

    assert decision.terminal is False
    assert decision.delay == timedelta(minutes=minutes)
    assert decision.attempt == attempt


@pytest.mark.parametrize("attempt", [4, 5, 10])
def test_attempts_past_the_budget_are_terminal(attempt: int) -> None:
    decision = next_retry(attempt)

    assert decision.terminal is True
    assert decision.delay is None


def test_custom_policy_changes_budget() -> None:
    policy = RetryPolicy(name="short", base_delay_minutes=1, growth_factor=2, max_retries=1)

    assert next_retry(1, policy).delay == timedelta(minutes=2)
    assert next_retry(2, policy).terminal is True
