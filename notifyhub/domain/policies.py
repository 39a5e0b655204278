"""Named policy tables consumed by the dispatcher and the analytics jobs.

Numeric constants that influence stored data live here rather than inline so
that a change is introduced as a new version instead of silently rewriting
the meaning of historical rows.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from .entities.notification_queue_entry import (
    CHANNEL_CHAT,
    CHANNEL_EMAIL,
    CHANNEL_SMS,
    MAX_RETRY_COUNT,
)


@dataclass(frozen=True)
class RetryPolicy:
    """Geometric backoff applied to failed deliveries."""

    name: str
    base_delay_minutes: int
    growth_factor: int
    max_retries: int


@dataclass(frozen=True)
class OptimizationPolicy:
    """Thresholds used by the send-time decision engine."""

    name: str
    enable_threshold: float
    keep_default_threshold: float
    min_hour_sample_size: int
    min_qualifying_hours: int
    min_segment_hour_sample_size: int
    default_hour_min: int
    default_hour_max: int


@dataclass(frozen=True)
class EventWeights:
    """Weights of each engagement stage for one channel."""

    open: float
    click: float
    convert: float


@dataclass(frozen=True)
class EngagementScoringPolicy:
    """Versioned weighting of engagement events.

    Each stage weight is decayed by ``0.5 ** (minutes / decay_half_life_minutes)``
    where ``minutes`` is the time it took the recipient to reach that stage.
    """

    version: int
    channel_weights: Mapping[str, EventWeights]
    decay_half_life_minutes: int

    def weights_for(self, channel: str) -> EventWeights:
        return self.channel_weights.get(channel) or self.channel_weights[CHANNEL_EMAIL]


DEFAULT_RETRY_POLICY = RetryPolicy(
    name="geometric-v1",
    base_delay_minutes=5,
    growth_factor=3,
    max_retries=MAX_RETRY_COUNT,
)

DEFAULT_OPTIMIZATION_POLICY = OptimizationPolicy(
    name="variance-v1",
    enable_threshold=0.30,
    keep_default_threshold=0.15,
    min_hour_sample_size=100,
    min_qualifying_hours=3,
    min_segment_hour_sample_size=20,
    default_hour_min=8,
    default_hour_max=20,
)

ENGAGEMENT_SCORING_POLICIES: dict[int, EngagementScoringPolicy] = {
    1: EngagementScoringPolicy(
        version=1,
        channel_weights={
            CHANNEL_EMAIL: EventWeights(open=1.0, click=3.0, convert=5.0),
            CHANNEL_CHAT: EventWeights(open=0.5, click=3.0, convert=5.0),
            CHANNEL_SMS: EventWeights(open=0.0, click=4.0, convert=5.0),
        },
        decay_half_life_minutes=24 * 60,
    ),
}
CURRENT_SCORING_POLICY_VERSION = 1


def get_scoring_policy(version: int) -> EngagementScoringPolicy | None:
    """Return the scoring policy registered under ``version``."""

    return ENGAGEMENT_SCORING_POLICIES.get(version)


__all__ = [
    "RetryPolicy",
    "OptimizationPolicy",
    "EventWeights",
    "EngagementScoringPolicy",
    "DEFAULT_RETRY_POLICY",
    "DEFAULT_OPTIMIZATION_POLICY",
    "ENGAGEMENT_SCORING_POLICIES",
    "CURRENT_SCORING_POLICY_VERSION",
    "get_scoring_policy",
]
