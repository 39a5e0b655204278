"""Advisory decision engine for send-time personalization."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from notifyhub.domain.policies import DEFAULT_OPTIMIZATION_POLICY, OptimizationPolicy

DECISION_INSUFFICIENT_DATA = "insufficient_data"
DECISION_ENABLE = "enable_optimization"
DECISION_KEEP_DEFAULT = "keep_default_timing"
DECISION_MONITOR = "monitor"


@dataclass(frozen=True)
class Recommendation:
    """Outcome of the decision engine for one analysis date."""

    decision: str
    variance: float
    qualifying_hours: int
    message: str

    @property
    def suggests_optimization(self) -> bool:
        return self.decision == DECISION_ENABLE


def coefficient_of_variation(values: Sequence[float]) -> float:
    """Return the population standard deviation of ``values`` over their mean.

    Empty input and a zero mean both yield ``0``.
    """

    if not values:
        return 0.0
    mean = sum(values) / len(values)
    if mean == 0:
        return 0.0
    squared = sum((value - mean) ** 2 for value in values) / len(values)
    return math.sqrt(squared) / mean


def recommend(
    variance: float,
    qualifying_hours: int,
    policy: OptimizationPolicy = DEFAULT_OPTIMIZATION_POLICY,
) -> Recommendation:
    """Apply the ordered thresholds of ``policy`` to the day's variance."""

    percentage = f"{variance * 100:.1f}%"
    if qualifying_hours < policy.min_qualifying_hours:
        return Recommendation(
            decision=DECISION_INSUFFICIENT_DATA,
            variance=variance,
            qualifying_hours=qualifying_hours,
            message=(
                f"Insufficient data. Need at least {policy.min_qualifying_hours} hours "
                f"with {policy.min_hour_sample_size}+ sends each."
            ),
        )
    if variance > policy.enable_threshold:
        return Recommendation(
            decision=DECISION_ENABLE,
            variance=variance,
            qualifying_hours=qualifying_hours,
            message=(
                f"High variance ({percentage}) detected. Enable optimization: "
                "personalized send times should improve engagement."
            ),
        )
    if variance < policy.keep_default_threshold:
        return Recommendation(
            decision=DECISION_KEEP_DEFAULT,
            variance=variance,
            qualifying_hours=qualifying_hours,
            message=(
                f"Low variance ({percentage}). Keep default timing: "
                "recipients engage consistently across hours."
            ),
        )
    return Recommendation(
        decision=DECISION_MONITOR,
        variance=variance,
        qualifying_hours=qualifying_hours,
        message=f"Moderate variance ({percentage}). Monitor and collect more data before optimizing.",
    )


def recommend_from_click_rates(
    hourly: Sequence[tuple[float, int]],
    policy: OptimizationPolicy = DEFAULT_OPTIMIZATION_POLICY,
) -> Recommendation:
    """Build a recommendation from ``(click_rate, sample_size)`` pairs.

    Only hours whose sample size reaches ``policy.min_hour_sample_size`` count.
    """

    rates = [
        rate for rate, sample_size in hourly if sample_size >= policy.min_hour_sample_size
    ]
    return recommend(coefficient_of_variation(rates), len(rates), policy)


__all__ = [
    "Recommendation",
    "coefficient_of_variation",
    "recommend",
    "recommend_from_click_rates",
    "DECISION_INSUFFICIENT_DATA",
    "DECISION_ENABLE",
    "DECISION_KEEP_DEFAULT",
    "DECISION_MONITOR",
]
