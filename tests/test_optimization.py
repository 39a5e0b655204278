"""Tests for the send-time decision engine."""

from __future__ import annotations

import pytest

from notifyhub.application.use_cases.send_time import (
    DECISION_ENABLE,
    DECISION_INSUFFICIENT_DATA,
    DECISION_KEEP_DEFAULT,
    DECISION_MONITOR,
    coefficient_of_variation,
    recommend,
    recommend_from_click_rates,
)


def test_coefficient_of_variation_guards_against_empty_and_zero_mean() -> None:
    assert coefficient_of_variation([]) == 0.0
    assert coefficient_of_variation([0.0, 0.0, 0.0]) == 0.0


def test_coefficient_of_variation_of_constant_values_is_zero() -> None:
    assert coefficient_of_variation([0.2, 0.2, 0.2]) == pytest.approx(0.0)


def test_low_spread_keeps_default_timing() -> None:
    recommendation = recommend_from_click_rates([(0.10, 150), (0.12, 150), (0.11, 150)])

    assert recommendation.decision == DECISION_KEEP_DEFAULT
    assert recommendation.qualifying_hours == 3
    assert recommendation.suggests_optimization is False


def test_high_spread_enables_optimization() -> None:
    recommendation = recommend_from_click_rates([(0.05, 150), (0.40, 150), (0.08, 150)])

    assert recommendation.decision == DECISION_ENABLE
    assert recommendation.variance > 0.30
    assert recommendation.suggests_optimization is True


def test_fewer_than_three_qualifying_hours_is_insufficient() -> None:
    """Hours below the sample threshold do not count, whatever their spread."""

    recommendation = recommend_from_click_rates([(0.05, 150), (0.90, 150), (0.40, 99)])

    assert recommendation.decision == DECISION_INSUFFICIENT_DATA
    assert recommendation.qualifying_hours == 2


def test_ambiguous_zone_asks_to_monitor() -> None:
    assert recommend(0.2, 5).decision == DECISION_MONITOR


@pytest.mark.parametrize(
    ("variance", "expected"),
    [(0.31, DECISION_ENABLE), (0.30, DECISION_MONITOR), (0.15, DECISION_MONITOR), (0.14, DECISION_KEEP_DEFAULT)],
)
def test_threshold_boundaries(variance: float, expected: str) -> None:
    assert recommend(variance, 3).decision == expected
