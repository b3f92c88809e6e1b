"""Tests for reorder point policy."""

from __future__ import annotations

import pytest

from clinic_stock.domain.stock.reorder import (
    ReorderPolicy,
    ReorderRecommendation,
    calculate_reorder,
)


def test_reorder_policy_defaults():
    """rate 2/day, 7-day lead time."""
    rec = calculate_reorder(2.0)

    assert rec == ReorderRecommendation(safety_stock=7, reorder_point=21, recommended_quantity=60)


def test_zero_rate_gives_zero_recommendation():
    rec = calculate_reorder(0.0)

    assert rec.safety_stock == 0
    assert rec.reorder_point == 0
    assert rec.recommended_quantity == 0


def test_values_round_up():
    # 0.25 * 7 = 1.75 -> 2; safety 0.875 -> 1; supply 7.5 -> 8
    rec = calculate_reorder(0.25)

    assert rec.safety_stock == 1
    assert rec.reorder_point == 3
    assert rec.recommended_quantity == 8


def test_custom_lead_time():
    rec = calculate_reorder(2.0, ReorderPolicy(lead_time_days=14))

    assert rec.safety_stock == 14
    assert rec.reorder_point == 42
    # Supply target does not depend on lead time
    assert rec.recommended_quantity == 60


def test_custom_safety_factor_and_supply_days():
    rec = calculate_reorder(2.0, ReorderPolicy(safety_factor=1.0, supply_days=14))

    assert rec.safety_stock == 14
    assert rec.reorder_point == 28
    assert rec.recommended_quantity == 28


def test_zero_lead_time():
    rec = calculate_reorder(5.0, ReorderPolicy(lead_time_days=0))

    assert rec.safety_stock == 0
    assert rec.reorder_point == 0
    assert rec.recommended_quantity == 150


@pytest.mark.parametrize(
    "kwargs",
    [{"lead_time_days": -1}, {"safety_factor": -0.1}, {"supply_days": -30}],
)
def test_policy_rejects_negative_parameters(kwargs):
    with pytest.raises(ValueError):
        ReorderPolicy(**kwargs)
