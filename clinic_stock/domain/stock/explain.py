"""Explainability for stock analytics results."""

from __future__ import annotations

import hashlib

from clinic_stock.domain.stock.ranking import AnalyticsResult


def generate_explanation(result: AnalyticsResult) -> str:
    """Generate human-readable explanation for an analytics result.

    Args:
        result: Analytics for one item

    Returns:
        Explanation string

    """
    if result.avg_daily_consumption <= 0:
        return f"{result.name or result.stock_item_id}: no issuance history, nothing to forecast"

    rate_display = f"rate={result.avg_daily_consumption_display:.2f}/day"
    if result.days_until_depletion == 0:
        depletion_display = "already depleted"
    else:
        depletion_display = f"depletes in {result.days_until_depletion} days"
    reorder_display = f"reorder point {result.reorder_point} (safety {result.safety_stock})"
    stock_display = f"on hand {result.current_quantity}"

    if result.needs_reorder:
        action = f"order {result.recommended_quantity}"
    else:
        action = "no reorder needed"

    return (
        f"{result.name or result.stock_item_id}: {rate_display}, {depletion_display}, "
        f"{stock_display}, {reorder_display} → {action}"
    )


def generate_hash(result: AnalyticsResult) -> str:
    """Generate deterministic hash for the analytics rationale.

    Hash based on: stock_item_id, quantity, rate, depletion, safety, reorder point, order qty

    Args:
        result: Analytics for one item

    Returns:
        SHA256 hex digest

    """
    rationale_str = (
        f"{result.stock_item_id}|{result.current_quantity}|"
        f"{result.avg_daily_consumption:.2f}|{result.days_until_depletion}|"
        f"{result.safety_stock}|{result.reorder_point}|{result.recommended_quantity}"
    )

    return hashlib.sha256(rationale_str.encode()).hexdigest()
