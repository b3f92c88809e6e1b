"""Per-item analytics and urgency ranking across a dispensary."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Any

from clinic_stock.domain.stock.consumption import (
    StockMovement,
    avg_daily_consumption,
    days_until_depletion,
)
from clinic_stock.domain.stock.reorder import ReorderPolicy, calculate_reorder


@dataclass(frozen=True)
class ItemSnapshot:
    """Immutable copy of the stock item fields analytics need."""

    id: int
    quantity: int
    low_stock_threshold: int = 0
    name: str | None = None


@dataclass(frozen=True)
class AnalyticsResult:
    """Predictive analytics for one stock item (computed on demand)."""

    stock_item_id: int
    name: str | None
    current_quantity: int
    low_stock_threshold: int
    avg_daily_consumption: float
    days_until_depletion: int | None
    safety_stock: int
    reorder_point: int
    recommended_quantity: int
    needs_reorder: bool

    @property
    def avg_daily_consumption_display(self) -> float:
        """Consumption rounded to 2 decimals for display."""
        return round(self.avg_daily_consumption, 2)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for API/export with display rounding applied."""
        return {
            "stock_item_id": self.stock_item_id,
            "name": self.name,
            "current_quantity": self.current_quantity,
            "low_stock_threshold": self.low_stock_threshold,
            "avg_daily_consumption": self.avg_daily_consumption_display,
            "days_until_depletion": self.days_until_depletion,
            "safety_stock": self.safety_stock,
            "reorder_point": self.reorder_point,
            "recommended_quantity": self.recommended_quantity,
            "needs_reorder": self.needs_reorder,
        }


def analyze_item(
    item: ItemSnapshot,
    history: Iterable[StockMovement],
    policy: ReorderPolicy | None = None,
) -> AnalyticsResult:
    """Run consumption, depletion and reorder calculations for one item.

    Args:
        item: Current item state
        history: Complete transaction history of the item (any order)
        policy: Replenishment policy

    Returns:
        AnalyticsResult with needs_reorder = quantity <= reorder point

    """
    rate = avg_daily_consumption(history)
    reorder = calculate_reorder(rate, policy)

    return AnalyticsResult(
        stock_item_id=item.id,
        name=item.name,
        current_quantity=item.quantity,
        low_stock_threshold=item.low_stock_threshold,
        avg_daily_consumption=rate,
        days_until_depletion=days_until_depletion(item.quantity, rate),
        safety_stock=reorder.safety_stock,
        reorder_point=reorder.reorder_point,
        recommended_quantity=reorder.recommended_quantity,
        needs_reorder=item.quantity <= reorder.reorder_point,
    )


def compare_urgency(a: AnalyticsResult, b: AnalyticsResult) -> int:
    """Composite urgency comparator.

    1. needs_reorder items first
    2. within a group, fewer days until depletion first
    3. unknown depletion last within its group

    Returns:
        Negative if a is more urgent, positive if b is, 0 for a tie

    """
    if a.needs_reorder != b.needs_reorder:
        return -1 if a.needs_reorder else 1

    a_days, b_days = a.days_until_depletion, b.days_until_depletion
    if a_days is None and b_days is None:
        return 0
    if a_days is None:
        return 1
    if b_days is None:
        return -1

    return (a_days > b_days) - (a_days < b_days)


def rank_by_urgency(results: Iterable[AnalyticsResult]) -> list[AnalyticsResult]:
    """Sort analytics by urgency. Ties keep input order (stable sort)."""
    return sorted(results, key=cmp_to_key(compare_urgency))


def analyze_dispensary(
    items: Sequence[ItemSnapshot],
    histories: Mapping[int, Sequence[StockMovement]],
    policy: ReorderPolicy | None = None,
) -> list[AnalyticsResult]:
    """Analyze every item of a dispensary and rank by urgency.

    Args:
        items: Items of the dispensary, in a deterministic order
        histories: Transaction history by stock item id (missing = empty)
        policy: Replenishment policy shared by all items

    Returns:
        AnalyticsResults, most urgent first

    """
    results = [analyze_item(item, histories.get(item.id, ()), policy) for item in items]
    return rank_by_urgency(results)
