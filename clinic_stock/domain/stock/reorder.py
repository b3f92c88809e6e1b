"""Reorder point and order quantity policy."""

from __future__ import annotations

import math
from dataclasses import dataclass

DEFAULT_LEAD_TIME_DAYS = 7
DEFAULT_SAFETY_FACTOR = 0.5
DEFAULT_SUPPLY_DAYS = 30


@dataclass(frozen=True)
class ReorderPolicy:
    """Replenishment policy parameters.

    Attributes:
        lead_time_days: Days between placing and receiving an order
        safety_factor: Share of lead-time consumption held as buffer
        supply_days: Days of consumption covered by one order

    """

    lead_time_days: int = DEFAULT_LEAD_TIME_DAYS
    safety_factor: float = DEFAULT_SAFETY_FACTOR
    supply_days: int = DEFAULT_SUPPLY_DAYS

    def __post_init__(self) -> None:
        if self.lead_time_days < 0:
            raise ValueError(f"lead_time_days must be >= 0, got {self.lead_time_days}")
        if self.safety_factor < 0:
            raise ValueError(f"safety_factor must be >= 0, got {self.safety_factor}")
        if self.supply_days < 0:
            raise ValueError(f"supply_days must be >= 0, got {self.supply_days}")


@dataclass(frozen=True)
class ReorderRecommendation:
    """Safety stock, reorder point and order size for one item."""

    safety_stock: int
    reorder_point: int
    recommended_quantity: int


def calculate_reorder(
    daily_consumption: float, policy: ReorderPolicy | None = None
) -> ReorderRecommendation:
    """Calculate reorder recommendation from consumption rate.

    Safety Stock = ceil(rate × lead_time × safety_factor)
    Reorder Point = ceil(rate × lead_time) + Safety Stock
    Order Quantity = ceil(rate × supply_days)

    All values round up: under-ordering is the costlier error.

    Args:
        daily_consumption: Average units consumed per day
        policy: Replenishment policy (defaults: 7 days, 0.5, 30 days)

    Returns:
        ReorderRecommendation (all zeros when there is no consumption)

    Examples:
        >>> calculate_reorder(2.0)
        ReorderRecommendation(safety_stock=7, reorder_point=21, recommended_quantity=60)

    """
    policy = policy or ReorderPolicy()

    if daily_consumption <= 0:
        return ReorderRecommendation(safety_stock=0, reorder_point=0, recommended_quantity=0)

    lead_time_demand = daily_consumption * policy.lead_time_days
    safety_stock = math.ceil(lead_time_demand * policy.safety_factor)
    reorder_point = math.ceil(lead_time_demand) + safety_stock
    recommended_quantity = math.ceil(daily_consumption * policy.supply_days)

    return ReorderRecommendation(
        safety_stock=safety_stock,
        reorder_point=reorder_point,
        recommended_quantity=recommended_quantity,
    )
