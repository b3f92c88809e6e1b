"""Predictive stock analytics: consumption, depletion, reorder policy, ranking."""

from clinic_stock.domain.stock.consumption import (
    DataIntegrityError,
    StockMovement,
    TransactionType,
    avg_daily_consumption,
    days_until_depletion,
)
from clinic_stock.domain.stock.ranking import (
    AnalyticsResult,
    ItemSnapshot,
    analyze_dispensary,
    analyze_item,
    compare_urgency,
    rank_by_urgency,
)
from clinic_stock.domain.stock.reorder import (
    ReorderPolicy,
    ReorderRecommendation,
    calculate_reorder,
)

__all__ = [
    "AnalyticsResult",
    "DataIntegrityError",
    "ItemSnapshot",
    "ReorderPolicy",
    "ReorderRecommendation",
    "StockMovement",
    "TransactionType",
    "analyze_dispensary",
    "analyze_item",
    "avg_daily_consumption",
    "calculate_reorder",
    "compare_urgency",
    "days_until_depletion",
    "rank_by_urgency",
]
