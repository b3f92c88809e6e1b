"""Stock analytics service facade."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from clinic_stock.core.config import get_settings
from clinic_stock.core.metrics import analytics_computed_total, analytics_items_needing_reorder
from clinic_stock.domain.stock.ranking import (
    AnalyticsResult,
    ItemSnapshot,
    analyze_dispensary,
    analyze_item,
)
from clinic_stock.domain.stock.reorder import ReorderPolicy
from clinic_stock.services.stock_service import (
    fetch_histories_for_dispensary,
    fetch_items_for_dispensary,
    fetch_transaction_history,
    get_item,
)

logger = logging.getLogger(__name__)


def build_policy(lead_time_days: int | None = None) -> ReorderPolicy:
    """Reorder policy from settings, with optional lead time override."""
    kwargs = get_settings().analytics_policy_kwargs
    if lead_time_days is not None:
        kwargs["lead_time_days"] = lead_time_days
    return ReorderPolicy(**kwargs)


def get_item_analytics(
    db: Session,
    stock_item_id: int,
    current_quantity: int,
    lead_time_days: int | None = None,
) -> AnalyticsResult:
    """Analytics for one item at a given on-hand quantity.

    The caller is responsible for checking the item exists.

    Args:
        db: Database session
        stock_item_id: Stock item ID
        current_quantity: Units currently on hand
        lead_time_days: Replenishment lead time (default from settings, 7)

    Returns:
        AnalyticsResult

    """
    history = fetch_transaction_history(db, stock_item_id)
    item = ItemSnapshot(id=stock_item_id, quantity=current_quantity)

    analytics_computed_total.labels(scope="item").inc()
    return analyze_item(item, history, build_policy(lead_time_days))


def get_stored_item_analytics(
    db: Session, stock_item_id: int, lead_time_days: int | None = None
) -> AnalyticsResult:
    """Analytics for a stored item using its current quantity and metadata.

    Raises:
        StockItemNotFound: If the item does not exist

    """
    row = get_item(db, stock_item_id)
    item = ItemSnapshot(
        id=row.id,
        quantity=row.quantity,
        low_stock_threshold=row.low_stock_threshold,
        name=row.name,
    )
    history = fetch_transaction_history(db, stock_item_id)

    analytics_computed_total.labels(scope="item").inc()
    return analyze_item(item, history, build_policy(lead_time_days))


def get_dispensary_analytics(
    db: Session, dispensary_id: int, lead_time_days: int | None = None
) -> list[AnalyticsResult]:
    """Analytics for every item of a dispensary, most urgent first.

    Args:
        db: Database session
        dispensary_id: Dispensary ID
        lead_time_days: Replenishment lead time (default from settings, 7)

    Returns:
        Ranked list of AnalyticsResult

    """
    policy = build_policy(lead_time_days)

    items = [
        ItemSnapshot(
            id=row.id,
            quantity=row.quantity,
            low_stock_threshold=row.low_stock_threshold,
            name=row.name,
        )
        for row in fetch_items_for_dispensary(db, dispensary_id)
    ]
    histories = fetch_histories_for_dispensary(db, dispensary_id)

    results = analyze_dispensary(items, histories, policy)

    needing = sum(1 for r in results if r.needs_reorder)
    analytics_computed_total.labels(scope="dispensary").inc()
    analytics_items_needing_reorder.labels(dispensary_id=str(dispensary_id)).set(needing)
    logger.info(
        "dispensary_analytics_computed",
        extra={
            "dispensary_id": dispensary_id,
            "items": len(results),
            "needs_reorder": needing,
            "lead_time_days": policy.lead_time_days,
        },
    )

    return results
