"""Predictive stock analytics endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query

from clinic_stock.domain.stock.explain import generate_explanation, generate_hash
from clinic_stock.domain.stock.ranking import AnalyticsResult
from clinic_stock.services import stock_analytics
from clinic_stock.services.stock_service import StockItemNotFound
from clinic_stock.web.deps import CurrentUser, DBSession
from clinic_stock.web.schemas import AnalyticsDTO

router = APIRouter(prefix="/analytics")


def _to_dto(result: AnalyticsResult) -> AnalyticsDTO:
    return AnalyticsDTO(
        **result.to_dict(),
        explanation=generate_explanation(result),
        rationale_hash=generate_hash(result),
    )


@router.get("/dispensary/{dispensary_id}", response_model=list[AnalyticsDTO])
def get_dispensary_analytics(
    dispensary_id: int,
    db: DBSession,
    user: CurrentUser,
    lead_time_days: int | None = Query(None, ge=0, le=365, description="Lead time in days"),
):
    """Analytics for every item of a dispensary, most urgent first.

    Items needing reorder come first, then ascending days until depletion;
    items with no consumption history sort last within their group.
    """
    results = stock_analytics.get_dispensary_analytics(db, dispensary_id, lead_time_days)
    return [_to_dto(r) for r in results]


@router.get("/item/{stock_item_id}", response_model=AnalyticsDTO)
def get_item_analytics(
    stock_item_id: int,
    db: DBSession,
    user: CurrentUser,
    lead_time_days: int | None = Query(None, ge=0, le=365, description="Lead time in days"),
):
    """Analytics for one stock item at its current quantity."""
    try:
        result = stock_analytics.get_stored_item_analytics(db, stock_item_id, lead_time_days)
    except StockItemNotFound as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    return _to_dto(result)
