"""Stock item and movement endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, Response, status

from clinic_stock.domain.stock.consumption import DataIntegrityError
from clinic_stock.services import stock_service
from clinic_stock.services.stock_service import StockItemNotFound
from clinic_stock.web.deps import CurrentUser, DBSession, StockEditor
from clinic_stock.web.schemas import (
    AdjustQuantityRequest,
    AdjustQuantityResponse,
    StockItemCreate,
    StockItemDTO,
    StockItemUpdate,
    TransactionDTO,
)

router = APIRouter()


def _not_found(e: StockItemNotFound) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/stock", response_model=list[StockItemDTO])
def list_stock(
    db: DBSession,
    user: CurrentUser,
    dispensary_id: int = Query(..., description="Dispensary ID"),
    category_id: int | None = Query(None, description="Filter by category ID"),
):
    """List stock items of a dispensary."""
    return stock_service.list_items(db, dispensary_id, category_id)


@router.get("/stock/low", response_model=list[StockItemDTO])
def list_low_stock(
    db: DBSession,
    user: CurrentUser,
    dispensary_id: int = Query(..., description="Dispensary ID"),
):
    """Items at or below their low-stock threshold, lowest quantity first."""
    return stock_service.low_stock_items(db, dispensary_id)


@router.get("/stock/expiring", response_model=list[StockItemDTO])
def list_expiring(
    db: DBSession,
    user: CurrentUser,
    dispensary_id: int = Query(..., description="Dispensary ID"),
):
    """Items expiring within the warning window, soonest first."""
    return stock_service.expiring_items(db, dispensary_id)


@router.get("/stock/{stock_item_id}", response_model=StockItemDTO)
def get_stock_item(stock_item_id: int, db: DBSession, user: CurrentUser):
    """Get one stock item."""
    try:
        return stock_service.get_item_detail(db, stock_item_id)
    except StockItemNotFound as e:
        raise _not_found(e) from e


@router.post("/stock", status_code=status.HTTP_201_CREATED)
def create_stock_item(body: StockItemCreate, db: DBSession, user: StockEditor) -> dict:
    """Create a stock item (initial quantity is logged as received)."""
    if stock_service.get_dispensary(db, body.dispensary_id) is None:
        raise HTTPException(status_code=404, detail="Dispensary not found")

    item = stock_service.create_item(db, body.model_dump(exclude_none=True), user_id=user["id"])
    return {"success": True, "id": item.id}


@router.patch("/stock/{stock_item_id}", response_model=StockItemDTO)
def update_stock_item(
    stock_item_id: int, body: StockItemUpdate, db: DBSession, user: StockEditor
):
    """Update stock item fields."""
    try:
        stock_service.update_item(db, stock_item_id, body.model_dump(exclude_unset=True))
        return stock_service.get_item_detail(db, stock_item_id)
    except StockItemNotFound as e:
        raise _not_found(e) from e


@router.delete("/stock/{stock_item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_stock_item(stock_item_id: int, db: DBSession, user: StockEditor) -> Response:
    """Delete a stock item."""
    try:
        stock_service.delete_item(db, stock_item_id)
    except StockItemNotFound as e:
        raise _not_found(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/stock/{stock_item_id}/adjust", response_model=AdjustQuantityResponse)
def adjust_stock_quantity(
    stock_item_id: int, body: AdjustQuantityRequest, db: DBSession, user: StockEditor
):
    """Record an issued/received/lost/adjustment movement."""
    try:
        new_quantity = stock_service.adjust_quantity(
            db,
            stock_item_id,
            body.transaction_type,
            body.quantity,
            user_id=user["id"],
            reason=body.reason,
            notes=body.notes,
        )
    except StockItemNotFound as e:
        raise _not_found(e) from e
    except DataIntegrityError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e

    return AdjustQuantityResponse(new_quantity=new_quantity)


@router.get("/transactions/item/{stock_item_id}", response_model=list[TransactionDTO])
def list_item_transactions(stock_item_id: int, db: DBSession, user: CurrentUser):
    """Transaction history of one item, newest first."""
    return stock_service.transactions_for_item(db, stock_item_id)


@router.get("/transactions", response_model=list[TransactionDTO])
def list_dispensary_transactions(
    db: DBSession,
    user: CurrentUser,
    dispensary_id: int = Query(..., description="Dispensary ID"),
):
    """Transaction history of a dispensary, newest first."""
    return stock_service.transactions_for_dispensary(db, dispensary_id)
