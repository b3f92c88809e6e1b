"""Dispensary, category and preference endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from clinic_stock.services import stock_service
from clinic_stock.web.deps import CurrentUser, DBSession
from clinic_stock.web.schemas import CategoryDTO, DispensaryDTO, PreferenceDTO, PreferenceUpdate

router = APIRouter()


@router.get("/dispensaries", response_model=list[DispensaryDTO])
def list_dispensaries(db: DBSession, user: CurrentUser):
    """List dispensaries."""
    return stock_service.list_dispensaries(db)


@router.get("/dispensaries/preference", response_model=PreferenceDTO | None)
def get_preference(db: DBSession, user: CurrentUser):
    """Current user's last selected dispensary (null if never saved)."""
    return stock_service.get_user_preference(db, user["id"])


@router.put("/dispensaries/preference", response_model=PreferenceDTO)
def save_preference(body: PreferenceUpdate, db: DBSession, user: CurrentUser):
    """Save the current user's selected dispensary."""
    if stock_service.get_dispensary(db, body.dispensary_id) is None:
        raise HTTPException(status_code=404, detail="Dispensary not found")

    return stock_service.upsert_user_preference(
        db,
        user["id"],
        last_selected_dispensary_id=body.dispensary_id,
        email_notifications=body.email_notifications,
        sms_notifications=body.sms_notifications,
    )


@router.get("/categories", response_model=list[CategoryDTO])
def list_categories(db: DBSession, user: CurrentUser):
    """List medication categories in display order."""
    return stock_service.list_categories(db)
