"""User management endpoints (admin/founder only)."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Response, status

from clinic_stock.services import stock_service
from clinic_stock.services.stock_service import UserNotFound
from clinic_stock.web.deps import DBSession, UserAdmin
from clinic_stock.web.schemas import RoleUpdate, UserDTO

router = APIRouter()


@router.get("/users", response_model=list[UserDTO])
def list_users(db: DBSession, admin: UserAdmin):
    """List staff users."""
    return stock_service.list_users(db)


@router.patch("/users/{user_id}/role", response_model=UserDTO)
def update_role(user_id: int, body: RoleUpdate, db: DBSession, admin: UserAdmin):
    """Change a user's role."""
    try:
        return stock_service.update_user_role(db, user_id, body.role)
    except UserNotFound as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: int, db: DBSession, admin: UserAdmin) -> Response:
    """Delete a user."""
    if user_id == admin["id"]:
        raise HTTPException(status_code=400, detail="Cannot delete your own account")
    try:
        stock_service.delete_user(db, user_id)
    except UserNotFound as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)
