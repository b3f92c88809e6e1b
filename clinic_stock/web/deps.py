"""FastAPI dependencies for authentication and database."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from clinic_stock.core.config import get_settings
from clinic_stock.db.models import STOCK_EDITOR_ROLES, USER_ADMIN_ROLES, User
from clinic_stock.db.session import SessionLocal


def get_db() -> Session:
    """Database session dependency."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def current_user(
    db: Annotated[Session, Depends(get_db)],
    x_user_id: Annotated[str | None, Header()] = None,
) -> dict:
    """Resolve the authenticated user from the session gateway header.

    The upstream auth proxy sets X-User-Id after validating the session.

    Returns:
        Dict with user info (id, name, role)

    Raises:
        HTTPException: If the header is missing or the user is unknown

    """
    if not x_user_id:
        if get_settings().dev_mode:
            return {"id": 0, "name": "developer", "role": "admin"}
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")

    try:
        user_id = int(x_user_id)
    except ValueError as e:
        raise HTTPException(status_code=401, detail="Invalid X-User-Id header") from e

    user = db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=401, detail="Unknown user")

    return {"id": user.id, "name": user.name, "role": user.role}


def require_stock_editor(user: dict = Depends(current_user)) -> dict:
    """Require a role allowed to change stock.

    Raises:
        HTTPException: If user is a plain user

    """
    if user["role"] not in STOCK_EDITOR_ROLES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Stock controller, manager or founder role required",
        )
    return user


def require_user_admin(user: dict = Depends(current_user)) -> dict:
    """Require admin or founder role.

    Raises:
        HTTPException: If user cannot manage users

    """
    if user["role"] not in USER_ADMIN_ROLES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin or founder role required",
        )
    return user


# Type aliases for cleaner endpoints
DBSession = Annotated[Session, Depends(get_db)]
CurrentUser = Annotated[dict, Depends(current_user)]
StockEditor = Annotated[dict, Depends(require_stock_editor)]
UserAdmin = Annotated[dict, Depends(require_user_admin)]
