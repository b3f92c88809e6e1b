"""Stock data access: items, movements, reference data and preferences."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from clinic_stock.core.config import get_settings
from clinic_stock.core.metrics import stock_movements_total
from clinic_stock.db.models import (
    ALERT_RECIPIENT_ROLES,
    Category,
    Dispensary,
    StockItem,
    StockTransaction,
    User,
    UserPreference,
    utcnow,
)
from clinic_stock.domain.stock.consumption import StockMovement, TransactionType
from clinic_stock.domain.stock.movements import apply_movement, is_expiring

logger = logging.getLogger(__name__)


class StockItemNotFound(LookupError):
    """Requested stock item does not exist."""

    def __init__(self, stock_item_id: int):
        super().__init__(f"Stock item {stock_item_id} not found")
        self.stock_item_id = stock_item_id


class UserNotFound(LookupError):
    """Requested user does not exist."""

    def __init__(self, user_id: int):
        super().__init__(f"User {user_id} not found")
        self.user_id = user_id


# =============================================================================
# Analytics collaborator interface
# =============================================================================


def fetch_transaction_history(db: Session, stock_item_id: int) -> list[StockMovement]:
    """Complete transaction history of one item as immutable movements.

    No pagination: a truncated history would understate the elapsed span
    and overstate the consumption rate.
    """
    stmt = select(
        StockTransaction.stock_item_id,
        StockTransaction.transaction_type,
        StockTransaction.quantity,
        StockTransaction.created_at,
    ).where(StockTransaction.stock_item_id == stock_item_id)

    return [
        StockMovement(
            stock_item_id=row.stock_item_id,
            transaction_type=row.transaction_type,
            quantity=row.quantity,
            created_at=row.created_at,
        )
        for row in db.execute(stmt).all()
    ]


def fetch_histories_for_dispensary(db: Session, dispensary_id: int) -> dict[int, list[StockMovement]]:
    """Transaction histories of every item in a dispensary, keyed by item id."""
    stmt = (
        select(
            StockTransaction.stock_item_id,
            StockTransaction.transaction_type,
            StockTransaction.quantity,
            StockTransaction.created_at,
        )
        .join(StockItem, StockTransaction.stock_item_id == StockItem.id)
        .where(StockItem.dispensary_id == dispensary_id)
    )

    histories: dict[int, list[StockMovement]] = {}
    for row in db.execute(stmt).all():
        histories.setdefault(row.stock_item_id, []).append(
            StockMovement(
                stock_item_id=row.stock_item_id,
                transaction_type=row.transaction_type,
                quantity=row.quantity,
                created_at=row.created_at,
            )
        )
    return histories


def fetch_items_for_dispensary(db: Session, dispensary_id: int) -> list[StockItem]:
    """All stock items of a dispensary, ordered by id."""
    stmt = select(StockItem).where(StockItem.dispensary_id == dispensary_id).order_by(StockItem.id)
    return list(db.execute(stmt).scalars().all())


# =============================================================================
# Reference data
# =============================================================================


def list_dispensaries(db: Session) -> list[Dispensary]:
    return list(db.execute(select(Dispensary).order_by(Dispensary.id)).scalars().all())


def get_dispensary(db: Session, dispensary_id: int) -> Dispensary | None:
    return db.get(Dispensary, dispensary_id)


def list_categories(db: Session) -> list[Category]:
    return list(db.execute(select(Category).order_by(Category.sort_order)).scalars().all())


# =============================================================================
# Stock items
# =============================================================================


def _item_rows(db: Session, stmt) -> list[dict[str, Any]]:
    """Execute an item query joined to categories and flatten rows."""
    rows = db.execute(stmt).all()
    return [item_to_dict(item, category_name) for item, category_name in rows]


def _item_query():
    return select(StockItem, Category.name.label("category_name")).outerjoin(
        Category, StockItem.category_id == Category.id
    )


def item_to_dict(item: StockItem, category_name: str | None = None) -> dict[str, Any]:
    """Serialize a stock item row."""
    return {
        "id": item.id,
        "dispensary_id": item.dispensary_id,
        "category_id": item.category_id,
        "category_name": category_name,
        "name": item.name,
        "quantity": item.quantity,
        "unit_price": str(item.unit_price) if item.unit_price is not None else None,
        "batch_number": item.batch_number,
        "expiration_date": item.expiration_date,
        "source": item.source,
        "low_stock_threshold": item.low_stock_threshold,
        "notes": item.notes,
        "created_at": item.created_at,
        "updated_at": item.updated_at,
        "created_by": item.created_by,
    }


def list_items(
    db: Session, dispensary_id: int, category_id: int | None = None
) -> list[dict[str, Any]]:
    """Items of a dispensary with category names, ordered by name."""
    stmt = _item_query().where(StockItem.dispensary_id == dispensary_id)
    if category_id is not None:
        stmt = stmt.where(StockItem.category_id == category_id)
    return _item_rows(db, stmt.order_by(StockItem.name, StockItem.id))


def get_item(db: Session, stock_item_id: int) -> StockItem:
    """Get stock item or raise StockItemNotFound."""
    item = db.get(StockItem, stock_item_id)
    if item is None:
        raise StockItemNotFound(stock_item_id)
    return item


def get_item_detail(db: Session, stock_item_id: int) -> dict[str, Any]:
    """Serialized stock item with category name, or raise StockItemNotFound."""
    rows = _item_rows(db, _item_query().where(StockItem.id == stock_item_id))
    if not rows:
        raise StockItemNotFound(stock_item_id)
    return rows[0]


def create_item(db: Session, data: dict[str, Any], *, user_id: int) -> StockItem:
    """Create a stock item.

    A positive initial quantity is recorded as a ``received`` movement.
    Low-stock and expiry checks run after the insert.
    """
    from clinic_stock.services.notifications import check_and_alert

    fields = dict(data)
    fields.setdefault("quantity", 0)
    fields.setdefault("low_stock_threshold", get_settings().default_low_stock_threshold)
    item = StockItem(**fields, created_by=user_id)
    db.add(item)
    db.flush()

    if item.quantity > 0:
        db.add(
            StockTransaction(
                stock_item_id=item.id,
                dispensary_id=item.dispensary_id,
                transaction_type=TransactionType.RECEIVED.value,
                quantity=item.quantity,
                previous_quantity=0,
                new_quantity=item.quantity,
                reason="Initial stock",
                user_id=user_id,
            )
        )
        stock_movements_total.labels(transaction_type=TransactionType.RECEIVED.value).inc()

    db.commit()
    db.refresh(item)

    logger.info(
        "stock_item_created",
        extra={"stock_item_id": item.id, "dispensary_id": item.dispensary_id},
    )
    check_and_alert(db, item)
    return item


def update_item(db: Session, stock_item_id: int, changes: dict[str, Any]) -> StockItem:
    """Apply partial field changes to a stock item."""
    item = get_item(db, stock_item_id)
    for key, value in changes.items():
        setattr(item, key, value)
    db.commit()
    db.refresh(item)
    return item


def delete_item(db: Session, stock_item_id: int) -> None:
    """Delete a stock item together with its transaction log."""
    item = get_item(db, stock_item_id)
    db.execute(delete(StockTransaction).where(StockTransaction.stock_item_id == item.id))
    db.delete(item)
    db.commit()
    logger.info("stock_item_deleted", extra={"stock_item_id": stock_item_id})


def adjust_quantity(
    db: Session,
    stock_item_id: int,
    transaction_type: str,
    quantity: int,
    *,
    user_id: int,
    reason: str | None = None,
    notes: str | None = None,
) -> int:
    """Record a stock movement and update the on-hand quantity.

    Returns:
        New on-hand quantity

    Raises:
        StockItemNotFound: If the item does not exist
        DataIntegrityError: If quantity is negative

    """
    from clinic_stock.services.notifications import check_and_alert

    item = get_item(db, stock_item_id)
    previous_quantity = item.quantity
    new_quantity = apply_movement(previous_quantity, transaction_type, quantity)

    item.quantity = new_quantity
    db.add(
        StockTransaction(
            stock_item_id=item.id,
            dispensary_id=item.dispensary_id,
            transaction_type=transaction_type,
            quantity=quantity,
            previous_quantity=previous_quantity,
            new_quantity=new_quantity,
            reason=reason,
            notes=notes,
            user_id=user_id,
        )
    )
    db.commit()
    db.refresh(item)

    stock_movements_total.labels(transaction_type=transaction_type).inc()
    logger.info(
        "stock_movement_recorded",
        extra={
            "stock_item_id": item.id,
            "transaction_type": transaction_type,
            "previous_quantity": previous_quantity,
            "new_quantity": new_quantity,
        },
    )

    check_and_alert(db, item)
    return new_quantity


def low_stock_items(db: Session, dispensary_id: int) -> list[dict[str, Any]]:
    """Items at or below their low-stock threshold, lowest quantity first."""
    stmt = (
        _item_query()
        .where(StockItem.dispensary_id == dispensary_id)
        .where(StockItem.quantity <= StockItem.low_stock_threshold)
        .order_by(StockItem.quantity, StockItem.id)
    )
    return _item_rows(db, stmt)


def expiring_items(
    db: Session, dispensary_id: int, now: datetime | None = None
) -> list[dict[str, Any]]:
    """Items expiring within the warning window (or expired), soonest first."""
    now = now or utcnow()
    warning_days = get_settings().expiry_warning_days

    stmt = (
        _item_query()
        .where(StockItem.dispensary_id == dispensary_id)
        .where(StockItem.expiration_date.is_not(None))
        .order_by(StockItem.expiration_date, StockItem.id)
    )
    return [
        row
        for row in _item_rows(db, stmt)
        if is_expiring(row["expiration_date"], now, warning_days)
    ]


# =============================================================================
# Transactions
# =============================================================================


def _transaction_query():
    return (
        select(
            StockTransaction,
            User.name.label("user_name"),
            StockItem.name.label("item_name"),
        )
        .outerjoin(User, StockTransaction.user_id == User.id)
        .outerjoin(StockItem, StockTransaction.stock_item_id == StockItem.id)
    )


def transaction_to_dict(
    tx: StockTransaction, user_name: str | None = None, item_name: str | None = None
) -> dict[str, Any]:
    """Serialize a transaction row."""
    return {
        "id": tx.id,
        "stock_item_id": tx.stock_item_id,
        "dispensary_id": tx.dispensary_id,
        "item_name": item_name,
        "transaction_type": tx.transaction_type,
        "quantity": tx.quantity,
        "previous_quantity": tx.previous_quantity,
        "new_quantity": tx.new_quantity,
        "reason": tx.reason,
        "notes": tx.notes,
        "user_id": tx.user_id,
        "user_name": user_name,
        "created_at": tx.created_at,
    }


def transactions_for_item(db: Session, stock_item_id: int) -> list[dict[str, Any]]:
    """Item history, newest first."""
    stmt = (
        _transaction_query()
        .where(StockTransaction.stock_item_id == stock_item_id)
        .order_by(StockTransaction.created_at.desc(), StockTransaction.id.desc())
    )
    return [transaction_to_dict(*row) for row in db.execute(stmt).all()]


def transactions_for_dispensary(db: Session, dispensary_id: int) -> list[dict[str, Any]]:
    """Dispensary history, newest first."""
    stmt = (
        _transaction_query()
        .where(StockTransaction.dispensary_id == dispensary_id)
        .order_by(StockTransaction.created_at.desc(), StockTransaction.id.desc())
    )
    return [transaction_to_dict(*row) for row in db.execute(stmt).all()]


# =============================================================================
# Users and preferences
# =============================================================================


def list_users(db: Session) -> list[User]:
    return list(db.execute(select(User).order_by(User.id)).scalars().all())


def update_user_role(db: Session, user_id: int, role: str) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise UserNotFound(user_id)
    user.role = role
    db.commit()
    db.refresh(user)
    logger.info("user_role_updated", extra={"user_id": user_id, "role": role})
    return user


def delete_user(db: Session, user_id: int) -> None:
    user = db.get(User, user_id)
    if user is None:
        raise UserNotFound(user_id)
    db.execute(delete(UserPreference).where(UserPreference.user_id == user_id))
    db.delete(user)
    db.commit()


def alert_recipients(db: Session) -> list[User]:
    """Users who receive stock alerts."""
    stmt = select(User).where(User.role.in_(ALERT_RECIPIENT_ROLES)).order_by(User.id)
    return list(db.execute(stmt).scalars().all())


def get_user_preference(db: Session, user_id: int) -> UserPreference | None:
    stmt = select(UserPreference).where(UserPreference.user_id == user_id)
    return db.execute(stmt).scalar_one_or_none()


def upsert_user_preference(
    db: Session,
    user_id: int,
    *,
    last_selected_dispensary_id: int | None,
    email_notifications: bool = True,
    sms_notifications: bool = False,
) -> UserPreference:
    """Insert or update the preference row of a user."""
    pref = get_user_preference(db, user_id)
    if pref is None:
        pref = UserPreference(user_id=user_id)
        db.add(pref)

    pref.last_selected_dispensary_id = last_selected_dispensary_id
    pref.email_notifications = email_notifications
    pref.sms_notifications = sms_notifications
    pref.updated_at = utcnow()

    db.commit()
    db.refresh(pref)
    return pref
