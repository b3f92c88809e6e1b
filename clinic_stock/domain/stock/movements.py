"""Stock movement arithmetic and stock status rules.

NO DATA ACCESS - pure functions only. Data access happens in services layer.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta

from clinic_stock.domain.stock.consumption import DataIntegrityError, TransactionType

OUT_OF_STOCK = "OUT OF STOCK"
LOW_STOCK = "LOW STOCK"
EXPIRED = "EXPIRED"
EXPIRING_SOON = "EXPIRING SOON"


def apply_movement(previous_quantity: int, transaction_type: str, quantity: int) -> int:
    """Calculate on-hand quantity after a movement.

    received adds, issued/lost subtract (never below zero), adjustment sets
    the count outright.

    Args:
        previous_quantity: Units on hand before the movement
        transaction_type: issued | received | lost | adjustment
        quantity: Movement magnitude (adjustment: the new count)

    Returns:
        New on-hand quantity

    Raises:
        DataIntegrityError: If quantity is negative
        ValueError: If transaction_type is unknown

    Examples:
        >>> apply_movement(10, "received", 5)
        15
        >>> apply_movement(3, "issued", 5)
        0
        >>> apply_movement(10, "adjustment", 7)
        7

    """
    if quantity < 0:
        raise DataIntegrityError(f"Movement quantity must be >= 0, got {quantity}")

    kind = TransactionType(transaction_type)

    if kind is TransactionType.RECEIVED:
        return previous_quantity + quantity
    if kind in (TransactionType.ISSUED, TransactionType.LOST):
        return max(0, previous_quantity - quantity)
    return quantity


def is_low_stock(quantity: int, low_stock_threshold: int) -> bool:
    """Item is low when quantity is at or below its threshold."""
    return quantity <= low_stock_threshold


def low_stock_status(quantity: int) -> str:
    """Display status for an item on the low-stock list."""
    return OUT_OF_STOCK if quantity == 0 else LOW_STOCK


def days_until_expiry(expiration_date: datetime, now: datetime) -> int:
    """Whole days until expiry, negative once expired."""
    return math.floor((expiration_date - now) / timedelta(days=1))


def expiry_status(days_left: int) -> str:
    """Display status for an item on the expiring list."""
    return EXPIRED if days_left < 0 else EXPIRING_SOON


def is_expiring(expiration_date: datetime | None, now: datetime, warning_days: int) -> bool:
    """Item expires within the warning window (or already has)."""
    if expiration_date is None:
        return False
    return expiration_date <= now + timedelta(days=warning_days)
