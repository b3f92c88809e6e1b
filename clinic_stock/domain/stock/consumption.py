"""Consumption rate and depletion forecasting for stock items.

NO DATA ACCESS - pure functions only. Data access happens in services layer.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

_ONE_DAY = timedelta(days=1)


class DataIntegrityError(ValueError):
    """Stock record violates a data invariant (e.g. negative quantity)."""


class TransactionType(str, Enum):
    """Kind of stock movement."""

    ISSUED = "issued"
    RECEIVED = "received"
    LOST = "lost"
    ADJUSTMENT = "adjustment"


@dataclass(frozen=True)
class StockMovement:
    """Immutable copy of one stock transaction."""

    stock_item_id: int
    transaction_type: str
    quantity: int
    created_at: datetime


def _check_quantity(movement: StockMovement) -> None:
    if movement.quantity < 0:
        raise DataIntegrityError(
            f"Negative quantity {movement.quantity} in {movement.transaction_type} "
            f"movement of stock item {movement.stock_item_id}"
        )


def avg_daily_consumption(history: Iterable[StockMovement]) -> float:
    """Calculate average daily consumption (units/day) from issuance history.

    Only ``issued`` movements count as consumption; received, lost and
    adjustment movements are not demand signals. The time span runs from the
    earliest to the latest issuance, floored to whole days and clamped to at
    least one day. Input order does not matter.

    Args:
        history: All movements recorded for one stock item, in any order

    Returns:
        Units issued per day (0.0 when nothing was ever issued)

    Raises:
        DataIntegrityError: If an issued movement has a negative quantity

    Examples:
        >>> avg_daily_consumption([])
        0.0

    """
    issued = [m for m in history if m.transaction_type == TransactionType.ISSUED]
    if not issued:
        return 0.0

    for movement in issued:
        _check_quantity(movement)

    total_issued = sum(m.quantity for m in issued)

    first = min(m.created_at for m in issued)
    last = max(m.created_at for m in issued)
    elapsed_days = max(1, (last - first) // _ONE_DAY)

    return total_issued / elapsed_days


def days_until_depletion(current_quantity: int, daily_consumption: float) -> int | None:
    """Predict whole days until stock reaches zero.

    Args:
        current_quantity: Units on hand
        daily_consumption: Average units consumed per day

    Returns:
        Days until depletion, or None when there is no consumption to
        extrapolate from. Zero means already depleted.

    Examples:
        >>> days_until_depletion(45, 2.0)
        22
        >>> days_until_depletion(0, 2.0)
        0
        >>> days_until_depletion(45, 0.0) is None
        True

    """
    if daily_consumption <= 0:
        return None

    return math.floor(current_quantity / daily_consumption)
