"""Report row builders for CSV/HTML/XLSX exports."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable

from sqlalchemy.orm import Session

from clinic_stock.db.models import utcnow
from clinic_stock.domain.stock.explain import generate_explanation
from clinic_stock.domain.stock.movements import days_until_expiry, expiry_status, low_stock_status
from clinic_stock.services import stock_analytics, stock_service

MISSING = "-"
UNCATEGORIZED = "Uncategorized"


@dataclass(frozen=True)
class Report:
    """Tabular report ready for rendering."""

    name: str
    title: str
    columns: list[str]
    rows: list[dict[str, Any]]


def _fmt_date(value: datetime | None) -> str:
    return value.strftime("%Y-%m-%d") if value else MISSING


def _fmt_datetime(value: datetime | None) -> str:
    return value.strftime("%Y-%m-%d %H:%M") if value else MISSING


def stock_inventory(db: Session, dispensary_id: int, **_: Any) -> Report:
    rows = [
        {
            "name": item["name"],
            "category": item["category_name"] or UNCATEGORIZED,
            "quantity": item["quantity"],
            "lowStockThreshold": item["low_stock_threshold"],
            "batchNumber": item["batch_number"] or MISSING,
            "expirationDate": _fmt_date(item["expiration_date"]),
            "unitPrice": item["unit_price"] or MISSING,
            "source": item["source"] or MISSING,
            "notes": item["notes"] or MISSING,
        }
        for item in stock_service.list_items(db, dispensary_id)
    ]
    columns = [
        "name",
        "category",
        "quantity",
        "lowStockThreshold",
        "batchNumber",
        "expirationDate",
        "unitPrice",
        "source",
        "notes",
    ]
    return Report("stock-inventory", "Stock Inventory Report", columns, rows)


def transaction_history(db: Session, dispensary_id: int, **_: Any) -> Report:
    rows = [
        {
            "itemName": tx["item_name"] or "Unknown",
            "transactionType": tx["transaction_type"],
            "quantity": tx["quantity"],
            "previousQuantity": tx["previous_quantity"],
            "newQuantity": tx["new_quantity"],
            "reason": tx["reason"] or MISSING,
            "userName": tx["user_name"] or "System",
            "createdAt": _fmt_datetime(tx["created_at"]),
        }
        for tx in stock_service.transactions_for_dispensary(db, dispensary_id)
    ]
    columns = [
        "itemName",
        "transactionType",
        "quantity",
        "previousQuantity",
        "newQuantity",
        "reason",
        "userName",
        "createdAt",
    ]
    return Report("transactions", "Transaction History Report", columns, rows)


def low_stock(db: Session, dispensary_id: int, **_: Any) -> Report:
    rows = [
        {
            "name": item["name"],
            "category": item["category_name"] or UNCATEGORIZED,
            "quantity": item["quantity"],
            "lowStockThreshold": item["low_stock_threshold"],
            "status": low_stock_status(item["quantity"]),
            "batchNumber": item["batch_number"] or MISSING,
        }
        for item in stock_service.low_stock_items(db, dispensary_id)
    ]
    columns = ["name", "category", "quantity", "lowStockThreshold", "status", "batchNumber"]
    return Report("low-stock", "Low Stock Report", columns, rows)


def expiration(db: Session, dispensary_id: int, now: datetime | None = None, **_: Any) -> Report:
    now = now or utcnow()
    rows = []
    for item in stock_service.expiring_items(db, dispensary_id, now=now):
        days_left = days_until_expiry(item["expiration_date"], now)
        rows.append(
            {
                "name": item["name"],
                "category": item["category_name"] or UNCATEGORIZED,
                "quantity": item["quantity"],
                "batchNumber": item["batch_number"] or MISSING,
                "expirationDate": _fmt_date(item["expiration_date"]),
                "daysUntilExpiry": days_left,
                "status": expiry_status(days_left),
            }
        )
    columns = [
        "name",
        "category",
        "quantity",
        "batchNumber",
        "expirationDate",
        "daysUntilExpiry",
        "status",
    ]
    return Report("expiration", "Expiration Report", columns, rows)


def analytics(
    db: Session, dispensary_id: int, lead_time_days: int | None = None, **_: Any
) -> Report:
    rows = []
    for result in stock_analytics.get_dispensary_analytics(db, dispensary_id, lead_time_days):
        row = result.to_dict()
        if row["days_until_depletion"] is None:
            row["days_until_depletion"] = "unknown"
        row["explanation"] = generate_explanation(result)
        rows.append(row)
    columns = [
        "name",
        "current_quantity",
        "avg_daily_consumption",
        "days_until_depletion",
        "safety_stock",
        "reorder_point",
        "recommended_quantity",
        "needs_reorder",
        "explanation",
    ]
    return Report("analytics", "Predictive Stock Analytics", columns, rows)


REPORTS: dict[str, Callable[..., Report]] = {
    "stock-inventory": stock_inventory,
    "transactions": transaction_history,
    "low-stock": low_stock,
    "expiration": expiration,
    "analytics": analytics,
}


def build_report(db: Session, name: str, dispensary_id: int, **options: Any) -> Report:
    """Build a named report.

    Raises:
        KeyError: If the report name is unknown

    """
    return REPORTS[name](db, dispensary_id, **options)
