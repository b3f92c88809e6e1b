"""SQLAlchemy ORM models for Clinic Stock.

This module defines the database schema for:
- Reference data (Dispensaries, Categories)
- Stock items and their append-only transaction log
- Users and per-user preferences

All timestamps are stored in UTC. Display timezone conversion happens in presentation layer.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from clinic_stock.domain.stock.consumption import TransactionType

USER_ROLES = ("user", "admin", "stock_controller", "manager", "founder")
# Role groups, all drawn from USER_ROLES
STOCK_EDITOR_ROLES = frozenset(USER_ROLES) - {"user"}
USER_ADMIN_ROLES = frozenset({"admin", "founder"})
ALERT_RECIPIENT_ROLES = tuple(r for r in USER_ROLES if r not in {"user", "admin"})

DISPENSARY_TYPES = ("main_clinic", "pod_mobile")
TRANSACTION_TYPES = tuple(t.value for t in TransactionType)


def utcnow() -> datetime:
    """Naive UTC timestamp (stored without tzinfo)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


# =============================================================================
# Users
# =============================================================================


class User(Base):
    """Clinic staff account backing the auth flow."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    open_id: Mapped[str] = mapped_column(String(64), unique=True)
    name: Mapped[str | None] = mapped_column(Text, nullable=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    phone_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    login_method: Mapped[str | None] = mapped_column(String(64), nullable=True)
    role: Mapped[str] = mapped_column(String(20), default="user")  # see USER_ROLES
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)
    last_signed_in: Mapped[datetime] = mapped_column(DateTime, default=utcnow)


class UserPreference(Base):
    """Per-user dispensary selection and notification channels."""

    __tablename__ = "user_preferences"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), unique=True
    )
    last_selected_dispensary_id: Mapped[int | None] = mapped_column(
        ForeignKey("dispensaries.id", ondelete="SET NULL"), nullable=True
    )
    email_notifications: Mapped[bool] = mapped_column(Boolean, default=True)
    sms_notifications: Mapped[bool] = mapped_column(Boolean, default=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)


# =============================================================================
# Reference Tables
# =============================================================================


class Dispensary(Base):
    """Dispensing point: the main clinic or a POD mobile clinic."""

    __tablename__ = "dispensaries"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255))
    type: Mapped[str] = mapped_column(String(20))  # see DISPENSARY_TYPES
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)


class Category(Base):
    """Medication category."""

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)


# =============================================================================
# Stock
# =============================================================================


class StockItem(Base):
    """Stock item held at one dispensary.

    `quantity` is the current on-hand count. `low_stock_threshold` drives the
    low-stock list and alerts only; reorder analytics ignore it.
    """

    __tablename__ = "stock_items"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    dispensary_id: Mapped[int] = mapped_column(
        ForeignKey("dispensaries.id", ondelete="RESTRICT"), index=True
    )
    category_id: Mapped[int | None] = mapped_column(
        ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True
    )
    name: Mapped[str] = mapped_column(String(255))
    quantity: Mapped[int] = mapped_column(Integer, default=0)
    unit_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    batch_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    expiration_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    source: Mapped[str | None] = mapped_column(String(255), nullable=True)
    low_stock_threshold: Mapped[int] = mapped_column(Integer, default=10)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)
    created_by: Mapped[int | None] = mapped_column(Integer, nullable=True)


class StockTransaction(Base):
    """Stock movement (append-only).

    `quantity` is the non-negative magnitude of the movement; its meaning
    depends on `transaction_type` (an adjustment carries the new count).
    """

    __tablename__ = "stock_transactions"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    stock_item_id: Mapped[int] = mapped_column(
        ForeignKey("stock_items.id", ondelete="CASCADE"), index=True
    )
    dispensary_id: Mapped[int] = mapped_column(Integer, index=True)
    transaction_type: Mapped[str] = mapped_column(String(20))  # see TRANSACTION_TYPES
    quantity: Mapped[int] = mapped_column(Integer)
    previous_quantity: Mapped[int] = mapped_column(Integer)
    new_quantity: Mapped[int] = mapped_column(Integer)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    user_id: Mapped[int] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, index=True)

    __table_args__ = (Index("ix_tx_item_created", "stock_item_id", "created_at"),)
