"""Pydantic schemas for API requests and responses."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from clinic_stock.db.models import DISPENSARY_TYPES, TRANSACTION_TYPES, USER_ROLES

TransactionTypeName = Literal[TRANSACTION_TYPES]
RoleName = Literal[USER_ROLES]
DispensaryTypeName = Literal[DISPENSARY_TYPES]


# Reference data
class DispensaryDTO(BaseModel):
    """Dispensary."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    type: DispensaryTypeName
    description: str | None = None
    is_active: bool


class CategoryDTO(BaseModel):
    """Medication category."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None = None
    sort_order: int


class PreferenceDTO(BaseModel):
    """User dispensary/notification preference."""

    model_config = ConfigDict(from_attributes=True)

    user_id: int
    last_selected_dispensary_id: int | None = None
    email_notifications: bool
    sms_notifications: bool


class PreferenceUpdate(BaseModel):
    """Request to save the selected dispensary."""

    dispensary_id: int
    email_notifications: bool = True
    sms_notifications: bool = False


# Stock schemas
class StockItemDTO(BaseModel):
    """Stock item with category name."""

    id: int
    dispensary_id: int
    category_id: int | None = None
    category_name: str | None = None
    name: str
    quantity: int
    unit_price: str | None = None
    batch_number: str | None = None
    expiration_date: datetime | None = None
    source: str | None = None
    low_stock_threshold: int
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    created_by: int | None = None


class StockItemCreate(BaseModel):
    """Request to create a stock item."""

    dispensary_id: int
    category_id: int | None = None
    name: str = Field(..., min_length=1, max_length=255)
    quantity: int = Field(0, ge=0)
    unit_price: Decimal | None = Field(None, ge=0)
    batch_number: str | None = Field(None, max_length=100)
    expiration_date: datetime | None = None
    source: str | None = Field(None, max_length=255)
    low_stock_threshold: int | None = Field(None, ge=0)
    notes: str | None = None


class StockItemUpdate(BaseModel):
    """Partial update of a stock item."""

    category_id: int | None = None
    name: str | None = Field(None, min_length=1, max_length=255)
    quantity: int | None = Field(None, ge=0)
    unit_price: Decimal | None = Field(None, ge=0)
    batch_number: str | None = Field(None, max_length=100)
    expiration_date: datetime | None = None
    source: str | None = Field(None, max_length=255)
    low_stock_threshold: int | None = Field(None, ge=0)
    notes: str | None = None

    @field_validator("name", "quantity", "low_stock_threshold")
    @classmethod
    def _not_null(cls, value):
        # may be omitted, but an explicit null would clear a required column
        if value is None:
            raise ValueError("may not be null")
        return value


class AdjustQuantityRequest(BaseModel):
    """Request to record a stock movement."""

    transaction_type: TransactionTypeName
    quantity: int
    reason: str | None = None
    notes: str | None = None


class AdjustQuantityResponse(BaseModel):
    """Result of a stock movement."""

    success: bool = True
    new_quantity: int


class TransactionDTO(BaseModel):
    """Stock transaction with item and user names."""

    id: int
    stock_item_id: int
    dispensary_id: int
    item_name: str | None = None
    transaction_type: str
    quantity: int
    previous_quantity: int
    new_quantity: int
    reason: str | None = None
    notes: str | None = None
    user_id: int
    user_name: str | None = None
    created_at: datetime


# Users
class UserDTO(BaseModel):
    """Staff user."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str | None = None
    email: str | None = None
    phone_number: str | None = None
    role: str
    last_signed_in: datetime | None = None


class RoleUpdate(BaseModel):
    """Request to change a user's role."""

    role: RoleName


# Analytics
class AnalyticsDTO(BaseModel):
    """Predictive analytics for one stock item."""

    stock_item_id: int
    name: str | None = None
    current_quantity: int
    low_stock_threshold: int
    avg_daily_consumption: float = Field(..., description="Units/day, rounded to 2 decimals")
    days_until_depletion: int | None = Field(
        None, description="Whole days until zero stock; null when unknown"
    )
    safety_stock: int
    reorder_point: int
    recommended_quantity: int
    needs_reorder: bool
    explanation: str
    rationale_hash: str
