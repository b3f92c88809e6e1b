"""Tests for stock data access and movement recording."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest
from sqlalchemy import select

from clinic_stock.db.models import StockTransaction, UserPreference
from clinic_stock.domain.stock.consumption import DataIntegrityError
from clinic_stock.services import stock_service
from clinic_stock.services.stock_service import StockItemNotFound, UserNotFound

NOW = datetime(2025, 6, 1, 12, 0)


def test_create_item_records_initial_stock(db, seeded):
    item = stock_service.create_item(
        db, {"dispensary_id": 1, "name": "Amoxicillin 250mg", "quantity": 40}, user_id=2
    )

    txs = db.execute(select(StockTransaction)).scalars().all()
    assert len(txs) == 1
    assert txs[0].stock_item_id == item.id
    assert txs[0].transaction_type == "received"
    assert txs[0].quantity == 40
    assert txs[0].previous_quantity == 0
    assert txs[0].new_quantity == 40
    assert txs[0].reason == "Initial stock"
    assert item.created_by == 2


def test_create_item_defaults(db, seeded):
    item = stock_service.create_item(db, {"dispensary_id": 1, "name": "Gauze"}, user_id=2)

    assert item.quantity == 0
    assert item.low_stock_threshold == 10
    # No movement for an empty item
    assert db.execute(select(StockTransaction)).first() is None


def test_get_item_detail_includes_category(db, seeded, make_item):
    item = make_item(category_id=1, unit_price=12.5)

    detail = stock_service.get_item_detail(db, item.id)

    assert detail["category_name"] == "Analgesics"
    assert detail["unit_price"] == "12.50"


def test_get_item_missing(db, seeded):
    with pytest.raises(StockItemNotFound):
        stock_service.get_item(db, 999)
    with pytest.raises(StockItemNotFound):
        stock_service.get_item_detail(db, 999)


def test_list_items_filters_and_sorts(db, seeded, make_item):
    make_item(name="Zinc", category_id=1)
    make_item(name="Aspirin", category_id=2)
    make_item(name="Bandage", category_id=1)
    make_item(name="Elsewhere", dispensary_id=2)

    assert [i["name"] for i in stock_service.list_items(db, 1)] == ["Aspirin", "Bandage", "Zinc"]
    assert [i["name"] for i in stock_service.list_items(db, 1, category_id=1)] == ["Bandage", "Zinc"]


def test_update_item(db, seeded, make_item):
    item = make_item(name="Old name")

    updated = stock_service.update_item(db, item.id, {"name": "New name", "low_stock_threshold": 3})

    assert updated.name == "New name"
    assert updated.low_stock_threshold == 3


def test_delete_item_removes_transactions(db, seeded):
    item = stock_service.create_item(db, {"dispensary_id": 1, "name": "Saline", "quantity": 20}, user_id=2)
    stock_service.adjust_quantity(db, item.id, "issued", 5, user_id=2)

    stock_service.delete_item(db, item.id)

    assert stock_service.transactions_for_item(db, item.id) == []
    with pytest.raises(StockItemNotFound):
        stock_service.get_item(db, item.id)


@pytest.mark.parametrize(
    "kind,qty,expected",
    [("issued", 4, 16), ("received", 10, 30), ("lost", 50, 0), ("adjustment", 7, 7)],
)
def test_adjust_quantity(db, seeded, make_item, kind, qty, expected):
    item = make_item(quantity=20)

    new_quantity = stock_service.adjust_quantity(
        db, item.id, kind, qty, user_id=2, reason="ward round", notes="bed 4"
    )

    assert new_quantity == expected
    assert stock_service.get_item(db, item.id).quantity == expected

    (tx,) = stock_service.transactions_for_item(db, item.id)
    assert tx["transaction_type"] == kind
    assert tx["quantity"] == qty
    assert tx["previous_quantity"] == 20
    assert tx["new_quantity"] == expected
    assert tx["reason"] == "ward round"
    assert tx["notes"] == "bed 4"
    assert tx["user_name"] == "Sam Controller"
    assert tx["item_name"] == "Paracetamol 500mg"


def test_adjust_quantity_rejects_negative(db, seeded, make_item):
    item = make_item(quantity=20)

    with pytest.raises(DataIntegrityError):
        stock_service.adjust_quantity(db, item.id, "issued", -3, user_id=2)

    assert stock_service.get_item(db, item.id).quantity == 20
    assert stock_service.transactions_for_item(db, item.id) == []


def test_adjust_quantity_missing_item(db, seeded):
    with pytest.raises(StockItemNotFound):
        stock_service.adjust_quantity(db, 404, "issued", 1, user_id=2)


def test_low_stock_items(db, seeded, make_item):
    make_item(name="At threshold", quantity=10, low_stock_threshold=10)
    make_item(name="Out", quantity=0, low_stock_threshold=5)
    make_item(name="Fine", quantity=50, low_stock_threshold=10)
    make_item(name="Other dispensary", quantity=0, dispensary_id=2)

    names = [i["name"] for i in stock_service.low_stock_items(db, 1)]

    assert names == ["Out", "At threshold"]


def test_expiring_items(db, seeded, make_item):
    make_item(name="Later", expiration_date=NOW + timedelta(days=60))
    make_item(name="Expired", expiration_date=NOW - timedelta(days=2))
    make_item(name="Far", expiration_date=NOW + timedelta(days=365))
    make_item(name="No date")

    names = [i["name"] for i in stock_service.expiring_items(db, 1, now=NOW)]

    assert names == ["Expired", "Later"]


def test_transactions_newest_first(db, seeded, make_item, make_movement):
    a = make_item(name="A")
    b = make_item(name="B")
    make_movement(a, "issued", 1, NOW - timedelta(days=2))
    make_movement(b, "received", 2, NOW)
    make_movement(a, "issued", 3, NOW - timedelta(days=1))

    assert [t["quantity"] for t in stock_service.transactions_for_item(db, a.id)] == [3, 1]
    assert [t["quantity"] for t in stock_service.transactions_for_dispensary(db, 1)] == [2, 3, 1]


def test_fetch_transaction_history_is_complete(db, seeded, make_item, make_movement):
    item = make_item()
    for day in range(150):
        make_movement(item, "issued", 1, NOW - timedelta(days=day))

    history = stock_service.fetch_transaction_history(db, item.id)

    assert len(history) == 150
    assert {m.transaction_type for m in history} == {"issued"}


def test_fetch_histories_for_dispensary(db, seeded, make_item, make_movement):
    a = make_item(name="A")
    b = make_item(name="B")
    other = make_item(name="Other", dispensary_id=2)
    make_movement(a, "issued", 1, NOW)
    make_movement(a, "issued", 2, NOW)
    make_movement(other, "issued", 5, NOW)

    histories = stock_service.fetch_histories_for_dispensary(db, 1)

    assert set(histories) == {a.id}
    assert len(histories[a.id]) == 2
    assert b.id not in histories


def test_reference_data_order(db, seeded):
    assert [d.name for d in stock_service.list_dispensaries(db)] == ["Main Clinic", "POD Mobile Clinic"]
    assert [c.name for c in stock_service.list_categories(db)] == ["Antibiotics", "Analgesics"]


def test_user_role_update_and_delete(db, seeded):
    user = stock_service.update_user_role(db, 3, "manager")
    assert user.role == "manager"

    stock_service.upsert_user_preference(db, 3, last_selected_dispensary_id=1)
    stock_service.delete_user(db, 3)

    assert [u.id for u in stock_service.list_users(db)] == [1, 2, 4]
    assert db.execute(select(UserPreference).where(UserPreference.user_id == 3)).first() is None

    with pytest.raises(UserNotFound):
        stock_service.update_user_role(db, 3, "user")
    with pytest.raises(UserNotFound):
        stock_service.delete_user(db, 3)


def test_alert_recipients(db, seeded):
    assert [u.id for u in stock_service.alert_recipients(db)] == [2, 4]


def test_upsert_user_preference(db, seeded):
    assert stock_service.get_user_preference(db, 2) is None

    first = stock_service.upsert_user_preference(db, 2, last_selected_dispensary_id=1)
    second = stock_service.upsert_user_preference(
        db, 2, last_selected_dispensary_id=2, sms_notifications=True
    )

    assert first.id == second.id
    assert second.last_selected_dispensary_id == 2
    assert second.sms_notifications is True
    assert db.execute(select(UserPreference)).scalars().all() == [second]
