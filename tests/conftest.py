"""Shared pytest fixtures and configuration."""

from __future__ import annotations

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from clinic_stock.db.models import (
    Base,
    Category,
    Dispensary,
    StockItem,
    StockTransaction,
    User,
)


@pytest.fixture
def db() -> Session:
    """Create in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)

    session = Session(engine)
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seeded(db: Session) -> dict:
    """Two dispensaries, two categories and one user per role."""
    main = Dispensary(id=1, name="Main Clinic", type="main_clinic")
    pod = Dispensary(id=2, name="POD Mobile Clinic", type="pod_mobile")
    analgesics = Category(id=1, name="Analgesics", sort_order=2)
    antibiotics = Category(id=2, name="Antibiotics", sort_order=1)
    users = [
        User(id=1, open_id="u-admin", name="Ada Admin", email="ada@clinic.test", role="admin"),
        User(
            id=2,
            open_id="u-ctrl",
            name="Sam Controller",
            email="sam@clinic.test",
            phone_number="+15550001111",
            role="stock_controller",
        ),
        User(id=3, open_id="u-plain", name="Pat User", role="user"),
        User(id=4, open_id="u-founder", name="Fay Founder", email="fay@clinic.test", role="founder"),
    ]
    db.add_all([main, pod, analgesics, antibiotics, *users])
    db.commit()
    return {"dispensary": main, "pod": pod, "category": analgesics}


@pytest.fixture
def make_item(db: Session):
    """Factory inserting a stock item directly (no initial transaction, no alerts)."""

    def _make(**fields) -> StockItem:
        values = {
            "dispensary_id": 1,
            "name": "Paracetamol 500mg",
            "quantity": 0,
            "low_stock_threshold": 10,
        }
        values.update(fields)
        item = StockItem(**values)
        db.add(item)
        db.commit()
        db.refresh(item)
        return item

    return _make


@pytest.fixture
def make_movement(db: Session):
    """Factory inserting a historical transaction with an explicit timestamp."""

    def _make(
        item: StockItem,
        transaction_type: str,
        quantity: int,
        created_at: datetime,
        user_id: int = 2,
    ) -> StockTransaction:
        tx = StockTransaction(
            stock_item_id=item.id,
            dispensary_id=item.dispensary_id,
            transaction_type=transaction_type,
            quantity=quantity,
            previous_quantity=0,
            new_quantity=0,
            user_id=user_id,
            created_at=created_at,
        )
        db.add(tx)
        db.commit()
        return tx

    return _make


@pytest.fixture
def client(db: Session, seeded: dict):
    """Test client bound to the in-memory database.

    Authentication is resolved from the X-User-Id header against seeded users:
    1 admin, 2 stock_controller, 3 user, 4 founder.
    """
    from clinic_stock.web.deps import get_db
    from clinic_stock.web.main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
