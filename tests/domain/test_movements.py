"""Tests for stock movement arithmetic and status rules."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from clinic_stock.domain.stock.consumption import DataIntegrityError
from clinic_stock.domain.stock.movements import (
    apply_movement,
    days_until_expiry,
    expiry_status,
    is_expiring,
    is_low_stock,
    low_stock_status,
)

NOW = datetime(2025, 6, 1, 12, 0)


def test_received_adds():
    assert apply_movement(10, "received", 5) == 15


def test_issued_subtracts():
    assert apply_movement(10, "issued", 4) == 6


def test_issued_and_lost_never_go_negative():
    assert apply_movement(3, "issued", 5) == 0
    assert apply_movement(3, "lost", 10) == 0


def test_adjustment_sets_count():
    assert apply_movement(10, "adjustment", 7) == 7
    assert apply_movement(0, "adjustment", 42) == 42


def test_negative_movement_rejected():
    with pytest.raises(DataIntegrityError):
        apply_movement(10, "received", -1)


def test_unknown_movement_type_rejected():
    with pytest.raises(ValueError):
        apply_movement(10, "stolen", 1)


def test_low_stock_at_threshold():
    assert is_low_stock(10, 10) is True
    assert is_low_stock(11, 10) is False
    assert is_low_stock(0, 0) is True


def test_low_stock_status():
    assert low_stock_status(0) == "OUT OF STOCK"
    assert low_stock_status(3) == "LOW STOCK"


def test_days_until_expiry():
    assert days_until_expiry(NOW + timedelta(days=30), NOW) == 30
    assert days_until_expiry(NOW + timedelta(days=30, hours=5), NOW) == 30
    assert days_until_expiry(NOW - timedelta(hours=1), NOW) == -1


def test_expiry_status():
    assert expiry_status(-1) == "EXPIRED"
    assert expiry_status(0) == "EXPIRING SOON"
    assert expiry_status(45) == "EXPIRING SOON"


def test_is_expiring_window():
    assert is_expiring(NOW + timedelta(days=90), NOW, 90) is True
    assert is_expiring(NOW + timedelta(days=91), NOW, 90) is False
    # Already expired items stay on the list
    assert is_expiring(NOW - timedelta(days=5), NOW, 90) is True
    assert is_expiring(None, NOW, 90) is False
