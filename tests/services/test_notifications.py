"""Tests for low-stock and expiry notifications."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

import pytest

from clinic_stock.core.config import get_settings
from clinic_stock.services import notifications, stock_service
from clinic_stock.services.notifications import Recipient

NOW = datetime(2025, 6, 1, 12, 0)


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def delivered(caplog) -> list[logging.LogRecord]:
    return [r for r in caplog.records if r.name == "clinic_stock.notify"]


def test_email_requires_address(caplog):
    caplog.set_level(logging.INFO)

    assert notifications.send_email_notification("", "subject", "body") is False
    assert delivered(caplog) == []
    assert "No email provided" in caplog.text


def test_sms_requires_number(caplog):
    caplog.set_level(logging.INFO)

    assert notifications.send_sms_notification(None, "body") is False
    assert delivered(caplog) == []


def test_email_delivery_logged(caplog):
    caplog.set_level(logging.INFO)

    assert notifications.send_email_notification("sam@clinic.test", "Hi", "Restock") is True

    (record,) = delivered(caplog)
    assert record.channel == "email"
    assert record.subject == "Hi"


def test_disabled_channels(monkeypatch, caplog):
    monkeypatch.setenv("NOTIFY_EMAIL_ENABLED", "false")
    monkeypatch.setenv("NOTIFY_SMS_ENABLED", "false")
    caplog.set_level(logging.INFO)

    assert notifications.send_email_notification("sam@clinic.test", "Hi", "Restock") is False
    assert notifications.send_sms_notification("+15550001111", "Restock") is False
    assert delivered(caplog) == []


def test_low_stock_alert_fans_out(caplog):
    caplog.set_level(logging.INFO)
    recipients = [
        Recipient(name="Sam", email="sam@clinic.test", phone_number="+15550001111"),
        Recipient(name="Fay", email="fay@clinic.test"),
        Recipient(name="Nobody"),
    ]

    sent = notifications.send_low_stock_alert(recipients, "Amoxicillin", 3, 10, "Main Clinic")

    assert sent == 3
    records = delivered(caplog)
    assert [r.channel for r in records] == ["email", "sms", "email"]
    assert "Current: 3 units (Threshold: 10) at Main Clinic" in records[0].body


def test_low_stock_alert_notifies_owner(monkeypatch, caplog):
    monkeypatch.setenv("OWNER_EMAIL", "owner@clinic.test")
    caplog.set_level(logging.INFO)

    sent = notifications.send_low_stock_alert([], "Amoxicillin", 0, 10, "Main Clinic")

    assert sent == 1
    assert delivered(caplog)[0].subject == "Critical Stock Alert"


def test_expiration_alert_message(caplog):
    caplog.set_level(logging.INFO)
    recipients = [Recipient(name="Sam", email="sam@clinic.test", phone_number="+15550001111")]

    sent = notifications.send_expiration_alert(
        recipients, "Insulin", NOW + timedelta(days=20), "POD Mobile Clinic", now=NOW
    )

    assert sent == 2
    records = delivered(caplog)
    assert "expires in 20 days at POD Mobile Clinic" in records[0].body
    assert records[1].body == "Insulin expires in 20 days at POD Mobile Clinic."


def test_check_and_alert_targets_stock_roles(db, seeded, make_item, caplog):
    caplog.set_level(logging.INFO)
    item = make_item(name="Saline", quantity=2, low_stock_threshold=5)

    notifications.check_and_alert(db, item, now=NOW)

    records = delivered(caplog)
    # Controller has email + phone, founder has email only; admin/user are not recipients
    assert len(records) == 3
    assert all("Saline" in r.body for r in records)
    assert "Main Clinic" in records[0].body


def test_check_and_alert_quiet_when_healthy(db, seeded, make_item, caplog):
    caplog.set_level(logging.INFO)
    item = make_item(quantity=50, expiration_date=NOW + timedelta(days=365))

    notifications.check_and_alert(db, item, now=NOW)

    assert delivered(caplog) == []


def test_check_and_alert_expiry(db, seeded, make_item, caplog):
    caplog.set_level(logging.INFO)
    item = make_item(quantity=50, expiration_date=NOW + timedelta(days=10))

    notifications.check_and_alert(db, item, now=NOW)

    assert {r.subject for r in delivered(caplog) if r.channel == "email"} == {
        "Expiration Alert: Paracetamol 500mg"
    }


def test_check_and_alert_never_raises(db, seeded, make_item, monkeypatch, caplog):
    item = make_item(quantity=0)

    def boom(_db):
        raise RuntimeError("recipient lookup failed")

    monkeypatch.setattr(stock_service, "alert_recipients", boom)

    notifications.check_and_alert(db, item, now=NOW)

    assert "stock_alert_failed" in caplog.text


def test_adjust_quantity_triggers_alert(db, seeded, make_item, caplog):
    caplog.set_level(logging.INFO)
    item = make_item(quantity=12, low_stock_threshold=10)

    stock_service.adjust_quantity(db, item.id, "issued", 5, user_id=2)

    assert len(delivered(caplog)) == 3
