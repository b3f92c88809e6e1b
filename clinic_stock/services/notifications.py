"""Low-stock and expiry notifications over email and SMS.

Delivery is fire-and-forget: a failed send is logged and never reaches the
stock operation that triggered it. No provider is wired in yet; messages are
emitted as structured log records on the ``clinic_stock.notify`` logger.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from clinic_stock.core.config import get_settings
from clinic_stock.core.metrics import notifications_sent_total
from clinic_stock.db.models import StockItem, utcnow
from clinic_stock.domain.stock.movements import days_until_expiry, is_expiring, is_low_stock
from clinic_stock.services import stock_service

logger = logging.getLogger(__name__)
delivery_log = logging.getLogger("clinic_stock.notify")


@dataclass(frozen=True)
class Recipient:
    """Alert recipient contact details."""

    name: str
    email: str = ""
    phone_number: str | None = None


def send_email_notification(email: str, subject: str, message: str, *, kind: str = "generic") -> bool:
    """Send email notification.

    Returns:
        True if the message was handed off, False otherwise.

    """
    if not email:
        logger.warning("No email provided for email notification")
        return False
    if not get_settings().notify_email_enabled:
        logger.debug("Email notifications disabled, skipping")
        return False

    try:
        delivery_log.info(
            "email_notification",
            extra={"channel": "email", "email": email, "subject": subject, "body": message},
        )
    except Exception:
        logger.exception("Failed to send email notification")
        return False

    notifications_sent_total.labels(channel="email", kind=kind).inc()
    return True


def send_sms_notification(phone_number: str | None, message: str, *, kind: str = "generic") -> bool:
    """Send SMS notification.

    Returns:
        True if the message was handed off, False otherwise.

    """
    if not phone_number:
        logger.warning("No phone number provided for SMS notification")
        return False
    if not get_settings().notify_sms_enabled:
        logger.debug("SMS notifications disabled, skipping")
        return False

    try:
        delivery_log.info(
            "sms_notification",
            extra={"channel": "sms", "phone_number": phone_number, "body": message},
        )
    except Exception:
        logger.exception("Failed to send SMS notification")
        return False

    notifications_sent_total.labels(channel="sms", kind=kind).inc()
    return True


def notify_owner(title: str, content: str) -> bool:
    """Notify the clinic owner (configured by OWNER_EMAIL)."""
    owner_email = get_settings().owner_email
    if not owner_email:
        logger.debug("No owner_email configured, skipping owner notification")
        return False
    return send_email_notification(owner_email, title, content, kind="owner")


def send_low_stock_alert(
    recipients: list[Recipient],
    item_name: str,
    current_quantity: int,
    threshold: int,
    dispensary_name: str,
) -> int:
    """Alert every recipient that an item is at or below its threshold.

    Returns:
        Number of messages handed off

    """
    message = (
        f'CRITICAL ALERT: Stock level for "{item_name}" is critically low! '
        f"Current: {current_quantity} units (Threshold: {threshold}) at {dispensary_name}"
    )
    subject = f"Critical Stock Alert: {item_name}"
    sms = (
        f"{item_name} is critically low ({current_quantity}/{threshold}) at "
        f"{dispensary_name}. Please restock immediately."
    )

    sent = 0
    for recipient in recipients:
        if recipient.email:
            sent += send_email_notification(
                recipient.email, subject, f"{message}\n\nPlease restock immediately.", kind="low_stock"
            )
        if recipient.phone_number:
            sent += send_sms_notification(recipient.phone_number, sms, kind="low_stock")

    sent += notify_owner(
        "Critical Stock Alert",
        f"{item_name} is critically low at {dispensary_name}. "
        f"Current: {current_quantity} units (Threshold: {threshold})",
    )
    return sent


def send_expiration_alert(
    recipients: list[Recipient],
    item_name: str,
    expiration_date: datetime,
    dispensary_name: str,
    now: datetime | None = None,
) -> int:
    """Alert every recipient that an item expires soon.

    Returns:
        Number of messages handed off

    """
    days_left = days_until_expiry(expiration_date, now or utcnow())
    message = f'EXPIRATION ALERT: "{item_name}" expires in {days_left} days at {dispensary_name}'
    subject = f"Expiration Alert: {item_name}"

    sent = 0
    for recipient in recipients:
        if recipient.email:
            sent += send_email_notification(
                recipient.email,
                subject,
                f"{message}\n\nPlease review and use before expiration.",
                kind="expiry",
            )
        if recipient.phone_number:
            sent += send_sms_notification(
                recipient.phone_number,
                f"{item_name} expires in {days_left} days at {dispensary_name}.",
                kind="expiry",
            )
    return sent


def _recipients(db: Session) -> list[Recipient]:
    return [
        Recipient(
            name=user.name or "Stock Controller",
            email=user.email or "",
            phone_number=user.phone_number or None,
        )
        for user in stock_service.alert_recipients(db)
    ]


def check_and_alert(db: Session, item: StockItem, now: datetime | None = None) -> None:
    """Run low-stock and expiry checks for an item and send alerts.

    Never raises: alert failures are logged only.
    """
    try:
        now = now or utcnow()
        low = is_low_stock(item.quantity, item.low_stock_threshold)
        expiring = is_expiring(item.expiration_date, now, get_settings().expiry_warning_days)
        if not (low or expiring):
            return

        dispensary = stock_service.get_dispensary(db, item.dispensary_id)
        dispensary_name = dispensary.name if dispensary else "Unknown Dispensary"
        recipients = _recipients(db)

        if low:
            send_low_stock_alert(
                recipients, item.name, item.quantity, item.low_stock_threshold, dispensary_name
            )
        if expiring:
            send_expiration_alert(recipients, item.name, item.expiration_date, dispensary_name, now)
    except Exception:
        logger.exception("stock_alert_failed", extra={"stock_item_id": item.id})
