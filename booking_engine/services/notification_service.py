"""SMS notifications for booking outcomes.

Messages are queued on FastAPI ``BackgroundTasks`` and delivered after the
response is sent. Delivery never raises: failures are logged and dropped so
they cannot affect the booking that triggered them.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Iterable

from fastapi import BackgroundTasks

from booking_engine.core.config import get_settings
from booking_engine.models import Booking, BookingStatus, ServiceOffering, User
from booking_engine.services.slot_generator import normalize_datetime

logger = logging.getLogger(__name__)

_PHONE_CLEAN_RE = re.compile(r"[^0-9+]")

_STATUS_PHRASES: dict[BookingStatus, str] = {
    BookingStatus.ACCEPTED: "has been accepted",
    BookingStatus.REJECTED: "was declined",
    BookingStatus.COMPLETED: "is marked as completed",
    BookingStatus.CANCELLED: "has been cancelled",
}


def normalize_phone(raw: str) -> str:
    """Normalize a phone number to E.164 format (US default)."""

    if not raw:
        raise ValueError("Phone number is required")
    cleaned = _PHONE_CLEAN_RE.sub("", raw)
    if cleaned.startswith("+"):
        digits = cleaned[1:]
    else:
        digits = cleaned
    if digits.startswith("1") and len(digits) == 11:
        return "+" + digits
    if len(digits) == 10:
        return "+1" + digits
    if cleaned.startswith("+") and len(digits) >= 8:
        return "+" + digits
    raise ValueError("Unsupported phone number format")


def _format_moment(moment: datetime) -> str:
    return normalize_datetime(moment).strftime("%Y-%m-%d %H:%M UTC")


def build_booking_requested_sms(*, service_name: str, start_at: datetime) -> str:
    sender = get_settings().sms_sender_name
    return (
        f"{sender}: New booking request for {service_name} on "
        f"{_format_moment(start_at)}. Please accept or reject it."
    )


def build_booking_status_sms(
    *, service_name: str, start_at: datetime, status: BookingStatus
) -> str:
    sender = get_settings().sms_sender_name
    phrase = _STATUS_PHRASES.get(status, f"is now {status.value}")
    return (
        f"{sender}: Your booking for {service_name} on "
        f"{_format_moment(start_at)} {phrase}."
    )


def schedule_sms(
    background_tasks: BackgroundTasks,
    *,
    phone_numbers: Iterable[str | None],
    message: str,
) -> int:
    """Queue SMS delivery for each usable number; returns how many were queued."""
    queued = 0
    for raw in phone_numbers:
        if not raw:
            continue
        try:
            number = normalize_phone(raw)
        except ValueError:
            logger.warning("Skipping SMS to unusable phone number %s", raw)
            continue
        background_tasks.add_task(_deliver_sms, number, message)
        queued += 1
    if not queued:
        logger.debug("No phone numbers available for SMS; skipping")
    return queued


def notify_booking_requested(
    booking: Booking,
    *,
    provider: User,
    service: ServiceOffering,
    background_tasks: BackgroundTasks,
) -> int:
    message = build_booking_requested_sms(
        service_name=service.name, start_at=booking.start_at
    )
    return schedule_sms(
        background_tasks, phone_numbers=[provider.phone_number], message=message
    )


def notify_booking_status(
    booking: Booking,
    *,
    recipient: User,
    service: ServiceOffering,
    background_tasks: BackgroundTasks,
) -> int:
    message = build_booking_status_sms(
        service_name=service.name,
        start_at=booking.start_at,
        status=booking.status,
    )
    return schedule_sms(
        background_tasks, phone_numbers=[recipient.phone_number], message=message
    )


def _send_sms(phone_number: str, message: str) -> None:
    settings = get_settings()
    if not settings.sms_enabled:
        logger.debug("SMS disabled; dropping message to %s", phone_number)
        return
    logger.info("SMS to %s: %s", phone_number, message)


def _deliver_sms(phone_number: str, message: str) -> None:
    try:
        _send_sms(phone_number, message)
    except Exception:
        logger.exception("SMS delivery to %s failed", phone_number)
