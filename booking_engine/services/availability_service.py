"""Open-slot resolution for a service on a calendar date."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timedelta
from typing import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from booking_engine.models import ServiceOffering, User
from booking_engine.services import booking_service, catalog_service, schedule_service
from booking_engine.services.slot_generator import (
    day_bounds,
    generate_slots,
    normalize_datetime,
    overlaps,
)


def filter_open_slots(
    candidates: Iterable[datetime],
    *,
    duration_minutes: int,
    busy: Iterable[tuple[datetime, datetime]],
) -> list[datetime]:
    """Drop candidates overlapping any busy window; return unique starts in order."""
    length = timedelta(minutes=duration_minutes)
    windows = [
        (normalize_datetime(start), normalize_datetime(end)) for start, end in busy
    ]
    open_starts: set[datetime] = set()
    for start in candidates:
        end = start + length
        if any(overlaps(start, end, busy_start, busy_end) for busy_start, busy_end in windows):
            continue
        open_starts.add(start)
    return sorted(open_starts)


async def get_open_slots(
    session: AsyncSession,
    *,
    service_id: uuid.UUID,
    on_date: date,
) -> list[datetime]:
    """Bookable start instants (UTC) for ``service_id`` on ``on_date``.

    A provider with no stored availability, or whose effective schedule for
    the date is closed, yields an empty list rather than an error.
    """
    service, provider = await catalog_service.resolve_schedulable_service(
        session, service_id=service_id
    )
    return await open_slots_for_service(
        session, service=service, provider=provider, on_date=on_date
    )


async def open_slots_for_service(
    session: AsyncSession,
    *,
    service: ServiceOffering,
    provider: User,
    on_date: date,
) -> list[datetime]:
    """Open slots for a service already resolved as schedulable."""
    duration_minutes = service.duration_minutes or 0

    availability = await schedule_service.get_availability(
        session, provider_id=provider.id
    )
    if availability is None:
        return []
    day_schedule = schedule_service.effective_day_schedule(availability, on_date)
    if not day_schedule.is_active or not day_schedule.slots:
        return []

    candidates = generate_slots(day_schedule, duration_minutes, on_date)
    window_start, window_end = day_bounds(on_date)
    bookings = await booking_service.find_blocking_bookings(
        session,
        provider_id=provider.id,
        start_at=window_start,
        end_at=window_end,
    )
    return filter_open_slots(
        candidates,
        duration_minutes=duration_minutes,
        busy=[(booking.start_at, booking.end_at) for booking in bookings],
    )
