"""Storage of provider weekly availability and per-date overrides."""

from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from booking_engine.core.config import get_settings
from booking_engine.models import Availability, User, UserRole
from booking_engine.schemas.availability import (
    AvailabilityUpdate,
    CustomDateOverride,
    DaySchedule,
    Weekday,
)
from booking_engine.services.errors import AuthorizationError, NotFoundError
from booking_engine.services.slot_generator import weekday_of

logger = logging.getLogger(__name__)


async def get_provider(session: AsyncSession, *, provider_id: uuid.UUID) -> User:
    provider = await session.get(User, provider_id)
    if provider is None or provider.role is not UserRole.PROVIDER:
        raise NotFoundError("Provider not found")
    return provider


def default_days() -> dict[str, Any]:
    """Closed week with a single configurable block on every day."""
    settings = get_settings()
    block = {"start": settings.default_block_start, "end": settings.default_block_end}
    return {day.value: {"is_active": False, "slots": [dict(block)]} for day in Weekday}


async def get_availability(
    session: AsyncSession, *, provider_id: uuid.UUID
) -> Availability | None:
    """Return the stored availability document, or ``None`` if never configured."""
    stmt = select(Availability).where(Availability.provider_id == provider_id)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def get_or_create_availability(
    session: AsyncSession, *, provider_id: uuid.UUID
) -> Availability:
    await get_provider(session, provider_id=provider_id)
    existing = await get_availability(session, provider_id=provider_id)
    if existing is not None:
        return existing

    availability = Availability(
        provider_id=provider_id, days=default_days(), custom_dates=[]
    )
    session.add(availability)
    try:
        await session.commit()
    except IntegrityError:
        # Another request created the default document first.
        await session.rollback()
        existing = await get_availability(session, provider_id=provider_id)
        if existing is None:
            raise
        return existing
    await session.refresh(availability)
    logger.info("Created default availability for provider %s", provider_id)
    return availability


def _ensure_can_edit(actor: User, provider_id: uuid.UUID) -> None:
    if actor.role is UserRole.ADMIN:
        return
    if actor.id != provider_id:
        raise AuthorizationError(
            "Only the provider or an administrator may change availability"
        )


async def upsert_availability(
    session: AsyncSession,
    *,
    provider_id: uuid.UUID,
    payload: AvailabilityUpdate,
    actor: User,
) -> Availability:
    """Replace the provider's weekly map and override list in one write.

    Overrides are keyed by calendar date; when the payload repeats a date the
    last entry wins.
    """
    _ensure_can_edit(actor, provider_id)
    await get_provider(session, provider_id=provider_id)

    days = {
        weekday.value: schedule.model_dump(mode="json")
        for weekday, schedule in payload.days.items()
    }
    by_date: dict[date, CustomDateOverride] = {}
    for override in payload.custom_dates:
        by_date[override.date] = override
    custom_dates = [by_date[key].model_dump(mode="json") for key in sorted(by_date)]

    availability = await get_availability(session, provider_id=provider_id)
    if availability is None:
        availability = Availability(
            provider_id=provider_id, days=days, custom_dates=custom_dates
        )
        session.add(availability)
    else:
        availability.days = days
        availability.custom_dates = custom_dates
    try:
        await session.commit()
    except IntegrityError:
        # A concurrent first write inserted the row; replace its contents.
        await session.rollback()
        availability = await get_availability(session, provider_id=provider_id)
        if availability is None:
            raise
        availability.days = days
        availability.custom_dates = custom_dates
        await session.commit()
    await session.refresh(availability)
    logger.info(
        "Availability for provider %s replaced (%d overrides)",
        provider_id,
        len(custom_dates),
    )
    return availability


def effective_day_schedule(availability: Availability, on_date: date) -> DaySchedule:
    """Schedule in force on ``on_date``: an override fully replaces the weekday entry."""
    key = on_date.isoformat()
    for entry in availability.custom_dates:
        if entry.get("date") == key:
            return DaySchedule.model_validate(entry)
    weekly = availability.days.get(weekday_of(on_date).value)
    if weekly is None:
        return DaySchedule()
    return DaySchedule.model_validate(weekly)
