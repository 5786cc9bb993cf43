"""Provider availability and open-slot endpoints."""

from __future__ import annotations

import uuid
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from booking_engine.api import deps
from booking_engine.models import User
from booking_engine.schemas.availability import (
    AvailabilityRead,
    AvailabilityUpdate,
    OpenSlotsRead,
)
from booking_engine.services import (
    availability_service,
    catalog_service,
    schedule_service,
)
from booking_engine.services.errors import BookingEngineError

router = APIRouter()


@router.get(
    "/providers/{provider_id}/availability",
    response_model=AvailabilityRead,
    summary="Get provider availability",
)
async def get_provider_availability(
    provider_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
) -> AvailabilityRead:
    try:
        availability = await schedule_service.get_or_create_availability(
            session, provider_id=provider_id
        )
    except BookingEngineError as exc:
        raise deps.to_http_error(exc) from exc
    return AvailabilityRead.model_validate(availability)


@router.put(
    "/providers/{provider_id}/availability",
    response_model=AvailabilityRead,
    summary="Replace provider availability",
)
async def put_provider_availability(
    provider_id: uuid.UUID,
    payload: AvailabilityUpdate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
) -> AvailabilityRead:
    try:
        availability = await schedule_service.upsert_availability(
            session,
            provider_id=provider_id,
            payload=payload,
            actor=current_user,
        )
    except BookingEngineError as exc:
        raise deps.to_http_error(exc) from exc
    return AvailabilityRead.model_validate(availability)


@router.get(
    "/services/{service_id}/slots",
    response_model=OpenSlotsRead,
    summary="List open slots for a service on a date",
)
async def list_open_slots(
    service_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
    on_date: Annotated[date, Query(alias="date")],
) -> OpenSlotsRead:
    try:
        service, provider = await catalog_service.resolve_schedulable_service(
            session, service_id=service_id
        )
        slots = await availability_service.open_slots_for_service(
            session, service=service, provider=provider, on_date=on_date
        )
    except BookingEngineError as exc:
        raise deps.to_http_error(exc) from exc
    return OpenSlotsRead(
        service_id=service.id,
        provider_id=provider.id,
        date=on_date,
        duration_minutes=service.duration_minutes,
        slots=slots,
    )
