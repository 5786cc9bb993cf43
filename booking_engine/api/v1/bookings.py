"""Booking placement and lifecycle endpoints."""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from booking_engine.api import deps
from booking_engine.core.config import get_settings
from booking_engine.models import User
from booking_engine.schemas.booking import (
    BookingCreate,
    BookingRead,
    BookingStatusUpdate,
)
from booking_engine.services import booking_service
from booking_engine.services.errors import BookingEngineError

router = APIRouter()

_settings = get_settings()
_BOOKING_RATE_DEP = deps.rate_limit(_settings.rate_limit_booking, fallback=(20, 60))
_DEFAULT_RATE_DEP = deps.rate_limit(_settings.rate_limit_default)


@router.post(
    "",
    response_model=BookingRead,
    status_code=status.HTTP_201_CREATED,
    summary="Request a booking",
    dependencies=[_BOOKING_RATE_DEP],
)
async def create_booking(
    payload: BookingCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
    background_tasks: BackgroundTasks,
) -> BookingRead:
    try:
        booking = await booking_service.create_booking(
            session,
            user=current_user,
            service_id=payload.service_id,
            start_at=payload.start_at,
            address=payload.address,
            notes=payload.notes,
            background_tasks=background_tasks,
        )
    except BookingEngineError as exc:
        raise deps.to_http_error(exc) from exc
    return BookingRead.model_validate(booking)


@router.post(
    "/{booking_id}/status",
    response_model=BookingRead,
    summary="Transition booking status",
    dependencies=[_DEFAULT_RATE_DEP],
)
async def update_booking_status(
    booking_id: uuid.UUID,
    payload: BookingStatusUpdate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
    background_tasks: BackgroundTasks,
) -> BookingRead:
    try:
        booking = await booking_service.set_status(
            session,
            booking_id=booking_id,
            new_status=payload.status,
            actor=current_user,
            background_tasks=background_tasks,
        )
    except BookingEngineError as exc:
        raise deps.to_http_error(exc) from exc
    return BookingRead.model_validate(booking)


@router.get("", response_model=list[BookingRead], summary="List bookings")
async def list_bookings(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
    provider_id: Annotated[uuid.UUID | None, Query()] = None,
    user_id: Annotated[uuid.UUID | None, Query()] = None,
) -> list[BookingRead]:
    if provider_id is None and user_id is None:
        user_id = current_user.id
    try:
        bookings = await booking_service.list_bookings(
            session,
            actor=current_user,
            provider_id=provider_id,
            user_id=user_id,
        )
    except BookingEngineError as exc:
        raise deps.to_http_error(exc) from exc
    return [BookingRead.model_validate(obj) for obj in bookings]
