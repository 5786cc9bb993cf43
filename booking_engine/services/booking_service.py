"""Booking placement and lifecycle management."""

from __future__ import annotations

import asyncio
import enum
import logging
import uuid
import weakref
from datetime import datetime, timedelta

from fastapi import BackgroundTasks
from sqlalchemy import Select, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from booking_engine.models import (
    BLOCKING_STATUSES,
    Booking,
    BookingStatus,
    ServiceOffering,
    User,
    UserRole,
)
from booking_engine.services import catalog_service, notification_service
from booking_engine.services.errors import (
    AuthorizationError,
    ConflictError,
    InvalidRequestError,
    NotFoundError,
)
from booking_engine.services.slot_generator import normalize_datetime

logger = logging.getLogger(__name__)


class _Party(enum.Enum):
    PROVIDER = "provider"
    REQUESTER = "requester"


# Edge -> parties allowed to take it. Administrators may take any edge.
_ALLOWED_STATUS_TRANSITIONS: dict[
    BookingStatus, dict[BookingStatus, frozenset[_Party]]
] = {
    BookingStatus.PENDING: {
        BookingStatus.ACCEPTED: frozenset({_Party.PROVIDER}),
        BookingStatus.REJECTED: frozenset({_Party.PROVIDER}),
        BookingStatus.CANCELLED: frozenset({_Party.REQUESTER}),
    },
    BookingStatus.ACCEPTED: {
        BookingStatus.COMPLETED: frozenset({_Party.PROVIDER}),
        BookingStatus.CANCELLED: frozenset({_Party.PROVIDER, _Party.REQUESTER}),
    },
    BookingStatus.REJECTED: {},
    BookingStatus.COMPLETED: {},
    BookingStatus.CANCELLED: {},
}


class ProviderLocks:
    """In-process ``asyncio.Lock`` per provider id.

    Entries disappear once no coroutine holds a reference to the lock.
    """

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[uuid.UUID, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def for_provider(self, provider_id: uuid.UUID) -> asyncio.Lock:
        lock = self._locks.get(provider_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[provider_id] = lock
        return lock


_provider_locks = ProviderLocks()


def can_transition(current: BookingStatus, new_status: BookingStatus) -> bool:
    return new_status in _ALLOWED_STATUS_TRANSITIONS[current]


async def find_blocking_bookings(
    session: AsyncSession,
    *,
    provider_id: uuid.UUID,
    start_at: datetime,
    end_at: datetime,
    exclude_booking_id: uuid.UUID | None = None,
) -> list[Booking]:
    """Bookings still holding provider time that overlap ``[start_at, end_at)``."""
    stmt: Select[tuple[Booking]] = (
        select(Booking)
        .where(
            Booking.provider_id == provider_id,
            Booking.status.in_(BLOCKING_STATUSES),
            Booking.start_at < end_at,
            Booking.end_at > start_at,
        )
        .order_by(Booking.start_at.asc())
    )
    if exclude_booking_id is not None:
        stmt = stmt.where(Booking.id != exclude_booking_id)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def _lock_provider_row(session: AsyncSession, provider_id: uuid.UUID) -> None:
    # Serializes writers across processes on PostgreSQL; a no-op on SQLite.
    await session.execute(
        select(User.id).where(User.id == provider_id).with_for_update()
    )


async def create_booking(
    session: AsyncSession,
    *,
    user: User,
    service_id: uuid.UUID,
    start_at: datetime,
    address: str | None = None,
    notes: str | None = None,
    background_tasks: BackgroundTasks | None = None,
    locks: ProviderLocks | None = None,
) -> Booking:
    """Place a pending booking, or raise ``ConflictError`` if the slot is taken.

    The overlap check always runs again here, under the provider lock, even
    when the caller has just seen the slot listed as open. ``locks`` defaults
    to the process-wide registry.
    """
    service, provider = await catalog_service.resolve_schedulable_service(
        session, service_id=service_id
    )
    provider_id = provider.id
    start_at_utc = normalize_datetime(start_at)
    end_at = start_at_utc + timedelta(minutes=service.duration_minutes or 0)

    registry = locks if locks is not None else _provider_locks
    async with registry.for_provider(provider_id):
        await _lock_provider_row(session, provider_id)
        clashes = await find_blocking_bookings(
            session,
            provider_id=provider_id,
            start_at=start_at_utc,
            end_at=end_at,
        )
        if clashes:
            logger.info(
                "Booking conflict for provider %s at %s",
                provider_id,
                start_at_utc.isoformat(),
            )
            await session.rollback()
            raise ConflictError("Slot no longer available")

        booking = Booking(
            user_id=user.id,
            provider_id=provider_id,
            service_id=service.id,
            start_at=start_at_utc,
            end_at=end_at,
            status=BookingStatus.PENDING,
            address=address,
            notes=notes,
        )
        session.add(booking)
        await session.commit()

    logger.info(
        "Booking %s created for provider %s at %s",
        booking.id,
        provider_id,
        start_at_utc.isoformat(),
    )
    if background_tasks is not None:
        notification_service.notify_booking_requested(
            booking,
            provider=provider,
            service=service,
            background_tasks=background_tasks,
        )
    return booking


async def get_booking(session: AsyncSession, *, booking_id: uuid.UUID) -> Booking:
    booking = await session.get(Booking, booking_id)
    if booking is None:
        raise NotFoundError("Booking not found")
    return booking


def _parties(booking: Booking, actor: User) -> set[_Party]:
    parties: set[_Party] = set()
    if actor.role is UserRole.ADMIN or actor.id == booking.provider_id:
        parties.add(_Party.PROVIDER)
    if actor.id == booking.user_id:
        parties.add(_Party.REQUESTER)
    return parties


async def set_status(
    session: AsyncSession,
    *,
    booking_id: uuid.UUID,
    new_status: BookingStatus,
    actor: User,
    background_tasks: BackgroundTasks | None = None,
) -> Booking:
    booking = await get_booking(session, booking_id=booking_id)
    parties = _parties(booking, actor)
    if not parties:
        raise AuthorizationError("Not permitted to update this booking")

    current = booking.status
    allowed = _ALLOWED_STATUS_TRANSITIONS[current]
    if new_status not in allowed:
        raise InvalidRequestError(
            f"Status transition not allowed: {current.value} -> {new_status.value}"
        )
    if actor.role is not UserRole.ADMIN and not parties & allowed[new_status]:
        raise AuthorizationError(
            f"Not permitted to move this booking to {new_status.value}"
        )

    result = await session.execute(
        update(Booking)
        .where(Booking.id == booking.id, Booking.status == current)
        .values(status=new_status)
    )
    if result.rowcount == 0:
        await session.rollback()
        raise ConflictError("Booking status changed concurrently; reload and retry")
    await session.commit()
    await session.refresh(booking)
    logger.info(
        "Booking %s moved %s -> %s by %s",
        booking.id,
        current.value,
        new_status.value,
        actor.id,
    )

    if background_tasks is not None:
        recipient = await session.get(User, booking.user_id)
        service = await session.get(ServiceOffering, booking.service_id)
        if recipient is not None and service is not None:
            notification_service.notify_booking_status(
                booking,
                recipient=recipient,
                service=service,
                background_tasks=background_tasks,
            )
    return booking


async def list_bookings(
    session: AsyncSession,
    *,
    actor: User,
    provider_id: uuid.UUID | None = None,
    user_id: uuid.UUID | None = None,
) -> list[Booking]:
    """Bookings for exactly one provider or one requesting user, newest first."""
    if (provider_id is None) == (user_id is None):
        raise InvalidRequestError("Specify exactly one of provider_id or user_id")
    subject_id = provider_id if provider_id is not None else user_id
    if actor.role is not UserRole.ADMIN and actor.id != subject_id:
        raise AuthorizationError("Not permitted to list these bookings")

    stmt: Select[tuple[Booking]] = select(Booking)
    if provider_id is not None:
        stmt = stmt.where(Booking.provider_id == provider_id)
    else:
        stmt = stmt.where(Booking.user_id == user_id)
    stmt = stmt.order_by(Booking.created_at.desc(), Booking.start_at.desc())
    result = await session.execute(stmt)
    return list(result.scalars().all())
