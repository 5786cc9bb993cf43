"""Lookups against the service catalog collaborator."""

from __future__ import annotations

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from booking_engine.models import ServiceOffering, User
from booking_engine.services.errors import NotFoundError, NotSchedulableError
from booking_engine.services.schedule_service import get_provider


async def get_service(
    session: AsyncSession, *, service_id: uuid.UUID
) -> ServiceOffering:
    service = await session.get(ServiceOffering, service_id)
    if service is None:
        raise NotFoundError("Service not found")
    return service


async def resolve_schedulable_service(
    session: AsyncSession, *, service_id: uuid.UUID
) -> tuple[ServiceOffering, User]:
    """Return the service and its provider, rejecting anything not bookable."""
    service = await get_service(session, service_id=service_id)
    if not service.is_schedulable:
        raise NotSchedulableError("Service is not bookable")
    if service.provider_id is None:
        raise NotFoundError("Provider not found")
    provider = await get_provider(session, provider_id=service.provider_id)
    return service, provider
