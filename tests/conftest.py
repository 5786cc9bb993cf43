"""Test fixtures for the booking engine."""
from __future__ import annotations

import os
import uuid
from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")

from booking_engine.core.config import get_settings
from booking_engine.db.base import Base
from booking_engine.db.session import dispose_engine, get_sessionmaker
from booking_engine.main import app
from booking_engine.models import (
    ServiceKind,
    ServiceOffering,
    User,
    UserRole,
    UserStatus,
)


@pytest.fixture(scope="session")
def db_url(tmp_path_factory: pytest.TempPathFactory) -> str:
    """Provide a temporary SQLite database URL for the test session."""
    db_path = tmp_path_factory.mktemp("db") / "test.db"
    return f"sqlite+aiosqlite:///{db_path}"


@pytest_asyncio.fixture()
async def reset_database(db_url: str) -> AsyncIterator[None]:
    """Drop and recreate the database schema for an isolated test."""
    os.environ["DATABASE_URL"] = db_url
    get_settings.cache_clear()
    get_settings()

    await dispose_engine(db_url)
    engine = create_async_engine(db_url)
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.drop_all)
        await connection.run_sync(Base.metadata.create_all)
    await engine.dispose()
    yield
    await dispose_engine(db_url)


@pytest_asyncio.fixture()
async def booking_setup(reset_database: None, db_url: str) -> dict[str, uuid.UUID]:
    """Seed one provider with a bookable service plus requesters and an admin."""
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        admin = User(
            full_name="Avery Admin",
            role=UserRole.ADMIN,
            status=UserStatus.ACTIVE,
        )
        provider = User(
            full_name="Pat Plumber",
            phone_number="(319) 555-0101",
            role=UserRole.PROVIDER,
            status=UserStatus.ACTIVE,
        )
        other_provider = User(
            full_name="Olive Electric",
            phone_number="319-555-0199",
            role=UserRole.PROVIDER,
            status=UserStatus.ACTIVE,
        )
        customer = User(
            full_name="Casey Customer",
            phone_number="+1 319 555 0142",
            role=UserRole.CUSTOMER,
            status=UserStatus.ACTIVE,
        )
        other_customer = User(
            full_name="Drew Neighbor",
            role=UserRole.CUSTOMER,
            status=UserStatus.ACTIVE,
        )
        session.add_all([admin, provider, other_provider, customer, other_customer])
        await session.flush()

        service = ServiceOffering(
            provider_id=provider.id,
            name="Drain Cleaning",
            kind=ServiceKind.APPOINTMENT,
            duration_minutes=30,
        )
        product = ServiceOffering(
            provider_id=provider.id,
            name="Drain Snake",
            kind=ServiceKind.PRODUCT,
            duration_minutes=None,
        )
        orphan = ServiceOffering(
            provider_id=None,
            name="Unassigned Visit",
            kind=ServiceKind.APPOINTMENT,
            duration_minutes=60,
        )
        session.add_all([service, product, orphan])
        await session.commit()

        return {
            "admin_id": admin.id,
            "provider_id": provider.id,
            "other_provider_id": other_provider.id,
            "customer_id": customer.id,
            "other_customer_id": other_customer.id,
            "service_id": service.id,
            "product_id": product.id,
            "orphan_service_id": orphan.id,
        }


@pytest_asyncio.fixture()
async def app_context(
    booking_setup: dict[str, uuid.UUID],
) -> AsyncIterator[dict[str, object]]:
    """Yield an async client alongside the seeded ids."""
    context: dict[str, object] = dict(booking_setup)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        context["client"] = client
        yield context
