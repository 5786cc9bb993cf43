"""Pydantic schemas for booking endpoints."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from booking_engine.models.booking import BookingStatus


class BookingCreate(BaseModel):
    service_id: uuid.UUID
    start_at: datetime
    address: str | None = Field(default=None, max_length=512)
    notes: str | None = Field(default=None, max_length=1024)


class BookingRead(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    provider_id: uuid.UUID
    service_id: uuid.UUID
    start_at: datetime
    end_at: datetime
    status: BookingStatus
    address: str | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator("start_at", "end_at", "created_at", "updated_at")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        # SQLite hands back naive values; everything is stored in UTC.
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)


class BookingStatusUpdate(BaseModel):
    status: BookingStatus
