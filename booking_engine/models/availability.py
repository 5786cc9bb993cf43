"""Provider availability stored as a single weekly document."""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import JSON, ForeignKey, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from booking_engine.db.base import Base
from booking_engine.models.mixins import TimestampMixin

JSONB_TYPE = JSONB(astext_type=Text()).with_variant(JSON(), "sqlite")


class Availability(TimestampMixin, Base):
    """Weekly recurring blocks plus per-date overrides for one provider.

    ``days`` maps weekday names to ``{"is_active": bool, "slots": [...]}`` and
    ``custom_dates`` holds ``{"date": "YYYY-MM-DD", "is_active": ..., "slots": ...}``
    entries, one per calendar date. Both are rewritten together on every update.
    """

    __tablename__ = "availabilities"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    provider_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    days: Mapped[dict[str, Any]] = mapped_column(JSONB_TYPE, nullable=False)
    custom_dates: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONB_TYPE, nullable=False, default=list
    )
