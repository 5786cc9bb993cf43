"""Booking records placed against a provider's time."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from booking_engine.db.base import Base
from booking_engine.models.mixins import TimestampMixin
from booking_engine.models.service_offering import ServiceOffering
from booking_engine.models.user import User


class BookingStatus(str, enum.Enum):
    """Lifecycle states for bookings."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Bookings in these states no longer hold the provider's time.
RELEASED_STATUSES: frozenset[BookingStatus] = frozenset(
    {BookingStatus.REJECTED, BookingStatus.CANCELLED}
)
BLOCKING_STATUSES: frozenset[BookingStatus] = frozenset(
    status for status in BookingStatus if status not in RELEASED_STATUSES
)


class Booking(TimestampMixin, Base):
    """A user's reservation of one provider slot."""

    __tablename__ = "bookings"
    __table_args__ = (
        Index("ix_bookings_provider_start", "provider_id", "start_at"),
        Index("ix_bookings_user", "user_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    provider_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    service_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("service_offerings.id", ondelete="CASCADE"), nullable=False
    )
    start_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[BookingStatus] = mapped_column(
        Enum(BookingStatus),
        nullable=False,
        default=BookingStatus.PENDING,
    )
    address: Mapped[str | None] = mapped_column(String(512))
    notes: Mapped[str | None] = mapped_column(String(1024))

    user: Mapped[User] = relationship("User", foreign_keys=[user_id])
    provider: Mapped[User] = relationship("User", foreign_keys=[provider_id])
    service: Mapped[ServiceOffering] = relationship("ServiceOffering")
