"""Catalog entries that can be booked against a provider's calendar."""

from __future__ import annotations

import enum
import uuid

from sqlalchemy import Boolean, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from booking_engine.db.base import Base
from booking_engine.models.mixins import TimestampMixin
from booking_engine.models.user import User


class ServiceKind(str, enum.Enum):
    """Catalog category; only appointments occupy provider time."""

    APPOINTMENT = "appointment"
    PRODUCT = "product"


class ServiceOffering(TimestampMixin, Base):
    """Service sold by a provider with a fixed duration."""

    __tablename__ = "service_offerings"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    provider_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    kind: Mapped[ServiceKind] = mapped_column(
        Enum(ServiceKind), nullable=False, default=ServiceKind.APPOINTMENT
    )
    duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    provider: Mapped[User | None] = relationship("User")

    @property
    def is_schedulable(self) -> bool:
        return (
            self.active
            and self.kind is ServiceKind.APPOINTMENT
            and self.duration_minutes is not None
            and self.duration_minutes > 0
        )
