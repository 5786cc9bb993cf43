"""ORM models package export."""

from booking_engine.models.availability import Availability
from booking_engine.models.booking import (
    BLOCKING_STATUSES,
    RELEASED_STATUSES,
    Booking,
    BookingStatus,
)
from booking_engine.models.service_offering import ServiceKind, ServiceOffering
from booking_engine.models.user import User, UserRole, UserStatus

__all__ = [
    "Availability",
    "Booking",
    "BookingStatus",
    "BLOCKING_STATUSES",
    "RELEASED_STATUSES",
    "ServiceKind",
    "ServiceOffering",
    "User",
    "UserRole",
    "UserStatus",
]
