"""Error taxonomy raised by the scheduling and booking services."""


class BookingEngineError(ValueError):
    """Base class for all booking-engine failures reported to callers."""


class NotFoundError(BookingEngineError):
    """A provider, service or booking id does not resolve."""


class NotSchedulableError(BookingEngineError):
    """The service has no usable duration or is not an appointment."""


class InvalidRequestError(BookingEngineError):
    """Malformed input or a state transition the lifecycle does not permit."""


class ConflictError(BookingEngineError):
    """The requested slot overlaps a booking that still holds the time."""


class AuthorizationError(BookingEngineError):
    """The acting user may not perform the requested operation."""


__all__ = [
    "AuthorizationError",
    "BookingEngineError",
    "ConflictError",
    "InvalidRequestError",
    "NotFoundError",
    "NotSchedulableError",
]
