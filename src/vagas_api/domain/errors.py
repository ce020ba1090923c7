class BookingDomainError(Exception):
    """Base class for business-rule rejections surfaced verbatim to callers."""

    pass


class UnauthorizedError(BookingDomainError):
    """Raised when the caller lacks the role required for a booking/facility."""

    pass


class InvalidTransitionError(BookingDomainError):
    """Raised when an operation is not valid from the booking's current status."""

    pass


class SpotUnavailableError(BookingDomainError):
    """Raised when the target spot is not free at reservation time."""

    pass


class NotFoundError(BookingDomainError):
    """Raised when a referenced booking, spot or facility does not exist."""

    pass


class ActiveBookingExistsError(BookingDomainError):
    """Raised when a requester already holds an active booking for today."""

    pass


class ConcurrentUpdateError(RuntimeError):
    """Raised when a conditional write loses a race; safe to retry."""

    pass


class AuthenticationError(Exception):
    """Raised when a caller token cannot be resolved to an identity."""

    pass
