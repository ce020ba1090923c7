from vagas_api.domain.entities import (
    Booking,
    BookingStatusChange,
    Facility,
    HandshakeOutcome,
    Notification,
    Spot,
)
from vagas_api.domain.enums import BookingStatus, ConfirmationParty, NotificationType, SpotStatus
from vagas_api.domain.errors import (
    ActiveBookingExistsError,
    AuthenticationError,
    BookingDomainError,
    ConcurrentUpdateError,
    InvalidTransitionError,
    NotFoundError,
    SpotUnavailableError,
    UnauthorizedError,
)
from vagas_api.domain.ports import (
    BookingRepository,
    DeliveryResult,
    FacilityReader,
    IdentityResolver,
    LifecycleUnitOfWork,
    NotificationGateway,
    NotificationOutbox,
    RetryExecutor,
    SpotRepository,
    UnitOfWorkFactory,
)

__all__ = [
    "ActiveBookingExistsError",
    "AuthenticationError",
    "Booking",
    "BookingDomainError",
    "BookingRepository",
    "BookingStatus",
    "BookingStatusChange",
    "ConcurrentUpdateError",
    "ConfirmationParty",
    "DeliveryResult",
    "Facility",
    "FacilityReader",
    "HandshakeOutcome",
    "IdentityResolver",
    "InvalidTransitionError",
    "LifecycleUnitOfWork",
    "Notification",
    "NotificationGateway",
    "NotificationOutbox",
    "NotificationType",
    "NotFoundError",
    "RetryExecutor",
    "Spot",
    "SpotRepository",
    "SpotStatus",
    "SpotUnavailableError",
    "UnauthorizedError",
    "UnitOfWorkFactory",
]
