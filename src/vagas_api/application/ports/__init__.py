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
    "BookingRepository",
    "DeliveryResult",
    "FacilityReader",
    "IdentityResolver",
    "LifecycleUnitOfWork",
    "NotificationGateway",
    "NotificationOutbox",
    "RetryExecutor",
    "SpotRepository",
    "UnitOfWorkFactory",
]
