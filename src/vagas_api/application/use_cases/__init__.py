from vagas_api.application.use_cases.base import (
    BookingActionRequest,
    BookingAuditLogger,
    BookingLifecycleUseCase,
)
from vagas_api.application.use_cases.booking_queries_use_case import (
    GetBookingUseCase,
    ListNotificationsUseCase,
    ListPendingBookingsUseCase,
)
from vagas_api.application.use_cases.cancel_booking_use_case import CancelBookingUseCase
from vagas_api.application.use_cases.confirm_presence_use_case import (
    ConfirmArrivalUseCase,
    ConfirmDepartureUseCase,
    ConfirmPresenceRequest,
    ConfirmPresenceResult,
)
from vagas_api.application.use_cases.create_booking_use_case import (
    DEFAULT_EXPIRY_MINUTES,
    CreateBookingRequest,
    CreateBookingUseCase,
)
from vagas_api.application.use_cases.decide_booking_use_case import (
    AcceptBookingUseCase,
    RejectBookingUseCase,
)
from vagas_api.application.use_cases.expire_pending_bookings_use_case import (
    ExpirationReport,
    ExpirePendingBookingsUseCase,
)
from vagas_api.application.use_cases.spot_management_use_case import (
    GetSpotStatsUseCase,
    SetSpotMaintenanceRequest,
    SetSpotMaintenanceUseCase,
    SpotStats,
)

__all__ = [
    "AcceptBookingUseCase",
    "BookingActionRequest",
    "BookingAuditLogger",
    "BookingLifecycleUseCase",
    "CancelBookingUseCase",
    "ConfirmArrivalUseCase",
    "ConfirmDepartureUseCase",
    "ConfirmPresenceRequest",
    "ConfirmPresenceResult",
    "CreateBookingRequest",
    "CreateBookingUseCase",
    "DEFAULT_EXPIRY_MINUTES",
    "ExpirationReport",
    "ExpirePendingBookingsUseCase",
    "GetBookingUseCase",
    "GetSpotStatsUseCase",
    "ListNotificationsUseCase",
    "ListPendingBookingsUseCase",
    "RejectBookingUseCase",
    "SetSpotMaintenanceRequest",
    "SetSpotMaintenanceUseCase",
    "SpotStats",
]
