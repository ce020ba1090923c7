from vagas_api.application.services import NotificationEmitter, SpotAllocator
from vagas_api.application.use_cases import (
    AcceptBookingUseCase,
    BookingActionRequest,
    CancelBookingUseCase,
    ConfirmArrivalUseCase,
    ConfirmDepartureUseCase,
    ConfirmPresenceRequest,
    CreateBookingRequest,
    CreateBookingUseCase,
    ExpirationReport,
    ExpirePendingBookingsUseCase,
    GetBookingUseCase,
    GetSpotStatsUseCase,
    ListNotificationsUseCase,
    ListPendingBookingsUseCase,
    RejectBookingUseCase,
    SetSpotMaintenanceRequest,
    SetSpotMaintenanceUseCase,
    SpotStats,
)

__all__ = [
    "AcceptBookingUseCase",
    "BookingActionRequest",
    "CancelBookingUseCase",
    "ConfirmArrivalUseCase",
    "ConfirmDepartureUseCase",
    "ConfirmPresenceRequest",
    "CreateBookingRequest",
    "CreateBookingUseCase",
    "ExpirationReport",
    "ExpirePendingBookingsUseCase",
    "GetBookingUseCase",
    "GetSpotStatsUseCase",
    "ListNotificationsUseCase",
    "ListPendingBookingsUseCase",
    "NotificationEmitter",
    "RejectBookingUseCase",
    "SetSpotMaintenanceRequest",
    "SetSpotMaintenanceUseCase",
    "SpotAllocator",
    "SpotStats",
]
