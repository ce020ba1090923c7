from vagas_api.api.schemas.booking_dto import (
    BookingRequestDTO,
    BookingResponseDTO,
    ErrorResponseDTO,
    ExpirationReportDTO,
    NotificationResponseDTO,
    PresenceConfirmationDTO,
    PresenceConfirmationResponseDTO,
    SpotMaintenanceDTO,
    SpotResponseDTO,
    SpotStatsResponseDTO,
)

__all__ = [
    "BookingRequestDTO",
    "BookingResponseDTO",
    "ErrorResponseDTO",
    "ExpirationReportDTO",
    "NotificationResponseDTO",
    "PresenceConfirmationDTO",
    "PresenceConfirmationResponseDTO",
    "SpotMaintenanceDTO",
    "SpotResponseDTO",
    "SpotStatsResponseDTO",
]
