from vagas_api.domain.enums.booking_status import (
    ACTIVE_BOOKING_STATUSES,
    TERMINAL_BOOKING_STATUSES,
    BookingStatus,
)
from vagas_api.domain.enums.confirmation_party import ConfirmationParty
from vagas_api.domain.enums.notification_type import NotificationType
from vagas_api.domain.enums.spot_status import SpotStatus

__all__ = [
    "ACTIVE_BOOKING_STATUSES",
    "BookingStatus",
    "ConfirmationParty",
    "NotificationType",
    "SpotStatus",
    "TERMINAL_BOOKING_STATUSES",
]
