from vagas_api.infrastructure.db.models import (
    BookingModel,
    BookingStatusHistoryModel,
    FacilityModel,
    NotificationModel,
    SpotModel,
)

__all__ = [
    "BookingModel",
    "BookingStatusHistoryModel",
    "FacilityModel",
    "NotificationModel",
    "SpotModel",
]
