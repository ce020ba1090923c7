from vagas_api.domain.entities.booking import Booking, BookingStatusChange, HandshakeOutcome
from vagas_api.domain.entities.facility import Facility
from vagas_api.domain.entities.notification import Notification
from vagas_api.domain.entities.spot import Spot

__all__ = [
    "Booking",
    "BookingStatusChange",
    "Facility",
    "HandshakeOutcome",
    "Notification",
    "Spot",
]
