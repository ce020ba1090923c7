from enum import StrEnum


class NotificationType(StrEnum):
    BOOKING_REQUEST = "booking_request"
    BOOKING_ACCEPTED = "booking_accepted"
    BOOKING_REJECTED = "booking_rejected"
    BOOKING_EXPIRED = "booking_expired"
    BOOKING_CANCELLED = "booking_cancelled"
    ARRIVAL_REQUEST = "arrival_request"
    BOOKING_STARTED = "booking_started"
    DEPARTURE_CONFIRMATION = "departure_confirmation"
    BOOKING_COMPLETED = "booking_completed"
