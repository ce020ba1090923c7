from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from vagas_api.domain.entities import Booking, Notification, Spot
from vagas_api.domain.enums import BookingStatus, ConfirmationParty, NotificationType, SpotStatus


class BookingRequestDTO(BaseModel):
    """Request body for `POST /api/v1/bookings`."""

    facility_id: str = Field(min_length=1, max_length=36, examples=["b1c2d3e4-0000-4000-8000-000000000001"])
    spot_number: str = Field(min_length=1, max_length=20, examples=["A12"])
    date: date
    start_time: time = Field(examples=["09:00"])
    end_time: time = Field(examples=["11:00"])

    @model_validator(mode="after")
    def validate_end_after_start(self) -> BookingRequestDTO:
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class PresenceConfirmationDTO(BaseModel):
    """Request body for arrival/departure confirmation."""

    confirmed_by: ConfirmationParty = Field(examples=["owner"])


class SpotMaintenanceDTO(BaseModel):
    enabled: bool


class BookingResponseDTO(BaseModel):
    """Booking as returned to the requester or the facility owner."""

    id: str
    requester_id: str
    facility_id: str
    spot_number: str
    date: date
    start_time: time
    end_time: time
    price: Decimal
    status: BookingStatus
    created_at: datetime
    expires_at: datetime | None = None
    accepted_at: datetime | None = None
    rejected_at: datetime | None = None
    arrival_confirmed_by_owner_at: datetime | None = None
    arrival_confirmed_by_user_at: datetime | None = None
    departure_confirmed_by_owner_at: datetime | None = None
    departure_confirmed_by_user_at: datetime | None = None
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancelled_by: str | None = None
    expired_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_entity(cls, booking: Booking) -> BookingResponseDTO:
        return cls.model_validate(booking)


class PresenceConfirmationResponseDTO(BaseModel):
    booking: BookingResponseDTO
    outcome: str


class SpotResponseDTO(BaseModel):
    facility_id: str
    spot_number: str
    status: SpotStatus
    booking_id: str | None = None

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_entity(cls, spot: Spot) -> SpotResponseDTO:
        return cls.model_validate(spot)


class SpotStatsResponseDTO(BaseModel):
    total: int
    disponivel: int
    reservada: int
    ocupada: int
    manutencao: int

    model_config = ConfigDict(from_attributes=True)


class NotificationResponseDTO(BaseModel):
    id: str
    type: NotificationType
    title: str
    message: str
    booking_id: str | None = None
    facility_id: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_entity(cls, notification: Notification) -> NotificationResponseDTO:
        return cls.model_validate(notification)


class ExpirationReportDTO(BaseModel):
    expired: int
    failed: int
    skipped: int

    model_config = ConfigDict(from_attributes=True)


class ErrorResponseDTO(BaseModel):
    """Error payload used for business, validation and server failures."""

    error: str
    message: str
    request_id: str | None = None
    code: str | None = None
