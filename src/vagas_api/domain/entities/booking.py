import uuid
from collections.abc import Collection
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time, timedelta
from decimal import Decimal
from enum import StrEnum

from vagas_api.domain.enums import ACTIVE_BOOKING_STATUSES, BookingStatus, ConfirmationParty
from vagas_api.domain.errors import InvalidTransitionError


class HandshakeOutcome(StrEnum):
    """Result of one side confirming arrival or departure."""

    ALREADY_CONFIRMED = "already_confirmed"
    AWAITING_COUNTERPART = "awaiting_counterpart"
    ADVANCED = "advanced"


@dataclass(slots=True, frozen=True)
class BookingStatusChange:
    """Represents one booking status transition with timestamp."""

    from_status: BookingStatus
    to_status: BookingStatus
    changed_at: datetime


@dataclass(slots=True)
class Booking:
    """Booking aggregate root and lifecycle state machine.

    Every mutating method validates the current status first and raises
    `InvalidTransitionError` without touching any field when the move is not
    allowed, so a terminal booking can never change again.

    Example:
        ```python
        booking = Booking.request(...)
        booking.accept(at=datetime.now(UTC))
        booking.confirm_arrival(ConfirmationParty.OWNER, at=...)
        ```
    """

    requester_id: str
    facility_id: str
    spot_number: str
    date: date
    start_time: time
    end_time: time
    price: Decimal
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: BookingStatus = BookingStatus.AGUARDANDO_CONFIRMACAO
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
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
    version: int = 0
    status_history: list[BookingStatusChange] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.spot_number.strip():
            raise ValueError("spot_number must not be empty")
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        if self.price <= Decimal("0"):
            raise ValueError("price must be greater than zero")

    @classmethod
    def request(
        cls,
        *,
        requester_id: str,
        facility_id: str,
        spot_number: str,
        booking_date: date,
        start_time: time,
        end_time: time,
        price: Decimal,
        requested_at: datetime,
        expires_in: timedelta,
    ) -> "Booking":
        """Build a new booking awaiting the facility owner's decision."""
        return cls(
            requester_id=requester_id,
            facility_id=facility_id,
            spot_number=spot_number,
            date=booking_date,
            start_time=start_time,
            end_time=end_time,
            price=price,
            created_at=requested_at,
            expires_at=requested_at + expires_in,
        )

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def holds_spot(self) -> bool:
        return self.status in ACTIVE_BOOKING_STATUSES

    def is_expired(self, now: datetime) -> bool:
        """Return whether the pending request's deadline has passed."""
        return (
            self.status == BookingStatus.AGUARDANDO_CONFIRMACAO
            and self.expires_at is not None
            and self.expires_at <= now
        )

    def accept(self, at: datetime) -> None:
        """Move status from `aguardando_confirmacao` to `reservada`."""
        self._require({BookingStatus.AGUARDANDO_CONFIRMACAO}, BookingStatus.RESERVADA)
        if self.is_expired(at):
            raise InvalidTransitionError(f"Booking {self.id} request has expired")
        self._transition(BookingStatus.RESERVADA, at)
        self.accepted_at = at

    def reject(self, at: datetime) -> None:
        """Move status from `aguardando_confirmacao` to `rejeitada`."""
        self._require({BookingStatus.AGUARDANDO_CONFIRMACAO}, BookingStatus.REJEITADA)
        self._transition(BookingStatus.REJEITADA, at)
        self.rejected_at = at

    def expire(self, at: datetime) -> None:
        """Move an overdue pending booking to `expirada`."""
        self._require({BookingStatus.AGUARDANDO_CONFIRMACAO}, BookingStatus.EXPIRADA)
        if not self.is_expired(at):
            raise InvalidTransitionError(f"Booking {self.id} has not reached its deadline")
        self._transition(BookingStatus.EXPIRADA, at)
        self.expired_at = at

    def cancel(self, actor_id: str, at: datetime) -> None:
        """Cancel the booking from any non-terminal status."""
        self._require(ACTIVE_BOOKING_STATUSES, BookingStatus.CANCELADA)
        self._transition(BookingStatus.CANCELADA, at)
        self.cancelled_at = at
        self.cancelled_by = actor_id

    def confirm_arrival(self, party: ConfirmationParty, at: datetime) -> HandshakeOutcome:
        """Record one side's arrival; both sides move status to `ocupada`."""
        owner_field, user_field = "arrival_confirmed_by_owner_at", "arrival_confirmed_by_user_at"
        if self._confirmed(party, owner_field, user_field):
            return HandshakeOutcome.ALREADY_CONFIRMED
        self._require({BookingStatus.RESERVADA}, BookingStatus.OCUPADA)
        self._record(party, owner_field, user_field, at)
        if self.arrival_confirmed_by_owner_at and self.arrival_confirmed_by_user_at:
            self._transition(BookingStatus.OCUPADA, at)
            return HandshakeOutcome.ADVANCED
        return HandshakeOutcome.AWAITING_COUNTERPART

    def confirm_departure(self, party: ConfirmationParty, at: datetime) -> HandshakeOutcome:
        """Record one side's departure; both sides complete the booking."""
        owner_field, user_field = "departure_confirmed_by_owner_at", "departure_confirmed_by_user_at"
        if self._confirmed(party, owner_field, user_field):
            return HandshakeOutcome.ALREADY_CONFIRMED
        self._require({BookingStatus.OCUPADA}, BookingStatus.CONCLUIDA)
        self._record(party, owner_field, user_field, at)
        if self.departure_confirmed_by_owner_at and self.departure_confirmed_by_user_at:
            self._transition(BookingStatus.CONCLUIDA, at)
            self.completed_at = at
            return HandshakeOutcome.ADVANCED
        return HandshakeOutcome.AWAITING_COUNTERPART

    def _confirmed(self, party: ConfirmationParty, owner_field: str, user_field: str) -> bool:
        name = owner_field if party == ConfirmationParty.OWNER else user_field
        return getattr(self, name) is not None

    def _record(
        self,
        party: ConfirmationParty,
        owner_field: str,
        user_field: str,
        at: datetime,
    ) -> None:
        setattr(self, owner_field if party == ConfirmationParty.OWNER else user_field, at)

    def _require(self, allowed: Collection[BookingStatus], target: BookingStatus) -> None:
        if self.status not in allowed:
            raise InvalidTransitionError(
                f"Invalid transition from {self.status} to {target} for booking {self.id}"
            )

    def _transition(self, target: BookingStatus, at: datetime) -> None:
        previous_status = self.status
        self.status = target
        self.status_history.append(
            BookingStatusChange(
                from_status=previous_status,
                to_status=target,
                changed_at=at,
            )
        )
