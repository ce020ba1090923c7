from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime, time

from vagas_api.application.services import NotificationEmitter, SpotAllocator
from vagas_api.application.use_cases.base import BookingAuditLogger, BookingLifecycleUseCase
from vagas_api.domain.entities import Booking
from vagas_api.domain.errors import ActiveBookingExistsError, NotFoundError
from vagas_api.domain.ports import LifecycleUnitOfWork, RetryExecutor, UnitOfWorkFactory

DEFAULT_EXPIRY_MINUTES = 15


@dataclass(slots=True, frozen=True)
class CreateBookingRequest:
    """Application input model to request a spot for a time window."""

    requester_id: str
    facility_id: str
    spot_number: str
    booking_date: date
    start_time: time
    end_time: time

    def __post_init__(self) -> None:
        if not self.requester_id.strip():
            raise ValueError("requester_id must not be empty")
        if not self.facility_id.strip():
            raise ValueError("facility_id must not be empty")
        if not self.spot_number.strip():
            raise ValueError("spot_number must not be empty")
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")


class CreateBookingUseCase(BookingLifecycleUseCase):
    """Create a pending booking and reserve its spot in one unit of work.

    The booking row and the spot claim commit together: if the spot is taken
    the whole attempt rolls back and `SpotUnavailableError` reaches the caller.

    Example:
        ```python
        request = CreateBookingRequest(...)
        booking = await CreateBookingUseCase(uow_factory).execute(request)
        assert booking.status == BookingStatus.AGUARDANDO_CONFIRMACAO
        ```
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        allocator: SpotAllocator | None = None,
        emitter: NotificationEmitter | None = None,
        retry_policy: RetryExecutor | None = None,
        audit_logger: BookingAuditLogger | None = None,
        clock: Callable[[], datetime] | None = None,
        default_expiry_minutes: int = DEFAULT_EXPIRY_MINUTES,
    ) -> None:
        super().__init__(uow_factory, retry_policy, audit_logger, clock)
        if default_expiry_minutes <= 0:
            raise ValueError("default_expiry_minutes must be greater than zero")
        self._allocator = allocator or SpotAllocator()
        self._emitter = emitter or NotificationEmitter(clock=self._clock)
        self._default_expiry_minutes = default_expiry_minutes

    async def execute(self, request: CreateBookingRequest) -> Booking:
        """Persist a new booking in `aguardando_confirmacao`."""

        async def operation(uow: LifecycleUnitOfWork) -> Booking:
            facility = await uow.facilities.get(request.facility_id)
            if not facility.active:
                raise NotFoundError(f"Facility {facility.id} is not accepting bookings")
            now = self._clock()
            if request.booking_date == now.date():
                active = await uow.bookings.find_active_for_requester(
                    request.requester_id, request.booking_date
                )
                if active:
                    raise ActiveBookingExistsError(
                        "Requester already holds an active booking for today"
                    )
            booking = Booking.request(
                requester_id=request.requester_id,
                facility_id=facility.id,
                spot_number=request.spot_number,
                booking_date=request.booking_date,
                start_time=request.start_time,
                end_time=request.end_time,
                price=facility.price_for(request.start_time, request.end_time),
                requested_at=now,
                expires_in=facility.reservation_timeout(self._default_expiry_minutes),
            )
            await uow.bookings.add(booking)
            await self._allocator.reserve(
                uow, facility.id, booking.spot_number, booking.id, booking.requester_id
            )
            await uow.notifications.add_many(self._emitter.booking_requested(booking, facility))
            return booking

        booking = await self._run(operation)
        if self._audit_logger is not None:
            self._audit_logger.log_booking_created(
                booking_id=booking.id,
                actor=request.requester_id,
                context={
                    "status": booking.status.value,
                    "facility_id": booking.facility_id,
                    "spot_number": booking.spot_number,
                    "expires_at": booking.expires_at.isoformat() if booking.expires_at else None,
                },
            )
        return booking
