from collections.abc import Callable
from datetime import datetime

from vagas_api.application.services import NotificationEmitter, SpotAllocator
from vagas_api.application.use_cases.base import (
    BookingActionRequest,
    BookingAuditLogger,
    BookingLifecycleUseCase,
)
from vagas_api.domain.entities import Booking
from vagas_api.domain.ports import LifecycleUnitOfWork, RetryExecutor, UnitOfWorkFactory


class CancelBookingUseCase(BookingLifecycleUseCase):
    """Either party cancels a non-terminal booking; the spot is released."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        allocator: SpotAllocator | None = None,
        emitter: NotificationEmitter | None = None,
        retry_policy: RetryExecutor | None = None,
        audit_logger: BookingAuditLogger | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        super().__init__(uow_factory, retry_policy, audit_logger, clock)
        self._allocator = allocator or SpotAllocator()
        self._emitter = emitter or NotificationEmitter(clock=self._clock)

    async def execute(self, request: BookingActionRequest) -> Booking:
        async def operation(uow: LifecycleUnitOfWork) -> Booking:
            booking, facility = await self._load_as_participant(uow, request)
            booking.cancel(request.actor_id, self._clock())
            await uow.bookings.update(booking)
            await self._allocator.release_booking(uow, booking)
            await uow.notifications.add_many(
                self._emitter.booking_cancelled(booking, facility, request.actor_id)
            )
            return booking

        booking = await self._run(operation)
        self._audit_transition(booking, request.actor_id, "cancel")
        return booking
