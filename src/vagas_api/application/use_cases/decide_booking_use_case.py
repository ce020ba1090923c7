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


class _OwnerDecisionUseCase(BookingLifecycleUseCase):
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


class AcceptBookingUseCase(_OwnerDecisionUseCase):
    """Facility owner accepts a pending request; the spot stays reserved."""

    async def execute(self, request: BookingActionRequest) -> Booking:
        async def operation(uow: LifecycleUnitOfWork) -> Booking:
            booking, _ = await self._load_as_owner(uow, request)
            booking.accept(self._clock())
            await uow.bookings.update(booking)
            await uow.notifications.add_many(self._emitter.booking_accepted(booking))
            return booking

        booking = await self._run(operation)
        self._audit_transition(booking, request.actor_id, "accept")
        return booking


class RejectBookingUseCase(_OwnerDecisionUseCase):
    """Facility owner rejects a pending request and frees the spot.

    Example:
        ```python
        await use_case.execute(BookingActionRequest(actor_id=owner_id, booking_id=booking.id))
        ```
    """

    async def execute(self, request: BookingActionRequest) -> Booking:
        async def operation(uow: LifecycleUnitOfWork) -> Booking:
            booking, _ = await self._load_as_owner(uow, request)
            booking.reject(self._clock())
            await uow.bookings.update(booking)
            await self._allocator.release_booking(uow, booking)
            await uow.notifications.add_many(self._emitter.booking_rejected(booking))
            return booking

        booking = await self._run(operation)
        self._audit_transition(booking, request.actor_id, "reject")
        return booking
