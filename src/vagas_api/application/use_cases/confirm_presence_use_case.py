from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from vagas_api.application.services import NotificationEmitter, SpotAllocator
from vagas_api.application.use_cases.base import (
    BookingActionRequest,
    BookingAuditLogger,
    BookingLifecycleUseCase,
)
from vagas_api.domain.entities import Booking, Facility, HandshakeOutcome, Notification
from vagas_api.domain.enums import ConfirmationParty
from vagas_api.domain.ports import LifecycleUnitOfWork, RetryExecutor, UnitOfWorkFactory


@dataclass(slots=True, frozen=True)
class ConfirmPresenceRequest(BookingActionRequest):
    """Arrival/departure confirmation from one side of the handshake."""

    party: ConfirmationParty = ConfirmationParty.USER


@dataclass(slots=True, frozen=True)
class ConfirmPresenceResult:
    booking: Booking
    outcome: HandshakeOutcome


class _HandshakeUseCase(BookingLifecycleUseCase):
    """Two-sided confirmation: only the second distinct party moves status.

    A repeated confirmation from the same party returns
    `HandshakeOutcome.ALREADY_CONFIRMED` without writing anything.
    """

    _action: str = ""

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

    async def execute(self, request: ConfirmPresenceRequest) -> ConfirmPresenceResult:
        async def operation(uow: LifecycleUnitOfWork) -> ConfirmPresenceResult:
            booking, facility = await self._load(uow, request.booking_id)
            self._authorize_party(booking, facility, request.actor_id, request.party)
            outcome = self._confirm(booking, request.party)
            if outcome == HandshakeOutcome.ALREADY_CONFIRMED:
                return ConfirmPresenceResult(booking=booking, outcome=outcome)
            await uow.bookings.update(booking)
            notifications = await self._apply_side_effects(uow, booking, facility, request, outcome)
            await uow.notifications.add_many(notifications)
            return ConfirmPresenceResult(booking=booking, outcome=outcome)

        result = await self._run(operation)
        if result.outcome != HandshakeOutcome.ALREADY_CONFIRMED:
            self._audit_transition(
                result.booking,
                request.actor_id,
                self._action,
                party=request.party.value,
                outcome=result.outcome.value,
            )
        return result

    def _confirm(self, booking: Booking, party: ConfirmationParty) -> HandshakeOutcome:
        raise NotImplementedError

    async def _apply_side_effects(
        self,
        uow: LifecycleUnitOfWork,
        booking: Booking,
        facility: Facility,
        request: ConfirmPresenceRequest,
        outcome: HandshakeOutcome,
    ) -> list[Notification]:
        raise NotImplementedError


class ConfirmArrivalUseCase(_HandshakeUseCase):
    """Record arrival; both confirmations move the booking to `ocupada`."""

    _action = "confirm_arrival"

    def _confirm(self, booking: Booking, party: ConfirmationParty) -> HandshakeOutcome:
        return booking.confirm_arrival(party, self._clock())

    async def _apply_side_effects(
        self,
        uow: LifecycleUnitOfWork,
        booking: Booking,
        facility: Facility,
        request: ConfirmPresenceRequest,
        outcome: HandshakeOutcome,
    ) -> list[Notification]:
        if outcome == HandshakeOutcome.ADVANCED:
            await self._allocator.mark_occupied(uow, booking)
            return self._emitter.booking_started(booking, facility)
        if request.party == ConfirmationParty.OWNER:
            return self._emitter.arrival_requested(booking)
        return []


class ConfirmDepartureUseCase(_HandshakeUseCase):
    """Record departure; both confirmations complete the booking and free the spot."""

    _action = "confirm_departure"

    def _confirm(self, booking: Booking, party: ConfirmationParty) -> HandshakeOutcome:
        return booking.confirm_departure(party, self._clock())

    async def _apply_side_effects(
        self,
        uow: LifecycleUnitOfWork,
        booking: Booking,
        facility: Facility,
        request: ConfirmPresenceRequest,
        outcome: HandshakeOutcome,
    ) -> list[Notification]:
        if outcome == HandshakeOutcome.ADVANCED:
            await self._allocator.release_booking(uow, booking)
            return self._emitter.booking_completed(booking, facility)
        if request.party == ConfirmationParty.OWNER:
            return self._emitter.departure_requested(booking)
        return []
