from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Protocol, TypeVar

from vagas_api.domain.entities import Booking, Facility
from vagas_api.domain.enums import ConfirmationParty
from vagas_api.domain.errors import UnauthorizedError
from vagas_api.domain.ports import LifecycleUnitOfWork, RetryExecutor, UnitOfWorkFactory

T = TypeVar("T")


class BookingAuditLogger(Protocol):
    """Port for audit events emitted by lifecycle use cases."""

    def log_booking_created(
        self,
        *,
        booking_id: str,
        actor: str,
        context: dict[str, Any] | None = None,
    ) -> None: ...

    def log_booking_transition(
        self,
        *,
        booking_id: str,
        actor: str,
        context: dict[str, Any] | None = None,
    ) -> None: ...


@dataclass(slots=True, frozen=True)
class BookingActionRequest:
    """Input model for an actor acting on an existing booking."""

    actor_id: str
    booking_id: str

    def __post_init__(self) -> None:
        if not self.actor_id.strip():
            raise ValueError("actor_id must not be empty")
        if not self.booking_id.strip():
            raise ValueError("booking_id must not be empty")


class BookingLifecycleUseCase:
    """Shared plumbing: one unit of work per attempt, retried on contention."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        retry_policy: RetryExecutor | None = None,
        audit_logger: BookingAuditLogger | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._retry_policy = retry_policy
        self._audit_logger = audit_logger
        self._clock = clock or (lambda: datetime.now(UTC))

    async def _run(self, operation: Callable[[LifecycleUnitOfWork], Awaitable[T]]) -> T:
        async def _attempt() -> T:
            async with self._uow_factory() as uow:
                return await operation(uow)

        if self._retry_policy is None:
            return await _attempt()
        return await self._retry_policy.execute(_attempt)

    async def _load(self, uow: LifecycleUnitOfWork, booking_id: str) -> tuple[Booking, Facility]:
        booking = await uow.bookings.get(booking_id)
        facility = await uow.facilities.get(booking.facility_id)
        return booking, facility

    async def _load_as_owner(
        self, uow: LifecycleUnitOfWork, request: BookingActionRequest
    ) -> tuple[Booking, Facility]:
        booking, facility = await self._load(uow, request.booking_id)
        if not facility.is_owned_by(request.actor_id):
            raise UnauthorizedError(
                f"User {request.actor_id} does not own facility {facility.id}"
            )
        return booking, facility

    async def _load_as_participant(
        self, uow: LifecycleUnitOfWork, request: BookingActionRequest
    ) -> tuple[Booking, Facility]:
        booking, facility = await self._load(uow, request.booking_id)
        if request.actor_id != booking.requester_id and not facility.is_owned_by(request.actor_id):
            raise UnauthorizedError(
                f"User {request.actor_id} is not a party to booking {booking.id}"
            )
        return booking, facility

    @staticmethod
    def _authorize_party(
        booking: Booking, facility: Facility, actor_id: str, party: ConfirmationParty
    ) -> None:
        if party == ConfirmationParty.OWNER and not facility.is_owned_by(actor_id):
            raise UnauthorizedError("Only the facility owner can confirm as owner")
        if party == ConfirmationParty.USER and actor_id != booking.requester_id:
            raise UnauthorizedError("Only the requester can confirm as user")

    def _audit_transition(
        self, booking: Booking, actor: str, action: str, **context: Any
    ) -> None:
        if self._audit_logger is None:
            return
        self._audit_logger.log_booking_transition(
            booking_id=booking.id,
            actor=actor,
            context={
                "action": action,
                "status": booking.status.value,
                "facility_id": booking.facility_id,
                "spot_number": booking.spot_number,
                **context,
            },
        )
