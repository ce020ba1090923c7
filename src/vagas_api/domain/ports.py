from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from datetime import date, datetime
from types import TracebackType
from typing import Any, Protocol, TypeVar

from vagas_api.domain.entities import Booking, Facility, Notification, Spot
from vagas_api.domain.enums import SpotStatus

T = TypeVar("T")

# (expires_at, booking_id) of the last overdue booking seen by a sweep page.
ExpiryCursor = tuple[datetime, str]


@dataclass(slots=True, frozen=True)
class DeliveryResult:
    success: bool
    status: str
    payload: dict[str, Any] | None = None


class BookingRepository(Protocol):
    """Booking persistence inside one unit of work.

    Bookings are returned with an empty `status_history`; `add`/`update`
    persist the transitions appended since loading and then clear the list.
    """

    async def get(self, booking_id: str) -> Booking: ...

    async def add(self, booking: Booking) -> None: ...

    async def update(self, booking: Booking) -> None: ...

    async def find_active_for_requester(
        self, requester_id: str, booking_date: date
    ) -> list[Booking]: ...

    async def list_pending_for_facility(self, facility_id: str) -> list[Booking]: ...

    async def list_expired_pending(
        self, now: datetime, limit: int, after: ExpiryCursor | None = None
    ) -> list[ExpiryCursor]:
        """Overdue pending bookings ordered by `(expires_at, id)`, strictly after `after`."""
        ...


class SpotRepository(Protocol):
    """Conditional spot updates; each returns whether the row matched."""

    async def get(self, facility_id: str, spot_number: str) -> Spot: ...

    async def claim(
        self, facility_id: str, spot_number: str, booking_id: str, user_id: str
    ) -> bool: ...

    async def set_status_if_held(
        self, facility_id: str, spot_number: str, booking_id: str, status: SpotStatus
    ) -> bool: ...

    async def clear_if_held(self, facility_id: str, spot_number: str, booking_id: str) -> bool: ...

    async def set_status_if_vacant(
        self,
        facility_id: str,
        spot_number: str,
        from_status: SpotStatus,
        status: SpotStatus,
    ) -> bool: ...

    async def count_by_status(self, facility_id: str) -> dict[SpotStatus, int]: ...


class FacilityReader(Protocol):
    async def get(self, facility_id: str) -> Facility: ...


class NotificationOutbox(Protocol):
    async def add_many(self, notifications: Iterable[Notification]) -> None: ...

    async def list_for_recipient(self, recipient_id: str, limit: int) -> list[Notification]: ...


class LifecycleUnitOfWork(Protocol):
    """One atomic transaction over bookings, spots and notifications.

    Leaving the context normally commits; leaving it with an exception rolls
    back every change made through the repositories.
    """

    bookings: BookingRepository
    spots: SpotRepository
    facilities: FacilityReader
    notifications: NotificationOutbox

    async def __aenter__(self) -> "LifecycleUnitOfWork": ...

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None: ...


UnitOfWorkFactory = Callable[[], LifecycleUnitOfWork]


class RetryExecutor(Protocol):
    async def execute(self, func: Callable[[], Awaitable[T]]) -> T: ...


class IdentityResolver(Protocol):
    def resolve(self, token: str) -> str: ...


class NotificationGateway(Protocol):
    async def deliver(self, notification: Notification) -> DeliveryResult: ...
