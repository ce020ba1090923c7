import asyncio
import copy
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from types import TracebackType

from vagas_api.domain.entities import Booking, BookingStatusChange, Facility, Notification, Spot
from vagas_api.domain.enums import ACTIVE_BOOKING_STATUSES, BookingStatus, SpotStatus
from vagas_api.domain.errors import ConcurrentUpdateError, NotFoundError


@dataclass(slots=True, frozen=True)
class RecordedStatusChange:
    booking_id: str
    change: BookingStatusChange


@dataclass(slots=True)
class InMemoryLifecycleStore:
    """Process-local store backing `InMemoryUnitOfWork`.

    Transactions are serialized by a single lock, which makes every unit of
    work behave like a SERIALIZABLE database transaction. Used by unit and
    property tests and for running the API without MySQL.

    Example:
        ```python
        store = InMemoryLifecycleStore()
        store.add_facility(Facility(id="fac-1", owner_id="owner-1", name="Centro"))
        store.add_spots("fac-1", "A12", "B03")
        use_case = CreateBookingUseCase(uow_factory=store.unit_of_work)
        ```
    """

    facilities: dict[str, Facility] = field(default_factory=dict)
    spots: dict[tuple[str, str], Spot] = field(default_factory=dict)
    bookings: dict[str, Booking] = field(default_factory=dict)
    notifications: list[Notification] = field(default_factory=list)
    history: list[RecordedStatusChange] = field(default_factory=list)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    def unit_of_work(self) -> "InMemoryUnitOfWork":
        return InMemoryUnitOfWork(self)

    def add_facility(self, facility: Facility) -> Facility:
        self.facilities[facility.id] = facility
        return facility

    def add_spots(
        self, facility_id: str, *spot_numbers: str, status: SpotStatus = SpotStatus.DISPONIVEL
    ) -> list[Spot]:
        created = []
        for number in spot_numbers:
            spot = Spot(
                facility_id=facility_id,
                spot_number=number,
                status=status,
                id=len(self.spots) + 1,
            )
            self.spots[(facility_id, number)] = spot
            created.append(spot)
        return created

    def spot(self, facility_id: str, spot_number: str) -> Spot:
        return self.spots[(facility_id, spot_number)]

    def booking(self, booking_id: str) -> Booking:
        return self.bookings[booking_id]

    def history_for(self, booking_id: str) -> list[BookingStatusChange]:
        return [item.change for item in self.history if item.booking_id == booking_id]


class InMemoryBookingRepository:
    def __init__(self, uow: "InMemoryUnitOfWork") -> None:
        self._uow = uow

    async def get(self, booking_id: str) -> Booking:
        stored = self._uow.staged_bookings.get(booking_id)
        if stored is None:
            raise NotFoundError(f"Booking {booking_id} not found")
        return copy.deepcopy(stored)

    async def add(self, booking: Booking) -> None:
        if booking.id in self._uow.staged_bookings:
            raise ValueError(f"Booking {booking.id} already exists")
        self._stage(booking)

    async def update(self, booking: Booking) -> None:
        stored = self._uow.staged_bookings.get(booking.id)
        if stored is None:
            raise NotFoundError(f"Booking {booking.id} not found")
        if stored.version != booking.version:
            raise ConcurrentUpdateError(
                f"Booking {booking.id} changed concurrently "
                f"(expected version {booking.version}, found {stored.version})"
            )
        booking.version += 1
        self._stage(booking)

    async def find_active_for_requester(
        self, requester_id: str, booking_date: date
    ) -> list[Booking]:
        return [
            copy.deepcopy(booking)
            for booking in self._uow.staged_bookings.values()
            if booking.requester_id == requester_id
            and booking.date == booking_date
            and booking.status in ACTIVE_BOOKING_STATUSES
        ]

    async def list_pending_for_facility(self, facility_id: str) -> list[Booking]:
        pending = [
            booking
            for booking in self._uow.staged_bookings.values()
            if booking.facility_id == facility_id
            and booking.status == BookingStatus.AGUARDANDO_CONFIRMACAO
        ]
        pending.sort(key=lambda booking: booking.created_at, reverse=True)
        return [copy.deepcopy(booking) for booking in pending]

    async def list_expired_pending(
        self, now: datetime, limit: int, after: tuple[datetime, str] | None = None
    ) -> list[tuple[datetime, str]]:
        keys = sorted(
            (booking.expires_at, booking.id)
            for booking in self._uow.staged_bookings.values()
            if booking.is_expired(now) and booking.expires_at is not None
        )
        if after is not None:
            keys = [key for key in keys if key > after]
        return keys[:limit]

    def _stage(self, booking: Booking) -> None:
        self._uow.staged_history.extend(
            RecordedStatusChange(booking_id=booking.id, change=change)
            for change in booking.status_history
        )
        booking.status_history.clear()
        self._uow.staged_bookings[booking.id] = copy.deepcopy(booking)


class InMemorySpotRepository:
    def __init__(self, uow: "InMemoryUnitOfWork") -> None:
        self._uow = uow

    async def get(self, facility_id: str, spot_number: str) -> Spot:
        spot = self._uow.staged_spots.get((facility_id, spot_number))
        if spot is None:
            raise NotFoundError(f"Spot {spot_number} not found at facility {facility_id}")
        return replace(spot)

    async def claim(
        self, facility_id: str, spot_number: str, booking_id: str, user_id: str
    ) -> bool:
        spot = self._uow.staged_spots.get((facility_id, spot_number))
        if spot is None or not spot.is_free:
            return False
        self._put(replace(spot, status=SpotStatus.RESERVADA, booking_id=booking_id, user_id=user_id))
        return True

    async def set_status_if_held(
        self, facility_id: str, spot_number: str, booking_id: str, status: SpotStatus
    ) -> bool:
        spot = self._uow.staged_spots.get((facility_id, spot_number))
        if spot is None or not spot.is_held_by(booking_id):
            return False
        self._put(replace(spot, status=status))
        return True

    async def clear_if_held(self, facility_id: str, spot_number: str, booking_id: str) -> bool:
        spot = self._uow.staged_spots.get((facility_id, spot_number))
        if spot is None or not spot.is_held_by(booking_id):
            return False
        self._put(replace(spot, status=SpotStatus.DISPONIVEL, booking_id=None, user_id=None))
        return True

    async def set_status_if_vacant(
        self,
        facility_id: str,
        spot_number: str,
        from_status: SpotStatus,
        status: SpotStatus,
    ) -> bool:
        spot = self._uow.staged_spots.get((facility_id, spot_number))
        if spot is None or spot.status != from_status or spot.booking_id is not None:
            return False
        self._put(replace(spot, status=status))
        return True

    async def count_by_status(self, facility_id: str) -> dict[SpotStatus, int]:
        return dict(
            Counter(
                spot.status
                for spot in self._uow.staged_spots.values()
                if spot.facility_id == facility_id
            )
        )

    def _put(self, spot: Spot) -> None:
        self._uow.staged_spots[(spot.facility_id, spot.spot_number)] = spot


class InMemoryFacilityReader:
    def __init__(self, store: InMemoryLifecycleStore) -> None:
        self._store = store

    async def get(self, facility_id: str) -> Facility:
        facility = self._store.facilities.get(facility_id)
        if facility is None:
            raise NotFoundError(f"Facility {facility_id} not found")
        return facility


class InMemoryNotificationOutbox:
    def __init__(self, uow: "InMemoryUnitOfWork") -> None:
        self._uow = uow

    async def add_many(self, notifications: Iterable[Notification]) -> None:
        self._uow.staged_notifications.extend(notifications)

    async def list_for_recipient(self, recipient_id: str, limit: int) -> list[Notification]:
        matching = [
            item
            for item in (*self._uow.store.notifications, *self._uow.staged_notifications)
            if item.recipient_id == recipient_id
        ]
        matching.sort(key=lambda item: item.created_at, reverse=True)
        return matching[:limit]


class InMemoryUnitOfWork:
    """Stage every write and publish it to the store only on a clean exit."""

    def __init__(self, store: InMemoryLifecycleStore) -> None:
        self.store = store
        self.staged_bookings: dict[str, Booking] = {}
        self.staged_spots: dict[tuple[str, str], Spot] = {}
        self.staged_notifications: list[Notification] = []
        self.staged_history: list[RecordedStatusChange] = []
        self.bookings = InMemoryBookingRepository(self)
        self.spots = InMemorySpotRepository(self)
        self.facilities = InMemoryFacilityReader(store)
        self.notifications = InMemoryNotificationOutbox(self)

    async def __aenter__(self) -> "InMemoryUnitOfWork":
        await self.store.lock.acquire()
        self.staged_bookings = dict(self.store.bookings)
        self.staged_spots = dict(self.store.spots)
        self.staged_notifications = []
        self.staged_history = []
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        try:
            if exc_type is None:
                self.store.bookings = self.staged_bookings
                self.store.spots = self.staged_spots
                self.store.notifications.extend(self.staged_notifications)
                self.store.history.extend(self.staged_history)
        finally:
            self.store.lock.release()
