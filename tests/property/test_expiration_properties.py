import asyncio
from datetime import UTC, date, datetime, time, timedelta
from decimal import Decimal

from hypothesis import given, settings
from hypothesis import strategies as st

from vagas_api.application import (
    BookingActionRequest,
    CreateBookingRequest,
    CreateBookingUseCase,
    ExpirePendingBookingsUseCase,
    RejectBookingUseCase,
)
from vagas_api.domain.entities import Facility
from vagas_api.domain.enums import BookingStatus, NotificationType
from vagas_api.domain.errors import InvalidTransitionError
from vagas_api.infrastructure.repositories import InMemoryLifecycleStore

START = datetime(2026, 10, 19, 8, 0, tzinfo=UTC)
SPOTS = ("A12", "B03", "C01", "D04", "E05")


def _store() -> InMemoryLifecycleStore:
    store = InMemoryLifecycleStore()
    store.add_facility(
        Facility(
            id="fac-1",
            owner_id="owner-1",
            name="Centro",
            hourly_rate=Decimal("10.00"),
            reservation_timeout_minutes=5,
        )
    )
    store.add_spots("fac-1", *SPOTS)
    return store


async def _create_many(store: InMemoryLifecycleStore, count: int) -> list[str]:
    use_case = CreateBookingUseCase(uow_factory=store.unit_of_work, clock=lambda: START)
    ids = []
    for index in range(count):
        booking = await use_case.execute(
            CreateBookingRequest(
                requester_id=f"user-{index}",
                facility_id="fac-1",
                spot_number=SPOTS[index],
                booking_date=date(2026, 10, 19),
                start_time=time(9, 0),
                end_time=time(10, 0),
            )
        )
        ids.append(booking.id)
    return ids


@settings(max_examples=30, deadline=None)
@given(
    bookings=st.integers(min_value=1, max_value=len(SPOTS)),
    sweeps=st.integers(min_value=1, max_value=4),
    overlapping=st.booleans(),
)
def test_property_expiration_is_idempotent(bookings: int, sweeps: int, overlapping: bool) -> None:
    """
    Feature: vagas-api, repeated or overlapping sweeps expire each booking exactly once.
    """
    store = _store()
    sweep_time = START + timedelta(minutes=6)
    use_case = ExpirePendingBookingsUseCase(uow_factory=store.unit_of_work, clock=lambda: sweep_time)

    async def run_scenario() -> int:
        await _create_many(store, bookings)
        if overlapping:
            reports = await asyncio.gather(*(use_case.execute() for _ in range(sweeps)))
        else:
            reports = [await use_case.execute() for _ in range(sweeps)]
        assert all(report.failed == 0 for report in reports)
        return sum(report.expired for report in reports)

    total_expired = asyncio.run(run_scenario())

    assert total_expired == bookings
    assert all(booking.status == BookingStatus.EXPIRADA for booking in store.bookings.values())
    assert all(store.spot("fac-1", spot).is_free for spot in SPOTS)
    expired_notices = [n for n in store.notifications if n.type == NotificationType.BOOKING_EXPIRED]
    assert len(expired_notices) == bookings


@settings(max_examples=40, deadline=None)
@given(reject_first=st.booleans())
def test_property_sweep_and_owner_decision_have_a_single_winner(reject_first: bool) -> None:
    """
    Feature: vagas-api, an overdue booking ends either rejected or expired, never both.
    """
    store = _store()
    sweep_time = START + timedelta(minutes=6)
    sweep = ExpirePendingBookingsUseCase(uow_factory=store.unit_of_work, clock=lambda: sweep_time)
    reject = RejectBookingUseCase(uow_factory=store.unit_of_work, clock=lambda: sweep_time)

    async def run_scenario() -> list:
        [booking_id] = await _create_many(store, 1)
        calls = [
            reject.execute(BookingActionRequest(actor_id="owner-1", booking_id=booking_id)),
            sweep.execute(),
        ]
        if not reject_first:
            calls.reverse()
        return await asyncio.gather(*calls, return_exceptions=True)

    results = asyncio.run(run_scenario())

    [booking] = store.bookings.values()
    assert booking.status in {BookingStatus.REJEITADA, BookingStatus.EXPIRADA}
    assert store.spot("fac-1", "A12").is_free
    assert [c.to_status for c in store.history_for(booking.id)] == [booking.status]
    decided = {
        n.type
        for n in store.notifications
        if n.type in {NotificationType.BOOKING_REJECTED, NotificationType.BOOKING_EXPIRED}
    }
    assert len(decided) == 1
    errors = [item for item in results if isinstance(item, BaseException)]
    assert all(isinstance(item, InvalidTransitionError) for item in errors)
