import pytest

from vagas_api.application import (
    AcceptBookingUseCase,
    BookingActionRequest,
    CancelBookingUseCase,
)
from vagas_api.domain.enums import BookingStatus, NotificationType
from vagas_api.domain.errors import InvalidTransitionError, UnauthorizedError


@pytest.mark.asyncio
async def test_requester_cancels_pending_booking(store, clock, pending_booking) -> None:
    use_case = CancelBookingUseCase(uow_factory=store.unit_of_work, clock=clock)

    booking = await use_case.execute(
        BookingActionRequest(actor_id="user-1", booking_id=pending_booking.id)
    )

    assert booking.status == BookingStatus.CANCELADA
    assert booking.cancelled_by == "user-1"
    assert booking.cancelled_at == clock.now
    assert store.spot("fac-1", "A12").is_free
    last = store.notifications[-1]
    assert (last.recipient_id, last.type) == ("owner-1", NotificationType.BOOKING_CANCELLED)


@pytest.mark.asyncio
async def test_owner_cancels_reserved_booking(store, clock, pending_booking) -> None:
    await AcceptBookingUseCase(uow_factory=store.unit_of_work, clock=clock).execute(
        BookingActionRequest(actor_id="owner-1", booking_id=pending_booking.id)
    )
    use_case = CancelBookingUseCase(uow_factory=store.unit_of_work, clock=clock)

    booking = await use_case.execute(
        BookingActionRequest(actor_id="owner-1", booking_id=pending_booking.id)
    )

    assert booking.status == BookingStatus.CANCELADA
    assert store.spot("fac-1", "A12").is_free
    assert store.notifications[-1].recipient_id == "user-1"


@pytest.mark.asyncio
async def test_outsider_cannot_cancel(store, clock, pending_booking) -> None:
    use_case = CancelBookingUseCase(uow_factory=store.unit_of_work, clock=clock)

    with pytest.raises(UnauthorizedError):
        await use_case.execute(BookingActionRequest(actor_id="user-2", booking_id=pending_booking.id))

    assert store.spot("fac-1", "A12").booking_id == pending_booking.id


@pytest.mark.asyncio
async def test_cancelled_booking_cannot_be_cancelled_again(store, clock, pending_booking) -> None:
    use_case = CancelBookingUseCase(uow_factory=store.unit_of_work, clock=clock)
    request = BookingActionRequest(actor_id="user-1", booking_id=pending_booking.id)
    await use_case.execute(request)

    with pytest.raises(InvalidTransitionError):
        await use_case.execute(request)


@pytest.mark.asyncio
async def test_cancelling_does_not_free_a_spot_rebooked_by_someone_else(
    store, clock, pending_booking
) -> None:
    spot = store.spot("fac-1", "A12")
    spot.booking_id = "other-booking"
    spot.user_id = "user-9"
    use_case = CancelBookingUseCase(uow_factory=store.unit_of_work, clock=clock)

    await use_case.execute(BookingActionRequest(actor_id="user-1", booking_id=pending_booking.id))

    assert store.spot("fac-1", "A12").booking_id == "other-booking"
