import asyncio
from datetime import UTC, date, datetime, time, timedelta
from decimal import Decimal
from itertools import pairwise

from hypothesis import given, settings
from hypothesis import strategies as st

from vagas_api.application import (
    AcceptBookingUseCase,
    BookingActionRequest,
    CancelBookingUseCase,
    ConfirmArrivalUseCase,
    ConfirmDepartureUseCase,
    ConfirmPresenceRequest,
    CreateBookingRequest,
    CreateBookingUseCase,
    ExpirePendingBookingsUseCase,
    RejectBookingUseCase,
)
from vagas_api.domain.entities import Facility, HandshakeOutcome
from vagas_api.domain.enums import (
    BookingStatus,
    ConfirmationParty,
    NotificationType,
    SpotStatus,
)
from vagas_api.domain.errors import BookingDomainError
from vagas_api.infrastructure.repositories import InMemoryLifecycleStore

START = datetime(2026, 10, 19, 8, 0, tzinfo=UTC)

_EXPECTED_SPOT_STATUS = {
    BookingStatus.AGUARDANDO_CONFIRMACAO: SpotStatus.RESERVADA,
    BookingStatus.RESERVADA: SpotStatus.RESERVADA,
    BookingStatus.OCUPADA: SpotStatus.OCUPADA,
}

ACTIONS = [
    "accept",
    "reject",
    "cancel_user",
    "cancel_owner",
    "arrival_owner",
    "arrival_user",
    "departure_owner",
    "departure_user",
    "sweep",
    "wait",
]


class _Clock:
    def __init__(self) -> None:
        self.now = START

    def __call__(self) -> datetime:
        return self.now


def _store() -> InMemoryLifecycleStore:
    store = InMemoryLifecycleStore()
    store.add_facility(
        Facility(id="fac-1", owner_id="owner-1", name="Centro", hourly_rate=Decimal("10.00"))
    )
    store.add_spots("fac-1", "A12")
    return store


async def _create(store: InMemoryLifecycleStore, clock: _Clock) -> str:
    booking = await CreateBookingUseCase(uow_factory=store.unit_of_work, clock=clock).execute(
        CreateBookingRequest(
            requester_id="user-1",
            facility_id="fac-1",
            spot_number="A12",
            booking_date=date(2026, 10, 19),
            start_time=time(9, 0),
            end_time=time(11, 0),
        )
    )
    return booking.id


async def _apply(action: str, booking_id: str, store: InMemoryLifecycleStore, clock: _Clock) -> None:
    deps = {"uow_factory": store.unit_of_work, "clock": clock}
    owner = BookingActionRequest(actor_id="owner-1", booking_id=booking_id)
    user = BookingActionRequest(actor_id="user-1", booking_id=booking_id)
    if action == "accept":
        await AcceptBookingUseCase(**deps).execute(owner)
    elif action == "reject":
        await RejectBookingUseCase(**deps).execute(owner)
    elif action == "cancel_user":
        await CancelBookingUseCase(**deps).execute(user)
    elif action == "cancel_owner":
        await CancelBookingUseCase(**deps).execute(owner)
    elif action.startswith(("arrival", "departure")):
        kind, side = action.split("_")
        use_case_type = ConfirmArrivalUseCase if kind == "arrival" else ConfirmDepartureUseCase
        party = ConfirmationParty.OWNER if side == "owner" else ConfirmationParty.USER
        actor = "owner-1" if side == "owner" else "user-1"
        await use_case_type(**deps).execute(
            ConfirmPresenceRequest(actor_id=actor, booking_id=booking_id, party=party)
        )
    elif action == "sweep":
        await ExpirePendingBookingsUseCase(**deps).execute()
    else:
        clock.now += timedelta(minutes=10)


@settings(max_examples=80, deadline=None)
@given(actions=st.lists(st.sampled_from(ACTIONS), min_size=1, max_size=12))
def test_property_spot_mirrors_booking_status_through_any_sequence(actions: list[str]) -> None:
    """
    Feature: vagas-api, terminal bookings release their spot and never change again.
    """
    store = _store()
    clock = _Clock()

    async def run_scenario() -> None:
        booking_id = await _create(store, clock)
        terminal_status: BookingStatus | None = None
        for action in actions:
            try:
                await _apply(action, booking_id, store, clock)
            except BookingDomainError:
                pass

            booking = store.booking(booking_id)
            spot = store.spot("fac-1", "A12")
            if terminal_status is not None:
                assert booking.status == terminal_status
            if booking.is_terminal:
                terminal_status = booking.status
                assert spot.booking_id is None
                assert spot.status == SpotStatus.DISPONIVEL
            else:
                assert spot.booking_id == booking_id
                assert spot.status == _EXPECTED_SPOT_STATUS[booking.status]

        history = store.history_for(booking_id)
        for previous, current in pairwise(history):
            assert previous.to_status == current.from_status
        if history:
            assert history[0].from_status == BookingStatus.AGUARDANDO_CONFIRMACAO
            assert history[-1].to_status == store.booking(booking_id).status
        assert store.booking(booking_id).version >= len(history)

    asyncio.run(run_scenario())


@settings(max_examples=30, deadline=None)
@given(
    order=st.permutations([ConfirmationParty.OWNER, ConfirmationParty.USER]),
    repeats=st.lists(st.sampled_from([ConfirmationParty.OWNER, ConfirmationParty.USER]), max_size=4),
)
def test_property_handshake_is_order_independent(
    order: list[ConfirmationParty], repeats: list[ConfirmationParty]
) -> None:
    """
    Feature: vagas-api, arrival needs both parties in either order; repeats are no-ops.
    """
    store = _store()
    clock = _Clock()

    async def run_scenario() -> list[HandshakeOutcome]:
        booking_id = await _create(store, clock)
        await AcceptBookingUseCase(uow_factory=store.unit_of_work, clock=clock).execute(
            BookingActionRequest(actor_id="owner-1", booking_id=booking_id)
        )
        arrival = ConfirmArrivalUseCase(uow_factory=store.unit_of_work, clock=clock)
        sequence = [order[0], *[party for party in repeats if party == order[0]], order[1]]
        outcomes = []
        for party in sequence:
            actor = "owner-1" if party == ConfirmationParty.OWNER else "user-1"
            result = await arrival.execute(
                ConfirmPresenceRequest(actor_id=actor, booking_id=booking_id, party=party)
            )
            outcomes.append(result.outcome)
        return outcomes

    outcomes = asyncio.run(run_scenario())

    assert outcomes[0] == HandshakeOutcome.AWAITING_COUNTERPART
    assert all(outcome == HandshakeOutcome.ALREADY_CONFIRMED for outcome in outcomes[1:-1])
    assert outcomes[-1] == HandshakeOutcome.ADVANCED
    [booking] = store.bookings.values()
    assert booking.status == BookingStatus.OCUPADA
    assert store.spot("fac-1", "A12").status == SpotStatus.OCUPADA
    started = [n for n in store.notifications if n.type == NotificationType.BOOKING_STARTED]
    assert len(started) == 2
