from vagas_api.application.use_cases.base import BookingActionRequest, BookingLifecycleUseCase
from vagas_api.domain.entities import Booking, Notification
from vagas_api.domain.errors import UnauthorizedError
from vagas_api.domain.ports import LifecycleUnitOfWork


class GetBookingUseCase(BookingLifecycleUseCase):
    """Return a booking to its requester or to the facility owner."""

    async def execute(self, request: BookingActionRequest) -> Booking:
        async def operation(uow: LifecycleUnitOfWork) -> Booking:
            booking, _ = await self._load_as_participant(uow, request)
            return booking

        return await self._run(operation)


class ListPendingBookingsUseCase(BookingLifecycleUseCase):
    """List requests still awaiting the owner's decision, newest first."""

    async def execute(self, owner_id: str, facility_id: str) -> list[Booking]:
        async def operation(uow: LifecycleUnitOfWork) -> list[Booking]:
            facility = await uow.facilities.get(facility_id)
            if not facility.is_owned_by(owner_id):
                raise UnauthorizedError(f"User {owner_id} does not own facility {facility_id}")
            return await uow.bookings.list_pending_for_facility(facility_id)

        return await self._run(operation)


class ListNotificationsUseCase(BookingLifecycleUseCase):
    async def execute(self, user_id: str, limit: int = 50) -> list[Notification]:
        if limit <= 0:
            raise ValueError("limit must be greater than zero")

        async def operation(uow: LifecycleUnitOfWork) -> list[Notification]:
            return await uow.notifications.list_for_recipient(user_id, limit)

        return await self._run(operation)
