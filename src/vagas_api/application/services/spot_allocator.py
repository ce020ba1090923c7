import logging

from vagas_api.domain.entities import Booking, Spot
from vagas_api.domain.enums import SpotStatus
from vagas_api.domain.errors import SpotUnavailableError
from vagas_api.domain.ports import LifecycleUnitOfWork

logger = logging.getLogger(__name__)


class SpotAllocator:
    """Sole gateway for binding and unbinding bookings to spots.

    Every operation is one conditional update inside the caller's unit of
    work, so contention for a spot is settled by the store and never by a
    read-then-write at the booking level.

    Example:
        ```python
        async with uow_factory() as uow:
            await allocator.reserve(uow, "fac-1", "A12", booking.id, booking.requester_id)
        ```
    """

    async def reserve(
        self,
        uow: LifecycleUnitOfWork,
        facility_id: str,
        spot_number: str,
        booking_id: str,
        user_id: str,
    ) -> None:
        """Bind a free spot to the booking or raise `SpotUnavailableError`."""
        if await uow.spots.claim(facility_id, spot_number, booking_id, user_id):
            return
        spot = await uow.spots.get(facility_id, spot_number)
        raise SpotUnavailableError(
            f"Spot {spot_number} at facility {facility_id} is {spot.status}"
        )

    async def release(
        self,
        uow: LifecycleUnitOfWork,
        facility_id: str,
        spot_number: str,
        expected_booking_id: str,
    ) -> bool:
        """Free the spot only while it is still held by `expected_booking_id`."""
        released = await uow.spots.clear_if_held(facility_id, spot_number, expected_booking_id)
        if not released:
            logger.warning(
                "spot_release_skipped facility_id=%s spot_number=%s booking_id=%s",
                facility_id,
                spot_number,
                expected_booking_id,
            )
        return released

    async def release_booking(self, uow: LifecycleUnitOfWork, booking: Booking) -> bool:
        return await self.release(uow, booking.facility_id, booking.spot_number, booking.id)

    async def mark_occupied(self, uow: LifecycleUnitOfWork, booking: Booking) -> bool:
        """Flip the held spot to `ocupada`, keeping the booking reference."""
        occupied = await uow.spots.set_status_if_held(
            booking.facility_id, booking.spot_number, booking.id, SpotStatus.OCUPADA
        )
        if not occupied:
            logger.warning(
                "spot_occupy_skipped facility_id=%s spot_number=%s booking_id=%s",
                booking.facility_id,
                booking.spot_number,
                booking.id,
            )
        return occupied

    async def mark_maintenance(
        self, uow: LifecycleUnitOfWork, facility_id: str, spot_number: str
    ) -> Spot:
        """Take a vacant spot out of service."""
        return await self._toggle_vacant(
            uow, facility_id, spot_number, SpotStatus.DISPONIVEL, SpotStatus.MANUTENCAO
        )

    async def mark_available(
        self, uow: LifecycleUnitOfWork, facility_id: str, spot_number: str
    ) -> Spot:
        """Return a spot under maintenance to service."""
        return await self._toggle_vacant(
            uow, facility_id, spot_number, SpotStatus.MANUTENCAO, SpotStatus.DISPONIVEL
        )

    async def _toggle_vacant(
        self,
        uow: LifecycleUnitOfWork,
        facility_id: str,
        spot_number: str,
        from_status: SpotStatus,
        to_status: SpotStatus,
    ) -> Spot:
        spot = await uow.spots.get(facility_id, spot_number)
        if spot.status == to_status:
            return spot
        if not await uow.spots.set_status_if_vacant(facility_id, spot_number, from_status, to_status):
            raise SpotUnavailableError(
                f"Spot {spot_number} at facility {facility_id} is {spot.status}"
            )
        return await uow.spots.get(facility_id, spot_number)
