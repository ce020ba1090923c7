from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from vagas_api.application.services import SpotAllocator
from vagas_api.application.use_cases.base import BookingAuditLogger, BookingLifecycleUseCase
from vagas_api.domain.entities import Spot
from vagas_api.domain.enums import SpotStatus
from vagas_api.domain.errors import UnauthorizedError
from vagas_api.domain.ports import LifecycleUnitOfWork, RetryExecutor, UnitOfWorkFactory


@dataclass(slots=True, frozen=True)
class SpotStats:
    """Spot counts per status for one facility."""

    total: int
    disponivel: int
    reservada: int
    ocupada: int
    manutencao: int


@dataclass(slots=True, frozen=True)
class SetSpotMaintenanceRequest:
    owner_id: str
    facility_id: str
    spot_number: str
    enabled: bool


class GetSpotStatsUseCase(BookingLifecycleUseCase):
    async def execute(self, facility_id: str) -> SpotStats:
        async def operation(uow: LifecycleUnitOfWork) -> dict[SpotStatus, int]:
            await uow.facilities.get(facility_id)
            return await uow.spots.count_by_status(facility_id)

        counts = await self._run(operation)
        return SpotStats(
            total=sum(counts.values()),
            disponivel=counts.get(SpotStatus.DISPONIVEL, 0),
            reservada=counts.get(SpotStatus.RESERVADA, 0),
            ocupada=counts.get(SpotStatus.OCUPADA, 0),
            manutencao=counts.get(SpotStatus.MANUTENCAO, 0),
        )


class SetSpotMaintenanceUseCase(BookingLifecycleUseCase):
    """Owner takes a vacant spot out of service or brings it back."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        allocator: SpotAllocator | None = None,
        retry_policy: RetryExecutor | None = None,
        audit_logger: BookingAuditLogger | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        super().__init__(uow_factory, retry_policy, audit_logger, clock)
        self._allocator = allocator or SpotAllocator()

    async def execute(self, request: SetSpotMaintenanceRequest) -> Spot:
        async def operation(uow: LifecycleUnitOfWork) -> Spot:
            facility = await uow.facilities.get(request.facility_id)
            if not facility.is_owned_by(request.owner_id):
                raise UnauthorizedError(
                    f"User {request.owner_id} does not own facility {request.facility_id}"
                )
            if request.enabled:
                return await self._allocator.mark_maintenance(
                    uow, request.facility_id, request.spot_number
                )
            return await self._allocator.mark_available(
                uow, request.facility_id, request.spot_number
            )

        return await self._run(operation)
