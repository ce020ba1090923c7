import pytest

from vagas_api.application import (
    GetSpotStatsUseCase,
    SetSpotMaintenanceRequest,
    SetSpotMaintenanceUseCase,
    SpotStats,
)
from vagas_api.domain.enums import SpotStatus
from vagas_api.domain.errors import NotFoundError, SpotUnavailableError, UnauthorizedError


@pytest.mark.asyncio
async def test_stats_count_spots_per_status(store, pending_booking) -> None:
    stats = await GetSpotStatsUseCase(uow_factory=store.unit_of_work).execute("fac-1")

    assert stats == SpotStats(total=3, disponivel=2, reservada=1, ocupada=0, manutencao=0)


@pytest.mark.asyncio
async def test_stats_for_unknown_facility(store) -> None:
    with pytest.raises(NotFoundError):
        await GetSpotStatsUseCase(uow_factory=store.unit_of_work).execute("missing")


@pytest.mark.asyncio
async def test_owner_toggles_maintenance(store) -> None:
    use_case = SetSpotMaintenanceUseCase(uow_factory=store.unit_of_work)

    spot = await use_case.execute(
        SetSpotMaintenanceRequest(owner_id="owner-1", facility_id="fac-1", spot_number="B03", enabled=True)
    )
    assert spot.status == SpotStatus.MANUTENCAO
    assert store.spot("fac-1", "B03").status == SpotStatus.MANUTENCAO

    spot = await use_case.execute(
        SetSpotMaintenanceRequest(owner_id="owner-1", facility_id="fac-1", spot_number="B03", enabled=False)
    )
    assert spot.status == SpotStatus.DISPONIVEL


@pytest.mark.asyncio
async def test_maintenance_requires_owner_and_vacant_spot(store, pending_booking) -> None:
    use_case = SetSpotMaintenanceUseCase(uow_factory=store.unit_of_work)

    with pytest.raises(UnauthorizedError):
        await use_case.execute(
            SetSpotMaintenanceRequest(owner_id="user-1", facility_id="fac-1", spot_number="B03", enabled=True)
        )
    with pytest.raises(SpotUnavailableError):
        await use_case.execute(
            SetSpotMaintenanceRequest(owner_id="owner-1", facility_id="fac-1", spot_number="A12", enabled=True)
        )
    assert store.spot("fac-1", "A12").booking_id == pending_booking.id
