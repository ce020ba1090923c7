from typing import Annotated

from fastapi import APIRouter, Depends

from vagas_api.api.dependencies import (
    CurrentUserId,
    get_list_pending_bookings_use_case,
    get_set_spot_maintenance_use_case,
    get_spot_stats_use_case,
)
from vagas_api.api.schemas import (
    BookingResponseDTO,
    ErrorResponseDTO,
    SpotMaintenanceDTO,
    SpotResponseDTO,
    SpotStatsResponseDTO,
)
from vagas_api.application import (
    GetSpotStatsUseCase,
    ListPendingBookingsUseCase,
    SetSpotMaintenanceRequest,
    SetSpotMaintenanceUseCase,
)

router = APIRouter(prefix="/facilities", tags=["facilities"])


@router.get(
    "/{facility_id}/bookings/pending",
    response_model=list[BookingResponseDTO],
    summary="List booking requests awaiting the owner's decision",
    responses={
        403: {"model": ErrorResponseDTO, "description": "Caller does not own the facility"},
        404: {"model": ErrorResponseDTO, "description": "Facility not found"},
    },
)
async def list_pending_bookings(
    facility_id: str,
    user_id: CurrentUserId,
    use_case: Annotated[ListPendingBookingsUseCase, Depends(get_list_pending_bookings_use_case)],
) -> list[BookingResponseDTO]:
    bookings = await use_case.execute(owner_id=user_id, facility_id=facility_id)
    return [BookingResponseDTO.from_entity(booking) for booking in bookings]


@router.get(
    "/{facility_id}/spots/stats",
    response_model=SpotStatsResponseDTO,
    summary="Spot counts per status",
    responses={404: {"model": ErrorResponseDTO, "description": "Facility not found"}},
)
async def get_spot_stats(
    facility_id: str,
    _: CurrentUserId,
    use_case: Annotated[GetSpotStatsUseCase, Depends(get_spot_stats_use_case)],
) -> SpotStatsResponseDTO:
    stats = await use_case.execute(facility_id)
    return SpotStatsResponseDTO.model_validate(stats)


@router.put(
    "/{facility_id}/spots/{spot_number}/maintenance",
    response_model=SpotResponseDTO,
    summary="Put a vacant spot under maintenance or return it to service",
    responses={
        403: {"model": ErrorResponseDTO, "description": "Caller does not own the facility"},
        404: {"model": ErrorResponseDTO, "description": "Facility or spot not found"},
        409: {"model": ErrorResponseDTO, "description": "Spot is held by a booking"},
    },
)
async def set_spot_maintenance(
    facility_id: str,
    spot_number: str,
    payload: SpotMaintenanceDTO,
    user_id: CurrentUserId,
    use_case: Annotated[SetSpotMaintenanceUseCase, Depends(get_set_spot_maintenance_use_case)],
) -> SpotResponseDTO:
    spot = await use_case.execute(
        SetSpotMaintenanceRequest(
            owner_id=user_id,
            facility_id=facility_id,
            spot_number=spot_number,
            enabled=payload.enabled,
        )
    )
    return SpotResponseDTO.from_entity(spot)
