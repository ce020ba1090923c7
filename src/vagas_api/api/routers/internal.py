from typing import Annotated

from fastapi import APIRouter, Depends

from vagas_api.api.dependencies import (
    get_expire_pending_bookings_use_case,
    verify_scheduler_token,
)
from vagas_api.api.schemas import ErrorResponseDTO, ExpirationReportDTO
from vagas_api.application import ExpirePendingBookingsUseCase

router = APIRouter(
    prefix="/internal",
    tags=["internal"],
    dependencies=[Depends(verify_scheduler_token)],
)


@router.post(
    "/bookings/expire",
    response_model=ExpirationReportDTO,
    summary="Run one expiration sweep",
    description="Called by the external scheduler with the `X-Scheduler-Token` header.",
    responses={401: {"model": ErrorResponseDTO, "description": "Missing or invalid scheduler token"}},
)
async def expire_pending_bookings(
    use_case: Annotated[ExpirePendingBookingsUseCase, Depends(get_expire_pending_bookings_use_case)],
) -> ExpirationReportDTO:
    report = await use_case.execute()
    return ExpirationReportDTO.model_validate(report)
