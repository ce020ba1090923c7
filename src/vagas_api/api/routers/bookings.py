from typing import Annotated

from fastapi import APIRouter, Depends, status

from vagas_api.api.dependencies import (
    CurrentUserId,
    get_accept_booking_use_case,
    get_cancel_booking_use_case,
    get_confirm_arrival_use_case,
    get_confirm_departure_use_case,
    get_create_booking_use_case,
    get_get_booking_use_case,
    get_reject_booking_use_case,
)
from vagas_api.api.schemas import (
    BookingRequestDTO,
    BookingResponseDTO,
    ErrorResponseDTO,
    PresenceConfirmationDTO,
    PresenceConfirmationResponseDTO,
)
from vagas_api.application import (
    AcceptBookingUseCase,
    BookingActionRequest,
    CancelBookingUseCase,
    ConfirmArrivalUseCase,
    ConfirmDepartureUseCase,
    ConfirmPresenceRequest,
    CreateBookingRequest,
    CreateBookingUseCase,
    GetBookingUseCase,
    RejectBookingUseCase,
)
from vagas_api.application.use_cases import ConfirmPresenceResult

router = APIRouter(prefix="/bookings", tags=["bookings"])

_ERROR_RESPONSES: dict[int | str, dict] = {
    401: {"model": ErrorResponseDTO, "description": "Missing or invalid bearer token"},
    403: {"model": ErrorResponseDTO, "description": "Caller is not a party to the booking"},
    404: {"model": ErrorResponseDTO, "description": "Booking, spot or facility not found"},
    409: {"model": ErrorResponseDTO, "description": "Transition not allowed or spot unavailable"},
    503: {"model": ErrorResponseDTO, "description": "Concurrent update, retry later"},
}


def _presence_response(result: ConfirmPresenceResult) -> PresenceConfirmationResponseDTO:
    return PresenceConfirmationResponseDTO(
        booking=BookingResponseDTO.from_entity(result.booking),
        outcome=result.outcome.value,
    )


@router.post(
    "",
    response_model=BookingResponseDTO,
    status_code=status.HTTP_201_CREATED,
    summary="Request a booking",
    description="Reserve a free spot and notify the facility owner; the request expires unless accepted.",
    responses={
        201: {
            "description": "Booking created",
            "content": {
                "application/json": {
                    "example": {
                        "id": "5b0f6c1e-7c0a-4d43-9d3e-2f4a1c9b8e10",
                        "facility_id": "fac-1",
                        "spot_number": "A12",
                        "date": "2026-10-19",
                        "start_time": "09:00:00",
                        "end_time": "11:00:00",
                        "price": "20.00",
                        "status": "aguardando_confirmacao",
                    }
                }
            },
        },
        400: {"model": ErrorResponseDTO, "description": "Business rule violation"},
        422: {"model": ErrorResponseDTO, "description": "Validation error"},
        429: {"model": ErrorResponseDTO, "description": "Rate limit exceeded"},
        **_ERROR_RESPONSES,
    },
)
async def create_booking(
    payload: BookingRequestDTO,
    user_id: CurrentUserId,
    use_case: Annotated[CreateBookingUseCase, Depends(get_create_booking_use_case)],
) -> BookingResponseDTO:
    booking = await use_case.execute(
        CreateBookingRequest(
            requester_id=user_id,
            facility_id=payload.facility_id,
            spot_number=payload.spot_number,
            booking_date=payload.date,
            start_time=payload.start_time,
            end_time=payload.end_time,
        )
    )
    return BookingResponseDTO.from_entity(booking)


@router.get(
    "/{booking_id}",
    response_model=BookingResponseDTO,
    summary="Get a booking",
    responses=_ERROR_RESPONSES,
)
async def get_booking(
    booking_id: str,
    user_id: CurrentUserId,
    use_case: Annotated[GetBookingUseCase, Depends(get_get_booking_use_case)],
) -> BookingResponseDTO:
    booking = await use_case.execute(BookingActionRequest(actor_id=user_id, booking_id=booking_id))
    return BookingResponseDTO.from_entity(booking)


@router.post(
    "/{booking_id}/accept",
    response_model=BookingResponseDTO,
    summary="Accept a pending booking (facility owner)",
    responses=_ERROR_RESPONSES,
)
async def accept_booking(
    booking_id: str,
    user_id: CurrentUserId,
    use_case: Annotated[AcceptBookingUseCase, Depends(get_accept_booking_use_case)],
) -> BookingResponseDTO:
    booking = await use_case.execute(BookingActionRequest(actor_id=user_id, booking_id=booking_id))
    return BookingResponseDTO.from_entity(booking)


@router.post(
    "/{booking_id}/reject",
    response_model=BookingResponseDTO,
    summary="Reject a pending booking (facility owner)",
    responses=_ERROR_RESPONSES,
)
async def reject_booking(
    booking_id: str,
    user_id: CurrentUserId,
    use_case: Annotated[RejectBookingUseCase, Depends(get_reject_booking_use_case)],
) -> BookingResponseDTO:
    booking = await use_case.execute(BookingActionRequest(actor_id=user_id, booking_id=booking_id))
    return BookingResponseDTO.from_entity(booking)


@router.post(
    "/{booking_id}/arrival",
    response_model=PresenceConfirmationResponseDTO,
    summary="Confirm arrival",
    description="Both the owner and the requester must confirm before the booking becomes `ocupada`.",
    responses=_ERROR_RESPONSES,
)
async def confirm_arrival(
    booking_id: str,
    payload: PresenceConfirmationDTO,
    user_id: CurrentUserId,
    use_case: Annotated[ConfirmArrivalUseCase, Depends(get_confirm_arrival_use_case)],
) -> PresenceConfirmationResponseDTO:
    result = await use_case.execute(
        ConfirmPresenceRequest(actor_id=user_id, booking_id=booking_id, party=payload.confirmed_by)
    )
    return _presence_response(result)


@router.post(
    "/{booking_id}/departure",
    response_model=PresenceConfirmationResponseDTO,
    summary="Confirm departure",
    description="Both confirmations complete the booking and free the spot.",
    responses=_ERROR_RESPONSES,
)
async def confirm_departure(
    booking_id: str,
    payload: PresenceConfirmationDTO,
    user_id: CurrentUserId,
    use_case: Annotated[ConfirmDepartureUseCase, Depends(get_confirm_departure_use_case)],
) -> PresenceConfirmationResponseDTO:
    result = await use_case.execute(
        ConfirmPresenceRequest(actor_id=user_id, booking_id=booking_id, party=payload.confirmed_by)
    )
    return _presence_response(result)


@router.post(
    "/{booking_id}/cancel",
    response_model=BookingResponseDTO,
    summary="Cancel a booking (requester or owner)",
    responses=_ERROR_RESPONSES,
)
async def cancel_booking(
    booking_id: str,
    user_id: CurrentUserId,
    use_case: Annotated[CancelBookingUseCase, Depends(get_cancel_booking_use_case)],
) -> BookingResponseDTO:
    booking = await use_case.execute(BookingActionRequest(actor_id=user_id, booking_id=booking_id))
    return BookingResponseDTO.from_entity(booking)
