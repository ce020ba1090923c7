import secrets
from typing import Annotated

from fastapi import Depends, Header, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from vagas_api.application import (
    AcceptBookingUseCase,
    CancelBookingUseCase,
    ConfirmArrivalUseCase,
    ConfirmDepartureUseCase,
    CreateBookingUseCase,
    ExpirePendingBookingsUseCase,
    GetBookingUseCase,
    GetSpotStatsUseCase,
    ListNotificationsUseCase,
    ListPendingBookingsUseCase,
    RejectBookingUseCase,
    SetSpotMaintenanceUseCase,
)
from vagas_api.domain.errors import AuthenticationError
from vagas_api.shared.config import ApplicationContainer

bearer_scheme = HTTPBearer(auto_error=False)


def get_container(request: Request) -> ApplicationContainer:
    return request.app.state.container


ContainerDep = Annotated[ApplicationContainer, Depends(get_container)]


def get_current_user_id(
    container: ContainerDep,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> str:
    """Resolve the caller's user id from the bearer token."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Missing bearer token")
    return container.create_identity_resolver().resolve(credentials.credentials)


def verify_scheduler_token(
    container: ContainerDep,
    x_scheduler_token: Annotated[str | None, Header()] = None,
) -> None:
    """Guard internal endpoints called by the external scheduler."""
    expected = container.settings.scheduler_token
    if not expected or not x_scheduler_token:
        raise AuthenticationError("Missing scheduler token")
    if not secrets.compare_digest(expected.encode(), x_scheduler_token.encode()):
        raise AuthenticationError("Invalid scheduler token")


CurrentUserId = Annotated[str, Depends(get_current_user_id)]


def get_create_booking_use_case(container: ContainerDep) -> CreateBookingUseCase:
    return container.create_create_booking_use_case()


def get_get_booking_use_case(container: ContainerDep) -> GetBookingUseCase:
    return container.create_get_booking_use_case()


def get_accept_booking_use_case(container: ContainerDep) -> AcceptBookingUseCase:
    return container.create_accept_booking_use_case()


def get_reject_booking_use_case(container: ContainerDep) -> RejectBookingUseCase:
    return container.create_reject_booking_use_case()


def get_confirm_arrival_use_case(container: ContainerDep) -> ConfirmArrivalUseCase:
    return container.create_confirm_arrival_use_case()


def get_confirm_departure_use_case(container: ContainerDep) -> ConfirmDepartureUseCase:
    return container.create_confirm_departure_use_case()


def get_cancel_booking_use_case(container: ContainerDep) -> CancelBookingUseCase:
    return container.create_cancel_booking_use_case()


def get_list_pending_bookings_use_case(container: ContainerDep) -> ListPendingBookingsUseCase:
    return container.create_list_pending_bookings_use_case()


def get_spot_stats_use_case(container: ContainerDep) -> GetSpotStatsUseCase:
    return container.create_get_spot_stats_use_case()


def get_set_spot_maintenance_use_case(container: ContainerDep) -> SetSpotMaintenanceUseCase:
    return container.create_set_spot_maintenance_use_case()


def get_list_notifications_use_case(container: ContainerDep) -> ListNotificationsUseCase:
    return container.create_list_notifications_use_case()


def get_expire_pending_bookings_use_case(
    container: ContainerDep,
) -> ExpirePendingBookingsUseCase:
    return container.create_expire_pending_bookings_use_case()
