import pytest

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
from vagas_api.infrastructure.gateways import WebhookNotificationGateway
from vagas_api.infrastructure.repositories import InMemoryLifecycleStore
from vagas_api.shared.config import ApplicationContainer, Settings, settings


def test_settings_defaults_and_cors_parsing(monkeypatch) -> None:
    monkeypatch.setenv("CORS_ALLOWED_ORIGINS", "http://localhost:3000, ,http://localhost:5173")
    monkeypatch.setenv("BOOKING_EXPIRY_MINUTES", "20")
    monkeypatch.delenv("JWT_SECRET_KEY", raising=False)
    monkeypatch.setenv("SECRET_KEY", "from-legacy-name")

    loaded = Settings(_env_file=None)

    assert loaded.cors_allowed_origins_list == ["http://localhost:3000", "http://localhost:5173"]
    assert loaded.booking_expiry_minutes == 20
    assert loaded.jwt_secret_key == "from-legacy-name"
    assert loaded.jwt_algorithm == "HS256"


def test_container_builds_every_use_case() -> None:
    container = ApplicationContainer(uow_factory=InMemoryLifecycleStore().unit_of_work)

    built = [
        container.create_create_booking_use_case(),
        container.create_accept_booking_use_case(),
        container.create_reject_booking_use_case(),
        container.create_confirm_arrival_use_case(),
        container.create_confirm_departure_use_case(),
        container.create_cancel_booking_use_case(),
        container.create_expire_pending_bookings_use_case(),
        container.create_get_booking_use_case(),
        container.create_list_pending_bookings_use_case(),
        container.create_list_notifications_use_case(),
        container.create_get_spot_stats_use_case(),
        container.create_set_spot_maintenance_use_case(),
    ]

    assert [type(item) for item in built] == [
        CreateBookingUseCase,
        AcceptBookingUseCase,
        RejectBookingUseCase,
        ConfirmArrivalUseCase,
        ConfirmDepartureUseCase,
        CancelBookingUseCase,
        ExpirePendingBookingsUseCase,
        GetBookingUseCase,
        ListPendingBookingsUseCase,
        ListNotificationsUseCase,
        GetSpotStatsUseCase,
        SetSpotMaintenanceUseCase,
    ]
    assert container.create_identity_resolver() is container.create_identity_resolver()


@pytest.mark.asyncio
async def test_notification_gateway_requires_started_webhook_client() -> None:
    without_webhook = ApplicationContainer(
        settings.model_copy(update={"notification_webhook_url": ""}),
        uow_factory=InMemoryLifecycleStore().unit_of_work,
    )
    await without_webhook.startup()
    with pytest.raises(RuntimeError, match="Webhook client not started"):
        without_webhook.create_notification_gateway()

    with_webhook = ApplicationContainer(
        settings.model_copy(update={"notification_webhook_url": "https://hooks.test/notify/"}),
        uow_factory=InMemoryLifecycleStore().unit_of_work,
    )
    await with_webhook.startup()
    try:
        assert isinstance(with_webhook.create_notification_gateway(), WebhookNotificationGateway)
    finally:
        await with_webhook.shutdown()
    with pytest.raises(RuntimeError):
        with_webhook.create_notification_gateway()
