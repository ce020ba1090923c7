import httpx
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

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
    NotificationEmitter,
    RejectBookingUseCase,
    SetSpotMaintenanceUseCase,
    SpotAllocator,
)
from vagas_api.domain.errors import ConcurrentUpdateError
from vagas_api.domain.ports import UnitOfWorkFactory
from vagas_api.infrastructure.auth import JWTIdentityResolver
from vagas_api.infrastructure.db.session import create_session_factory
from vagas_api.infrastructure.gateways import WebhookNotificationGateway
from vagas_api.infrastructure.outbox import NotificationDispatcher
from vagas_api.infrastructure.repositories import SQLLifecycleUnitOfWork
from vagas_api.infrastructure.resilience import CircuitBreaker, RetryPolicy
from vagas_api.shared.config.settings import Settings, settings
from vagas_api.shared.logging import AuditLogger

TRANSIENT_STORAGE_ERRORS: tuple[type[Exception], ...] = (ConcurrentUpdateError, OperationalError)


class ApplicationContainer:
    """Dependency container for units of work, gateways and use cases.

    `uow_factory` replaces the MySQL unit of work, e.g. with
    `InMemoryLifecycleStore().unit_of_work` for tests or local runs.
    """

    def __init__(
        self,
        app_settings: Settings = settings,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        uow_factory: UnitOfWorkFactory | None = None,
    ) -> None:
        self.settings = app_settings
        self._session_factory = session_factory
        self._uow_factory = uow_factory
        self._audit_logger = AuditLogger()
        self._allocator = SpotAllocator()
        self._emitter = NotificationEmitter()
        self._identity_resolver: JWTIdentityResolver | None = None
        self._webhook_client: httpx.AsyncClient | None = None

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            self._session_factory = create_session_factory(self.settings)
        return self._session_factory

    @property
    def uow_factory(self) -> UnitOfWorkFactory:
        if self._uow_factory is None:
            session_factory = self.session_factory
            self._uow_factory = lambda: SQLLifecycleUnitOfWork(session_factory)
        return self._uow_factory

    async def startup(self) -> None:
        """Initialize the long-lived webhook HTTP client when a URL is configured."""
        if self._webhook_client is None and self.settings.notification_webhook_url:
            headers = {}
            if self.settings.notification_webhook_token:
                headers["Authorization"] = f"Bearer {self.settings.notification_webhook_token}"
            self._webhook_client = httpx.AsyncClient(
                base_url=self.settings.notification_webhook_url.rstrip("/"),
                headers=headers,
                limits=httpx.Limits(max_connections=self.settings.http_max_connections),
                timeout=self.settings.external_api_timeout_seconds,
            )

    async def shutdown(self) -> None:
        """Close the webhook client and dispose the database engine."""
        if self._webhook_client is not None:
            await self._webhook_client.aclose()
            self._webhook_client = None
        if self._session_factory is not None:
            engine = self._session_factory.kw.get("bind")
            if engine is not None:
                await engine.dispose()

    def create_identity_resolver(self) -> JWTIdentityResolver:
        if self._identity_resolver is None:
            self._identity_resolver = JWTIdentityResolver(
                secret_key=self.settings.jwt_secret_key,
                algorithm=self.settings.jwt_algorithm,
                audience=self.settings.jwt_audience,
            )
        return self._identity_resolver

    def create_contention_retry_policy(self) -> RetryPolicy:
        """Retry policy for lost optimistic-concurrency races and transient DB errors."""
        return RetryPolicy(
            max_retries=self.settings.retry_max_attempts,
            retry_on=TRANSIENT_STORAGE_ERRORS,
        )

    def create_circuit_breaker(self, name: str) -> CircuitBreaker:
        return CircuitBreaker(
            name=name,
            failure_threshold=self.settings.circuit_breaker_failure_threshold,
            recovery_timeout_seconds=self.settings.circuit_breaker_recovery_seconds,
        )

    def create_create_booking_use_case(self) -> CreateBookingUseCase:
        return CreateBookingUseCase(
            uow_factory=self.uow_factory,
            allocator=self._allocator,
            emitter=self._emitter,
            retry_policy=self.create_contention_retry_policy(),
            audit_logger=self._audit_logger,
            default_expiry_minutes=self.settings.booking_expiry_minutes,
        )

    def create_accept_booking_use_case(self) -> AcceptBookingUseCase:
        return AcceptBookingUseCase(**self._decision_dependencies())

    def create_reject_booking_use_case(self) -> RejectBookingUseCase:
        return RejectBookingUseCase(**self._decision_dependencies())

    def create_confirm_arrival_use_case(self) -> ConfirmArrivalUseCase:
        return ConfirmArrivalUseCase(**self._decision_dependencies())

    def create_confirm_departure_use_case(self) -> ConfirmDepartureUseCase:
        return ConfirmDepartureUseCase(**self._decision_dependencies())

    def create_cancel_booking_use_case(self) -> CancelBookingUseCase:
        return CancelBookingUseCase(**self._decision_dependencies())

    def create_expire_pending_bookings_use_case(self) -> ExpirePendingBookingsUseCase:
        return ExpirePendingBookingsUseCase(
            batch_size=self.settings.sweep_batch_size,
            **self._decision_dependencies(),
        )

    def create_get_booking_use_case(self) -> GetBookingUseCase:
        return GetBookingUseCase(uow_factory=self.uow_factory)

    def create_list_pending_bookings_use_case(self) -> ListPendingBookingsUseCase:
        return ListPendingBookingsUseCase(uow_factory=self.uow_factory)

    def create_list_notifications_use_case(self) -> ListNotificationsUseCase:
        return ListNotificationsUseCase(uow_factory=self.uow_factory)

    def create_get_spot_stats_use_case(self) -> GetSpotStatsUseCase:
        return GetSpotStatsUseCase(uow_factory=self.uow_factory)

    def create_set_spot_maintenance_use_case(self) -> SetSpotMaintenanceUseCase:
        return SetSpotMaintenanceUseCase(
            uow_factory=self.uow_factory,
            allocator=self._allocator,
            retry_policy=self.create_contention_retry_policy(),
        )

    def create_notification_gateway(self) -> WebhookNotificationGateway:
        if self._webhook_client is None:
            raise RuntimeError(
                "Webhook client not started. Configure NOTIFICATION_WEBHOOK_URL and call startup()."
            )
        return WebhookNotificationGateway(
            client=self._webhook_client,
            circuit_breaker=self.create_circuit_breaker("notification_webhook"),
            retry_policy=RetryPolicy(
                max_retries=self.settings.retry_max_attempts,
                base_delay_seconds=0.5,
                retry_on=(httpx.HTTPError,),
            ),
            timeout_seconds=self.settings.external_api_timeout_seconds,
        )

    def create_notification_dispatcher(
        self, poll_interval_seconds: float = 5.0, batch_size: int = 50
    ) -> NotificationDispatcher:
        return NotificationDispatcher(
            session_factory=self.session_factory,
            gateway=self.create_notification_gateway(),
            poll_interval_seconds=poll_interval_seconds,
            batch_size=batch_size,
        )

    def _decision_dependencies(self) -> dict:
        return {
            "uow_factory": self.uow_factory,
            "allocator": self._allocator,
            "emitter": self._emitter,
            "retry_policy": self.create_contention_retry_policy(),
            "audit_logger": self._audit_logger,
        }
