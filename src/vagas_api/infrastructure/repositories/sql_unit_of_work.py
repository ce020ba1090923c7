from collections.abc import Iterable
from datetime import UTC, date, datetime
from types import TracebackType
from typing import Any

from sqlalchemy import and_, func, or_, update
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from vagas_api.domain.entities import Booking, Facility, Notification, Spot
from vagas_api.domain.enums import ACTIVE_BOOKING_STATUSES, BookingStatus, SpotStatus
from vagas_api.domain.errors import ConcurrentUpdateError, NotFoundError
from vagas_api.infrastructure.db.models import (
    BookingModel,
    FacilityModel,
    NotificationModel,
    SpotModel,
)
from vagas_api.infrastructure.history import HistoryTracker


def _as_utc(value: datetime | None) -> datetime | None:
    # MySQL DATETIME columns come back naive; values are always written in UTC.
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


class SQLBookingRepository:
    def __init__(self, session: AsyncSession, history_tracker: HistoryTracker) -> None:
        self._session = session
        self._history_tracker = history_tracker

    async def get(self, booking_id: str) -> Booking:
        result = await self._session.exec(
            select(BookingModel)
            .where(BookingModel.id == booking_id)
            .execution_options(populate_existing=True)
        )
        model = result.one_or_none()
        if model is None:
            raise NotFoundError(f"Booking {booking_id} not found")
        return self._to_domain(model)

    async def add(self, booking: Booking) -> None:
        self._session.add(self._to_model(booking))
        # Spot rows reference bookings.id, so the row must exist before the claim.
        await self._session.flush()
        await self._track_history(booking)

    async def update(self, booking: Booking) -> None:
        result = await self._session.exec(
            update(BookingModel)
            .where(
                col(BookingModel.id) == booking.id,
                col(BookingModel.version) == booking.version,
            )
            .values(version=booking.version + 1, **self._mutable_values(booking))
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise ConcurrentUpdateError(
                f"Booking {booking.id} changed concurrently (expected version {booking.version})"
            )
        booking.version += 1
        await self._track_history(booking)

    async def find_active_for_requester(
        self, requester_id: str, booking_date: date
    ) -> list[Booking]:
        result = await self._session.exec(
            select(BookingModel).where(
                BookingModel.requester_id == requester_id,
                BookingModel.booking_date == booking_date,
                col(BookingModel.status).in_(list(ACTIVE_BOOKING_STATUSES)),
            )
        )
        return [self._to_domain(model) for model in result.all()]

    async def list_pending_for_facility(self, facility_id: str) -> list[Booking]:
        result = await self._session.exec(
            select(BookingModel)
            .where(
                BookingModel.facility_id == facility_id,
                BookingModel.status == BookingStatus.AGUARDANDO_CONFIRMACAO,
            )
            .order_by(col(BookingModel.created_at).desc())
        )
        return [self._to_domain(model) for model in result.all()]

    async def list_expired_pending(
        self, now: datetime, limit: int, after: tuple[datetime, str] | None = None
    ) -> list[tuple[datetime, str]]:
        statement = select(BookingModel.expires_at, BookingModel.id).where(
            BookingModel.status == BookingStatus.AGUARDANDO_CONFIRMACAO,
            col(BookingModel.expires_at).is_not(None),
            col(BookingModel.expires_at) <= now,
        )
        if after is not None:
            after_expires_at, after_id = after
            statement = statement.where(
                or_(
                    col(BookingModel.expires_at) > after_expires_at,
                    and_(
                        col(BookingModel.expires_at) == after_expires_at,
                        col(BookingModel.id) > after_id,
                    ),
                )
            )
        result = await self._session.exec(
            statement.order_by(col(BookingModel.expires_at), col(BookingModel.id)).limit(limit)
        )
        return [(expires_at, booking_id) for expires_at, booking_id in result.all()]

    async def _track_history(self, booking: Booking) -> None:
        await self._history_tracker.track_status_changes(
            session=self._session,
            booking_id=booking.id,
            changes=list(booking.status_history),
        )
        booking.status_history.clear()

    @staticmethod
    def _mutable_values(booking: Booking) -> dict[str, Any]:
        return {
            "status": booking.status,
            "accepted_at": booking.accepted_at,
            "rejected_at": booking.rejected_at,
            "arrival_confirmed_by_owner_at": booking.arrival_confirmed_by_owner_at,
            "arrival_confirmed_by_user_at": booking.arrival_confirmed_by_user_at,
            "departure_confirmed_by_owner_at": booking.departure_confirmed_by_owner_at,
            "departure_confirmed_by_user_at": booking.departure_confirmed_by_user_at,
            "completed_at": booking.completed_at,
            "cancelled_at": booking.cancelled_at,
            "cancelled_by": booking.cancelled_by,
            "expired_at": booking.expired_at,
        }

    @classmethod
    def _to_model(cls, booking: Booking) -> BookingModel:
        return BookingModel(
            id=booking.id,
            requester_id=booking.requester_id,
            facility_id=booking.facility_id,
            spot_number=booking.spot_number,
            booking_date=booking.date,
            start_time=booking.start_time,
            end_time=booking.end_time,
            price=booking.price,
            version=booking.version,
            created_at=booking.created_at,
            expires_at=booking.expires_at,
            **cls._mutable_values(booking),
        )

    @staticmethod
    def _to_domain(model: BookingModel) -> Booking:
        return Booking(
            id=model.id,
            requester_id=model.requester_id,
            facility_id=model.facility_id,
            spot_number=model.spot_number,
            date=model.booking_date,
            start_time=model.start_time,
            end_time=model.end_time,
            price=model.price,
            status=BookingStatus(model.status),
            version=model.version,
            created_at=_as_utc(model.created_at) or datetime.now(UTC),
            expires_at=_as_utc(model.expires_at),
            accepted_at=_as_utc(model.accepted_at),
            rejected_at=_as_utc(model.rejected_at),
            arrival_confirmed_by_owner_at=_as_utc(model.arrival_confirmed_by_owner_at),
            arrival_confirmed_by_user_at=_as_utc(model.arrival_confirmed_by_user_at),
            departure_confirmed_by_owner_at=_as_utc(model.departure_confirmed_by_owner_at),
            departure_confirmed_by_user_at=_as_utc(model.departure_confirmed_by_user_at),
            completed_at=_as_utc(model.completed_at),
            cancelled_at=_as_utc(model.cancelled_at),
            cancelled_by=model.cancelled_by,
            expired_at=_as_utc(model.expired_at),
        )


class SQLSpotRepository:
    """Spot writes as single conditional UPDATE statements."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, facility_id: str, spot_number: str) -> Spot:
        result = await self._session.exec(
            select(SpotModel)
            .where(SpotModel.facility_id == facility_id, SpotModel.spot_number == spot_number)
            .execution_options(populate_existing=True)
        )
        model = result.one_or_none()
        if model is None:
            raise NotFoundError(f"Spot {spot_number} not found at facility {facility_id}")
        return Spot(
            id=model.id,
            facility_id=model.facility_id,
            spot_number=model.spot_number,
            status=SpotStatus(model.status),
            booking_id=model.booking_id,
            user_id=model.user_id,
        )

    async def claim(
        self, facility_id: str, spot_number: str, booking_id: str, user_id: str
    ) -> bool:
        return await self._conditional_update(
            facility_id,
            spot_number,
            [
                SpotModel.status == SpotStatus.DISPONIVEL,
                col(SpotModel.booking_id).is_(None),
            ],
            status=SpotStatus.RESERVADA,
            booking_id=booking_id,
            user_id=user_id,
        )

    async def set_status_if_held(
        self, facility_id: str, spot_number: str, booking_id: str, status: SpotStatus
    ) -> bool:
        return await self._conditional_update(
            facility_id, spot_number, [SpotModel.booking_id == booking_id], status=status
        )

    async def clear_if_held(self, facility_id: str, spot_number: str, booking_id: str) -> bool:
        return await self._conditional_update(
            facility_id,
            spot_number,
            [SpotModel.booking_id == booking_id],
            status=SpotStatus.DISPONIVEL,
            booking_id=None,
            user_id=None,
        )

    async def set_status_if_vacant(
        self,
        facility_id: str,
        spot_number: str,
        from_status: SpotStatus,
        status: SpotStatus,
    ) -> bool:
        return await self._conditional_update(
            facility_id,
            spot_number,
            [SpotModel.status == from_status, col(SpotModel.booking_id).is_(None)],
            status=status,
        )

    async def count_by_status(self, facility_id: str) -> dict[SpotStatus, int]:
        result = await self._session.exec(
            select(SpotModel.status, func.count(col(SpotModel.id)))
            .where(SpotModel.facility_id == facility_id)
            .group_by(SpotModel.status)
        )
        return {SpotStatus(status): int(count) for status, count in result.all()}

    async def _conditional_update(
        self,
        facility_id: str,
        spot_number: str,
        conditions: list[Any],
        **values: Any,
    ) -> bool:
        result = await self._session.exec(
            update(SpotModel)
            .where(
                col(SpotModel.facility_id) == facility_id,
                col(SpotModel.spot_number) == spot_number,
                *conditions,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1


class SQLFacilityReader:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, facility_id: str) -> Facility:
        result = await self._session.exec(select(FacilityModel).where(FacilityModel.id == facility_id))
        model = result.one_or_none()
        if model is None:
            raise NotFoundError(f"Facility {facility_id} not found")
        return Facility(
            id=model.id,
            owner_id=model.owner_id,
            name=model.name,
            hourly_rate=model.hourly_rate,
            reservation_timeout_minutes=model.reservation_timeout_minutes,
            opening_hours=dict(model.opening_hours or {}),
            active=model.active,
        )


class SQLNotificationOutbox:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add_many(self, notifications: Iterable[Notification]) -> None:
        for notification in notifications:
            self._session.add(
                NotificationModel(
                    id=notification.id,
                    recipient_id=notification.recipient_id,
                    type=notification.type,
                    title=notification.title,
                    message=notification.message,
                    booking_id=notification.booking_id,
                    facility_id=notification.facility_id,
                    created_at=notification.created_at,
                    delivery_status="PENDING",
                )
            )

    async def list_for_recipient(self, recipient_id: str, limit: int) -> list[Notification]:
        result = await self._session.exec(
            select(NotificationModel)
            .where(NotificationModel.recipient_id == recipient_id)
            .order_by(col(NotificationModel.created_at).desc())
            .limit(limit)
        )
        return [notification_from_model(model) for model in result.all()]


def notification_from_model(model: NotificationModel) -> Notification:
    return Notification(
        id=model.id,
        recipient_id=model.recipient_id,
        type=model.type,
        title=model.title,
        message=model.message,
        booking_id=model.booking_id,
        facility_id=model.facility_id,
        created_at=_as_utc(model.created_at) or datetime.now(UTC),
    )


class SQLLifecycleUnitOfWork:
    """One database transaction shared by every repository it exposes.

    Example:
        ```python
        async with SQLLifecycleUnitOfWork(session_factory) as uow:
            booking = await uow.bookings.get(booking_id)
            ...
        # committed here, or rolled back if the block raised
        ```
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        history_tracker: HistoryTracker | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._history_tracker = history_tracker or HistoryTracker()
        self._session: AsyncSession | None = None

    async def __aenter__(self) -> "SQLLifecycleUnitOfWork":
        self._session = self._session_factory()
        self.bookings = SQLBookingRepository(self._session, self._history_tracker)
        self.spots = SQLSpotRepository(self._session)
        self.facilities = SQLFacilityReader(self._session)
        self.notifications = SQLNotificationOutbox(self._session)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._session is None:
            return
        try:
            if exc_type is None:
                await self._session.commit()
            else:
                await self._session.rollback()
        finally:
            await self._session.close()
            self._session = None
