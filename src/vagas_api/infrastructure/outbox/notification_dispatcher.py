import asyncio
import logging
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from vagas_api.domain.ports import NotificationGateway
from vagas_api.infrastructure.db.models import NotificationModel
from vagas_api.infrastructure.repositories import notification_from_model

logger = logging.getLogger(__name__)

PENDING = "PENDING"
DELIVERED = "DELIVERED"
FAILED = "FAILED"


class NotificationDispatcher:
    """Outbox worker pushing stored notifications to the delivery gateway.

    Rows are picked up while `PENDING`, or `FAILED` with fewer than
    `max_attempts` tries, and each row is updated in its own transaction.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        gateway: NotificationGateway,
        poll_interval_seconds: float = 5.0,
        batch_size: int = 50,
        max_attempts: int = 5,
    ) -> None:
        if poll_interval_seconds <= 0:
            raise ValueError("poll_interval_seconds must be greater than zero")
        if batch_size <= 0:
            raise ValueError("batch_size must be greater than zero")
        if max_attempts <= 0:
            raise ValueError("max_attempts must be greater than zero")

        self._session_factory = session_factory
        self._gateway = gateway
        self._poll_interval_seconds = poll_interval_seconds
        self._batch_size = batch_size
        self._max_attempts = max_attempts
        self._stop_event = asyncio.Event()

    async def run_forever(self) -> None:
        while not self._stop_event.is_set():
            try:
                await self.process_pending_once(self._batch_size)
            except Exception:
                logger.exception("notification_dispatch_cycle_failed")
            try:
                await asyncio.wait_for(
                    self._stop_event.wait(),
                    timeout=self._poll_interval_seconds,
                )
            except TimeoutError:
                continue

    def stop(self) -> None:
        self._stop_event.set()

    async def process_pending_once(self, limit: int | None = None) -> int:
        """Deliver one batch; return how many notifications were delivered."""
        target_limit = limit if limit is not None else self._batch_size
        async with self._session_factory() as session:
            result = await session.exec(
                select(NotificationModel.id)
                .where(
                    col(NotificationModel.delivery_status).in_([PENDING, FAILED]),
                    col(NotificationModel.attempts) < self._max_attempts,
                )
                .order_by(col(NotificationModel.created_at))
                .limit(target_limit)
            )
            notification_ids = list(result.all())

        delivered = 0
        for notification_id in notification_ids:
            if await self._deliver_by_id(notification_id):
                delivered += 1
        if notification_ids:
            logger.info(
                "notification_dispatch_batch picked=%s delivered=%s",
                len(notification_ids),
                delivered,
            )
        return delivered

    async def _deliver_by_id(self, notification_id: str) -> bool:
        async with self._session_factory() as session:
            async with session.begin():
                result = await session.exec(
                    select(NotificationModel)
                    .where(NotificationModel.id == notification_id)
                    .with_for_update(skip_locked=True)
                )
                model = result.one_or_none()
                if model is None or model.delivery_status == DELIVERED:
                    return False

                model.attempts += 1
                try:
                    delivery = await self._gateway.deliver(notification_from_model(model))
                except Exception as exc:
                    logger.warning(
                        "notification_delivery_error id=%s error=%s", notification_id, exc
                    )
                    model.delivery_status = FAILED
                    model.last_error = str(exc)[:255]
                    return False

                if not delivery.success:
                    model.delivery_status = FAILED
                    model.last_error = delivery.status[:255]
                    return False

                model.delivery_status = DELIVERED
                model.last_error = None
                model.delivered_at = datetime.now(UTC)
                return True
