import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime

from vagas_api.application.services import NotificationEmitter, SpotAllocator
from vagas_api.application.use_cases.base import BookingAuditLogger, BookingLifecycleUseCase
from vagas_api.domain.errors import InvalidTransitionError, NotFoundError
from vagas_api.domain.ports import (
    ExpiryCursor,
    LifecycleUnitOfWork,
    RetryExecutor,
    UnitOfWorkFactory,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ExpirationReport:
    """Aggregate outcome of one sweep.

    `skipped` counts bookings that another actor moved out of
    `aguardando_confirmacao` first; those are not failures.
    """

    expired: int = 0
    failed: int = 0
    skipped: int = 0


class ExpirePendingBookingsUseCase(BookingLifecycleUseCase):
    """Reclaim pending bookings whose deadline has passed.

    One sweep walks every overdue booking in pages of `batch_size`, keyed on
    `(expires_at, id)` so bookings that fail stay behind the cursor and are
    retried on the next sweep only. Each booking is expired in its own unit of
    work, and overlapping sweeps are harmless: the loser of any race sees
    `InvalidTransitionError` and moves on.

    Example:
        ```python
        report = await ExpirePendingBookingsUseCase(uow_factory).execute()
        print(report.expired, report.failed)
        ```
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        allocator: SpotAllocator | None = None,
        emitter: NotificationEmitter | None = None,
        retry_policy: RetryExecutor | None = None,
        audit_logger: BookingAuditLogger | None = None,
        clock: Callable[[], datetime] | None = None,
        batch_size: int = 100,
    ) -> None:
        super().__init__(uow_factory, retry_policy, audit_logger, clock)
        if batch_size <= 0:
            raise ValueError("batch_size must be greater than zero")
        self._allocator = allocator or SpotAllocator()
        self._emitter = emitter or NotificationEmitter(clock=self._clock)
        self._batch_size = batch_size

    async def execute(self, now: datetime | None = None) -> ExpirationReport:
        sweep_time = now or self._clock()
        expired = failed = skipped = scanned = 0
        cursor: ExpiryCursor | None = None

        while True:
            async with self._uow_factory() as uow:
                page = await uow.bookings.list_expired_pending(
                    sweep_time, self._batch_size, after=cursor
                )
            if not page:
                break
            scanned += len(page)
            cursor = page[-1]
            for _, booking_id in page:
                try:
                    await self._run(self._expire_one(booking_id, sweep_time))
                except (InvalidTransitionError, NotFoundError) as exc:
                    skipped += 1
                    logger.info("booking_expiry_skipped booking_id=%s reason=%s", booking_id, exc)
                except Exception:
                    failed += 1
                    logger.exception("booking_expiry_failed booking_id=%s", booking_id)
                else:
                    expired += 1
                    if self._audit_logger is not None:
                        self._audit_logger.log_booking_transition(
                            booking_id=booking_id,
                            actor="system",
                            context={"action": "expire", "status": "expirada"},
                        )
            if len(page) < self._batch_size:
                break

        report = ExpirationReport(expired=expired, failed=failed, skipped=skipped)
        logger.info(
            "booking_expiry_sweep scanned=%s expired=%s failed=%s skipped=%s",
            scanned,
            report.expired,
            report.failed,
            report.skipped,
        )
        return report

    def _expire_one(
        self, booking_id: str, sweep_time: datetime
    ) -> Callable[[LifecycleUnitOfWork], Awaitable[None]]:
        async def operation(uow: LifecycleUnitOfWork) -> None:
            booking = await uow.bookings.get(booking_id)
            booking.expire(sweep_time)
            await uow.bookings.update(booking)
            await self._allocator.release_booking(uow, booking)
            await uow.notifications.add_many(self._emitter.booking_expired(booking))

        return operation
