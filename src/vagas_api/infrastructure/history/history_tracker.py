from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from vagas_api.domain.entities import BookingStatusChange
from vagas_api.infrastructure.db.models import BookingStatusHistoryModel


class HistoryTracker:
    """Persist and read booking status change history."""

    async def track_status_changes(
        self,
        *,
        session: AsyncSession,
        booking_id: str,
        changes: list[BookingStatusChange],
    ) -> None:
        """Store transitions in the caller's transaction."""
        for change in changes:
            session.add(
                BookingStatusHistoryModel(
                    booking_id=booking_id,
                    from_status=change.from_status,
                    to_status=change.to_status,
                    changed_at=change.changed_at,
                )
            )

    async def get_history(
        self, session: AsyncSession, booking_id: str
    ) -> list[BookingStatusHistoryModel]:
        """Return ordered status history for a booking."""
        result = await session.exec(
            select(BookingStatusHistoryModel)
            .where(BookingStatusHistoryModel.booking_id == booking_id)
            .order_by(BookingStatusHistoryModel.id)
        )
        return list(result.all())
