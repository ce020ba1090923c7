import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime

from vagas_api.domain.enums import NotificationType


@dataclass(slots=True, frozen=True)
class Notification:
    """Immutable outbound notification record produced on state changes."""

    recipient_id: str
    type: NotificationType
    title: str
    message: str
    booking_id: str | None = None
    facility_id: str | None = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
