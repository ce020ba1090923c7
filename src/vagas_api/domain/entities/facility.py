from dataclasses import dataclass, field
from datetime import time, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

_CENTS = Decimal("0.01")


@dataclass(slots=True, frozen=True)
class Facility:
    """Owner-operated parking site (estacionamento), read-only for the engine."""

    id: str
    owner_id: str
    name: str
    hourly_rate: Decimal | None = None
    reservation_timeout_minutes: int | None = None
    opening_hours: dict[str, Any] = field(default_factory=dict)
    active: bool = True

    def is_owned_by(self, user_id: str) -> bool:
        return self.owner_id == user_id

    def reservation_timeout(self, default_minutes: int) -> timedelta:
        """Return how long an unanswered request stays pending."""
        minutes = self.reservation_timeout_minutes or default_minutes
        return timedelta(minutes=minutes)

    def price_for(self, start_time: time, end_time: time) -> Decimal:
        """Price a same-day window at the facility's hourly rate."""
        if self.hourly_rate is None or self.hourly_rate <= Decimal("0"):
            raise ValueError(f"Facility {self.id} has no hourly rate configured")
        minutes = (end_time.hour * 60 + end_time.minute) - (start_time.hour * 60 + start_time.minute)
        if minutes <= 0:
            raise ValueError("end_time must be after start_time")
        return (self.hourly_rate * Decimal(minutes) / Decimal(60)).quantize(
            _CENTS, rounding=ROUND_HALF_UP
        )
