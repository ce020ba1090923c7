import logging
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

_SENSITIVE_TOKENS = ("email", "phone", "token", "password", "secret", "authorization")


class AuditLogger:
    """Structured audit trail for booking creation and status transitions.

    Every event goes to the `vagas_api.audit` logger as a single record whose
    `audit_event` extra carries the payload; sensitive context keys are masked.

    Example:
        ```python
        audit = AuditLogger()
        audit.log_booking_transition(
            booking_id=booking.id,
            actor="owner-1",
            context={"action": "accept", "status": "reservada"},
        )
        ```
    """

    def __init__(
        self,
        logger: logging.Logger | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._logger = logger or logging.getLogger("vagas_api.audit")
        self._clock = clock or (lambda: datetime.now(UTC))

    def log_booking_created(
        self,
        *,
        booking_id: str,
        actor: str,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        self._emit(action="BOOKING_CREATED", booking_id=booking_id, actor=actor, context=context or {})

    def log_booking_transition(
        self,
        *,
        booking_id: str,
        actor: str,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        """Emit one audit event per committed status change."""
        self._emit(
            action="BOOKING_TRANSITION",
            booking_id=booking_id,
            actor=actor,
            context=context or {},
        )

    def _emit(
        self,
        *,
        action: str,
        booking_id: str,
        actor: str,
        context: Mapping[str, Any],
    ) -> None:
        event = {
            "timestamp": self._clock().astimezone(UTC).isoformat(),
            "action": action,
            "booking_id": booking_id,
            "actor": actor,
            "context": self.mask_sensitive_data(dict(context)),
        }
        self._logger.info("audit_event", extra={"audit_event": event})

    @classmethod
    def mask_sensitive_data(cls, value: Any, key: str | None = None) -> Any:
        """Recursively mask string values stored under sensitive key names."""
        if isinstance(value, dict):
            return {k: cls.mask_sensitive_data(v, key=k) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return type(value)(cls.mask_sensitive_data(item, key=key) for item in value)
        if isinstance(value, str) and key and any(t in key.lower() for t in _SENSITIVE_TOKENS):
            return cls._mask_string(value, key)
        return value

    @staticmethod
    def _mask_string(raw: str, key: str) -> str:
        lowered_key = key.lower()
        if "email" in lowered_key:
            local_part, _, domain = raw.partition("@")
            if not domain:
                return "***"
            return f"{local_part[:1] or '*'}***@{domain}"
        if "phone" in lowered_key:
            digits = "".join(ch for ch in raw if ch.isdigit())
            if len(digits) <= 2:
                return "***"
            return f"{'*' * (len(digits) - 2)}{digits[-2:]}"
        return "***MASKED***"
