from typing import Any

import httpx

from vagas_api.domain.entities import Notification
from vagas_api.domain.ports import DeliveryResult
from vagas_api.infrastructure.resilience import (
    CircuitBreaker,
    CircuitBreakerOpenError,
    RetryPolicy,
)


class WebhookNotificationGateway:
    """Deliver notification records to the configured push/realtime webhook.

    Transport failures are reported as an unsuccessful `DeliveryResult`; the
    dispatcher decides what to do with the outbox row.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        circuit_breaker: CircuitBreaker,
        retry_policy: RetryPolicy,
        path: str = "",
        timeout_seconds: float = 10.0,
    ) -> None:
        self._client = client
        self._circuit_breaker = circuit_breaker
        self._retry_policy = retry_policy
        self._path = path
        self._timeout_seconds = timeout_seconds

    async def deliver(self, notification: Notification) -> DeliveryResult:
        async def _request() -> DeliveryResult:
            response = await self._client.post(
                self._path,
                json=self._build_payload(notification),
                timeout=self._timeout_seconds,
            )
            response.raise_for_status()
            payload = response.json() if response.content else {}
            status = str(payload.get("status", "DELIVERED")).upper()
            return DeliveryResult(success=True, status=status, payload=payload)

        async def _request_with_circuit_breaker() -> DeliveryResult:
            return await self._circuit_breaker.call(_request)

        try:
            return await self._retry_policy.execute(_request_with_circuit_breaker)
        except CircuitBreakerOpenError:
            return DeliveryResult(success=False, status="CIRCUIT_OPEN")
        except httpx.TimeoutException:
            return DeliveryResult(success=False, status="TIMEOUT")
        except httpx.HTTPError as exc:
            return DeliveryResult(success=False, status="FAILED", payload={"error": str(exc)})

    @staticmethod
    def _build_payload(notification: Notification) -> dict[str, Any]:
        return {
            "id": notification.id,
            "user_id": notification.recipient_id,
            "type": notification.type.value,
            "title": notification.title,
            "message": notification.message,
            "booking_id": notification.booking_id,
            "facility_id": notification.facility_id,
            "created_at": notification.created_at.isoformat(),
        }
