import asyncio
from collections import defaultdict, deque
from collections.abc import Awaitable, Callable
from time import monotonic

from fastapi import Request
from fastapi.responses import JSONResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from vagas_api.api.schemas import ErrorResponseDTO

BOOKINGS_PATH = "/api/v1/bookings"


class RateLimiterMiddleware(BaseHTTPMiddleware):
    """Sliding one-minute window per client IP and endpoint.

    Booking creation has its own, tighter limit.
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        default_limit_per_minute: int = 120,
        bookings_limit_per_minute: int = 30,
        time_provider: Callable[[], float] | None = None,
    ) -> None:
        super().__init__(app)
        if default_limit_per_minute <= 0:
            raise ValueError("default_limit_per_minute must be greater than zero")
        if bookings_limit_per_minute <= 0:
            raise ValueError("bookings_limit_per_minute must be greater than zero")
        self._default_limit = default_limit_per_minute
        self._bookings_limit = bookings_limit_per_minute
        self._time_provider = time_provider or monotonic
        self._request_windows: dict[str, deque[float]] = defaultdict(deque)
        self._lock = asyncio.Lock()

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        limit = self._resolve_limit(request)
        key = self._build_key(request)
        now = self._time_provider()
        cutoff = now - 60.0

        async with self._lock:
            window = self._request_windows[key]
            while window and window[0] <= cutoff:
                window.popleft()
            if len(window) >= limit:
                return JSONResponse(
                    status_code=429,
                    content=ErrorResponseDTO(
                        error="Too many requests",
                        message="Rate limit exceeded. Please retry later.",
                        code="RATE_LIMIT_EXCEEDED",
                    ).model_dump(),
                    headers={"Retry-After": str(max(1, int(window[0] + 60.0 - now)))},
                )
            window.append(now)

        return await call_next(request)

    def _resolve_limit(self, request: Request) -> int:
        is_booking_create = (
            request.method.upper() == "POST" and request.url.path.rstrip("/") == BOOKINGS_PATH
        )
        return self._bookings_limit if is_booking_create else self._default_limit

    @staticmethod
    def _build_key(request: Request) -> str:
        client_ip = request.client.host if request.client is not None else "unknown"
        return f"{client_ip}:{request.method.upper()}:{request.url.path}"
