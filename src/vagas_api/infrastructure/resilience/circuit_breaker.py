import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import StrEnum
from time import monotonic
from typing import TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


class CircuitState(StrEnum):
    CLOSED = "CLOSED"
    OPEN = "OPEN"
    HALF_OPEN = "HALF_OPEN"


class CircuitBreakerOpenError(RuntimeError):
    pass


class CircuitBreaker:
    """Stops calling a failing dependency until a recovery window has passed.

    After `failure_threshold` consecutive failures the breaker opens and every
    call fails fast with `CircuitBreakerOpenError`. Once the recovery window
    elapses a single trial call is let through (HALF_OPEN): success closes the
    breaker, failure reopens it.
    """

    def __init__(
        self,
        name: str = "default",
        failure_threshold: int = 5,
        recovery_timeout_seconds: float = 30.0,
        time_provider: Callable[[], float] | None = None,
    ) -> None:
        if failure_threshold <= 0:
            raise ValueError("failure_threshold must be greater than zero")
        if recovery_timeout_seconds <= 0:
            raise ValueError("recovery_timeout_seconds must be greater than zero")

        self._name = name
        self._failure_threshold = failure_threshold
        self._recovery_timeout_seconds = recovery_timeout_seconds
        self._time_provider = time_provider or monotonic

        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._opened_at: float | None = None
        self._lock = asyncio.Lock()

    @property
    def state(self) -> CircuitState:
        return self._state

    @property
    def failure_count(self) -> int:
        return self._failure_count

    async def call(self, func: Callable[[], Awaitable[T]]) -> T:
        async with self._lock:
            if self._state == CircuitState.OPEN:
                if not self._recovery_window_elapsed():
                    raise CircuitBreakerOpenError(f"Circuit breaker '{self._name}' is OPEN")
                self._state = CircuitState.HALF_OPEN

        try:
            result = await func()
        except Exception:
            async with self._lock:
                self._record_failure()
            raise
        async with self._lock:
            self._record_success()
        return result

    def _recovery_window_elapsed(self) -> bool:
        if self._opened_at is None:
            return False
        return (self._time_provider() - self._opened_at) >= self._recovery_timeout_seconds

    def _record_success(self) -> None:
        if self._state != CircuitState.CLOSED:
            logger.info("circuit_closed name=%s", self._name)
        self._failure_count = 0
        self._state = CircuitState.CLOSED
        self._opened_at = None

    def _record_failure(self) -> None:
        self._failure_count += 1
        if self._state == CircuitState.HALF_OPEN or self._failure_count >= self._failure_threshold:
            if self._state != CircuitState.OPEN:
                logger.warning(
                    "circuit_opened name=%s failures=%s", self._name, self._failure_count
                )
            self._state = CircuitState.OPEN
            self._opened_at = self._time_provider()
