import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


class RetryPolicy:
    """Exponential backoff around an async callable.

    Only exceptions listed in `retry_on` are retried; anything else, including
    business-rule errors, propagates on the first attempt.

    Example:
        ```python
        policy = RetryPolicy(max_retries=3, retry_on=(ConcurrentUpdateError,))
        booking = await policy.execute(lambda: use_case_attempt())
        ```
    """

    def __init__(
        self,
        max_retries: int = 3,
        base_delay_seconds: float = 0.05,
        backoff_factor: float = 2.0,
        max_delay_seconds: float = 5.0,
        retry_on: tuple[type[BaseException], ...] = (Exception,),
        sleep_func: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        if max_retries < 0:
            raise ValueError("max_retries must be greater than or equal to zero")
        if base_delay_seconds <= 0:
            raise ValueError("base_delay_seconds must be greater than zero")
        if backoff_factor < 1:
            raise ValueError("backoff_factor must be greater than or equal to one")
        if max_delay_seconds <= 0:
            raise ValueError("max_delay_seconds must be greater than zero")
        if not retry_on:
            raise ValueError("retry_on must name at least one exception type")

        self._max_retries = max_retries
        self._base_delay_seconds = base_delay_seconds
        self._backoff_factor = backoff_factor
        self._max_delay_seconds = max_delay_seconds
        self._retry_on = retry_on
        self._sleep_func = sleep_func or asyncio.sleep

    @property
    def max_retries(self) -> int:
        return self._max_retries

    async def execute(self, func: Callable[[], Awaitable[T]]) -> T:
        attempt = 0
        while True:
            try:
                return await func()
            except self._retry_on as exc:
                if attempt >= self._max_retries:
                    raise
                delay = min(
                    self._base_delay_seconds * (self._backoff_factor**attempt),
                    self._max_delay_seconds,
                )
                attempt += 1
                logger.info(
                    "retrying attempt=%s delay=%.3f error=%s", attempt, delay, type(exc).__name__
                )
                await self._sleep_func(delay)
