"""Resilient execution of provider calls.

The geocoding service never retries on its own; it hands each provider
call to an executor. Anything implementing ``ResilientExecutor`` can be
injected. ``RetryingExecutor`` is the default and delegates the retry and
backoff policy to geopy's ``AsyncRateLimiter``.
"""

from typing import Awaitable, Callable, Protocol, TypeVar

from geopy.extra.rate_limiter import AsyncRateLimiter

from georesolver.core.config import settings

T = TypeVar("T")


class ResilientExecutor(Protocol):
    async def execute(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run ``operation``, retrying per the executor's own policy.

        Raises the final error when retries are exhausted.
        """
        ...


async def _invoke(operation: Callable[[], Awaitable[T]]) -> T:
    return await operation()


class RetryingExecutor:
    """Retry ``GeocoderServiceError`` failures with a fixed wait.

    Provider errors subclass ``GeocoderServiceError`` and are retried;
    ``NotFoundError`` and other exceptions surface immediately.
    """

    def __init__(
        self,
        max_retries: int | None = None,
        error_wait_seconds: float | None = None,
        min_delay_seconds: float = 0.0,
    ):
        self.max_retries = (
            settings.GEOCODING_MAX_RETRIES if max_retries is None else max_retries
        )
        self.error_wait_seconds = (
            settings.GEOCODING_ERROR_WAIT_SECONDS
            if error_wait_seconds is None
            else error_wait_seconds
        )
        self._limiter = AsyncRateLimiter(
            _invoke,
            min_delay_seconds=min_delay_seconds,
            max_retries=self.max_retries,
            error_wait_seconds=self.error_wait_seconds,
            swallow_exceptions=False,
        )

    async def execute(self, operation: Callable[[], Awaitable[T]]) -> T:
        return await self._limiter(operation)


class DirectExecutor:
    """Run the operation once, no retries."""

    async def execute(self, operation: Callable[[], Awaitable[T]]) -> T:
        return await operation()
