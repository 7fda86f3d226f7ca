from __future__ import annotations

import asyncio
import functools
import logging
import time
from typing import Any, Awaitable, Callable, TypeVar

from ..metrics import RATE_LIMIT_WAIT_SECONDS

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class RateLimiter:
    """Enforce a minimum spacing between the starts of successive calls.

    State is per instance; callers sharing a limiter are serialized so the
    spacing holds under concurrency as well.
    """

    def __init__(
        self,
        min_delay: float,
        *,
        clock: Callable[[], float] | None = None,
        sleep: Callable[[float], Awaitable[object]] | None = None,
    ) -> None:
        if min_delay < 0:
            raise ValueError("min_delay must be non-negative")
        self._min_delay = float(min_delay)
        self._clock = clock or time.monotonic
        self._sleep = sleep or asyncio.sleep
        self._last_call: float | None = None
        self._lock: asyncio.Lock | None = None
        self._lock_loop: asyncio.AbstractEventLoop | None = None

    @classmethod
    def from_millis(cls, min_delay_ms: float, **kwargs: Any) -> "RateLimiter":
        return cls(float(min_delay_ms) / 1000.0, **kwargs)

    @property
    def min_delay(self) -> float:
        return self._min_delay

    @property
    def last_call(self) -> float | None:
        return self._last_call

    def reset(self) -> None:
        self._last_call = None

    def _get_lock(self) -> asyncio.Lock:
        # asyncio.Lock binds to one loop; a limiter may outlive several asyncio.run calls
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock

    async def enforce_delay(self) -> float:
        """Wait out the rest of the spacing window and stamp the call start.

        Returns the number of seconds waited. If the wait is cancelled the
        previous timestamp is left untouched.
        """

        async with self._get_lock():
            waited = 0.0
            if self._last_call is not None:
                elapsed = self._clock() - self._last_call
                if elapsed < self._min_delay:
                    waited = self._min_delay - elapsed
                    LOGGER.debug("rate_limit.wait", extra={"wait": waited})
                    await self._sleep(waited)
                    RATE_LIMIT_WAIT_SECONDS.inc(waited)
            self._last_call = self._clock()
            return waited

    def wrap(self, fn: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(fn)
        async def _limited(*args: Any, **kwargs: Any) -> T:
            await self.enforce_delay()
            return await fn(*args, **kwargs)

        return _limited


def create_rate_limited(
    fn: Callable[..., Awaitable[T]],
    min_delay_ms: float,
    *,
    limiter: RateLimiter | None = None,
) -> Callable[..., Awaitable[T]]:
    """Return ``fn`` wrapped by a limiter spacing calls ``min_delay_ms`` apart."""

    active = limiter or RateLimiter.from_millis(min_delay_ms)
    return active.wrap(fn)


__all__ = ["RateLimiter", "create_rate_limited"]
