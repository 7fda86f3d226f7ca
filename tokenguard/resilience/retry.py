"""Retry policies for remote ledger calls."""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from ..metrics import RETRY_ATTEMPTS_TOTAL, RETRY_EXHAUSTED_TOTAL

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[object]]


class RetryStrategy(str, enum.Enum):
    EXPONENTIAL = "exponential"
    LINEAR = "linear"


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Attempt budget and delay schedule for one remote call.

    Delays are in seconds. ``delay_after(n)`` is the pause that follows the
    n-th failed attempt (attempts are numbered from 1).
    """

    max_attempts: int = 3
    initial_delay: float = 1.0
    max_delay: float = 10.0
    strategy: RetryStrategy = RetryStrategy.EXPONENTIAL

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.initial_delay < 0:
            raise ValueError("initial_delay must be non-negative")
        if self.max_delay < 0:
            raise ValueError("max_delay must be non-negative")

    @classmethod
    def exponential(
        cls, max_attempts: int = 3, initial_delay: float = 1.0, max_delay: float = 10.0
    ) -> "RetryPolicy":
        return cls(max_attempts, initial_delay, max_delay, RetryStrategy.EXPONENTIAL)

    @classmethod
    def linear(cls, max_attempts: int = 3, delay: float = 1.0) -> "RetryPolicy":
        return cls(max_attempts, delay, max(delay, 0.0), RetryStrategy.LINEAR)

    def delay_after(self, attempt: int) -> float:
        if self.strategy is RetryStrategy.LINEAR:
            return min(self.initial_delay, self.max_delay)
        return min(self.initial_delay * (2 ** (attempt - 1)), self.max_delay)


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    *,
    sleep: Sleep = asyncio.sleep,
    label: str = "operation",
    retryable: Callable[[Exception], bool] | None = None,
) -> T:
    """Await ``operation()`` until it succeeds or ``policy`` runs out of attempts.

    Only the final attempt's exception escapes, unchanged. Earlier failures
    are logged and dropped. ``asyncio.CancelledError`` is never retried, and
    neither is any exception rejected by ``retryable``.
    """

    attempt = 1
    while True:
        try:
            return await operation()
        except Exception as exc:
            if retryable is not None and not retryable(exc):
                raise
            if attempt >= policy.max_attempts:
                RETRY_EXHAUSTED_TOTAL.labels(operation=label).inc()
                LOGGER.warning(
                    "retry.exhausted",
                    extra={"operation": label, "attempts": attempt, "error": str(exc)},
                )
                raise
            delay = policy.delay_after(attempt)
            RETRY_ATTEMPTS_TOTAL.labels(operation=label).inc()
            LOGGER.info(
                "retry.attempt_failed",
                extra={
                    "operation": label,
                    "attempt": attempt,
                    "max_attempts": policy.max_attempts,
                    "delay": delay,
                    "error": str(exc),
                },
            )
        await sleep(delay)
        attempt += 1


async def with_exponential_backoff(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    initial_delay: float = 1.0,
    max_delay: float = 10.0,
    *,
    sleep: Sleep = asyncio.sleep,
) -> T:
    policy = RetryPolicy.exponential(max_attempts, initial_delay, max_delay)
    return await retry_async(operation, policy, sleep=sleep)


async def with_linear_retry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    delay: float = 1.0,
    *,
    sleep: Sleep = asyncio.sleep,
) -> T:
    return await retry_async(operation, RetryPolicy.linear(max_attempts, delay), sleep=sleep)


__all__ = [
    "RetryPolicy",
    "RetryStrategy",
    "retry_async",
    "with_exponential_backoff",
    "with_linear_retry",
]
