"""Retry and rate limiting around remote ledger calls."""

from .rate_limit import RateLimiter, create_rate_limited
from .retry import (
    RetryPolicy,
    RetryStrategy,
    retry_async,
    with_exponential_backoff,
    with_linear_retry,
)

__all__ = [
    "RateLimiter",
    "RetryPolicy",
    "RetryStrategy",
    "create_rate_limited",
    "retry_async",
    "with_exponential_backoff",
    "with_linear_retry",
]
