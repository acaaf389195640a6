"""Rate limiting adapters.

Starts with a per-process in-memory store behind a small interface so a
shared store can replace it later without touching the service layer.
"""

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from app.adapters.rate_limit.in_memory import (
    InMemoryFixedWindowRateLimiter,
    UsageRecord,
    UsageStore,
)

__all__ = [
    "AbstractRateLimiter",
    "InMemoryFixedWindowRateLimiter",
    "RateLimitResult",
    "UsageRecord",
    "UsageStore",
]
