"""In-memory fixed-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit,
  and counters reset when the process restarts.
- Windows are anchored at the first call of each window, not at wall-clock
  boundaries. A client can therefore burst up to ``2 * limit`` calls across
  the moment a window expires.
- Records are never evicted; memory grows with the number of distinct clients.
- Thread-safe: check-and-record for one key runs under that key's lock.
"""

from __future__ import annotations

import math
import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult


@dataclass
class UsageRecord:
    """Calls made by one client in its current window."""

    count: int
    window_start: float


class UsageStore:
    """Client id → UsageRecord map with one lock per key.

    The store-wide lock only protects creation of per-key locks, so clients
    never contend with each other while their records are evaluated.
    """

    def __init__(self) -> None:
        self._records: dict[str, UsageRecord] = {}
        self._key_locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, client_id: object) -> bool:
        return client_id in self._records

    @contextmanager
    def locked(self, client_id: str) -> Iterator[None]:
        """Hold the lock owned by ``client_id`` for the duration of the block."""
        with self._locks_guard:
            lock = self._key_locks.get(client_id)
            if lock is None:
                lock = threading.Lock()
                self._key_locks[client_id] = lock
        with lock:
            yield

    def get(self, client_id: str) -> UsageRecord | None:
        return self._records.get(client_id)

    def put(self, client_id: str, record: UsageRecord) -> None:
        self._records[client_id] = record


class InMemoryFixedWindowRateLimiter(AbstractRateLimiter):
    """Limit calls per client within a fixed window (e.g., 5 per hour).

    Policy for ``check_and_record``:
        - no record, or the record's window started more than
          ``window_seconds`` ago: start a new window with ``count = 1``, allow;
        - ``count >= limit``: deny without touching the record;
        - otherwise: increment ``count``, allow.
    """

    def __init__(
        self,
        *,
        limit: int,
        window_seconds: int,
        store: UsageStore | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the limiter.

        Args:
            limit: Maximum number of allowed calls per window.
            window_seconds: Length of the window in seconds.
            store: Usage store to operate on; a fresh one is created if omitted.
            clock: Time source returning UNIX time in seconds.

        Raises:
            ValueError: If limit or window_seconds are invalid.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds < 1:
            raise ValueError("window_seconds must be >= 1")

        self._limit = limit
        self._window_seconds = window_seconds
        self._store = store if store is not None else UsageStore()
        self._clock = clock

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_seconds(self) -> int:
        return self._window_seconds

    @property
    def store(self) -> UsageStore:
        return self._store

    def _is_expired(self, record: UsageRecord, now: float) -> bool:
        return now - record.window_start > self._window_seconds

    def _reset_at(self, record: UsageRecord) -> int:
        return int(math.ceil(record.window_start + self._window_seconds))

    def check_and_record(self, client_id: str, now: float | None = None) -> RateLimitResult:
        """Evaluate the policy for ``client_id`` and record the call if allowed.

        Args:
            client_id: Client identifier (IP address or the "unknown" bucket).
            now: UNIX time in seconds; defaults to the configured clock.

        Returns:
            RateLimitResult with the decision and window metadata.

        Raises:
            ValueError: If client_id is empty.
        """
        if not client_id:
            raise ValueError("client_id must be a non-empty string")

        if now is None:
            now = self._clock()

        with self._store.locked(client_id):
            record = self._store.get(client_id)

            if record is None or self._is_expired(record, now):
                record = UsageRecord(count=1, window_start=now)
                self._store.put(client_id, record)
                return RateLimitResult(
                    allowed=True,
                    limit=self._limit,
                    remaining=self._limit - 1,
                    reset_at=self._reset_at(record),
                    retry_after_seconds=None,
                )

            if record.count >= self._limit:
                reset_at = self._reset_at(record)
                return RateLimitResult(
                    allowed=False,
                    limit=self._limit,
                    remaining=0,
                    reset_at=reset_at,
                    retry_after_seconds=max(1, int(math.ceil(reset_at - now))),
                )

            record.count += 1
            return RateLimitResult(
                allowed=True,
                limit=self._limit,
                remaining=max(0, self._limit - record.count),
                reset_at=self._reset_at(record),
                retry_after_seconds=None,
            )
