"""
Rate Limiter.

Fixed-window request counter keyed by authenticated principal, shared by
the member and student provisioning workflows (default: 20 requests per
60 seconds).

Storage sits behind the ``RateLimitStore`` protocol so a shared backend
can replace the in-process default without touching the workflows.  A
store must apply its read-modify-write atomically; the in-memory store
does so under a ``threading.Lock`` because Flask may serve requests on
several threads.
"""

from __future__ import annotations

import math
import threading
import time
from typing import Callable, Optional, Protocol

from supermock.errors import RateLimitError
from supermock.logger import StructuredLogger
from supermock.models.auth_models import RateBucket
from supermock.services.base_service import BaseService

RATE_LIMIT_MESSAGE: str = "Too many requests. Please wait a moment."

Clock = Callable[[], float]


class RateLimitStore(Protocol):
    """Storage contract for fixed-window buckets."""

    def hit(self, key: str, now: float, window_s: float) -> RateBucket:
        """Atomically count one request for *key* and return the bucket.

        A missing bucket starts at ``count=0, reset_at=now + window_s``;
        a bucket with ``now > reset_at`` restarts the same way.  The
        count is then incremented.
        """
        ...

    def peek(self, key: str) -> Optional[RateBucket]:
        ...

    def reset(self, key: str) -> None:
        ...


class InMemoryRateLimitStore:
    """Process-local store.  Buckets live for the life of the process."""

    def __init__(self) -> None:
        self._buckets: dict[str, RateBucket] = {}
        self._lock: threading.Lock = threading.Lock()

    def hit(self, key: str, now: float, window_s: float) -> RateBucket:
        with self._lock:
            bucket = self._buckets.get(key)
            if bucket is None:
                bucket = RateBucket(count=0, reset_at=now + window_s)
            if now > bucket.reset_at:
                bucket = RateBucket(count=0, reset_at=now + window_s)
            bucket = RateBucket(count=bucket.count + 1, reset_at=bucket.reset_at)
            self._buckets[key] = bucket
            return bucket

    def peek(self, key: str) -> Optional[RateBucket]:
        with self._lock:
            return self._buckets.get(key)

    def reset(self, key: str) -> None:
        with self._lock:
            self._buckets.pop(key, None)


class FixedWindowRateLimiter(BaseService):
    """Per-principal fixed-window limiter.

    Parameters
    ----------
    max_requests:
        Requests allowed per window.
    window_s:
        Window length in seconds.
    logger:
        Structured logger.
    store:
        Bucket storage; defaults to :class:`InMemoryRateLimitStore`.
    clock:
        Zero-argument callable returning the current time in seconds.
        Defaults to :func:`time.monotonic`.
    """

    def __init__(
        self,
        max_requests: int,
        window_s: float,
        logger: StructuredLogger,
        store: Optional[RateLimitStore] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        super().__init__(logger)
        self._max_requests = max_requests
        self._window_s = window_s
        self._store: RateLimitStore = store if store is not None else InMemoryRateLimitStore()
        self._clock: Clock = clock if clock is not None else time.monotonic

    def check(self, principal_id: str) -> bool:
        """Count one request and return ``True`` while under the limit."""
        bucket = self._store.hit(principal_id, self._clock(), self._window_s)
        allowed = bucket.count <= self._max_requests
        if not allowed:
            self._logger.warning(
                "Rate limit exceeded for %s: %d requests in window.",
                principal_id,
                bucket.count,
            )
        return allowed

    def retry_after(self, principal_id: str) -> int:
        """Whole seconds until *principal_id*'s window resets (``0`` if none)."""
        bucket = self._store.peek(principal_id)
        if bucket is None:
            return 0
        return max(0, math.ceil(bucket.reset_at - self._clock()))

    def enforce(self, principal_id: str) -> None:
        """Like :meth:`check` but raises once the limit is exceeded.

        Raises:
            RateLimitError: Carries ``retry_after`` for the response header.
        """
        if not self.check(principal_id):
            raise RateLimitError(
                RATE_LIMIT_MESSAGE, retry_after=self.retry_after(principal_id)
            )
