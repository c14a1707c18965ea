"""
Per-identity fixed-window rate limiting.

The limiter counts requests per identity key inside a fixed window and
rejects once the ceiling is reached. State lives in an injectable store so
the limiter can be swapped for a shared backend without touching callers.
Expired windows are reset lazily on the next attempt; idle buckets are
pruned once the store grows past a size limit.

Dependencies: asyncio, time (stdlib)
System role: Rate limiter stage of the chat pipeline
"""

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from edu_assistant.core.exceptions import RateLimitError

logger = logging.getLogger(__name__)


@dataclass
class RateLimitBucket:
    """Request count for one identity inside the current window."""

    window_start: float
    count: int = 0


@dataclass(frozen=True)
class AdmissionDecision:
    """Outcome of a single increment-and-check."""

    admitted: bool
    count: int
    retry_after: float


class InMemoryRateLimitStore:
    """
    Process-local keyed counter store.

    Increment-and-check is atomic per key: attempts for the same identity are
    serialized on a per-key asyncio.Lock, attempts for different identities
    never wait on each other.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        max_tracked_keys: int = 10_000,
    ) -> None:
        self._clock = clock
        self._max_tracked_keys = max_tracked_keys
        self._buckets: dict[str, RateLimitBucket] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def _lock_for(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    async def increment_and_check(
        self,
        key: str,
        ceiling: int,
        window_seconds: float,
        count_rejected: bool = True,
    ) -> AdmissionDecision:
        """
        Count one attempt for key and decide whether it is admitted.

        Args:
            key: Identity key
            ceiling: Maximum admitted attempts per window
            window_seconds: Window length
            count_rejected: Whether a rejected attempt still increments the count

        Returns:
            AdmissionDecision: admitted flag, count after this attempt, seconds until reset
        """
        async with self._lock_for(key):
            now = self._clock()
            bucket = self._buckets.get(key)

            if bucket is None or now - bucket.window_start >= window_seconds:
                bucket = RateLimitBucket(window_start=now)
                self._buckets[key] = bucket

            retry_after = max(0.0, bucket.window_start + window_seconds - now)

            if bucket.count < ceiling:
                bucket.count += 1
                admitted = True
            else:
                if count_rejected:
                    bucket.count += 1
                admitted = False

            decision = AdmissionDecision(
                admitted=admitted,
                count=bucket.count,
                retry_after=retry_after,
            )

        if len(self._buckets) > self._max_tracked_keys:
            self.prune(window_seconds)
        return decision

    def prune(self, window_seconds: float) -> int:
        """
        Drop buckets whose window has expired.

        Returns:
            int: Number of buckets removed
        """
        now = self._clock()
        stale = [
            key
            for key, bucket in self._buckets.items()
            if now - bucket.window_start >= window_seconds
            and not self._lock_for(key).locked()
        ]
        for key in stale:
            del self._buckets[key]
            self._locks.pop(key, None)
        if stale:
            logger.debug(f"{__name__}:prune - Removed {len(stale)} expired buckets")
        return len(stale)

    @property
    def max_tracked_keys(self) -> int:
        return self._max_tracked_keys

    def get_bucket(self, key: str) -> RateLimitBucket | None:
        return self._buckets.get(key)

    def __len__(self) -> int:
        return len(self._buckets)


class RateLimiter:
    """Fixed-window admission control keyed by caller identity."""

    def __init__(
        self,
        max_requests: int = 20,
        window_seconds: float = 60.0,
        count_rejected: bool = True,
        store: InMemoryRateLimitStore | None = None,
    ) -> None:
        """
        Initialize rate limiter.

        Args:
            max_requests: Ceiling of admitted requests per window
            window_seconds: Window length in seconds
            count_rejected: Whether rejected attempts count toward the window
            store: Counter store (defaults to a fresh in-memory store)
        """
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")

        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.count_rejected = count_rejected
        self.store = store if store is not None else InMemoryRateLimitStore()

    async def admit(self, identity_key: str) -> bool:
        """
        Record an attempt and report whether it is within the ceiling.

        Args:
            identity_key: Stable identifier of the caller

        Returns:
            bool: True when the attempt is admitted
        """
        decision = await self.store.increment_and_check(
            identity_key,
            ceiling=self.max_requests,
            window_seconds=self.window_seconds,
            count_rejected=self.count_rejected,
        )
        return decision.admitted

    async def enforce(self, identity_key: str) -> None:
        """
        Admit the attempt or raise.

        Raises:
            RateLimitError: Ceiling reached for the current window
        """
        decision = await self.store.increment_and_check(
            identity_key,
            ceiling=self.max_requests,
            window_seconds=self.window_seconds,
            count_rejected=self.count_rejected,
        )
        if not decision.admitted:
            logger.warning(
                f"{__name__}:enforce - Rate limit exceeded",
                extra={"count": decision.count, "retry_after": round(decision.retry_after, 2)},
            )
            raise RateLimitError(
                retry_after=decision.retry_after,
                details={"limit": self.max_requests, "window_seconds": self.window_seconds},
            )
