"""Per-client request throttling.

This module holds the in-memory rate limit backends and the ``RateLimiter``
facade the application owns. Two strategies share one contract,
``admit(identity) -> RateLimitDecision``:

- ``FixedWindowRateLimiter`` (default): a counter per identity that resets
  once its window has elapsed.
- ``TokenBucketRateLimiter``: smoother limiting with a continuously refilled
  bucket.

``admit`` and ``sweep`` are synchronous on purpose. Under the asyncio event
loop nothing can interleave between reading a client's counter and writing
it back, so the table needs no lock. A port to preemptive threads would need
one.
"""

import asyncio
import math
import time
from abc import ABC, abstractmethod
from collections import OrderedDict
from contextlib import suppress
from dataclasses import dataclass
from typing import Callable, Optional

from bridgegate.app.core.logging import get_logger

logger = get_logger(__name__)

Clock = Callable[[], float]


@dataclass(frozen=True)
class RateLimitDecision:
    """Result of a rate limit check."""
    allowed: bool
    limit: int
    remaining: int
    reset_at: float

    @property
    def reset_epoch(self) -> int:
        """Reset time as whole epoch seconds, rounded up."""
        return math.ceil(self.reset_at)

    def retry_after(self, now: float) -> int:
        """Whole seconds a rejected client should wait, never less than 1."""
        return max(1, math.ceil(self.reset_at - now))


@dataclass
class ClientWindow:
    """Fixed window state for one client identity."""
    count: int
    window_start: float


@dataclass
class TokenBucket:
    """Token bucket state for one client identity."""
    tokens: float
    last_update: float


class RateLimitBackend(ABC):
    """Abstract base class for rate limit backends."""

    def __init__(
        self,
        limit: int = 50,
        window_seconds: float = 30.0,
        max_entries: int = 10000,
        clock: Clock = time.time,
    ):
        """Initialize backend.

        Args:
            limit: Maximum requests per window
            window_seconds: Window duration in seconds
            max_entries: Maximum number of identities tracked (LRU eviction)
            clock: Source of the current time in epoch seconds
        """
        if limit < 1:
            raise ValueError("limit must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.limit = limit
        self.window_seconds = window_seconds
        self.clock = clock
        self._max_entries = max_entries

    @abstractmethod
    def admit(self, identity: str) -> RateLimitDecision:
        """Decide whether a request from ``identity`` may proceed."""

    @abstractmethod
    def sweep(self) -> int:
        """Remove expired entries.

        Returns:
            Number of entries removed
        """

    @abstractmethod
    def clear(self) -> None:
        """Drop all tracked state."""

    @abstractmethod
    def __len__(self) -> int:
        """Number of identities currently tracked."""

    def _evict_if_full(self, storage: OrderedDict) -> None:
        """Enforce max entries limit.

        Expired entries go first. Live entries are evicted in LRU order only
        when the table is still full after the sweep.
        """
        if len(storage) < self._max_entries:
            return
        if self.sweep() and len(storage) < self._max_entries:
            return
        # Remove oldest 20% of entries
        remove_count = max(1, int(self._max_entries * 0.2))
        for _ in range(min(remove_count, len(storage))):
            storage.popitem(last=False)
        logger.warning(
            "Rate limit table full, evicted %d least recently seen clients",
            remove_count,
        )


class FixedWindowRateLimiter(RateLimitBackend):
    """Fixed window counter per identity.

    A client's window opens on its first request and lasts
    ``window_seconds``. Within the window at most ``limit`` requests are
    admitted; the first request after the window has elapsed opens a new one.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._windows: "OrderedDict[str, ClientWindow]" = OrderedDict()

    def _expired(self, window: ClientWindow, now: float) -> bool:
        return now - window.window_start >= self.window_seconds

    def admit(self, identity: str) -> RateLimitDecision:
        now = self.clock()
        window = self._windows.get(identity)

        if window is None or self._expired(window, now):
            if window is None:
                self._evict_if_full(self._windows)
            self._windows[identity] = ClientWindow(count=1, window_start=now)
            self._windows.move_to_end(identity)
            return RateLimitDecision(
                allowed=True,
                limit=self.limit,
                remaining=self.limit - 1,
                reset_at=now + self.window_seconds,
            )

        self._windows.move_to_end(identity)
        reset_at = window.window_start + self.window_seconds

        if window.count >= self.limit:
            return RateLimitDecision(
                allowed=False, limit=self.limit, remaining=0, reset_at=reset_at
            )

        window.count += 1
        return RateLimitDecision(
            allowed=True,
            limit=self.limit,
            remaining=self.limit - window.count,
            reset_at=reset_at,
        )

    def sweep(self) -> int:
        now = self.clock()
        expired = [
            identity for identity, window in self._windows.items()
            if self._expired(window, now)
        ]
        for identity in expired:
            del self._windows[identity]
        return len(expired)

    def clear(self) -> None:
        self._windows.clear()

    def __len__(self) -> int:
        return len(self._windows)


class TokenBucketRateLimiter(RateLimitBackend):
    """Token bucket per identity.

    Each bucket holds up to ``limit`` tokens and refills at
    ``limit / window_seconds`` tokens per second. A request spends one token.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._buckets: "OrderedDict[str, TokenBucket]" = OrderedDict()
        self._rate = self.limit / self.window_seconds

    def admit(self, identity: str) -> RateLimitDecision:
        now = self.clock()
        bucket = self._buckets.get(identity)

        if bucket is None:
            self._evict_if_full(self._buckets)
            bucket = TokenBucket(tokens=float(self.limit), last_update=now)
            self._buckets[identity] = bucket
        else:
            self._buckets.move_to_end(identity)
            elapsed = max(0.0, now - bucket.last_update)
            bucket.tokens = min(float(self.limit), bucket.tokens + elapsed * self._rate)
            bucket.last_update = now

        if bucket.tokens >= 1:
            bucket.tokens -= 1
            return RateLimitDecision(
                allowed=True,
                limit=self.limit,
                remaining=int(bucket.tokens),
                reset_at=now + (self.limit - bucket.tokens) / self._rate,
            )

        return RateLimitDecision(
            allowed=False,
            limit=self.limit,
            remaining=0,
            reset_at=now + (1 - bucket.tokens) / self._rate,
        )

    def sweep(self) -> int:
        # Idle buckets are full again after one window; keep them for two
        now = self.clock()
        idle = [
            identity for identity, bucket in self._buckets.items()
            if now - bucket.last_update > self.window_seconds * 2
        ]
        for identity in idle:
            del self._buckets[identity]
        return len(idle)

    def clear(self) -> None:
        self._buckets.clear()

    def __len__(self) -> int:
        return len(self._buckets)


class RateLimiter:
    """Rate limiter owned by the application.

    Selects the backend for the configured algorithm and runs its periodic
    sweep on the event loop. Created at startup, started and stopped by the
    application lifespan.
    """

    def __init__(
        self,
        limit: int = 50,
        window_seconds: float = 30.0,
        algorithm: str = "fixed_window",
        max_entries: int = 10000,
        clock: Clock = time.time,
    ):
        """Initialize rate limiter with the backend for ``algorithm``.

        Args:
            limit: Maximum requests per window
            window_seconds: Window duration in seconds
            algorithm: fixed_window or token_bucket
            max_entries: Maximum number of identities tracked
            clock: Source of the current time in epoch seconds
        """
        if algorithm == "token_bucket":
            backend_cls = TokenBucketRateLimiter
        elif algorithm == "fixed_window":
            backend_cls = FixedWindowRateLimiter
        else:
            raise ValueError(f"Unknown rate limit algorithm: {algorithm}")

        self._backend: RateLimitBackend = backend_cls(
            limit=limit,
            window_seconds=window_seconds,
            max_entries=max_entries,
            clock=clock,
        )
        self.algorithm = algorithm
        self._sweep_task: Optional[asyncio.Task] = None

    @property
    def limit(self) -> int:
        return self._backend.limit

    @property
    def window_seconds(self) -> float:
        return self._backend.window_seconds

    @property
    def sweep_interval(self) -> float:
        """Seconds between sweeps: half a window."""
        return self._backend.window_seconds / 2

    @property
    def running(self) -> bool:
        return self._sweep_task is not None and not self._sweep_task.done()

    def now(self) -> float:
        return self._backend.clock()

    def admit(self, identity: str) -> RateLimitDecision:
        """Check and count a request from ``identity``."""
        return self._backend.admit(identity)

    def sweep(self) -> int:
        """Remove expired entries now."""
        removed = self._backend.sweep()
        if removed:
            logger.debug(
                "Rate limit sweep removed %d entries, %d remain",
                removed,
                len(self._backend),
            )
        return removed

    def __len__(self) -> int:
        return len(self._backend)

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval)
            self.sweep()

    def start(self) -> None:
        """Schedule the periodic sweep on the running event loop."""
        if self.running:
            return
        self._sweep_task = asyncio.create_task(
            self._sweep_loop(), name="rate-limit-sweep"
        )
        logger.info(
            "Rate limiter started",
            extra={
                "algorithm": self.algorithm,
                "limit": self.limit,
                "window_seconds": self.window_seconds,
            },
        )

    async def stop(self) -> None:
        """Cancel the periodic sweep and drop all state."""
        if self._sweep_task is not None:
            self._sweep_task.cancel()
            with suppress(asyncio.CancelledError):
                await self._sweep_task
            self._sweep_task = None
        self._backend.clear()
        logger.info("Rate limiter stopped")
