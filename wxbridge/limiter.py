"""Concurrency, rate and token-bucket limiters. Durations are in seconds."""

from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from collections.abc import Callable

log = logging.getLogger(__name__)

Clock = Callable[[], float]


class Permit:
    """One slot held on a ConcurrencyLimiter; releasing it twice is harmless."""

    def __init__(self, limiter: ConcurrencyLimiter) -> None:
        self._limiter = limiter
        self.released = False

    def release(self) -> None:
        if not self.released:
            self.released = True
            self._limiter._release()

    def __enter__(self) -> Permit:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()

    async def __aenter__(self) -> Permit:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.release()


class ConcurrencyLimiter:
    """Limits how many holders of a permit may run at once."""

    def __init__(self, name: str, max_permits: int) -> None:
        if max_permits < 0:
            raise ValueError("max_permits must not be negative")
        self.name = name
        self.max_permits = max_permits
        self._available = max_permits
        self._waiters: deque[asyncio.Future[None]] = deque()

    async def acquire(self) -> Permit:
        """Wait for a free slot and take it."""
        log.debug("Acquiring permit for %s", self.name)
        while self._available <= 0:
            waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()
            self._waiters.append(waiter)
            try:
                await waiter
            except asyncio.CancelledError:
                if waiter in self._waiters:
                    self._waiters.remove(waiter)
                elif self._available > 0:
                    self._wake_next()
                raise
        self._available -= 1
        return Permit(self)

    def try_acquire(self) -> Permit | None:
        """Take a slot if one is free right now."""
        if self._available <= 0:
            return None
        self._available -= 1
        return Permit(self)

    async def acquire_timeout(self, timeout: float) -> Permit | None:
        """Wait at most ``timeout`` seconds for a slot."""
        try:
            return await asyncio.wait_for(self.acquire(), timeout)
        except asyncio.TimeoutError:
            log.warning("Timeout acquiring permit for %s", self.name)
            return None

    def available_permits(self) -> int:
        return self._available

    def _release(self) -> None:
        self._available += 1
        self._wake_next()

    def _wake_next(self) -> None:
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                waiter.set_result(None)
                break


class MultiLimiter:
    """Acquires a permit from each of several limiters, in order."""

    def __init__(self, limiters: list[ConcurrencyLimiter]) -> None:
        self.limiters = list(limiters)

    async def acquire_all(self) -> list[Permit]:
        permits = []
        for limiter in self.limiters:
            permits.append(await limiter.acquire())
        return permits


class RateLimiter:
    """A permit pool refilled to full after each refill period of waiting."""

    def __init__(self, name: str, max_permits: int, refill_rate: float) -> None:
        self.name = name
        self.max_permits = max_permits
        self.refill_rate = refill_rate
        self._permits = max_permits

    def try_acquire(self) -> bool:
        if self._permits > 0:
            self._permits -= 1
            return True
        return False

    async def acquire(self) -> None:
        while not self.try_acquire():
            await asyncio.sleep(self.refill_rate)
            self._refill()

    async def acquire_timeout(self, timeout: float) -> bool:
        start = time.monotonic()
        while True:
            if self.try_acquire():
                return True
            if time.monotonic() - start >= timeout:
                return False
            await asyncio.sleep(self.refill_rate)
            self._refill()

    def _refill(self) -> None:
        self._permits = self.max_permits

    def available(self) -> int:
        return self._permits


class TokenBucket:
    """Tokens accrue continuously at a fixed rate up to a maximum."""

    def __init__(
        self,
        name: str,
        max_tokens: float,
        refill_per_second: float,
        clock: Clock = time.monotonic,
    ) -> None:
        self.name = name
        self.max_tokens = max_tokens
        self.refill_rate = refill_per_second
        self._clock = clock
        self._tokens = max_tokens
        self._last_refill = clock()

    def _refill(self) -> None:
        now = self._clock()
        elapsed = now - self._last_refill
        if elapsed > 0:
            self._tokens = min(self._tokens + elapsed * self.refill_rate, self.max_tokens)
            self._last_refill = now

    def try_consume(self, tokens: float) -> bool:
        self._refill()
        if self._tokens >= tokens:
            self._tokens -= tokens
            return True
        return False

    async def consume(self, tokens: float) -> None:
        """Wait until ``tokens`` can be taken, then take them."""
        while not self.try_consume(tokens):
            wait_time = (tokens - self.available()) / self.refill_rate
            await asyncio.sleep(max(wait_time, 0.01))

    def available(self) -> float:
        self._refill()
        return self._tokens


class AdaptiveLimiter:
    """A concurrency limiter that tracks outcomes and reports on its success rate."""

    def __init__(self, name: str, initial_permits: int, max_permits: int) -> None:
        self.inner = ConcurrencyLimiter(name, initial_permits)
        self.max_permits = max_permits
        self.success_count = 0
        self.failure_count = 0
        self.adjustment_interval = 10.0

    @property
    def name(self) -> str:
        return self.inner.name

    async def acquire(self) -> Permit:
        return await self.inner.acquire()

    def report_success(self) -> None:
        self.success_count += 1

    def report_failure(self) -> None:
        self.failure_count += 1

    def adjust(self) -> None:
        """Evaluate the success rate once more than 100 outcomes are counted."""
        total = self.success_count + self.failure_count
        if total <= 100:
            return
        success_rate = self.success_count / total
        if (
            success_rate > 0.95
            and self.inner.available_permits() < self.inner.max_permits
        ):
            log.debug("High success rate, increasing concurrency limit")
        elif success_rate < 0.8:
            log.warning("Low success rate, consider reducing concurrency limit")
        self.success_count = 0
        self.failure_count = 0