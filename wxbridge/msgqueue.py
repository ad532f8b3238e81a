"""Async message queues: bounded FIFO, three-level priority and delayed."""

from __future__ import annotations

import asyncio
import bisect
import contextlib
import logging
import time
from collections import deque
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import Generic, TypeVar

log = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class QueueMessage(Generic[T]):
    """A queued payload with its priority (0-255) and retry bookkeeping."""

    id: str
    data: T
    priority: int = 0
    created_at: float = field(default_factory=time.monotonic)
    retry_count: int = 0
    max_retries: int = 3

    def __post_init__(self) -> None:
        if not 0 <= self.priority <= 255:
            raise ValueError(f"priority must be within 0..255, got {self.priority}")

    def increment_retry(self) -> bool:
        """Count a retry; return False if no retries are left."""
        if self.retry_count < self.max_retries:
            self.retry_count += 1
            return True
        return False

    def can_retry(self) -> bool:
        return self.retry_count < self.max_retries


class QueueError(Exception):
    """Base class for queue failures."""


class QueueFullError(QueueError):
    def __init__(self) -> None:
        super().__init__("Queue is full")


class MessageQueue(Generic[T]):
    """A bounded FIFO queue with a concurrency limit for its consumers."""

    def __init__(self, capacity: int, max_concurrency: int) -> None:
        self.capacity = capacity
        self._items: deque[QueueMessage[T]] = deque()
        self._ready = asyncio.Event()
        self.concurrency_semaphore = asyncio.Semaphore(max_concurrency)

    def _check_capacity(self) -> None:
        if len(self._items) >= self.capacity:
            raise QueueFullError()

    def push(self, message: QueueMessage[T]) -> None:
        self._check_capacity()
        self._items.append(message)
        self._ready.set()
        log.debug("Message added to queue, current size: %d", len(self._items))

    def push_front(self, message: QueueMessage[T]) -> None:
        self._check_capacity()
        self._items.appendleft(message)
        self._ready.set()

    def pop(self) -> QueueMessage[T] | None:
        return self._items.popleft() if self._items else None

    async def wait_for_message(self) -> QueueMessage[T]:
        while True:
            if self._items:
                return self._items.popleft()
            self._ready.clear()
            await self._ready.wait()

    def __len__(self) -> int:
        return len(self._items)

    def clear(self) -> None:
        self._items.clear()

    @contextlib.asynccontextmanager
    async def acquire_concurrency(self) -> AsyncIterator[None]:
        """Hold one of the queue's concurrency slots for the ``async with`` body."""
        async with self.concurrency_semaphore:
            yield


class PriorityQueue(Generic[T]):
    """A bounded queue serving high (8+), then normal (4-7), then low priority."""

    def __init__(self, capacity: int) -> None:
        self.capacity = capacity
        self._high: deque[QueueMessage[T]] = deque()
        self._normal: deque[QueueMessage[T]] = deque()
        self._low: deque[QueueMessage[T]] = deque()
        self._ready = asyncio.Event()

    def push(self, message: QueueMessage[T]) -> None:
        if len(self) >= self.capacity:
            raise QueueFullError()
        if message.priority >= 8:
            self._high.append(message)
        elif message.priority >= 4:
            self._normal.append(message)
        else:
            self._low.append(message)
        self._ready.set()

    def pop(self) -> QueueMessage[T] | None:
        for level in (self._high, self._normal, self._low):
            if level:
                return level.popleft()
        return None

    async def wait_for_message(self) -> QueueMessage[T]:
        while True:
            message = self.pop()
            if message is not None:
                return message
            self._ready.clear()
            await self._ready.wait()

    def __len__(self) -> int:
        return len(self._high) + len(self._normal) + len(self._low)


class DelayedQueue(Generic[T]):
    """Messages that become available after a delay, in order of readiness."""

    def __init__(self) -> None:
        self._times: list[float] = []
        self._messages: list[QueueMessage[T]] = []
        self._changed = asyncio.Event()

    def push_after(self, delay: float, message: QueueMessage[T]) -> None:
        execute_at = time.monotonic() + delay
        position = bisect.bisect_right(self._times, execute_at)
        self._times.insert(position, execute_at)
        self._messages.insert(position, message)
        self._changed.set()

    def _pop_front(self) -> QueueMessage[T]:
        del self._times[0]
        return self._messages.pop(0)

    def pop_ready(self) -> QueueMessage[T] | None:
        if self._times and self._times[0] <= time.monotonic():
            return self._pop_front()
        return None

    async def wait_for_ready(self) -> QueueMessage[T]:
        while True:
            self._changed.clear()
            if self._times:
                remaining = self._times[0] - time.monotonic()
                if remaining <= 0:
                    return self._pop_front()
                with contextlib.suppress(asyncio.TimeoutError):
                    await asyncio.wait_for(self._changed.wait(), timeout=remaining)
            else:
                await self._changed.wait()

    def __len__(self) -> int:
        return len(self._messages)