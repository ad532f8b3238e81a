"""Connection state tracking and reconnection pacing."""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from .backoff import BackoffConfig, ExponentialBackoff

log = logging.getLogger(__name__)

T = TypeVar("T")


class ConnectionState(enum.Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"
    FAILED = "failed"


class ReconnectionManager:
    """Tracks connection state and waits out backoff delays between attempts."""

    def __init__(self, config: BackoffConfig | None = None) -> None:
        self._state = ConnectionState.DISCONNECTED
        self._backoff = ExponentialBackoff(config if config is not None else BackoffConfig())
        self._stop = asyncio.Event()

    @classmethod
    def default_manager(cls) -> ReconnectionManager:
        return cls(
            BackoffConfig(
                initial_delay=1.0,
                max_delay=60.0,
                multiplier=2.0,
                max_retries=100,
                jitter=True,
            )
        )

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def retry_count(self) -> int:
        return self._backoff.retry_count

    def set_state(self, state: ConnectionState) -> None:
        if self._state != state:
            log.info("Connection state changed: %s -> %s", self._state.name, state.name)
            self._state = state

    def is_connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED

    async def wait_for_reconnect_delay(self) -> bool:
        """Wait before the next attempt.

        Returns False when retries are exhausted (the state becomes FAILED)
        or when the manager is stopped during the wait.
        """
        delay = self._backoff.next_delay()
        if delay is None:
            log.warning("Max reconnection attempts exhausted")
            self.set_state(ConnectionState.FAILED)
            return False
        log.debug(
            "Waiting %.3fs before reconnection attempt %d", delay, self._backoff.retry_count
        )
        if self._stop.is_set():
            return False
        try:
            await asyncio.wait_for(self._stop.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return True
        return False

    def on_connected(self) -> None:
        self.set_state(ConnectionState.CONNECTED)
        self._backoff.reset()

    def on_disconnected(self) -> None:
        if self._state is ConnectionState.CONNECTED:
            self._state = ConnectionState.DISCONNECTED

    def on_connecting(self) -> None:
        self.set_state(ConnectionState.CONNECTING)

    def on_reconnecting(self) -> None:
        self.set_state(ConnectionState.RECONNECTING)

    def on_failed(self) -> None:
        self.set_state(ConnectionState.FAILED)

    def stop(self) -> None:
        self._stop.set()

    def reset(self) -> None:
        self._backoff.reset()
        self._stop.clear()
        self._state = ConnectionState.DISCONNECTED


class ReconnectEventKind(enum.Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"
    FAILED = "failed"
    STOP = "stop"


@dataclass(frozen=True)
class ReconnectEvent:
    kind: ReconnectEventKind
    attempt: int | None = None


_CLOSED = object()


class ReconnectEventEmitter:
    """Sending side of a reconnect event channel."""

    def __init__(self, queue: asyncio.Queue) -> None:
        self._queue = queue
        self._closed = False

    async def emit(self, event: ReconnectEvent) -> None:
        if self._closed:
            log.warning("Failed to emit reconnect event: %r (channel closed)", event)
            return
        await self._queue.put(event)

    async def close(self) -> None:
        """Close the channel; the receiver gets None once drained."""
        if not self._closed:
            self._closed = True
            await self._queue.put(_CLOSED)


class ReconnectEventReceiver:
    """Receiving side of a reconnect event channel."""

    def __init__(self, queue: asyncio.Queue) -> None:
        self._queue = queue
        self._closed = False

    async def recv(self) -> ReconnectEvent | None:
        if self._closed:
            return None
        item = await self._queue.get()
        if item is _CLOSED:
            self._closed = True
            return None
        return item


def create_reconnect_channel() -> tuple[ReconnectEventEmitter, ReconnectEventReceiver]:
    queue: asyncio.Queue = asyncio.Queue(maxsize=16)
    return ReconnectEventEmitter(queue), ReconnectEventReceiver(queue)


class ConnectionGuard:
    """Runs operations, warning when the connection is not established."""

    def __init__(self, manager: ReconnectionManager) -> None:
        self.manager = manager

    async def protect(self, func: Callable[[], Awaitable[T]]) -> T:
        if not self.manager.is_connected():
            log.warning("Connection not established, operation may fail")
        return await func()