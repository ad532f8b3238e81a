"""Retrying async operations with exponential backoff."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from .backoff import BackoffConfig, ExponentialBackoff

log = logging.getLogger(__name__)

T = TypeVar("T")

_RETRYABLE_TYPES = (ConnectionError, TimeoutError, asyncio.TimeoutError)


def is_retryable(error: object) -> bool:
    """Tell whether a failure is worth retrying.

    Plain string errors are always retryable; network and timeout errors are
    retryable; an exception may also say so through a ``retryable`` attribute.
    """
    if isinstance(error, str):
        return True
    if isinstance(error, _RETRYABLE_TYPES):
        return True
    return bool(getattr(error, "retryable", False))


class RetryHandler:
    """Runs an async callable, retrying retryable failures with backoff."""

    def __init__(self, config: BackoffConfig | None = None) -> None:
        self.backoff = ExponentialBackoff(config if config is not None else BackoffConfig())

    @classmethod
    def default_retry(cls) -> RetryHandler:
        return cls(BackoffConfig())

    async def execute(self, func: Callable[[], Awaitable[T]]) -> T:
        while True:
            try:
                result = await func()
            except Exception as exc:
                if not is_retryable(exc) or self.backoff.is_exhausted():
                    raise
                delay = self.backoff.next_delay() or 0.0
                log.debug(
                    "Retry attempt %d after %.3fs: %r", self.backoff.retry_count, delay, exc
                )
                await asyncio.sleep(delay)
            else:
                self.backoff.reset()
                return result


async def with_retry(func: Callable[[], Awaitable[T]]) -> T:
    return await RetryHandler.default_retry().execute(func)


async def with_retry_config(config: BackoffConfig, func: Callable[[], Awaitable[T]]) -> T:
    return await RetryHandler(config).execute(func)


@dataclass(frozen=True)
class RetryPolicy:
    """A small retry policy that converts into a jittered backoff config."""

    max_retries: int = 3
    initial_delay: float = 0.1
    max_delay: float = 30.0
    multiplier: float = 2.0

    def with_initial_delay(self, delay: float) -> RetryPolicy:
        return dataclasses.replace(self, initial_delay=delay)

    def with_max_delay(self, delay: float) -> RetryPolicy:
        return dataclasses.replace(self, max_delay=delay)

    def with_multiplier(self, multiplier: float) -> RetryPolicy:
        return dataclasses.replace(self, multiplier=multiplier)

    def into_config(self) -> BackoffConfig:
        return BackoffConfig(
            initial_delay=self.initial_delay,
            max_delay=self.max_delay,
            multiplier=self.multiplier,
            max_retries=self.max_retries,
            jitter=True,
        )