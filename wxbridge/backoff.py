"""Backoff schedules for retrying operations. Delays are in seconds."""

from __future__ import annotations

import enum
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class BackoffConfig:
    """Parameters shared by all backoff schedules."""

    initial_delay: float = 0.1
    max_delay: float = 60.0
    multiplier: float = 2.0
    max_retries: int = 10
    jitter: bool = True


class Backoff(ABC):
    """A schedule yielding successive retry delays until exhausted."""

    def __init__(self, config: BackoffConfig | None = None) -> None:
        self.config = config if config is not None else BackoffConfig()
        self.retry_count = 0

    @abstractmethod
    def next_delay(self) -> float | None:
        """Return the next delay, or None once retries are exhausted."""

    def reset(self) -> None:
        self.retry_count = 0

    def is_exhausted(self) -> bool:
        return self.retry_count >= self.config.max_retries


def _add_jitter(delay: float) -> float:
    jitter = delay * 0.1 * (random.random() * 2.0 - 1.0)
    return max(delay + jitter, 0.0)


class ExponentialBackoff(Backoff):
    """Delays grow by a multiplier up to a maximum, with optional jitter."""

    def __init__(self, config: BackoffConfig | None = None) -> None:
        super().__init__(config)
        self.current_delay = self.config.initial_delay

    def next_delay(self) -> float | None:
        if self.is_exhausted():
            return None
        delay = self.current_delay
        self.retry_count += 1
        following = min(self.current_delay * self.config.multiplier, self.config.max_delay)
        if self.config.jitter:
            following = _add_jitter(following)
        self.current_delay = following
        return delay

    def reset(self) -> None:
        super().reset()
        self.current_delay = self.config.initial_delay


class LinearBackoff(Backoff):
    """Delays grow by the initial delay each attempt, up to a maximum."""

    def __init__(self, config: BackoffConfig | None = None) -> None:
        super().__init__(config)
        self.current_delay = self.config.initial_delay

    def next_delay(self) -> float | None:
        if self.is_exhausted():
            return None
        delay = self.current_delay
        self.retry_count += 1
        self.current_delay = min(
            self.current_delay + self.config.initial_delay, self.config.max_delay
        )
        return delay

    def reset(self) -> None:
        super().reset()
        self.current_delay = self.config.initial_delay


class FixedBackoff(Backoff):
    """Always waits the initial delay."""

    def next_delay(self) -> float | None:
        if self.is_exhausted():
            return None
        self.retry_count += 1
        return self.config.initial_delay


class ImmediateBackoff(Backoff):
    """Retries without waiting."""

    def next_delay(self) -> float | None:
        if self.is_exhausted():
            return None
        self.retry_count += 1
        return 0.0


class BackoffStrategy(enum.Enum):
    EXPONENTIAL = "exponential"
    LINEAR = "linear"
    FIXED = "fixed"
    IMMEDIATE = "immediate"

    def create_backoff(self, config: BackoffConfig) -> Backoff:
        classes = {
            BackoffStrategy.EXPONENTIAL: ExponentialBackoff,
            BackoffStrategy.LINEAR: LinearBackoff,
            BackoffStrategy.FIXED: FixedBackoff,
            BackoffStrategy.IMMEDIATE: ImmediateBackoff,
        }
        return classes[self](config)