"""Counters, gauges and histograms with Prometheus text export."""

from __future__ import annotations

import math
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    if value.is_integer():
        return str(int(value))
    return repr(value)


class Counter:
    """A non-negative integer count."""

    def __init__(self, labels: dict[str, str] | None = None) -> None:
        self.labels = dict(labels or {})
        self._value = 0
        self._lock = threading.Lock()

    @property
    def value(self) -> int:
        return self._value

    def inc(self) -> None:
        self.inc_by(1)

    def inc_by(self, delta: int) -> None:
        if delta < 0:
            raise ValueError("counter increments must not be negative")
        with self._lock:
            self._value += delta

    def dec(self) -> None:
        """Decrease by one, never below zero."""
        with self._lock:
            self._value = max(self._value - 1, 0)


class Gauge:
    """A floating-point value that can go up and down."""

    def __init__(self, labels: dict[str, str] | None = None) -> None:
        self.labels = dict(labels or {})
        self._value = 0.0
        self._lock = threading.Lock()

    @property
    def value(self) -> float:
        return self._value

    def set(self, value: float) -> None:
        with self._lock:
            self._value = float(value)

    def inc(self) -> None:
        self.add(1.0)

    def dec(self) -> None:
        self.sub(1.0)

    def add(self, delta: float) -> None:
        with self._lock:
            self._value += delta

    def sub(self, delta: float) -> None:
        with self._lock:
            self._value -= delta


def default_buckets() -> list[float]:
    return [0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]


class Histogram:
    """Cumulative bucket counts plus a final bucket counting every observation."""

    def __init__(
        self, buckets: list[float] | None = None, labels: dict[str, str] | None = None
    ) -> None:
        self.buckets = list(buckets if buckets is not None else default_buckets())
        self.labels = dict(labels or {})
        self._counts = [0] * (len(self.buckets) + 1)
        self._sum = 0.0
        self._count = 0
        self._lock = threading.Lock()

    @property
    def counts(self) -> list[int]:
        return list(self._counts)

    @property
    def sum(self) -> float:
        return self._sum

    @property
    def count(self) -> int:
        return self._count

    def observe(self, value: float) -> None:
        with self._lock:
            self._sum += value
            self._count += 1
            for index, bound in enumerate(self.buckets):
                if value <= bound:
                    self._counts[index] += 1
            self._counts[-1] += 1


class HistogramTimer:
    """Measures elapsed time into a histogram; observes on leaving a ``with`` block."""

    def __init__(self, histogram: Histogram, clock: Callable[[], float] = time.perf_counter) -> None:
        self.histogram = histogram
        self._clock = clock
        self.start = clock()

    def observe_duration(self) -> None:
        self.histogram.observe(self._clock() - self.start)

    def __enter__(self) -> HistogramTimer:
        return self

    def __exit__(self, *args: object) -> None:
        self.observe_duration()


def _default_histogram() -> Histogram:
    return Histogram(default_buckets())


_EXPORTED = (
    ("messages_bridged", "Total number of messages bridged", "counter"),
    ("messages_sent", "Total number of messages sent", "counter"),
    ("messages_received", "Total number of messages received", "counter"),
    ("messages_failed", "Total number of messages failed", "counter"),
    ("http_requests", "Total number of HTTP requests", "counter"),
    ("http_errors", "Total number of HTTP errors", "counter"),
    ("websocket_connections", "Current number of WebSocket connections", "gauge"),
    ("database_queries", "Total number of database queries", "counter"),
    ("database_errors", "Total number of database errors", "counter"),
    ("active_users", "Current number of active users", "gauge"),
    ("active_portals", "Current number of active portals", "gauge"),
    ("active_puppets", "Current number of active puppets", "gauge"),
    ("encryption_operations", "Total number of encryption operations", "counter"),
    ("encryption_errors", "Total number of encryption errors", "counter"),
    ("reconnection_attempts", "Total number of reconnection attempts", "counter"),
    ("reconnection_success", "Total number of successful reconnections", "counter"),
)


@dataclass
class Metrics:
    """The bridge's metric set."""

    messages_bridged: Counter = field(default_factory=Counter)
    messages_sent: Counter = field(default_factory=Counter)
    messages_received: Counter = field(default_factory=Counter)
    messages_failed: Counter = field(default_factory=Counter)
    messages_latency: Histogram = field(default_factory=_default_histogram)

    http_requests: Counter = field(default_factory=Counter)
    http_errors: Counter = field(default_factory=Counter)
    http_latency: Histogram = field(default_factory=_default_histogram)

    websocket_connections: Gauge = field(default_factory=Gauge)
    websocket_messages: Counter = field(default_factory=Counter)

    database_queries: Counter = field(default_factory=Counter)
    database_errors: Counter = field(default_factory=Counter)
    database_latency: Histogram = field(default_factory=_default_histogram)

    active_users: Gauge = field(default_factory=Gauge)
    active_portals: Gauge = field(default_factory=Gauge)
    active_puppets: Gauge = field(default_factory=Gauge)

    encryption_operations: Counter = field(default_factory=Counter)
    encryption_errors: Counter = field(default_factory=Counter)
    encryption_latency: Histogram = field(default_factory=_default_histogram)

    reconnection_attempts: Counter = field(default_factory=Counter)
    reconnection_success: Counter = field(default_factory=Counter)

    def to_prometheus(self) -> str:
        """Render the exported counters and gauges in Prometheus text format."""
        lines = []
        for attr, help_text, kind in _EXPORTED:
            metric = getattr(self, attr)
            name = f"bridge_{attr}"
            value = (
                _format_float(metric.value) if isinstance(metric, Gauge) else str(metric.value)
            )
            lines.append(f"# HELP {name} {help_text}\n")
            lines.append(f"# TYPE {name} {kind}\n")
            lines.append(f"{name} {value}\n")
        return "".join(lines)


METRICS = Metrics()


def metrics() -> Metrics:
    """Return the process-wide metric set."""
    return METRICS