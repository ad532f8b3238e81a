"""In-memory caches with optional per-entry expiry. Durations are in seconds."""

from __future__ import annotations

import dataclasses
import logging
import time
from collections import OrderedDict
from collections.abc import Callable, Hashable
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

log = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

Clock = Callable[[], float]

# Marks an omitted ttl argument, as distinct from an explicit None (no expiry).
_DEFAULT: Any = object()


@dataclass
class CacheEntry(Generic[V]):
    """A cached value with its creation time, expiry time and hit count."""

    value: V
    created_at: float
    expires_at: float | None = None
    hits: int = 0
    clock: Clock = field(default=time.monotonic, repr=False, compare=False)

    @classmethod
    def create(cls, value: V, ttl: float | None, clock: Clock = time.monotonic) -> CacheEntry[V]:
        now = clock()
        return cls(
            value=value,
            created_at=now,
            expires_at=None if ttl is None else now + ttl,
            clock=clock,
        )

    def is_expired(self) -> bool:
        return self.expires_at is not None and self.clock() > self.expires_at

    def hit(self) -> None:
        self.hits += 1

    def age(self) -> float:
        return self.clock() - self.created_at


@dataclass(frozen=True)
class CacheStats:
    total_entries: int
    total_hits: int
    expired_count: int


class Cache(Generic[K, V]):
    """A bounded cache that evicts its oldest entry when full."""

    def __init__(
        self, max_size: int, ttl: float | None = None, clock: Clock = time.monotonic
    ) -> None:
        self.max_size = max_size
        self.default_ttl = ttl
        self._clock = clock
        self._entries: dict[K, CacheEntry[V]] = {}

    def _live_entry(self, key: K) -> CacheEntry[V] | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired():
            del self._entries[key]
            return None
        entry.hit()
        return entry

    def get(self, key: K) -> V | None:
        entry = self._live_entry(key)
        return None if entry is None else entry.value

    def get_entry(self, key: K) -> CacheEntry[V] | None:
        entry = self._live_entry(key)
        return None if entry is None else dataclasses.replace(entry)

    def insert(self, key: K, value: V, ttl: float | None = _DEFAULT) -> None:
        """Store a value; an omitted ttl uses the cache default, None never expires."""
        if ttl is _DEFAULT:
            ttl = self.default_ttl
        if len(self._entries) >= self.max_size and key not in self._entries:
            self._evict_oldest()
        self._entries[key] = CacheEntry.create(value, ttl, self._clock)

    def _evict_oldest(self) -> None:
        if not self._entries:
            return
        oldest = min(self._entries, key=lambda k: self._entries[k].created_at)
        log.debug("Evicting oldest cache entry: %r", oldest)
        del self._entries[oldest]

    def remove(self, key: K) -> V | None:
        entry = self._entries.pop(key, None)
        return None if entry is None else entry.value

    def contains(self, key: K) -> bool:
        entry = self._entries.get(key)
        return entry is not None and not entry.is_expired()

    def __contains__(self, key: object) -> bool:
        return self.contains(key)  # type: ignore[arg-type]

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def cleanup_expired(self) -> None:
        now = self._clock()
        self._entries = {
            key: entry
            for key, entry in self._entries.items()
            if entry.expires_at is None or entry.expires_at > now
        }

    def stats(self) -> CacheStats:
        entries = self._entries.values()
        return CacheStats(
            total_entries=len(self._entries),
            total_hits=sum(entry.hits for entry in entries),
            expired_count=sum(1 for entry in entries if entry.is_expired()),
        )


class LruCache(Generic[K, V]):
    """A cache that evicts its least recently used entry when full."""

    def __init__(
        self, capacity: int, ttl: float | None = None, clock: Clock = time.monotonic
    ) -> None:
        if capacity < 1:
            raise ValueError("LRU cache capacity must be at least 1")
        self.capacity = capacity
        self.default_ttl = ttl
        self._clock = clock
        self._entries: OrderedDict[K, CacheEntry[V]] = OrderedDict()

    def get(self, key: K) -> V | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        self._entries.move_to_end(key)
        if entry.is_expired():
            del self._entries[key]
            return None
        entry.hit()
        return entry.value

    def insert(self, key: K, value: V, ttl: float | None = _DEFAULT) -> None:
        """Store a value; an omitted ttl uses the cache default, None never expires."""
        if ttl is _DEFAULT:
            ttl = self.default_ttl
        if key in self._entries:
            del self._entries[key]
        elif len(self._entries) >= self.capacity:
            self._entries.popitem(last=False)
        self._entries[key] = CacheEntry.create(value, ttl, self._clock)

    def remove(self, key: K) -> V | None:
        entry = self._entries.pop(key, None)
        return None if entry is None else entry.value

    def contains(self, key: K) -> bool:
        """Tell whether the key is stored; expiry is not checked."""
        return key in self._entries

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)