"""Two in-memory caches: fetched holiday sets (TTL) and per-date decisions (size bound)."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, Generic, Mapping, MutableMapping, Tuple, TypeVar

T = TypeVar("T")
Clock = Callable[[], float]
MetricSink = Callable[[str, float, Mapping[str, Any] | None], None]

DEFAULT_DECISION_CAPACITY = 1000

_LOGGER = logging.getLogger("business_calendar.cache")


@dataclass
class FetchCacheEntry(Generic[T]):
    fetched_at: float
    value: T


class FetchCache(Generic[T]):
    """Single-value cache around an expensive loader, refreshed after ``ttl_seconds``.

    ``ttl_seconds=None`` keeps the first value forever; ``0`` reloads on every ``get``.
    """

    def __init__(
        self,
        loader: Callable[[], T],
        *,
        ttl_seconds: float | None,
        clock: Clock = time.time,
        metric_sink: MetricSink | None = None,
    ) -> None:
        self._loader = loader
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._metric_sink = metric_sink
        self._entry: FetchCacheEntry[T] | None = None
        self._fetch_count = 0
        self._lock = threading.Lock()

    def get(self) -> T:
        return self.snapshot()[0]

    def snapshot(self) -> Tuple[T, int]:
        """Return the current value with its generation, reloading it first if expired.

        The generation increases by one on every successful load, so callers
        holding values derived from an older load can tell they are stale.
        """

        with self._lock:
            entry = self._entry
            if entry is not None and self._is_valid_locked(entry):
                return entry.value, self._fetch_count
            try:
                value = self._loader()
            except Exception:
                self._record("holiday_fetch", {"outcome": "error"})
                raise
            self._fetch_count += 1
            self._entry = FetchCacheEntry(fetched_at=self._clock(), value=value)
            self._record("holiday_fetch", {"outcome": "ok"})
            return value, self._fetch_count

    def invalidate(self) -> None:
        with self._lock:
            self._entry = None

    def _is_valid_locked(self, entry: FetchCacheEntry[T]) -> bool:
        if self._ttl_seconds is None:
            return True
        return self._clock() - entry.fetched_at < self._ttl_seconds

    def _record(self, name: str, tags: Mapping[str, Any]) -> None:
        if self._metric_sink:
            self._metric_sink(name, 1.0, tags)

    def stats(self) -> MutableMapping[str, Any]:
        with self._lock:
            return {
                "ttl_seconds": self._ttl_seconds,
                "fetch_count": self._fetch_count,
                "fetched_at": self._entry.fetched_at if self._entry else None,
            }


class DecisionCache:
    """Memo of business-day decisions, flushed wholesale once it reaches ``capacity``.

    Decisions derived from a fetched holiday set are tagged with that fetch's
    generation; moving to a newer generation drops everything stored so far.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_DECISION_CAPACITY,
        *,
        metric_sink: MetricSink | None = None,
    ) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._capacity = capacity
        self._metric_sink = metric_sink
        self._store: Dict[date, bool] = {}
        self._flushes = 0
        self._generation: int | None = None
        self._lock = threading.Lock()

    def sync(self, generation: int) -> None:
        """Discard decisions made against any holiday set other than ``generation``."""

        with self._lock:
            if generation == self._generation:
                return
            if self._store:
                _LOGGER.debug(
                    "holiday set changed (generation %s), dropping %s decisions",
                    generation,
                    len(self._store),
                )
            self._store.clear()
            self._generation = generation

    def get(self, key: date) -> bool | None:
        with self._lock:
            return self._store.get(key)

    def put(self, key: date, value: bool, generation: int | None = None) -> bool:
        with self._lock:
            if generation is not None and generation != self._generation:
                return value
            if key not in self._store and len(self._store) >= self._capacity:
                _LOGGER.debug("decision cache reached %s entries, flushing", len(self._store))
                self._store.clear()
                self._flushes += 1
                if self._metric_sink:
                    self._metric_sink("decision_cache_flush", 1.0, None)
            self._store[key] = value
        return value

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def stats(self) -> MutableMapping[str, Any]:
        with self._lock:
            return {
                "capacity": self._capacity,
                "size": len(self._store),
                "flushes": self._flushes,
                "generation": self._generation,
            }


__all__ = ["DEFAULT_DECISION_CAPACITY", "DecisionCache", "FetchCache", "FetchCacheEntry"]
