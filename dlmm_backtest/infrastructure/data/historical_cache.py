"""
Historical data cache.

Capacity-bounded, TTL-expiring cache for historical datasets. Eviction on
overflow is insertion-ordered (oldest inserted key first), not LRU.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from threading import RLock
from typing import Any

from cachetools import FIFOCache
from loguru import logger

from dlmm_backtest.core.constants import DEFAULT_CACHE_SIZE, DEFAULT_CACHE_TTL_SECONDS
from dlmm_backtest.core.enums import Interval
from dlmm_backtest.core.models import HistoricalData

from .cache_statistics import CacheStatistics


@dataclass
class CacheEntry:
    """A cached dataset with its expiry deadline (in timer units)."""

    key: str
    data: HistoricalData
    expires_at: float
    size: int
    hits: int = 0


class _EvictingFIFOCache(FIFOCache):
    """FIFOCache that reports evicted keys."""

    def __init__(self, maxsize: int, on_evict: Callable[[str], None]) -> None:
        super().__init__(maxsize=maxsize)
        self._on_evict = on_evict

    def popitem(self) -> tuple[str, CacheEntry]:
        key, value = super().popitem()
        self._on_evict(key)
        return key, value


def build_cache_key(
    pool_address: str, start_date: datetime, end_date: datetime, interval: Interval | str
) -> str:
    """Deterministic cache key for a historical data request."""
    start_ms = int(start_date.timestamp() * 1000)
    end_ms = int(end_date.timestamp() * 1000)
    return f"{pool_address}_{start_ms}_{end_ms}_{Interval.from_string(interval).value}"


class HistoricalDataCache:
    """Thread-safe TTL cache for historical datasets.

    Entries are read-only after insertion, so concurrent readers may share
    them; inserts and evictions are serialized by a lock.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CACHE_SIZE,
        ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        if capacity <= 0:
            raise ValueError("Cache size must be positive")
        if ttl_seconds <= 0:
            raise ValueError("Cache TTL must be positive")
        if capacity > 1000:
            logger.warning(f"Large cache size ({capacity}) may consume significant memory")

        self.capacity = capacity
        self.ttl_seconds = ttl_seconds
        self._timer = timer
        self._statistics = CacheStatistics()
        self._entries: _EvictingFIFOCache = _EvictingFIFOCache(capacity, self._record_eviction)
        self._cache_lock = RLock()

    def _record_eviction(self, key: str) -> None:
        self._statistics.record_eviction()
        logger.debug(f"Evicted oldest cache entry: {key}")

    def __len__(self) -> int:
        with self._cache_lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._cache_lock:
            entry = self._entries.get(key)
            return entry is not None and self._timer() <= entry.expires_at

    def get(self, key: str) -> HistoricalData | None:
        """Return cached data for ``key``, or None on a miss or an expired entry."""
        with self._cache_lock:
            entry = self._entries.get(key)
            if entry is None:
                self._statistics.record_miss()
                return None

            if self._timer() > entry.expires_at:
                del self._entries[key]
                self._statistics.record_expiration()
                self._statistics.record_miss()
                logger.debug(f"Cache entry expired: {key}")
                return None

            entry.hits += 1
            self._statistics.record_hit()
            return entry.data

    def peek(self, key: str) -> HistoricalData | None:
        """Like get, but leaves the counters and expired entries untouched."""
        with self._cache_lock:
            entry = self._entries.get(key)
            if entry is None or self._timer() > entry.expires_at:
                return None
            return entry.data

    def set(self, key: str, data: HistoricalData) -> CacheEntry:
        """Insert ``data``, evicting the oldest inserted entry when full."""
        entry = CacheEntry(
            key=key,
            data=data,
            expires_at=self._timer() + self.ttl_seconds,
            size=data.estimate_size(),
        )
        with self._cache_lock:
            # Re-inserting an existing key must not evict an unrelated entry
            self._entries.pop(key, None)
            self._entries[key] = entry
        return entry

    def clear(self) -> None:
        """Drop every entry."""
        with self._cache_lock:
            cleared = len(self._entries)
            self._entries.clear()
        logger.info(f"Historical data cache cleared ({cleared} entries)")

    def get_stats(self) -> dict[str, Any]:
        """Cache statistics with per-entry detail sorted by hits."""
        with self._cache_lock:
            entries = [
                {"key": entry.key, "hits": entry.hits, "size": entry.size}
                for entry in self._entries.values()
            ]
            stats = self._statistics.snapshot(len(self._entries), self.capacity)

        stats["total_hits"] = sum(entry["hits"] for entry in entries)
        stats["total_size"] = sum(entry["size"] for entry in entries)
        stats["entries"] = sorted(entries, key=lambda entry: entry["hits"], reverse=True)
        return stats
