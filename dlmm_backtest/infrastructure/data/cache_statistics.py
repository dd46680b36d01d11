"""
Counters for the historical data cache.
"""

from dataclasses import dataclass, field
from threading import Lock
from typing import Any


@dataclass
class CacheStatistics:
    """Hit, miss, eviction and expiration counters guarded by a lock."""

    hits: int = 0
    misses: int = 0
    evictions: int = 0
    expirations: int = 0
    _lock: Lock = field(default_factory=Lock, repr=False, compare=False)

    def record_hit(self) -> None:
        with self._lock:
            self.hits += 1

    def record_miss(self) -> None:
        with self._lock:
            self.misses += 1

    def record_eviction(self) -> None:
        """Entry dropped to make room for a newer one."""
        with self._lock:
            self.evictions += 1

    def record_expiration(self) -> None:
        """Entry dropped on read because its TTL elapsed."""
        with self._lock:
            self.expirations += 1

    @property
    def hit_rate_percent(self) -> float:
        lookups = self.hits + self.misses
        return round(self.hits / lookups * 100, 1) if lookups else 0.0

    def snapshot(self, size: int, max_size: int) -> dict[str, Any]:
        """Counters together with the current cache occupancy."""
        with self._lock:
            return {
                "size": size,
                "max_size": max_size,
                "hits": self.hits,
                "misses": self.misses,
                "evictions": self.evictions,
                "expirations": self.expirations,
                "hit_rate_percent": self.hit_rate_percent,
            }
