"""
Historical data service.

Serves pool history from a TTL cache, an optional external source, and a
synthetic generator used as fallback when no recorded data exists.
"""

import asyncio
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from loguru import logger

from dlmm_backtest.core.constants import DEFAULT_CACHE_SIZE, DEFAULT_CACHE_TTL_SECONDS
from dlmm_backtest.core.enums import Interval
from dlmm_backtest.core.exceptions.backtest import DataUnavailableError, ValidationError
from dlmm_backtest.core.interfaces.data import IMarketDataSource
from dlmm_backtest.core.models import HistoricalData

from .historical_cache import HistoricalDataCache, build_cache_key
from .synthetic_generator import SyntheticDataGenerator


@dataclass
class HistoricalDataConfig:
    """Settings for the historical data service."""

    cache_size: int = DEFAULT_CACHE_SIZE
    cache_ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS
    fallback_to_synthetic: bool = True
    seed: int | None = None  # Seed for the default synthetic generator


class HistoricalDataService:
    """
    Historical data access with caching and synthetic fallback.

    Lookup order for ``fetch``:
    1. Cache (unexpired entries only)
    2. External data source, if one is injected
    3. Synthetic generator, if fallback is enabled
    """

    def __init__(
        self,
        config: HistoricalDataConfig | None = None,
        cache: HistoricalDataCache | None = None,
        data_source: IMarketDataSource | None = None,
        generator: SyntheticDataGenerator | None = None,
    ) -> None:
        self.config = config or HistoricalDataConfig()
        self.cache = cache or HistoricalDataCache(
            capacity=self.config.cache_size, ttl_seconds=self.config.cache_ttl_seconds
        )
        self.data_source = data_source
        self.generator = generator or SyntheticDataGenerator(seed=self.config.seed)
        self._miss_lock = asyncio.Lock()

    async def fetch(
        self,
        pool_address: str,
        start_date: datetime,
        end_date: datetime,
        interval: Interval | str = Interval.H1,
    ) -> HistoricalData:
        """
        Fetch historical data for a pool.

        Args:
            pool_address: Pool identifier
            start_date: Inclusive start of the range
            end_date: Exclusive end of the range
            interval: Sampling interval

        Returns:
            Historical data; cached entries are shared and must not be mutated

        Raises:
            ValidationError: If the date range is empty or inverted
            DataUnavailableError: If no real data exists and fallback is disabled
        """
        interval = Interval.from_string(interval)
        if end_date <= start_date:
            raise ValidationError("Start date must be before end date")

        cache_key = build_cache_key(pool_address, start_date, end_date, interval)

        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.debug(f"Historical data cache hit for {pool_address}")
            return cached

        # Serialize misses so concurrent requests for one key produce one entry
        async with self._miss_lock:
            # The miss was already counted above
            cached = self.cache.peek(cache_key)
            if cached is not None:
                return cached

            data = await self._fetch_uncached(pool_address, start_date, end_date, interval)
            self.cache.set(cache_key, data)
            return data

    async def _fetch_uncached(
        self, pool_address: str, start_date: datetime, end_date: datetime, interval: Interval
    ) -> HistoricalData:
        real_data = await self._fetch_from_source(pool_address, start_date, end_date, interval)
        if real_data is not None:
            logger.info(
                f"Fetched real historical data for {pool_address} "
                f"({real_data.metadata.data_points} points)"
            )
            return real_data

        if not self.config.fallback_to_synthetic:
            raise DataUnavailableError(
                pool_address, "no recorded data and synthetic fallback is disabled"
            )

        logger.debug(f"Using synthetic historical data for {pool_address}")
        return self.generator.generate(pool_address, start_date, end_date, interval)

    async def _fetch_from_source(
        self, pool_address: str, start_date: datetime, end_date: datetime, interval: Interval
    ) -> HistoricalData | None:
        """Ask the external source; failures and empty results mean "fall back"."""
        if self.data_source is None:
            return None

        try:
            data = await self.data_source.fetch_real(pool_address, start_date, end_date, interval)
        except Exception as e:
            logger.warning(f"External data fetch failed for {pool_address}: {e}")
            return None

        if data is None or data.is_empty:
            return None
        return data

    def get_cache_stats(self) -> dict[str, Any]:
        """Cache statistics for monitoring."""
        return self.cache.get_stats()

    def clear_cache(self) -> None:
        """Clear cache (useful for testing or memory management)."""
        self.cache.clear()

    async def preload(
        self,
        pool_addresses: Iterable[str],
        intervals: Iterable[Interval | str] = (Interval.H1, Interval.D1),
        days: int = 30,
        now: datetime | None = None,
    ) -> int:
        """
        Warm the cache with the last ``days`` of data for common pools.

        Failures for individual pools are logged and skipped.

        Returns:
            Number of datasets loaded
        """
        end_date = now or datetime.now(UTC)
        start_date = end_date - timedelta(days=days)
        requests = [
            (pool_address, Interval.from_string(interval))
            for pool_address in pool_addresses
            for interval in intervals
        ]

        logger.info(f"Preloading {len(requests)} historical datasets...")
        results = await asyncio.gather(
            *(self.fetch(pool, start_date, end_date, interval) for pool, interval in requests),
            return_exceptions=True,
        )

        loaded = 0
        for (pool, interval), outcome in zip(requests, results, strict=True):
            if isinstance(outcome, Exception):
                logger.warning(f"Preload failed for {pool} {interval.value}: {outcome}")
            else:
                loaded += 1

        logger.info(f"Preloaded {loaded}/{len(requests)} datasets")
        return loaded
