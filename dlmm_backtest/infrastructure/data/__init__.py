"""
Historical data infrastructure.

This module provides cached access to pool history, backed by an optional
recorded-data source and a synthetic generator fallback.
"""

from .csv_source import CSVMarketDataSource
from .historical_cache import CacheEntry, HistoricalDataCache, build_cache_key
from .historical_data_service import HistoricalDataConfig, HistoricalDataService
from .synthetic_generator import SyntheticDataGenerator

__all__ = [
    "CSVMarketDataSource",
    "CacheEntry",
    "HistoricalDataCache",
    "HistoricalDataConfig",
    "HistoricalDataService",
    "SyntheticDataGenerator",
    "build_cache_key",
]
