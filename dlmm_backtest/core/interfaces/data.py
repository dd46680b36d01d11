"""
Data access interfaces.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import datetime

from dlmm_backtest.core.constants import DEFAULT_RISK_FREE_RATE
from dlmm_backtest.core.enums import Interval
from dlmm_backtest.core.models import (
    BacktestMetrics,
    HistoricalData,
    StrategyAction,
    TimeSeriesPoint,
)


class IMarketDataSource(ABC):
    """Abstract interface for an external historical market-data source."""

    @abstractmethod
    async def fetch_real(
        self, pool_address: str, start_date: datetime, end_date: datetime, interval: Interval
    ) -> HistoricalData | None:
        """Fetch recorded data for the pool, or None when the source has none."""
        pass


class IMetricsCalculator(ABC):
    """Abstract interface for performance metrics calculation."""

    @abstractmethod
    def compute(
        self,
        time_series: Sequence[TimeSeriesPoint],
        actions: Sequence[StrategyAction],
        initial_capital: float,
        risk_free_rate: float = DEFAULT_RISK_FREE_RATE,
    ) -> BacktestMetrics:
        """Calculate return, risk, trading, cost and DLMM metrics."""
        pass
