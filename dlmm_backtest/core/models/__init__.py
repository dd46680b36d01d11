"""
Domain models for backtest configuration, market data, positions and results.
"""

from .action import ActionCosts, ActionResult, StrategyAction
from .backtest import (
    BacktestConfig,
    BacktestError,
    BacktestProgress,
    BacktestResult,
    BacktestSummary,
    CapitalConfig,
    CostConfig,
    MarketConfig,
    PeriodPerformance,
    RebalancingConfig,
    StrategyConfig,
    TimeframeConfig,
    TimeSeriesPoint,
)
from .market import DataMetadata, HistoricalData, LiquidityPoint, PricePoint, TimeRange
from .metrics import BacktestMetrics, MetricsValidation
from .position import (
    BenchmarkPosition,
    BinAllocation,
    FeesEarned,
    PositionMetrics,
    PositionSnapshot,
)

__all__ = [
    "ActionCosts",
    "ActionResult",
    "StrategyAction",
    "BacktestConfig",
    "BacktestError",
    "BacktestProgress",
    "BacktestResult",
    "BacktestSummary",
    "CapitalConfig",
    "CostConfig",
    "MarketConfig",
    "PeriodPerformance",
    "RebalancingConfig",
    "StrategyConfig",
    "TimeframeConfig",
    "TimeSeriesPoint",
    "DataMetadata",
    "HistoricalData",
    "LiquidityPoint",
    "PricePoint",
    "TimeRange",
    "BacktestMetrics",
    "MetricsValidation",
    "BenchmarkPosition",
    "BinAllocation",
    "FeesEarned",
    "PositionMetrics",
    "PositionSnapshot",
]
