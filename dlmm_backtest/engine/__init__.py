"""
Backtest engine, metrics and reporting helpers.
"""

from .backtest_engine import BacktestEngine, ProgressCallback
from .cancellation import CancellationToken
from .metrics import MetricsCalculator, validate_metrics
from .summary import generate_summary
from .utils import (
    BacktestComparison,
    compare_backtests,
    create_default_config,
    estimate_backtest_duration,
    format_metrics_for_display,
    generate_backtest_id,
)

__all__ = [
    "BacktestEngine",
    "ProgressCallback",
    "CancellationToken",
    "MetricsCalculator",
    "validate_metrics",
    "generate_summary",
    "BacktestComparison",
    "compare_backtests",
    "create_default_config",
    "estimate_backtest_duration",
    "format_metrics_for_display",
    "generate_backtest_id",
]
