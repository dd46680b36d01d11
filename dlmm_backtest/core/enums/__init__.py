"""
Core enumerations for the backtesting engine.

This module provides centralized enumerations for domain concepts
like sampling intervals, strategy actions, market regimes and run status.
"""

from .action_types import RebalanceFrequency, StrategyActionType
from .intervals import Interval
from .market import DataSource, MarketRegime
from .status import BacktestPhase, BacktestStatus

__all__ = [
    "Interval",
    "StrategyActionType",
    "RebalanceFrequency",
    "MarketRegime",
    "DataSource",
    "BacktestStatus",
    "BacktestPhase",
]
