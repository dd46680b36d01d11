"""
Backtest configuration, progress and results models.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

import pandas as pd

from dlmm_backtest.core.constants import DEFAULT_MIN_CONFIDENCE, DEFAULT_MIN_PROFIT_THRESHOLD
from dlmm_backtest.core.enums import (
    BacktestPhase,
    BacktestStatus,
    Interval,
    RebalanceFrequency,
)

from .action import StrategyAction
from .metrics import BacktestMetrics
from .position import PositionSnapshot


@dataclass
class MarketConfig:
    """Pool the backtest simulates liquidity provision for."""

    pool_address: str
    token_x_symbol: str = "X"
    token_y_symbol: str = "Y"

    @property
    def pair(self) -> str:
        return f"{self.token_x_symbol}/{self.token_y_symbol}"


@dataclass
class TimeframeConfig:
    """Simulated period and sampling interval."""

    start_date: datetime
    end_date: datetime
    interval: Interval = Interval.H1

    def __post_init__(self) -> None:
        """Accept plain interval strings such as "1h"."""
        self.interval = Interval.from_string(self.interval)


@dataclass
class CapitalConfig:
    initial_amount: float
    currency: str = "USD"


@dataclass
class CostConfig:
    """Per-action execution costs."""

    gas_price: float = 0.001  # USD per action
    slippage: float = 0.005  # Fraction, applied to the estimated profit
    transaction_fee: float = 0.25  # USD per action


@dataclass
class StrategyConfig:
    """Strategy identifier plus free-form evaluator parameters."""

    id: str
    parameters: dict[str, Any] = field(default_factory=dict)

    @property
    def min_profit_threshold(self) -> float:
        """Minimum estimated profit, in percent, for a recommendation to execute."""
        return float(self.parameters.get("min_profit_threshold", DEFAULT_MIN_PROFIT_THRESHOLD))

    @property
    def min_confidence(self) -> float:
        """Minimum evaluator confidence for a recommendation to execute."""
        return float(self.parameters.get("min_confidence", DEFAULT_MIN_CONFIDENCE))


@dataclass
class RebalancingConfig:
    frequency: RebalanceFrequency = RebalanceFrequency.IMMEDIATE
    min_threshold: float = 0.02


@dataclass
class BacktestConfig:
    """Configuration for a backtest execution.

    Construction never rejects semantically invalid values; use
    ``validate_backtest_config`` to check a configuration before running it.
    """

    name: str
    market: MarketConfig
    timeframe: TimeframeConfig
    capital: CapitalConfig
    strategy: StrategyConfig
    costs: CostConfig = field(default_factory=CostConfig)
    rebalancing: RebalancingConfig = field(default_factory=RebalancingConfig)

    def is_valid_date_range(self) -> bool:
        """Validate that end_date is after start_date."""
        return self.timeframe.end_date > self.timeframe.start_date

    def duration_days(self) -> float:
        """Length of the backtest period in (fractional) days."""
        return (self.timeframe.end_date - self.timeframe.start_date).total_seconds() / 86400

    def is_valid_capital(self) -> bool:
        """Validate initial capital is positive."""
        return self.capital.initial_amount > 0

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "name": self.name,
            "market": {
                "pool_address": self.market.pool_address,
                "token_x_symbol": self.market.token_x_symbol,
                "token_y_symbol": self.market.token_y_symbol,
            },
            "timeframe": {
                "start_date": self.timeframe.start_date.isoformat(),
                "end_date": self.timeframe.end_date.isoformat(),
                "interval": self.timeframe.interval.value,
            },
            "capital": {
                "initial_amount": self.capital.initial_amount,
                "currency": self.capital.currency,
            },
            "costs": {
                "gas_price": self.costs.gas_price,
                "slippage": self.costs.slippage,
                "transaction_fee": self.costs.transaction_fee,
            },
            "strategy": {"id": self.strategy.id, "parameters": dict(self.strategy.parameters)},
            "rebalancing": {
                "frequency": self.rebalancing.frequency.value,
                "min_threshold": self.rebalancing.min_threshold,
            },
        }


@dataclass
class TimeSeriesPoint:
    """Portfolio and benchmark state recorded once per historical sample."""

    timestamp: datetime
    portfolio_value: float
    benchmark_value: float
    position: PositionSnapshot
    market_price: float
    market_volume: float
    action: StrategyAction | None = None


@dataclass
class PeriodPerformance:
    start: datetime
    end: datetime
    return_: float


@dataclass
class BacktestSummary:
    """Narrative summary of a completed run."""

    best_period: PeriodPerformance | None = None
    worst_period: PeriodPerformance | None = None
    key_insights: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)


@dataclass
class BacktestError:
    """Terminal error of a run.

    ``kind`` distinguishes user cancellation ("cancelled") from
    configuration, data and unexpected failures.
    """

    message: str
    timestamp: datetime
    kind: str = "error"


@dataclass
class BacktestProgress:
    """Progress notification passed to the caller's callback."""

    phase: BacktestPhase
    progress: float  # 0-1
    current_step: str
    estimated_time_remaining: float | None = None  # Seconds


@dataclass
class BacktestResult:
    """Results from a backtest execution."""

    config: BacktestConfig
    status: BacktestStatus = BacktestStatus.RUNNING
    progress: float = 0.0
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    completed_at: datetime | None = None
    metrics: BacktestMetrics = field(default_factory=BacktestMetrics)
    time_series_data: list[TimeSeriesPoint] = field(default_factory=list)
    actions: list[StrategyAction] = field(default_factory=list)
    summary: BacktestSummary = field(default_factory=BacktestSummary)
    error: BacktestError | None = None

    @property
    def is_cancelled(self) -> bool:
        return self.error is not None and self.error.kind == "cancelled"

    def is_profitable(self) -> bool:
        """Check if the backtest was profitable."""
        return self.metrics.total_return > 0.0

    def performance_summary(self) -> dict:
        """Get a summary of key performance metrics."""
        if not self.time_series_data:
            return {}

        return {
            "initial_value": self.config.capital.initial_amount,
            "final_value": self.time_series_data[-1].portfolio_value,
            "final_benchmark_value": self.time_series_data[-1].benchmark_value,
            "total_return": self.metrics.total_return,
            "duration_days": self.config.duration_days(),
        }

    def to_frame(self) -> pd.DataFrame:
        """Time series as a DataFrame indexed by timestamp."""
        columns = [
            "timestamp",
            "portfolio_value",
            "benchmark_value",
            "market_price",
            "market_volume",
            "fees_earned",
            "action",
        ]
        frame = pd.DataFrame(
            [
                {
                    "timestamp": point.timestamp,
                    "portfolio_value": point.portfolio_value,
                    "benchmark_value": point.benchmark_value,
                    "market_price": point.market_price,
                    "market_volume": point.market_volume,
                    "fees_earned": point.position.fees_earned.usd_value,
                    "action": point.action.type.value if point.action else None,
                }
                for point in self.time_series_data
            ],
            columns=columns,
        )
        return frame.set_index("timestamp")

    def to_dict(self) -> dict:
        """Convert results to dictionary."""

        def _period(period: PeriodPerformance | None) -> dict | None:
            if period is None:
                return None
            return {
                "start": period.start.isoformat(),
                "end": period.end.isoformat(),
                "return": period.return_,
            }

        return {
            "config": self.config.to_dict(),
            "status": self.status.value,
            "progress": self.progress,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "metrics": self.metrics.to_dict(),
            "time_series_data": [
                {
                    "timestamp": point.timestamp.isoformat(),
                    "portfolio_value": point.portfolio_value,
                    "benchmark_value": point.benchmark_value,
                    "market_price": point.market_price,
                    "market_volume": point.market_volume,
                    "fees_earned": point.position.fees_earned.usd_value,
                    "action": point.action.type.value if point.action else None,
                }
                for point in self.time_series_data
            ],
            "actions": [action.to_dict() for action in self.actions],
            "summary": {
                "best_period": _period(self.summary.best_period),
                "worst_period": _period(self.summary.worst_period),
                "key_insights": list(self.summary.key_insights),
                "recommendations": list(self.summary.recommendations),
            },
            "error": (
                {
                    "message": self.error.message,
                    "timestamp": self.error.timestamp.isoformat(),
                    "kind": self.error.kind,
                }
                if self.error
                else None
            ),
        }
