"""
Backtest helper functions.

Default configuration, id generation, display formatting, runtime estimates
and side-by-side comparison of two results.
"""

import math
import secrets
import string
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Literal

from dlmm_backtest.core.enums import Interval, RebalanceFrequency
from dlmm_backtest.core.models import (
    BacktestConfig,
    BacktestMetrics,
    BacktestResult,
    CapitalConfig,
    CostConfig,
    MarketConfig,
    RebalancingConfig,
    StrategyConfig,
    TimeframeConfig,
)
from dlmm_backtest.core.types.financial import round_amount

DEFAULT_BACKTEST_DAYS = 30
DEFAULT_INITIAL_CAPITAL = 1000.0

# Rough runtime model: fixed overhead plus a per-sample cost
ESTIMATE_OVERHEAD_MS = 2000
ESTIMATE_MS_PER_POINT = 10

BACKTEST_ID_SUFFIX_LENGTH = 9

Winner = Literal["first", "second", "tie"]

# (metric, higher_is_better)
COMPARED_METRICS: tuple[tuple[str, bool], ...] = (
    ("total_return", True),
    ("sharpe_ratio", True),
    ("max_drawdown", False),
    ("win_rate", True),
    ("avg_apr", True),
)


def create_default_config(
    pool_address: str,
    strategy_id: str = "conservative-hold",
    name: str = "Default backtest",
    now: datetime | None = None,
) -> BacktestConfig:
    """Configuration for the last 30 days at 1h with 1000 USD of capital."""
    end_date = now or datetime.now(UTC)
    return BacktestConfig(
        name=name,
        market=MarketConfig(pool_address=pool_address),
        timeframe=TimeframeConfig(
            start_date=end_date - timedelta(days=DEFAULT_BACKTEST_DAYS),
            end_date=end_date,
            interval=Interval.H1,
        ),
        capital=CapitalConfig(initial_amount=DEFAULT_INITIAL_CAPITAL, currency="USD"),
        strategy=StrategyConfig(id=strategy_id),
        costs=CostConfig(gas_price=0.001, slippage=0.005, transaction_fee=0.25),
        rebalancing=RebalancingConfig(frequency=RebalanceFrequency.IMMEDIATE, min_threshold=0.02),
    )


def generate_backtest_id() -> str:
    """Unique id of the form ``bt_<epoch ms>_<random suffix>``."""
    alphabet = string.ascii_lowercase + string.digits
    suffix = "".join(secrets.choice(alphabet) for _ in range(BACKTEST_ID_SUFFIX_LENGTH))
    return f"bt_{int(time.time() * 1000)}_{suffix}"


def format_metrics_for_display(metrics: BacktestMetrics) -> dict[str, str]:
    """Human-readable headline metrics."""
    return {
        "Total Return": f"{metrics.total_return * 100:.2f}%",
        "Annualized Return": f"{metrics.annualized_return * 100:.2f}%",
        "Sharpe Ratio": f"{metrics.sharpe_ratio:.2f}",
        "Max Drawdown": f"{metrics.max_drawdown * 100:.2f}%",
        "Win Rate": f"{metrics.win_rate * 100:.1f}%",
        "Total Trades": str(metrics.total_trades),
        "Fees Earned": f"${metrics.total_fees_earned:.2f}",
        "Average APR": f"{metrics.avg_apr * 100:.1f}%",
    }


def estimate_backtest_duration(config: BacktestConfig) -> int:
    """Estimated wall-clock runtime of a backtest, in whole seconds (at least 1)."""
    data_points = config.duration_days() * Interval.periods_per_day(config.timeframe.interval)
    return max(1, math.floor((data_points * ESTIMATE_MS_PER_POINT + ESTIMATE_OVERHEAD_MS) / 1000))


@dataclass
class MetricComparison:
    metric: str
    first: float
    second: float
    difference: float
    winner: Winner


@dataclass
class BacktestComparison:
    """Metric-by-metric comparison; the overall winner follows the Sharpe ratio."""

    winner: Winner
    comparison: list[MetricComparison] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "winner": self.winner,
            "comparison": [
                {
                    "metric": c.metric,
                    "first": c.first,
                    "second": c.second,
                    "difference": c.difference,
                    "winner": c.winner,
                }
                for c in self.comparison
            ],
        }


def _pick_winner(first: float, second: float, higher_is_better: bool) -> Winner:
    if first == second:
        return "tie"
    if (first > second) == higher_is_better:
        return "first"
    return "second"


def compare_backtests(first: BacktestResult, second: BacktestResult) -> BacktestComparison:
    """Compare headline metrics of two results."""
    comparison = []
    for metric, higher_is_better in COMPARED_METRICS:
        a = getattr(first.metrics, metric)
        b = getattr(second.metrics, metric)
        comparison.append(
            MetricComparison(
                metric=metric,
                first=a,
                second=b,
                difference=round_amount(a - b),
                winner=_pick_winner(a, b, higher_is_better),
            )
        )

    # Risk-adjusted performance decides the overall winner
    sharpe = next(c for c in comparison if c.metric == "sharpe_ratio")
    return BacktestComparison(winner=sharpe.winner, comparison=comparison)
