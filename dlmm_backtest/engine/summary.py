"""
Narrative summary of a completed backtest.

Finds the best and worst rolling periods of the portfolio and turns
threshold crossings in the metrics into insight and recommendation strings.
"""

from collections.abc import Sequence

from dlmm_backtest.core.constants import (
    HIGH_DRAWDOWN_THRESHOLD,
    HIGH_REBALANCE_FREQUENCY,
    HIGH_SHARPE_THRESHOLD,
    LOW_SHARPE_THRESHOLD,
    LOW_WIN_RATE_THRESHOLD,
    SUMMARY_WINDOW_SIZE,
)
from dlmm_backtest.core.models import (
    BacktestMetrics,
    BacktestSummary,
    PeriodPerformance,
    TimeSeriesPoint,
)
from dlmm_backtest.core.types.financial import period_return


def summary_window_size(points: int) -> int:
    """Rolling window length: a quarter of the series, at most 30 and at least 2."""
    return min(points, max(2, min(SUMMARY_WINDOW_SIZE, points // 4)))


def find_extreme_periods(
    time_series: Sequence[TimeSeriesPoint],
) -> tuple[PeriodPerformance | None, PeriodPerformance | None]:
    """Best and worst rolling window by fractional portfolio return.

    Returns (None, None) when the series has fewer than two samples.
    """
    if len(time_series) < 2:
        return None, None

    window = summary_window_size(len(time_series))
    best: PeriodPerformance | None = None
    worst: PeriodPerformance | None = None

    for i in range(len(time_series) - window + 1):
        first = time_series[i]
        last = time_series[i + window - 1]
        window_return = period_return(first.portfolio_value, last.portfolio_value)
        if window_return is None:
            continue

        period = PeriodPerformance(start=first.timestamp, end=last.timestamp, return_=window_return)
        if best is None or window_return > best.return_:
            best = period
        if worst is None or window_return < worst.return_:
            worst = period

    return best, worst


def generate_summary(
    time_series: Sequence[TimeSeriesPoint], metrics: BacktestMetrics
) -> BacktestSummary:
    """Build best/worst periods, insights and recommendations for a run."""
    best, worst = find_extreme_periods(time_series)
    summary = BacktestSummary(best_period=best, worst_period=worst)

    if metrics.sharpe_ratio > HIGH_SHARPE_THRESHOLD:
        summary.key_insights.append(
            f"Excellent risk-adjusted returns with Sharpe ratio of {metrics.sharpe_ratio:.2f}"
        )
    elif metrics.sharpe_ratio < LOW_SHARPE_THRESHOLD:
        summary.key_insights.append(
            f"Low risk-adjusted returns (Sharpe: {metrics.sharpe_ratio:.2f}) "
            f"suggest strategy needs optimization"
        )

    if metrics.max_drawdown > HIGH_DRAWDOWN_THRESHOLD:
        summary.key_insights.append(
            f"High maximum drawdown of {metrics.max_drawdown * 100:.1f}% indicates significant risk"
        )
        summary.recommendations.append(
            "Consider implementing stop-loss or position sizing controls"
        )

    # Win rate is meaningless without trades
    if metrics.total_trades > 0 and metrics.win_rate < LOW_WIN_RATE_THRESHOLD:
        summary.key_insights.append(
            f"Low win rate of {metrics.win_rate * 100:.1f}% but strategy may still be profitable"
        )
        summary.recommendations.append("Focus on risk management and let winners run")

    if metrics.rebalance_frequency > HIGH_REBALANCE_FREQUENCY:
        summary.key_insights.append(
            f"High rebalancing frequency ({metrics.rebalance_frequency:.1f} times/day) "
            f"increases costs"
        )
        summary.recommendations.append(
            "Consider increasing rebalance thresholds to reduce transaction costs"
        )

    return summary
