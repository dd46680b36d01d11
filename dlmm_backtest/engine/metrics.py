"""
Backtest performance metrics.

Stateless calculator turning a simulated time series and its action log into
return, risk, trading, cost and DLMM statistics. Return-like values are
fractions and daily period returns are annualized with a 365-day year.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

import numpy as np
from loguru import logger

from dlmm_backtest.core.constants import (
    DAYS_PER_YEAR,
    DEFAULT_RISK_FREE_RATE,
    EXTREME_DRAWDOWN,
    EXTREME_SHARPE_RATIO,
    EXTREME_TOTAL_RETURN,
    IL_RECOVERY_FEE_SCALE,
)
from dlmm_backtest.core.enums import StrategyActionType
from dlmm_backtest.core.exceptions.backtest import CalculationError
from dlmm_backtest.core.interfaces.data import IMetricsCalculator
from dlmm_backtest.core.models import (
    BacktestMetrics,
    MetricsValidation,
    StrategyAction,
    TimeSeriesPoint,
)
from dlmm_backtest.core.types.financial import (
    days_between,
    is_finite,
    period_return,
    safe_divide,
)

SQRT_DAYS_PER_YEAR = math.sqrt(DAYS_PER_YEAR)


@dataclass
class DrawdownStats:
    max_drawdown: float = 0.0
    max_drawdown_duration: float = 0.0  # Days from peak to trough


@dataclass
class TradingStats:
    total_trades: int = 0
    profitable_trades: int = 0
    win_rate: float = 0.0
    profit_factor: float = 0.0
    avg_trade_return: float = 0.0
    largest_win: float = 0.0
    largest_loss: float = 0.0


@dataclass
class CostStats:
    total_fees: float = 0.0
    total_gas: float = 0.0
    total_slippage: float = 0.0
    cost_to_return: float = 0.0


@dataclass
class DLMMStats:
    total_fees_earned: float = 0.0
    avg_apr: float = 0.0
    liquidity_utilization: float = 0.0
    rebalance_frequency: float = 0.0
    impermanent_loss_recovery: float = 0.0


def _series_returns(values: Sequence[float]) -> list[float]:
    """Period returns, skipping periods whose starting value is not positive."""
    returns = []
    for previous, current in zip(values, values[1:]):
        r = period_return(previous, current)
        if r is not None:
            returns.append(r)
    return returns


class MetricsCalculator(IMetricsCalculator):
    """Calculate backtest metrics from a time series and action log."""

    def compute(
        self,
        time_series: Sequence[TimeSeriesPoint],
        actions: Sequence[StrategyAction],
        initial_capital: float,
        risk_free_rate: float = DEFAULT_RISK_FREE_RATE,
    ) -> BacktestMetrics:
        """
        Calculate all metrics for one backtest.

        Args:
            time_series: Ordered portfolio/benchmark samples
            actions: Action log of the run
            initial_capital: Capital the run started with
            risk_free_rate: Annual risk-free rate used by Sharpe and Sortino

        Returns:
            Metrics; all zero for an empty time series

        Raises:
            CalculationError: If initial_capital is negative or not finite
        """
        if initial_capital < 0 or not is_finite(initial_capital):
            raise CalculationError(
                f"Initial capital must be finite and non-negative, got {initial_capital}"
            )
        if not time_series:
            return BacktestMetrics.empty()

        logger.debug(
            f"Calculating metrics for {len(time_series)} data points and {len(actions)} actions"
        )

        returns = self.calculate_returns(time_series)
        benchmark_returns = self.calculate_benchmark_returns(time_series)

        total_return = self.calculate_total_return(time_series, initial_capital)
        annualized_return = self.calculate_annualized_return(returns, time_series)
        benchmark_return = self.calculate_compound_return(benchmark_returns)

        drawdown = self.calculate_max_drawdown(time_series)
        trading = self.calculate_trading_metrics(actions)
        costs = self.calculate_cost_metrics(actions, total_return)
        dlmm = self.calculate_dlmm_metrics(time_series, actions)

        return BacktestMetrics(
            total_return=total_return,
            annualized_return=annualized_return,
            benchmark_return=benchmark_return,
            excess_return=annualized_return - benchmark_return,
            volatility=self.calculate_volatility(returns),
            sharpe_ratio=self.calculate_sharpe_ratio(returns, risk_free_rate),
            sortino_ratio=self.calculate_sortino_ratio(returns, risk_free_rate),
            max_drawdown=drawdown.max_drawdown,
            max_drawdown_duration=drawdown.max_drawdown_duration,
            total_trades=trading.total_trades,
            profitable_trades=trading.profitable_trades,
            win_rate=trading.win_rate,
            profit_factor=trading.profit_factor,
            avg_trade_return=trading.avg_trade_return,
            largest_win=trading.largest_win,
            largest_loss=trading.largest_loss,
            total_fees=costs.total_fees,
            total_gas=costs.total_gas,
            total_slippage=costs.total_slippage,
            cost_to_return=costs.cost_to_return,
            total_fees_earned=dlmm.total_fees_earned,
            avg_apr=dlmm.avg_apr,
            liquidity_utilization=dlmm.liquidity_utilization,
            rebalance_frequency=dlmm.rebalance_frequency,
            impermanent_loss_recovery=dlmm.impermanent_loss_recovery,
        )

    # Return metrics

    def calculate_returns(self, time_series: Sequence[TimeSeriesPoint]) -> list[float]:
        """Period-over-period portfolio returns."""
        return _series_returns([point.portfolio_value for point in time_series])

    def calculate_benchmark_returns(self, time_series: Sequence[TimeSeriesPoint]) -> list[float]:
        """Period-over-period returns of the hold benchmark."""
        return _series_returns([point.benchmark_value for point in time_series])

    def calculate_total_return(
        self, time_series: Sequence[TimeSeriesPoint], initial_capital: float
    ) -> float:
        if not time_series or initial_capital == 0:
            return 0.0
        return (time_series[-1].portfolio_value - initial_capital) / initial_capital

    def calculate_compound_return(self, returns: Sequence[float]) -> float:
        """Product of (1 + r) over all period returns, minus one."""
        if len(returns) == 0:
            return 0.0
        return float(np.prod(1.0 + np.asarray(returns, dtype=float)) - 1.0)

    def calculate_annualized_return(
        self, returns: Sequence[float], time_series: Sequence[TimeSeriesPoint]
    ) -> float:
        """Compound return scaled to a 365-day year."""
        if len(returns) == 0 or len(time_series) < 2:
            return 0.0

        compound_return = self.calculate_compound_return(returns)
        days = self.days_between(time_series[0].timestamp, time_series[-1].timestamp)
        growth = 1.0 + compound_return
        if growth <= 0:
            return -1.0
        try:
            return growth ** (DAYS_PER_YEAR / days) - 1.0
        except OverflowError:
            return math.inf

    # Risk metrics

    def calculate_volatility(self, returns: Sequence[float]) -> float:
        """Annualized sample standard deviation of period returns."""
        if len(returns) < 2:
            return 0.0
        variance = float(np.var(np.asarray(returns, dtype=float), ddof=1))
        return math.sqrt(variance * DAYS_PER_YEAR)

    def calculate_sharpe_ratio(
        self, returns: Sequence[float], risk_free_rate: float = DEFAULT_RISK_FREE_RATE
    ) -> float:
        if len(returns) == 0:
            return 0.0

        volatility = self.calculate_volatility(returns)
        if volatility == 0:
            return 0.0

        excess = float(np.mean(returns)) - risk_free_rate / DAYS_PER_YEAR
        return excess / (volatility / SQRT_DAYS_PER_YEAR)

    def calculate_sortino_ratio(
        self, returns: Sequence[float], risk_free_rate: float = DEFAULT_RISK_FREE_RATE
    ) -> float:
        """
        Sortino ratio.

        Downside variance sums squared negative returns but averages over all
        returns. Infinite when no period return is negative.
        """
        if len(returns) == 0:
            return 0.0

        values = np.asarray(returns, dtype=float)
        negative = values[values < 0]
        if negative.size == 0:
            return math.inf

        downside_deviation = math.sqrt(float(np.sum(negative**2)) / values.size * DAYS_PER_YEAR)
        if downside_deviation == 0:
            return math.inf

        excess = float(np.mean(values)) - risk_free_rate / DAYS_PER_YEAR
        return excess / downside_deviation

    def calculate_max_drawdown(self, time_series: Sequence[TimeSeriesPoint]) -> DrawdownStats:
        """Largest peak-to-trough decline and the days it took."""
        stats = DrawdownStats()
        if not time_series:
            return stats

        peak = time_series[0].portfolio_value
        peak_index = 0

        for i, point in enumerate(time_series):
            value = point.portfolio_value
            if value > peak:
                peak = value
                peak_index = i
                continue

            if peak <= 0:
                continue

            drawdown = (peak - value) / peak
            if drawdown > stats.max_drawdown:
                stats.max_drawdown = drawdown
                stats.max_drawdown_duration = self.days_between(
                    time_series[peak_index].timestamp, point.timestamp
                )

        return stats

    # Trading metrics

    def calculate_trading_metrics(self, actions: Sequence[StrategyAction]) -> TradingStats:
        """
        Trade statistics over successful rebalances.

        A trade's return is the change in post-action position value since
        the previous rebalance. Ratios are taken over the number of trades.
        """
        trades = [action for action in actions if action.type.is_trade and action.result.success]
        if not trades:
            return TradingStats()

        stats = TradingStats(total_trades=len(trades))
        total_return = 0.0
        gross_profit = 0.0
        gross_loss = 0.0

        for previous, current in zip(trades, trades[1:]):
            trade_return = period_return(
                previous.result.new_position_value, current.result.new_position_value
            )
            if trade_return is None:
                continue

            total_return += trade_return
            if trade_return > 0:
                gross_profit += trade_return
                stats.profitable_trades += 1
                stats.largest_win = max(stats.largest_win, trade_return)
            else:
                gross_loss += abs(trade_return)
                stats.largest_loss = min(stats.largest_loss, trade_return)

        stats.win_rate = stats.profitable_trades / len(trades)
        stats.profit_factor = gross_profit / gross_loss if gross_loss > 0 else gross_profit
        stats.avg_trade_return = total_return / len(trades)
        return stats

    # Cost metrics

    def calculate_cost_metrics(
        self, actions: Sequence[StrategyAction], total_return: float
    ) -> CostStats:
        stats = CostStats(
            total_fees=sum(action.costs.fees for action in actions),
            total_gas=sum(action.costs.gas for action in actions),
            total_slippage=sum(action.costs.slippage for action in actions),
        )
        total_costs = stats.total_fees + stats.total_gas + stats.total_slippage
        stats.cost_to_return = safe_divide(total_costs, abs(total_return))
        return stats

    # DLMM metrics

    def calculate_dlmm_metrics(
        self, time_series: Sequence[TimeSeriesPoint], actions: Sequence[StrategyAction]
    ) -> DLMMStats:
        """
        Fee, APR, utilization and rebalance statistics.

        Fees earned are cumulative per snapshot, so the total is the last
        sample's value. APR is averaged over samples with a positive APR.
        """
        stats = DLMMStats()
        if not time_series:
            return stats

        stats.total_fees_earned = time_series[-1].position.fees_earned.usd_value

        aprs = np.array([point.position.metrics.apr for point in time_series], dtype=float)
        positive_aprs = aprs[aprs > 0]
        stats.avg_apr = float(np.mean(positive_aprs)) if positive_aprs.size else 0.0

        stats.liquidity_utilization = float(
            np.mean([point.position.metrics.utilization for point in time_series])
        )

        rebalances = sum(1 for action in actions if action.type == StrategyActionType.REBALANCE)
        days = self.days_between(time_series[0].timestamp, time_series[-1].timestamp)
        stats.rebalance_frequency = rebalances / days

        if stats.total_fees_earned > 0:
            stats.impermanent_loss_recovery = min(
                stats.total_fees_earned / IL_RECOVERY_FEE_SCALE, 1.0
            )

        return stats

    @staticmethod
    def days_between(start: datetime, end: datetime) -> float:
        """Elapsed days, never less than one."""
        return days_between(start, end)

    def validate_metrics(self, metrics: BacktestMetrics) -> MetricsValidation:
        return validate_metrics(metrics)


def validate_metrics(metrics: BacktestMetrics) -> MetricsValidation:
    """
    Flag implausible or invalid metric values.

    Never raises; the report is informational only.
    """
    validation = MetricsValidation()

    if is_finite(metrics.total_return) and abs(metrics.total_return) > EXTREME_TOTAL_RETURN:
        validation.warnings.append(f"Extreme total return: {metrics.total_return * 100:.1f}%")

    if metrics.sharpe_ratio > EXTREME_SHARPE_RATIO:
        validation.warnings.append(f"Very high Sharpe ratio: {metrics.sharpe_ratio:.2f}")

    if metrics.max_drawdown > EXTREME_DRAWDOWN:
        validation.warnings.append(f"Extreme drawdown: {metrics.max_drawdown * 100:.1f}%")

    if not is_finite(metrics.total_return):
        validation.errors.append("Invalid total return value")

    for name in ("annualized_return", "benchmark_return", "excess_return"):
        if not is_finite(getattr(metrics, name)):
            validation.errors.append(f"Invalid {name.replace('_', ' ')} value")

    if math.isnan(metrics.volatility) or metrics.volatility < 0:
        validation.errors.append("Invalid volatility value")

    return validation
