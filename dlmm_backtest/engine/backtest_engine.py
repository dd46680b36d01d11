"""
Backtest engine for DLMM liquidity strategies.

Runs a configuration through validation, data fetching, tick-by-tick
simulation of a binned liquidity position, metrics and summary generation.
Every failure is captured into the returned BacktestResult.
"""

import asyncio
import time
from collections.abc import Callable
from datetime import UTC, datetime

import numpy as np
from loguru import logger

from dlmm_backtest.core.constants import (
    DAILY_FEE_RATE,
    DAYS_PER_YEAR,
    INITIAL_BIN_COUNT,
    PROGRESS_FETCHING,
    PROGRESS_INITIALIZING,
    PROGRESS_METRICS,
    PROGRESS_SIMULATION_SPAN,
    PROGRESS_SIMULATION_START,
    PROGRESS_SUMMARY,
    PROGRESS_UPDATES_PER_RUN,
    VALUE_DRIFT_RANGE,
)
from dlmm_backtest.core.enums import BacktestPhase, BacktestStatus, Interval, StrategyActionType
from dlmm_backtest.core.exceptions.backtest import (
    CancellationError,
    ConfigurationError,
    DataError,
    ValidationError,
)
from dlmm_backtest.core.interfaces.data import IMetricsCalculator
from dlmm_backtest.core.interfaces.strategy import IStrategyEvaluator, StrategyRecommendation
from dlmm_backtest.core.models import (
    ActionCosts,
    ActionResult,
    BacktestConfig,
    BacktestError,
    BacktestProgress,
    BacktestResult,
    BenchmarkPosition,
    BinAllocation,
    HistoricalData,
    PositionSnapshot,
    PricePoint,
    StrategyAction,
    TimeSeriesPoint,
)
from dlmm_backtest.core.types.financial import price_to_bin_id
from dlmm_backtest.core.utils.validation import validate_backtest_config
from dlmm_backtest.infrastructure.data import HistoricalDataService
from dlmm_backtest.strategies import StrategyRegistry, default_registry

from .cancellation import CancellationToken
from .metrics import MetricsCalculator, validate_metrics
from .summary import generate_summary

ProgressCallback = Callable[[BacktestProgress], None]


class _ProgressTracker:
    """Forwards monotonic progress to the caller's callback.

    Callback failures are logged and never abort the run.
    """

    def __init__(self, result: BacktestResult, callback: ProgressCallback | None) -> None:
        self.result = result
        self.callback = callback
        self.started = time.monotonic()

    def report(self, phase: BacktestPhase, progress: float, step: str) -> None:
        progress = min(1.0, max(self.result.progress, progress))
        self.result.progress = progress

        if self.callback is None:
            return

        update = BacktestProgress(
            phase=phase,
            progress=progress,
            current_step=step,
            estimated_time_remaining=self._estimate_remaining(progress),
        )
        try:
            self.callback(update)
        except Exception as e:
            logger.warning(f"Progress callback failed: {e}")

    def _estimate_remaining(self, progress: float) -> float | None:
        if progress <= 0:
            return None
        elapsed = time.monotonic() - self.started
        return max(0.0, elapsed / progress - elapsed)


class BacktestEngine:
    """
    Simulates a DLMM liquidity strategy over historical pool data.

    Collaborators are injectable; defaults are a synthetic-fallback data
    service, the built-in strategy registry and the standard metrics
    calculator. ``seed`` fixes the per-tick value drift; each run draws from
    its own generator seeded with it, so repeated runs of one config match.
    """

    def __init__(
        self,
        data_service: HistoricalDataService | None = None,
        registry: StrategyRegistry | None = None,
        metrics_calculator: IMetricsCalculator | None = None,
        seed: int | None = None,
    ) -> None:
        self.data_service = data_service or HistoricalDataService()
        self.registry = registry or default_registry()
        self.metrics_calculator = metrics_calculator or MetricsCalculator()
        self.seed = seed
        self._active_tokens: list[CancellationToken] = []

    def is_running(self) -> bool:
        return bool(self._active_tokens)

    def cancel(self) -> None:
        """Cancel every run currently executing on this engine."""
        if not self._active_tokens:
            return
        for token in self._active_tokens:
            token.cancel()
        logger.info(f"Cancellation requested for {len(self._active_tokens)} running backtest(s)")

    async def run(
        self,
        config: BacktestConfig,
        on_progress: ProgressCallback | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> BacktestResult:
        """
        Run a backtest.

        Args:
            config: Backtest configuration
            on_progress: Called with progress updates; exceptions it raises are ignored
            cancel_token: Token checked once per tick; a fresh one is used if omitted

        Returns:
            Result with status ``completed``, or ``error`` with ``result.error`` set.
            Cancellation is reported as an error of kind ``"cancelled"``.
        """
        token = cancel_token or CancellationToken()
        result = BacktestResult(config=config)
        tracker = _ProgressTracker(result, on_progress)
        self._active_tokens.append(token)

        logger.info(
            f"Starting backtest '{config.name}' on {config.market.pair} "
            f"({config.market.pool_address}) with strategy {config.strategy.id}"
        )

        try:
            tracker.report(
                BacktestPhase.INITIALIZING, PROGRESS_INITIALIZING, "Validating configuration"
            )
            validate_backtest_config(config).raise_if_invalid()
            evaluator = self.registry.resolve(config.strategy.id)
            token.raise_if_cancelled()

            tracker.report(
                BacktestPhase.FETCHING_DATA, PROGRESS_FETCHING, "Fetching historical data"
            )
            history = await self.data_service.fetch(
                config.market.pool_address,
                config.timeframe.start_date,
                config.timeframe.end_date,
                config.timeframe.interval,
            )
            if history.is_empty:
                raise DataError(f"No historical data for {config.market.pool_address}")
            token.raise_if_cancelled()

            tracker.report(
                BacktestPhase.SIMULATING, PROGRESS_SIMULATION_START, "Running simulation"
            )
            rng = np.random.default_rng(self.seed)
            await self._simulate(config, history, evaluator, result, token, tracker, rng)

            tracker.report(
                BacktestPhase.CALCULATING_METRICS, PROGRESS_METRICS, "Calculating metrics"
            )
            result.metrics = self.metrics_calculator.compute(
                result.time_series_data, result.actions, config.capital.initial_amount
            )
            self._log_metrics_diagnostics(result)

            tracker.report(
                BacktestPhase.CALCULATING_METRICS, PROGRESS_SUMMARY, "Generating summary"
            )
            result.summary = generate_summary(result.time_series_data, result.metrics)

            result.status = BacktestStatus.COMPLETED
            result.completed_at = datetime.now(UTC)
            tracker.report(BacktestPhase.COMPLETED, 1.0, "Backtest completed")

            elapsed = time.monotonic() - tracker.started
            logger.info(
                f"Backtest '{config.name}' completed in {elapsed:.2f}s: "
                f"return {result.metrics.total_return:.2%}, "
                f"Sharpe {result.metrics.sharpe_ratio:.2f}, "
                f"{len(result.actions)} actions, {len(result.time_series_data)} points"
            )

        except CancellationError as e:
            logger.info(f"Backtest '{config.name}' cancelled")
            self._record_error(result, tracker, str(e), "cancelled")
        except ConfigurationError as e:
            logger.warning(f"Invalid backtest configuration: {e}")
            self._record_error(result, tracker, str(e), "configuration")
        except (DataError, ValidationError) as e:
            logger.error(f"Backtest '{config.name}' failed on data: {e}")
            self._record_error(result, tracker, str(e), "data")
        except Exception as e:
            logger.exception(f"Backtest '{config.name}' failed: {e}")
            self._record_error(result, tracker, str(e) or type(e).__name__, "error")
        finally:
            self._active_tokens.remove(token)

        return result

    def _record_error(
        self, result: BacktestResult, tracker: _ProgressTracker, message: str, kind: str
    ) -> None:
        result.status = BacktestStatus.ERROR
        result.completed_at = datetime.now(UTC)
        result.error = BacktestError(message=message, timestamp=result.completed_at, kind=kind)
        tracker.report(BacktestPhase.ERROR, result.progress, message)

    def _log_metrics_diagnostics(self, result: BacktestResult) -> None:
        validation = validate_metrics(result.metrics)
        for warning in validation.warnings:
            logger.warning(f"Metrics warning for '{result.config.name}': {warning}")
        for error in validation.errors:
            logger.error(f"Metrics error for '{result.config.name}': {error}")

    # Simulation

    async def _simulate(
        self,
        config: BacktestConfig,
        history: HistoricalData,
        evaluator: IStrategyEvaluator,
        result: BacktestResult,
        token: CancellationToken,
        tracker: _ProgressTracker,
        rng: np.random.Generator,
    ) -> None:
        """Walk the price series, appending time series points and actions to ``result``."""
        price_data = history.price_data
        first_point = price_data[0]
        capital = config.capital.initial_amount

        position = self._initial_position(capital, first_point)
        benchmark = BenchmarkPosition.from_capital(capital, first_point.close)

        result.actions.append(
            StrategyAction(
                timestamp=first_point.timestamp,
                type=StrategyActionType.INITIALIZE,
                parameters={"reason": "Initial position setup"},
                costs=ActionCosts(gas=config.costs.gas_price),
                result=ActionResult(success=True, new_position_value=position.total_value),
            )
        )

        periods_per_day = Interval.periods_per_day(config.timeframe.interval)
        fee_rate_per_tick = DAILY_FEE_RATE / periods_per_day
        total_points = len(price_data)
        report_every = max(1, total_points // PROGRESS_UPDATES_PER_RUN)

        for i, point in enumerate(price_data):
            token.raise_if_cancelled()

            self._accrue_fees(position, point, fee_rate_per_tick, periods_per_day, rng)
            benchmark.revalue(point.close)

            action = None
            recommendation = await self._evaluate(evaluator, config, position, point, history)
            if recommendation is not None and self._should_execute(recommendation, config):
                action = self._execute_action(config, position, point, recommendation)
                result.actions.append(action)

            result.time_series_data.append(
                TimeSeriesPoint(
                    timestamp=point.timestamp,
                    portfolio_value=position.total_value,
                    benchmark_value=benchmark.total_value,
                    position=position.copy(),
                    market_price=point.close,
                    market_volume=point.volume,
                    action=action,
                )
            )

            if i % report_every == 0:
                tracker.report(
                    BacktestPhase.SIMULATING,
                    PROGRESS_SIMULATION_START + (i / total_points) * PROGRESS_SIMULATION_SPAN,
                    f"Simulated {i + 1}/{total_points} periods",
                )

            # Let cancel() calls from other tasks land before the next tick
            await asyncio.sleep(0)

    def _initial_position(self, capital: float, point: PricePoint) -> PositionSnapshot:
        """Capital spread evenly over a bin window centred on the first price."""
        return PositionSnapshot(
            timestamp=point.timestamp,
            bin_distribution=self._allocate_bins(capital, point.close),
            total_value=capital,
            token_x_balance=capital * 0.5 / point.close,
            token_y_balance=capital * 0.5,
        )

    @staticmethod
    def _allocate_bins(value: float, price: float) -> list[BinAllocation]:
        """Even 50/50 allocation over INITIAL_BIN_COUNT bins around ``price``."""
        first_bin_id = price_to_bin_id(price) - INITIAL_BIN_COUNT // 2
        value_per_bin = value / INITIAL_BIN_COUNT
        return [
            BinAllocation(
                bin_id=first_bin_id + offset,
                liquidity_x=value_per_bin * 0.5 / price,
                liquidity_y=value_per_bin * 0.5,
                value=value_per_bin,
            )
            for offset in range(INITIAL_BIN_COUNT)
        ]

    def _accrue_fees(
        self,
        position: PositionSnapshot,
        point: PricePoint,
        fee_rate_per_tick: float,
        periods_per_day: float,
        rng: np.random.Generator,
    ) -> None:
        """Apply one tick of fee income and random value drift."""
        new_fees = position.total_value * fee_rate_per_tick

        # APR annualizes this tick's fee against the value that earned it
        if position.total_value > 0:
            position.metrics.apr = new_fees * periods_per_day * DAYS_PER_YEAR / position.total_value
        else:
            position.metrics.apr = 0.0

        drift = (float(rng.random()) - 0.5) * VALUE_DRIFT_RANGE
        self._rescale(position, position.total_value * (1 + drift))

        position.timestamp = point.timestamp
        position.fees_earned.token_x += new_fees / 2 / point.close
        position.fees_earned.token_y += new_fees / 2
        position.fees_earned.usd_value += new_fees

    @staticmethod
    def _rescale(position: PositionSnapshot, new_value: float) -> None:
        """Set total value, scaling bins and balances proportionally."""
        new_value = max(0.0, new_value)
        if position.total_value > 0:
            factor = new_value / position.total_value
            for allocation in position.bin_distribution:
                allocation.liquidity_x *= factor
                allocation.liquidity_y *= factor
                allocation.value *= factor
            position.token_x_balance *= factor
            position.token_y_balance *= factor
        position.total_value = new_value

    async def _evaluate(
        self,
        evaluator: IStrategyEvaluator,
        config: BacktestConfig,
        position: PositionSnapshot,
        point: PricePoint,
        history: HistoricalData,
    ) -> StrategyRecommendation | None:
        """Ask the evaluator for a recommendation; failures count as no action."""
        try:
            return await evaluator.evaluate(position, point, config.strategy, history)
        except Exception as e:
            logger.warning(
                f"Strategy {config.strategy.id} evaluation failed at "
                f"{point.timestamp.isoformat()}: {e}"
            )
            return None

    @staticmethod
    def _should_execute(recommendation: StrategyRecommendation, config: BacktestConfig) -> bool:
        """Apply the minimum profit (percent) and minimum confidence gate."""
        if recommendation.estimated_profit < config.strategy.min_profit_threshold / 100:
            return False
        if recommendation.confidence < config.strategy.min_confidence:
            return False
        return True

    def _execute_action(
        self,
        config: BacktestConfig,
        position: PositionSnapshot,
        point: PricePoint,
        recommendation: StrategyRecommendation,
    ) -> StrategyAction:
        """Charge the action's costs to the position and log it."""
        action_type = StrategyActionType.from_recommendation(recommendation.action)
        costs = ActionCosts(
            gas=config.costs.gas_price,
            slippage=config.costs.slippage * max(0.0, recommendation.estimated_profit),
            fees=config.costs.transaction_fee,
        )
        expected_value = position.total_value * (1 + recommendation.estimated_profit)

        self._rescale(position, position.total_value - costs.total)
        if action_type == StrategyActionType.REBALANCE:
            position.bin_distribution = self._allocate_bins(position.total_value, point.close)
        position.metrics.utilization = self._utilization(position, point.close)

        logger.debug(
            f"Executed {action_type.value} at {point.timestamp.isoformat()}: "
            f"{recommendation.reasoning}"
        )

        return StrategyAction(
            timestamp=point.timestamp,
            type=action_type,
            parameters={
                "reason": recommendation.reasoning,
                "estimated_profit": f"{recommendation.estimated_profit:.6f}",
                "confidence": f"{recommendation.confidence:.4f}",
            },
            costs=costs,
            result=ActionResult(success=True, new_position_value=expected_value),
        )

    @staticmethod
    def _utilization(position: PositionSnapshot, price: float) -> float:
        """Share of bin value within half a window of the active bin."""
        total = sum(allocation.value for allocation in position.bin_distribution)
        if total <= 0:
            return 0.0
        active_bin_id = price_to_bin_id(price)
        in_range = sum(
            allocation.value
            for allocation in position.bin_distribution
            if abs(allocation.bin_id - active_bin_id) <= INITIAL_BIN_COUNT // 2
        )
        return in_range / total
