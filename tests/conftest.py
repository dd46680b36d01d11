"""
Shared fixtures for backtesting tests.
"""

from collections.abc import Callable, Sequence
from datetime import UTC, datetime, timedelta

import pytest

from dlmm_backtest.core.enums import Interval
from dlmm_backtest.core.models import (
    BacktestConfig,
    BinAllocation,
    CapitalConfig,
    CostConfig,
    FeesEarned,
    MarketConfig,
    PositionMetrics,
    PositionSnapshot,
    PricePoint,
    StrategyConfig,
    TimeframeConfig,
    TimeSeriesPoint,
)
from dlmm_backtest.core.types.financial import price_to_bin_id

START_DATE = datetime(2025, 1, 1, tzinfo=UTC)


@pytest.fixture
def start_date() -> datetime:
    return START_DATE


@pytest.fixture
def make_config() -> Callable[..., BacktestConfig]:
    """Factory for backtest configurations over one day of hourly data."""

    def _make(
        strategy_id: str = "conservative-hold",
        start: datetime = START_DATE,
        end: datetime | None = None,
        interval: Interval = Interval.H1,
        capital: float = 1000.0,
        parameters: dict | None = None,
        costs: CostConfig | None = None,
        pool_address: str = "test-pool",
    ) -> BacktestConfig:
        return BacktestConfig(
            name="test backtest",
            market=MarketConfig(
                pool_address=pool_address, token_x_symbol="SOL", token_y_symbol="USDC"
            ),
            timeframe=TimeframeConfig(
                start_date=start, end_date=end or start + timedelta(hours=24), interval=interval
            ),
            capital=CapitalConfig(initial_amount=capital),
            strategy=StrategyConfig(id=strategy_id, parameters=parameters or {}),
            costs=costs or CostConfig(),
        )

    return _make


@pytest.fixture
def make_price_point() -> Callable[..., PricePoint]:
    def _make(timestamp: datetime = START_DATE, close: float = 100.0, volume: float = 1000.0):
        return PricePoint(
            timestamp=timestamp,
            open=close,
            high=close * 1.01,
            low=close * 0.99,
            close=close,
            volume=volume,
        )

    return _make


@pytest.fixture
def make_position() -> Callable[..., PositionSnapshot]:
    def _make(
        total_value: float = 1000.0,
        center_price: float = 100.0,
        timestamp: datetime = START_DATE,
        fees_usd: float = 0.0,
        apr: float = 0.0,
        utilization: float = 1.0,
    ) -> PositionSnapshot:
        center_bin_id = price_to_bin_id(center_price)
        bins = [
            BinAllocation(
                bin_id=center_bin_id - 5 + offset,
                liquidity_x=total_value / 20 / center_price,
                liquidity_y=total_value / 20,
                value=total_value / 10,
            )
            for offset in range(10)
        ]
        return PositionSnapshot(
            timestamp=timestamp,
            bin_distribution=bins,
            total_value=total_value,
            token_x_balance=total_value / 2 / center_price,
            token_y_balance=total_value / 2,
            fees_earned=FeesEarned(usd_value=fees_usd),
            metrics=PositionMetrics(apr=apr, utilization=utilization),
        )

    return _make


@pytest.fixture
def make_time_series(make_position) -> Callable[..., list[TimeSeriesPoint]]:
    """Factory for time series with daily samples of the given portfolio values."""

    def _make(
        values: Sequence[float],
        benchmark_values: Sequence[float] | None = None,
        start: datetime = START_DATE,
        step: timedelta = timedelta(days=1),
        fees: Sequence[float] | None = None,
        aprs: Sequence[float] | None = None,
    ) -> list[TimeSeriesPoint]:
        benchmark_values = benchmark_values or values
        points = []
        for i, value in enumerate(values):
            timestamp = start + i * step
            position = make_position(
                total_value=max(value, 0.0),
                timestamp=timestamp,
                fees_usd=fees[i] if fees else 0.0,
                apr=aprs[i] if aprs else 0.0,
            )
            points.append(
                TimeSeriesPoint(
                    timestamp=timestamp,
                    portfolio_value=value,
                    benchmark_value=benchmark_values[i],
                    position=position,
                    market_price=100.0,
                    market_volume=1000.0,
                )
            )
        return points

    return _make
