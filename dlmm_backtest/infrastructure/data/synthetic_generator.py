"""
Synthetic historical data generator.

Produces realistic-looking pool price, volume and bin liquidity series using a
regime-switching random walk. All randomness comes from an injectable numpy
Generator, so identical seeds reproduce identical series.
"""

import math
from datetime import datetime, timedelta

import numpy as np
from loguru import logger

from dlmm_backtest.core.constants import (
    ACTIVE_BIN_WINDOW,
    BASE_BIN_FEE_RATE,
    LIQUIDITY_BIN_RANGE,
    LIQUIDITY_DECAY_RATE,
    MIN_REGIME_STRENGTH,
    REGIME_SWITCH_PROBABILITY,
)
from dlmm_backtest.core.enums import DataSource, Interval, MarketRegime
from dlmm_backtest.core.exceptions.backtest import ValidationError
from dlmm_backtest.core.models import (
    DataMetadata,
    HistoricalData,
    LiquidityPoint,
    PricePoint,
    TimeRange,
)
from dlmm_backtest.core.types.financial import price_to_bin_id

# Per-tick volatility range (low, high) by interval
VOLATILITY_BY_INTERVAL: dict[Interval, tuple[float, float]] = {
    Interval.M1: (0.001, 0.004),  # 0.1-0.4% per minute
    Interval.M5: (0.003, 0.010),  # 0.3-1% per 5 minutes
    Interval.M15: (0.005, 0.020),  # 0.5-2% per 15 minutes
    Interval.H1: (0.010, 0.040),  # 1-4% per hour
    Interval.H4: (0.020, 0.070),  # 2-7% per 4 hours
    Interval.D1: (0.020, 0.100),  # 2-10% per day
}

# Base traded volume range (USD) by interval
BASE_VOLUME_BY_INTERVAL: dict[Interval, tuple[float, float]] = {
    Interval.M1: (1_000, 5_000),
    Interval.M5: (5_000, 20_000),
    Interval.M15: (15_000, 50_000),
    Interval.H1: (50_000, 200_000),
    Interval.H4: (200_000, 1_000_000),
    Interval.D1: (1_000_000, 5_000_000),
}

BASE_PRICE_RANGE = (100.0, 1000.0)
TREND_BIAS_SCALE = 0.0005
MEAN_REVERSION_RATE = 0.1
BASE_BIN_LIQUIDITY_RANGE = (50_000.0, 250_000.0)
VOLUME_X_SHARE = 0.6
FEE_RATE_DISTANCE_SLOPE = 0.1


class SyntheticDataGenerator:
    """Regime-switching generator for pool price and liquidity history.

    Args:
        seed: Seed for a fresh numpy Generator
        rng: Pre-built Generator (takes precedence over ``seed``)
        bin_range: Bins generated on each side of the active bin per tick
    """

    def __init__(
        self,
        seed: int | None = None,
        rng: np.random.Generator | None = None,
        bin_range: int = LIQUIDITY_BIN_RANGE,
    ) -> None:
        if bin_range < 0:
            raise ValueError("bin_range must be non-negative")
        self._rng = rng if rng is not None else np.random.default_rng(seed)
        self.bin_range = bin_range

    def _uniform(self, low: float = 0.0, high: float = 1.0) -> float:
        return float(self._rng.uniform(low, high))

    def generate(
        self,
        pool_address: str,
        start_date: datetime,
        end_date: datetime,
        interval: Interval | str = Interval.H1,
    ) -> HistoricalData:
        """Generate a dataset for ``[start_date, end_date)``.

        One sample is produced per whole interval, and always at least one
        sample for a positive-length range.

        Raises:
            ValidationError: If end_date is not after start_date
        """
        interval = Interval.from_string(interval)
        if end_date <= start_date:
            raise ValidationError("Start date must be before end date")

        time_range = TimeRange(start=start_date, end=end_date, interval=interval)
        total_points = max(1, time_range.expected_points())

        price_data = self._generate_prices(start_date, interval, total_points)
        liquidity_data = self._generate_liquidity(price_data)

        logger.debug(
            f"Generated {total_points} synthetic {interval.value} points for {pool_address} "
            f"({len(liquidity_data)} liquidity samples)"
        )

        return HistoricalData(
            pool_address=pool_address,
            time_range=time_range,
            price_data=price_data,
            liquidity_data=liquidity_data,
            metadata=DataMetadata(
                data_points=total_points, coverage=1.0, source=DataSource.MOCK
            ),
        )

    def _generate_prices(
        self, start_date: datetime, interval: Interval, total_points: int
    ) -> list[PricePoint]:
        """Random walk with trending, ranging and volatile regimes."""
        step = timedelta(seconds=Interval.to_seconds(interval))
        base_price = self._uniform(*BASE_PRICE_RANGE)
        volatility = self._uniform(*VOLATILITY_BY_INTERVAL[interval])
        trend_bias = (self._uniform() - 0.5) * TREND_BIAS_SCALE
        trend_direction = 1.0 if trend_bias > 0 else -1.0

        regime = MarketRegime.RANGING
        regime_strength = self._uniform(0.5, 1.0)

        price_data: list[PricePoint] = []
        current_price = base_price

        for i in range(total_points):
            if self._uniform() < REGIME_SWITCH_PROBABILITY:
                regime = list(MarketRegime)[int(self._rng.integers(len(MarketRegime)))]
                regime_strength = self._uniform(MIN_REGIME_STRENGTH, 1.0)

            price_change = self._price_change(
                regime, regime_strength, volatility, trend_direction, base_price, current_price
            )
            current_price *= 1 + price_change

            open_price = price_data[-1].close if price_data else current_price
            close_price = current_price
            high = current_price * (1 + self._uniform() * volatility * 0.3)
            low = current_price * (1 - self._uniform() * volatility * 0.3)

            volume = self._volume(interval, abs(price_change), regime, regime_strength)

            price_data.append(
                PricePoint(
                    timestamp=start_date + i * step,
                    open=open_price,
                    high=max(open_price, close_price, high),
                    low=min(open_price, close_price, low),
                    close=close_price,
                    volume=volume,
                    volume_x=volume * VOLUME_X_SHARE,
                    volume_y=volume * (1 - VOLUME_X_SHARE),
                )
            )

        return price_data

    def _price_change(
        self,
        regime: MarketRegime,
        regime_strength: float,
        volatility: float,
        trend_direction: float,
        base_price: float,
        current_price: float,
    ) -> float:
        """Fractional price move for one tick under ``regime``."""
        if regime == MarketRegime.TRENDING:
            # Skewed draw keeps the walk moving in the trend direction
            return (self._uniform() - 0.3) * volatility * regime_strength * trend_direction

        if regime == MarketRegime.RANGING:
            deviation = (base_price - current_price) / current_price
            mean_reversion = deviation * MEAN_REVERSION_RATE * regime_strength
            noise = (self._uniform() - 0.5) * volatility * 0.5
            return mean_reversion + noise

        return (self._uniform() - 0.5) * volatility * (1 + regime_strength)

    def _volume(
        self,
        interval: Interval,
        move_magnitude: float,
        regime: MarketRegime,
        regime_strength: float,
    ) -> float:
        """Traded volume scaled by move size and regime."""
        base_factor, strength_scale = regime.volume_factor_range
        multiplier = (1 + move_magnitude * 20) * (base_factor + regime_strength * strength_scale)
        multiplier *= self._uniform(0.7, 1.3)

        base_volume = self._uniform(*BASE_VOLUME_BY_INTERVAL[interval])
        return base_volume * multiplier * self._uniform(0.8, 1.2)

    def _generate_liquidity(self, price_data: list[PricePoint]) -> list[LiquidityPoint]:
        """Bin liquidity around the active bin of every sample."""
        liquidity_data: list[LiquidityPoint] = []
        offsets = range(-self.bin_range, self.bin_range + 1)

        for point in price_data:
            active_bin_id = price_to_bin_id(point.close)
            for offset in offsets:
                distance = abs(offset)
                liquidity = self._uniform(*BASE_BIN_LIQUIDITY_RANGE) * math.exp(
                    -distance * LIQUIDITY_DECAY_RATE
                )
                liquidity_data.append(
                    LiquidityPoint(
                        timestamp=point.timestamp,
                        bin_id=active_bin_id + offset,
                        liquidity_x=liquidity * 0.5,
                        liquidity_y=liquidity * 0.5,
                        fee_rate=BASE_BIN_FEE_RATE * (1 + distance * FEE_RATE_DISTANCE_SLOPE),
                        is_active=distance <= ACTIVE_BIN_WINDOW,
                    )
                )

        return liquidity_data
