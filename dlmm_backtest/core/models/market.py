"""
Historical market data models.

Price and liquidity samples for a single pool over a time range, as produced
by the historical data service (real source or synthetic generator).
"""

from dataclasses import dataclass, field
from datetime import datetime

import pandas as pd

from dlmm_backtest.core.enums import DataSource, Interval
from dlmm_backtest.core.exceptions.backtest import ValidationError

# Rough per-sample footprint used for cache accounting
PRICE_POINT_SIZE_BYTES = 200
LIQUIDITY_POINT_SIZE_BYTES = 150


@dataclass
class PricePoint:
    """One OHLCV sample of the pool price."""

    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float
    volume_x: float = 0.0
    volume_y: float = 0.0

    def __post_init__(self) -> None:
        """Validate OHLC relationships after initialization."""
        if min(self.open, self.high, self.low, self.close) <= 0:
            raise ValidationError(f"Prices must be positive at {self.timestamp.isoformat()}")
        if self.high < max(self.open, self.close):
            raise ValidationError(f"High below open/close at {self.timestamp.isoformat()}")
        if self.low > min(self.open, self.close):
            raise ValidationError(f"Low above open/close at {self.timestamp.isoformat()}")
        if self.volume < 0:
            raise ValidationError(f"Volume must be non-negative, got {self.volume}")

    def to_dict(self) -> dict:
        """Convert price point to dictionary."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "close": self.close,
            "volume": self.volume,
            "volume_x": self.volume_x,
            "volume_y": self.volume_y,
        }


@dataclass
class LiquidityPoint:
    """Liquidity held in one bin at one sample time."""

    timestamp: datetime
    bin_id: int
    liquidity_x: float
    liquidity_y: float
    fee_rate: float
    is_active: bool

    @property
    def total_liquidity(self) -> float:
        return self.liquidity_x + self.liquidity_y


@dataclass
class TimeRange:
    """Requested window of a historical dataset."""

    start: datetime
    end: datetime
    interval: Interval

    def expected_points(self) -> int:
        """Number of whole intervals between start and end."""
        span_ms = (self.end - self.start).total_seconds() * 1000
        return max(0, int(span_ms // Interval.to_milliseconds(self.interval)))


@dataclass
class DataMetadata:
    """Provenance and completeness of a historical dataset."""

    data_points: int
    coverage: float
    source: DataSource


@dataclass
class HistoricalData:
    """Ordered price and liquidity samples for one pool."""

    pool_address: str
    time_range: TimeRange
    price_data: list[PricePoint]
    liquidity_data: list[LiquidityPoint] = field(default_factory=list)
    metadata: DataMetadata | None = None

    def __post_init__(self) -> None:
        if self.metadata is None:
            self.metadata = DataMetadata(
                data_points=len(self.price_data), coverage=1.0, source=DataSource.REAL
            )

    @property
    def is_empty(self) -> bool:
        return not self.price_data

    def estimate_size(self) -> int:
        """Estimate the in-memory footprint in bytes for cache accounting."""
        return (
            len(self.price_data) * PRICE_POINT_SIZE_BYTES
            + len(self.liquidity_data) * LIQUIDITY_POINT_SIZE_BYTES
        )

    def liquidity_at(self, timestamp: datetime) -> list[LiquidityPoint]:
        """Liquidity samples recorded at ``timestamp``."""
        return [point for point in self.liquidity_data if point.timestamp == timestamp]

    def to_frame(self) -> pd.DataFrame:
        """Price data as a DataFrame indexed by timestamp."""
        columns = ["timestamp", "open", "high", "low", "close", "volume", "volume_x", "volume_y"]
        if not self.price_data:
            return pd.DataFrame(columns=columns).set_index("timestamp")

        frame = pd.DataFrame(
            [
                {
                    "timestamp": p.timestamp,
                    "open": p.open,
                    "high": p.high,
                    "low": p.low,
                    "close": p.close,
                    "volume": p.volume,
                    "volume_x": p.volume_x,
                    "volume_y": p.volume_y,
                }
                for p in self.price_data
            ],
            columns=columns,
        )
        return frame.set_index("timestamp")
