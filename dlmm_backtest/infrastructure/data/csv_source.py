"""
CSV-backed market data source.

Reads recorded pool OHLCV history from ``<data_dir>/<pool_address>/<interval>.csv``
files with millisecond timestamps.
"""

import asyncio
from datetime import UTC, datetime
from pathlib import Path

import pandas as pd
from loguru import logger

from dlmm_backtest.core.enums import DataSource, Interval
from dlmm_backtest.core.exceptions.backtest import DataError
from dlmm_backtest.core.interfaces.data import IMarketDataSource
from dlmm_backtest.core.models import DataMetadata, HistoricalData, PricePoint, TimeRange

from .ohlcv_validator import OHLCVValidator


class CSVMarketDataSource(IMarketDataSource):
    """
    Market data source backed by per-pool CSV files.

    A missing file or an empty window yields None so the caller can fall
    back to synthetic data; malformed files raise DataError.
    """

    def __init__(self, data_directory: str | Path = "data") -> None:
        self.data_dir = Path(data_directory)
        self._validator = OHLCVValidator()

    def file_path(self, pool_address: str, interval: Interval) -> Path:
        """Location of the CSV file for a pool and interval."""
        return self.data_dir / pool_address / f"{interval.value}.csv"

    async def fetch_real(
        self,
        pool_address: str,
        start_date: datetime,
        end_date: datetime,
        interval: Interval | str,
    ) -> HistoricalData | None:
        """Load recorded data for ``[start_date, end_date)``."""
        interval = Interval.from_string(interval)
        path = self.file_path(pool_address, interval)
        if not path.exists():
            logger.debug(f"No recorded data at {path}")
            return None

        try:
            df = await asyncio.to_thread(self._read_csv, path)
        except pd.errors.EmptyDataError:
            return None
        except OSError as e:
            logger.error(f"File system error loading {path.name}: {str(e)}")
            raise DataError(f"File system error loading {path.name}") from e

        df = self._filter_by_date_range(df, start_date, end_date)
        if df.empty:
            return None

        self._validator.validate_data(df)

        time_range = TimeRange(start=start_date, end=end_date, interval=interval)
        expected = time_range.expected_points()
        price_data = self._to_price_points(df)

        return HistoricalData(
            pool_address=pool_address,
            time_range=time_range,
            price_data=price_data,
            liquidity_data=[],
            metadata=DataMetadata(
                data_points=len(price_data),
                coverage=min(1.0, len(price_data) / expected) if expected else 1.0,
                source=DataSource.REAL,
            ),
        )

    @staticmethod
    def _read_csv(path: Path) -> pd.DataFrame:
        return pd.read_csv(
            path,
            dtype={
                "timestamp": "int64",
                "open": "float64",
                "high": "float64",
                "low": "float64",
                "close": "float64",
                "volume": "float64",
            },
        )

    @staticmethod
    def _filter_by_date_range(
        df: pd.DataFrame, start_date: datetime, end_date: datetime
    ) -> pd.DataFrame:
        """Filter to ``[start_date, end_date)`` and sort by timestamp."""
        if df.empty:
            return df

        start_ts = int(start_date.timestamp() * 1000)
        end_ts = int(end_date.timestamp() * 1000)

        mask = (df["timestamp"] >= start_ts) & (df["timestamp"] < end_ts)
        return df[mask].sort_values("timestamp").reset_index(drop=True)

    @staticmethod
    def _to_price_points(df: pd.DataFrame) -> list[PricePoint]:
        has_split_volume = {"volume_x", "volume_y"} <= set(df.columns)
        points = []
        for row in df.itertuples(index=False):
            volume = float(row.volume)
            points.append(
                PricePoint(
                    timestamp=datetime.fromtimestamp(row.timestamp / 1000, tz=UTC),
                    open=float(row.open),
                    high=float(row.high),
                    low=float(row.low),
                    close=float(row.close),
                    volume=volume,
                    volume_x=float(row.volume_x) if has_split_volume else volume * 0.6,
                    volume_y=float(row.volume_y) if has_split_volume else volume * 0.4,
                )
            )
        return points
