"""
Validation of recorded OHLCV frames.

Frames from an external market-data source are checked here before they are
turned into PricePoint models and cached, so a malformed file fails with one
descriptive error instead of a model error on an arbitrary row.
"""

import pandas as pd
from loguru import logger

from dlmm_backtest.core.exceptions.backtest import ValidationError

REQUIRED_COLUMNS = ("timestamp", "open", "high", "low", "close", "volume")
PRICE_COLUMNS = ("open", "high", "low", "close")
EXTREME_RANGE_THRESHOLD = 0.5  # High/low range above 50% of low


class OHLCVValidator:
    """Checks a price frame's shape, values and candle consistency.

    Hard failures raise ValidationError; anomalies that do not make the data
    unusable (wide candles, unordered rows) are logged as warnings.
    """

    def validate_data(self, data: pd.DataFrame) -> bool:
        """
        Validate an OHLCV frame.

        Args:
            data: Frame with at least the REQUIRED_COLUMNS

        Returns:
            True if the frame can be converted to price points

        Raises:
            ValidationError: On the first integrity problem found
        """
        if data.empty:
            return True

        missing = sorted(set(REQUIRED_COLUMNS) - set(data.columns))
        if missing:
            raise ValidationError(f"Missing required columns: {missing}")

        if data["timestamp"].duplicated().any():
            raise ValidationError("Duplicate timestamps found in data")

        for column in REQUIRED_COLUMNS:
            series = data[column]
            if not pd.api.types.is_numeric_dtype(series):
                raise ValidationError(f"Column {column} must be numeric")
            if series.isna().any():
                raise ValidationError(f"Column {column} contains NaN values")

        non_positive = [column for column in PRICE_COLUMNS if (data[column] <= 0).any()]
        if non_positive:
            raise ValidationError(f"Columns {non_positive} contain non-positive prices")

        if (data["volume"] < 0).any():
            raise ValidationError("Volume column contains negative values")

        self._check_candles(data)
        self._warn_on_anomalies(data)
        return True

    @staticmethod
    def _check_candles(data: pd.DataFrame) -> None:
        body_high = data[["open", "close"]].max(axis=1)
        body_low = data[["open", "close"]].min(axis=1)
        broken = (data["high"] < body_high) | (data["low"] > body_low)
        if broken.any():
            first = int(data.loc[broken, "timestamp"].iloc[0])
            raise ValidationError(
                f"Invalid OHLC relationships in {int(broken.sum())} rows (first at {first})"
            )

    @staticmethod
    def _warn_on_anomalies(data: pd.DataFrame) -> None:
        wide = (data["high"] - data["low"]) / data["low"] > EXTREME_RANGE_THRESHOLD
        if wide.any():
            logger.warning(f"{int(wide.sum())} candles span more than 50% of their low")

        if not data["timestamp"].is_monotonic_increasing:
            logger.warning("Timestamps are not in ascending order")
