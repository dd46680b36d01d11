"""
Sampling interval enumerations.

This module defines the allowed sampling intervals for historical pool data.
"""

from enum import StrEnum


class Interval(StrEnum):
    """
    Allowed sampling intervals.

    Each historical sample (and each simulation tick) covers exactly one interval.
    """

    # Minute intervals
    M1 = "1m"  # 1 minute
    M5 = "5m"  # 5 minutes
    M15 = "15m"  # 15 minutes

    # Hour intervals
    H1 = "1h"  # 1 hour
    H4 = "4h"  # 4 hours

    # Day intervals
    D1 = "1d"  # 1 day

    @classmethod
    def to_seconds(cls, interval: "Interval") -> int:
        """
        Convert interval to seconds.

        Args:
            interval: Interval enum value

        Returns:
            Number of seconds in the interval
        """
        conversions = {
            cls.M1: 60,
            cls.M5: 300,
            cls.M15: 900,
            cls.H1: 3600,
            cls.H4: 14400,
            cls.D1: 86400,
        }
        return conversions[interval]

    @classmethod
    def to_milliseconds(cls, interval: "Interval") -> int:
        """Convert interval to milliseconds."""
        return cls.to_seconds(interval) * 1000

    @classmethod
    def periods_per_day(cls, interval: "Interval") -> float:
        """Number of samples of this interval in one day."""
        return 86400 / cls.to_seconds(interval)

    @classmethod
    def from_string(cls, value: "str | Interval") -> "Interval":
        """
        Convert string to Interval enum.

        Args:
            value: String representation of interval

        Returns:
            Corresponding Interval enum value

        Raises:
            ValueError: If interval is not supported
        """
        if isinstance(value, Interval):
            return value

        value_lower = value.lower()
        for interval in cls:
            if interval.value == value_lower:
                return interval

        raise ValueError(
            f"Unsupported interval: {value}. "
            f"Supported intervals: {', '.join([i.value for i in cls])}"
        )

    @property
    def is_intraday(self) -> bool:
        """Check if interval is shorter than one day."""
        return self != self.D1
