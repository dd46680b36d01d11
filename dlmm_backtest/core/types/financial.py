"""
Financial helpers for float-based backtesting calculations.

Float arithmetic is used throughout the simulation; these helpers keep
rounding and division guards consistent between the engine and the
metrics calculator.
"""

import math
from datetime import datetime

from dlmm_backtest.core.constants import BIN_STEP, MS_PER_DAY

# Financial calculation precision (number of decimal places)
FINANCIAL_DECIMALS = 8

ZERO = 0.0
ONE = 1.0


def to_float(value: str | int | float) -> float:
    """Convert various numeric types to float.

    Examples:
        >>> to_float(50000)
        50000.0
        >>> to_float('1.5')
        1.5
    """
    if isinstance(value, float):
        return value
    return float(value)


def round_amount(amount: float) -> float:
    """Round a token or USD amount to financial precision."""
    return round(amount, FINANCIAL_DECIMALS)


def period_return(previous_value: float, current_value: float) -> float | None:
    """Fractional return between two values.

    Returns:
        The return, or None when the previous value is not positive
    """
    if previous_value <= ZERO:
        return None
    return (current_value - previous_value) / previous_value


def safe_divide(numerator: float, denominator: float, default: float = ZERO) -> float:
    """Divide, returning ``default`` for a zero denominator."""
    if denominator == ZERO:
        return default
    return numerator / denominator


def days_between(start: datetime, end: datetime, minimum: float = ONE) -> float:
    """Elapsed days between two timestamps, never less than ``minimum``."""
    elapsed_ms = (end - start).total_seconds() * 1000
    return max(minimum, elapsed_ms / MS_PER_DAY)


def is_finite(value: float) -> bool:
    """Check that a value is neither NaN nor infinite."""
    return not (math.isnan(value) or math.isinf(value))


def price_to_bin_id(price: float, bin_step: float = BIN_STEP) -> int:
    """Bin holding ``price``; bin ``i`` starts at ``(1 + bin_step) ** i``.

    Bins are a fixed relative width, so pools priced well below one quote
    unit still spread over many bins.
    """
    # Epsilon keeps prices sitting exactly on a bin edge in that bin
    return math.floor(math.log(price) / math.log1p(bin_step) + 1e-9)


def bin_id_to_price(bin_id: int, bin_step: float = BIN_STEP) -> float:
    """Lower edge price of ``bin_id``."""
    return (1 + bin_step) ** bin_id
