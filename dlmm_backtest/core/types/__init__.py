"""
Core type definitions and utilities.
"""

# Re-export financial utilities for easy access
from .financial import (
    FINANCIAL_DECIMALS,
    ONE,
    ZERO,
    bin_id_to_price,
    days_between,
    is_finite,
    period_return,
    price_to_bin_id,
    round_amount,
    safe_divide,
    to_float,
)

__all__ = [
    # Utility functions
    "to_float",
    "round_amount",
    "period_return",
    "bin_id_to_price",
    "price_to_bin_id",
    "safe_divide",
    "days_between",
    "is_finite",
    # Constants
    "FINANCIAL_DECIMALS",
    "ZERO",
    "ONE",
]
