"""
Validation utilities for core domain models.

Provides consistent validation across the application.
"""

from dataclasses import dataclass, field

from dlmm_backtest.core.constants import MAX_BACKTEST_DURATION_DAYS, MAX_SLIPPAGE
from dlmm_backtest.core.exceptions.backtest import ConfigurationError, ValidationError
from dlmm_backtest.core.models import BacktestConfig, StrategyConfig


@dataclass
class ConfigValidation:
    """Outcome of validating a backtest configuration."""

    errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def raise_if_invalid(self) -> None:
        """Raise ConfigurationError carrying every collected error."""
        if self.errors:
            raise ConfigurationError(self.errors)


def validate_positive(value: float, param_name: str) -> float:
    """Validate that a numeric value is positive.

    Args:
        value: Value to validate
        param_name: Parameter name for error messages

    Returns:
        The validated value

    Raises:
        ValidationError: If value is not positive
    """
    if value <= 0:
        raise ValidationError(f"{param_name} must be positive, got {value}")
    return value


def validate_fraction(value: float, param_name: str) -> float:
    """Validate that a value lies in [0, 1].

    Raises:
        ValidationError: If value is outside [0, 1]
    """
    if value < 0 or value > 1:
        raise ValidationError(f"{param_name} must be between 0 and 1, got {value}")
    return value


def validate_backtest_config(config: BacktestConfig) -> ConfigValidation:
    """Check a configuration without running it.

    Pure function: collects every problem instead of stopping at the first,
    so callers such as an input form can show all errors at once.
    """
    result = ConfigValidation()

    if not config.is_valid_date_range():
        result.errors.append("Start date must be before end date")

    if not config.is_valid_capital():
        result.errors.append("Initial capital must be positive")

    if not config.strategy.id or not config.strategy.id.strip():
        result.errors.append("Strategy ID is required")

    if config.costs.gas_price < 0:
        result.errors.append("Gas price cannot be negative")

    if config.costs.transaction_fee < 0:
        result.errors.append("Transaction fee cannot be negative")

    if config.costs.slippage < 0 or config.costs.slippage > MAX_SLIPPAGE:
        result.errors.append("Slippage must be between 0 and 1")

    if config.duration_days() > MAX_BACKTEST_DURATION_DAYS:
        result.errors.append("Backtest period cannot exceed 1 year")

    result.errors.extend(_gate_errors(config.strategy))

    return result


def _gate_errors(strategy: StrategyConfig) -> list[str]:
    """Check the execution gate parameters the engine reads on every tick."""
    errors = []

    try:
        threshold = strategy.min_profit_threshold
    except (TypeError, ValueError):
        errors.append("Minimum profit threshold must be a number")
    else:
        # NaN fails the comparison too
        if not threshold >= 0:
            errors.append("Minimum profit threshold cannot be negative")

    try:
        confidence = strategy.min_confidence
    except (TypeError, ValueError):
        errors.append("Minimum confidence must be a number")
    else:
        if not 0 <= confidence <= 1:
            errors.append("Minimum confidence must be between 0 and 1")

    return errors
