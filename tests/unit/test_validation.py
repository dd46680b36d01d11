"""
Unit tests for validation utilities.
Testing configuration validation and numeric validators.
"""

from datetime import UTC, datetime, timedelta

import pytest

from dlmm_backtest.core.exceptions.backtest import ConfigurationError, ValidationError
from dlmm_backtest.core.models import CostConfig
from dlmm_backtest.core.utils.validation import (
    validate_backtest_config,
    validate_fraction,
    validate_positive,
)


class TestValidateBacktestConfig:
    """Test suite for validate_backtest_config."""

    def test_should_accept_valid_config(self, make_config) -> None:
        """Test that a sane configuration has no errors."""
        validation = validate_backtest_config(make_config())

        assert validation.is_valid
        assert validation.errors == []
        validation.raise_if_invalid()

    def test_should_reject_inverted_date_range(self, make_config) -> None:
        """Test start >= end."""
        start = datetime(2025, 1, 2, tzinfo=UTC)
        validation = validate_backtest_config(make_config(start=start, end=start))

        assert "Start date must be before end date" in validation.errors

    def test_should_reject_non_positive_capital(self, make_config) -> None:
        """Test capital check."""
        validation = validate_backtest_config(make_config(capital=0.0))

        assert validation.errors == ["Initial capital must be positive"]

    def test_should_require_strategy_id(self, make_config) -> None:
        """Test blank strategy id."""
        validation = validate_backtest_config(make_config(strategy_id="  "))

        assert validation.errors == ["Strategy ID is required"]

    def test_should_reject_invalid_costs(self, make_config) -> None:
        """Test cost range checks."""
        config = make_config(costs=CostConfig(gas_price=-1.0, slippage=1.5, transaction_fee=-0.1))

        errors = validate_backtest_config(config).errors

        assert "Gas price cannot be negative" in errors
        assert "Transaction fee cannot be negative" in errors
        assert "Slippage must be between 0 and 1" in errors

    def test_should_reject_periods_longer_than_a_year(self, make_config) -> None:
        """Test maximum duration."""
        start = datetime(2024, 1, 1, tzinfo=UTC)
        config = make_config(start=start, end=start + timedelta(days=366))

        assert validate_backtest_config(config).errors == ["Backtest period cannot exceed 1 year"]

    @pytest.mark.parametrize(
        ("parameters", "expected"),
        [
            ({"min_profit_threshold": "abc"}, "Minimum profit threshold must be a number"),
            ({"min_profit_threshold": None}, "Minimum profit threshold must be a number"),
            ({"min_profit_threshold": -1.0}, "Minimum profit threshold cannot be negative"),
            ({"min_profit_threshold": "nan"}, "Minimum profit threshold cannot be negative"),
            ({"min_confidence": "high"}, "Minimum confidence must be a number"),
            ({"min_confidence": 1.5}, "Minimum confidence must be between 0 and 1"),
            ({"min_confidence": -0.1}, "Minimum confidence must be between 0 and 1"),
        ],
    )
    def test_should_reject_invalid_gate_parameters(
        self, make_config, parameters: dict, expected: str
    ) -> None:
        """Test that execution gate parameters are checked up front."""
        validation = validate_backtest_config(make_config(parameters=parameters))

        assert validation.errors == [expected]

    def test_should_accept_numeric_strings_for_gate_parameters(self, make_config) -> None:
        """Test that gate parameters convertible to float pass."""
        config = make_config(parameters={"min_profit_threshold": "0.5", "min_confidence": "1"})

        assert validate_backtest_config(config).is_valid

    def test_should_collect_every_error(self, make_config) -> None:
        """Test that validation does not stop at the first problem."""
        start = datetime(2025, 1, 2, tzinfo=UTC)
        config = make_config(start=start, end=start, capital=-5.0, strategy_id="")

        validation = validate_backtest_config(config)

        assert len(validation.errors) == 3
        with pytest.raises(ConfigurationError) as exc_info:
            validation.raise_if_invalid()
        assert exc_info.value.errors == validation.errors


class TestNumericValidators:
    """Test suite for numeric validators."""

    def test_should_pass_positive_values(self) -> None:
        """Test validate_positive."""
        assert validate_positive(0.02, "threshold") == 0.02

    @pytest.mark.parametrize("value", [0.0, -1.0])
    def test_should_reject_non_positive_values(self, value: float) -> None:
        """Test validate_positive error."""
        with pytest.raises(ValidationError, match="threshold must be positive"):
            validate_positive(value, "threshold")

    def test_should_validate_fraction_bounds(self) -> None:
        """Test validate_fraction."""
        assert validate_fraction(0.0, "confidence") == 0.0
        assert validate_fraction(1.0, "confidence") == 1.0
        with pytest.raises(ValidationError, match="between 0 and 1"):
            validate_fraction(1.2, "confidence")
