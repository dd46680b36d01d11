"""
Unit tests for the custom exception hierarchy.
"""

import pytest

from dlmm_backtest.core.exceptions.backtest import (
    BacktestException,
    CalculationError,
    CancellationError,
    ConfigurationError,
    DataError,
    DataUnavailableError,
    StrategyError,
    StrategyEvaluationError,
    ValidationError,
)


class TestExceptionHierarchy:
    """Test suite for exception inheritance."""

    @pytest.mark.parametrize(
        "exception_class",
        [
            ValidationError,
            ConfigurationError,
            DataError,
            CancellationError,
            StrategyError,
            CalculationError,
        ],
    )
    def test_should_inherit_from_backtest_exception(self, exception_class: type) -> None:
        """Test that all domain exceptions share a base class."""
        assert issubclass(exception_class, BacktestException)

    def test_should_treat_unavailable_data_as_data_error(self) -> None:
        """Test DataUnavailableError inheritance."""
        assert issubclass(DataUnavailableError, DataError)

    def test_should_treat_evaluation_error_as_strategy_error(self) -> None:
        """Test StrategyEvaluationError inheritance."""
        assert issubclass(StrategyEvaluationError, StrategyError)


class TestConfigurationError:
    """Test suite for ConfigurationError."""

    def test_should_join_multiple_errors(self) -> None:
        """Test message built from an error list."""
        error = ConfigurationError(["Initial capital must be positive", "Strategy ID is required"])

        assert error.errors == ["Initial capital must be positive", "Strategy ID is required"]
        assert str(error) == "Initial capital must be positive; Strategy ID is required"

    def test_should_accept_single_message(self) -> None:
        """Test construction from a single string."""
        error = ConfigurationError("Unknown strategy: foo")

        assert error.errors == ["Unknown strategy: foo"]
        assert str(error) == "Unknown strategy: foo"


class TestDomainErrorMessages:
    """Test suite for exceptions with structured context."""

    def test_should_describe_cancellation(self) -> None:
        """Test default cancellation message."""
        assert str(CancellationError()) == "Backtest was cancelled"

    def test_should_include_pool_in_unavailable_data_error(self) -> None:
        """Test DataUnavailableError context."""
        error = DataUnavailableError("pool-1")

        assert error.pool_address == "pool-1"
        assert "pool-1" in str(error)
        assert "synthetic fallback is disabled" in str(error)

    def test_should_include_strategy_in_evaluation_error(self) -> None:
        """Test StrategyEvaluationError context."""
        error = StrategyEvaluationError("mean-reversion", "missing price history")

        assert error.strategy_id == "mean-reversion"
        assert str(error) == "Strategy mean-reversion evaluation failed: missing price history"
