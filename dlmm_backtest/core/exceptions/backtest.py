"""
Custom exception hierarchy for the backtesting engine.

This module defines domain-specific exceptions for better error handling.
"""


class BacktestException(Exception):
    """Base exception for all backtesting-related errors."""

    pass


class ValidationError(BacktestException):
    """Raised when input validation fails."""

    pass


class ConfigurationError(BacktestException):
    """Raised when a backtest configuration is invalid."""

    def __init__(self, errors: list[str] | str):
        self.errors = [errors] if isinstance(errors, str) else list(errors)
        super().__init__("; ".join(self.errors) or "Invalid configuration")


class DataError(BacktestException):
    """Raised when data access or processing fails."""

    pass


class DataUnavailableError(DataError):
    """Raised when no historical data can be produced for a request."""

    def __init__(self, pool_address: str, reason: str = "synthetic fallback is disabled"):
        self.pool_address = pool_address
        self.reason = reason
        super().__init__(f"Unable to fetch historical data for {pool_address}: {reason}")


class CancellationError(BacktestException):
    """Raised when a running backtest observes its cancellation signal."""

    def __init__(self, message: str = "Backtest was cancelled"):
        super().__init__(message)


class StrategyError(BacktestException):
    """Raised when strategy execution fails."""

    pass


class StrategyEvaluationError(StrategyError):
    """Raised by an evaluator that cannot produce a recommendation for a tick."""

    def __init__(self, strategy_id: str, reason: str):
        self.strategy_id = strategy_id
        self.reason = reason
        super().__init__(f"Strategy {strategy_id} evaluation failed: {reason}")


class CalculationError(BacktestException):
    """Raised when mathematical calculations fail."""

    pass
