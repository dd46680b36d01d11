"""
Backtest performance metrics models.
"""

from dataclasses import asdict, dataclass, field, fields


@dataclass
class BacktestMetrics:
    """Return, risk, trading, cost and DLMM statistics of one backtest.

    All return-like values are fractions (0.05 == 5%). Every field defaults
    to zero so an empty run yields an all-zero metrics object.
    """

    # Return metrics
    total_return: float = 0.0
    annualized_return: float = 0.0
    benchmark_return: float = 0.0
    excess_return: float = 0.0

    # Risk metrics
    volatility: float = 0.0
    sharpe_ratio: float = 0.0
    sortino_ratio: float = 0.0
    max_drawdown: float = 0.0
    max_drawdown_duration: float = 0.0  # Days

    # Trading metrics
    total_trades: int = 0
    profitable_trades: int = 0
    win_rate: float = 0.0
    profit_factor: float = 0.0
    avg_trade_return: float = 0.0
    largest_win: float = 0.0
    largest_loss: float = 0.0

    # Cost metrics
    total_fees: float = 0.0
    total_gas: float = 0.0
    total_slippage: float = 0.0
    cost_to_return: float = 0.0

    # DLMM-specific metrics
    total_fees_earned: float = 0.0
    avg_apr: float = 0.0
    liquidity_utilization: float = 0.0
    rebalance_frequency: float = 0.0  # Rebalances per day
    impermanent_loss_recovery: float = 0.0

    @classmethod
    def empty(cls) -> "BacktestMetrics":
        """All-zero metrics for runs without data."""
        return cls()

    def is_empty(self) -> bool:
        """Check if every metric is zero."""
        return all(getattr(self, f.name) == 0 for f in fields(self))

    def to_dict(self) -> dict[str, float]:
        """Convert metrics to dictionary."""
        return asdict(self)


@dataclass
class MetricsValidation:
    """Diagnostic report on a metrics object; never blocks a result."""

    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors
