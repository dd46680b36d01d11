"""
Simulated liquidity position models.

The PositionSnapshot is the accumulator threaded through the simulation loop:
fee accrual and executed actions update it tick by tick.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime

from dlmm_backtest.core.exceptions.backtest import ValidationError
from dlmm_backtest.core.types.financial import ZERO


@dataclass
class BinAllocation:
    """Liquidity the position holds in a single bin."""

    bin_id: int
    liquidity_x: float
    liquidity_y: float
    value: float


@dataclass
class FeesEarned:
    """Cumulative fees accrued by the position."""

    token_x: float = ZERO
    token_y: float = ZERO
    usd_value: float = ZERO


@dataclass
class PositionMetrics:
    """Rolling per-tick position statistics."""

    apr: float = ZERO
    impermanent_loss: float = ZERO
    utilization: float = 1.0


@dataclass
class PositionSnapshot:
    """State of the simulated liquidity position at one tick."""

    timestamp: datetime
    bin_distribution: list[BinAllocation]
    total_value: float
    token_x_balance: float
    token_y_balance: float
    fees_earned: FeesEarned = field(default_factory=FeesEarned)
    metrics: PositionMetrics = field(default_factory=PositionMetrics)

    def __post_init__(self) -> None:
        """Validate position state after initialization."""
        if self.total_value < ZERO:
            raise ValidationError(f"Position value must be non-negative, got {self.total_value}")

    @property
    def bin_ids(self) -> list[int]:
        return [allocation.bin_id for allocation in self.bin_distribution]

    @property
    def center_bin_id(self) -> int | None:
        """Bin in the middle of the allocated window, None for an empty position."""
        if not self.bin_distribution:
            return None
        ids = sorted(self.bin_ids)
        return ids[len(ids) // 2]

    def copy(self) -> "PositionSnapshot":
        """Independent copy safe to store in a time series."""
        return replace(
            self,
            bin_distribution=[replace(allocation) for allocation in self.bin_distribution],
            fees_earned=replace(self.fees_earned),
            metrics=replace(self.metrics),
        )

    def to_dict(self) -> dict:
        """Convert snapshot to dictionary."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "bin_distribution": [
                {
                    "bin_id": a.bin_id,
                    "liquidity_x": a.liquidity_x,
                    "liquidity_y": a.liquidity_y,
                    "value": a.value,
                }
                for a in self.bin_distribution
            ],
            "total_value": self.total_value,
            "token_x_balance": self.token_x_balance,
            "token_y_balance": self.token_y_balance,
            "fees_earned": {
                "token_x": self.fees_earned.token_x,
                "token_y": self.fees_earned.token_y,
                "usd_value": self.fees_earned.usd_value,
            },
            "metrics": {
                "apr": self.metrics.apr,
                "impermanent_loss": self.metrics.impermanent_loss,
                "utilization": self.metrics.utilization,
            },
        }


@dataclass
class BenchmarkPosition:
    """Passive 50/50 hold of the pool's two tokens."""

    total_value: float
    token_x_amount: float
    token_y_amount: float

    @classmethod
    def from_capital(cls, capital: float, price: float) -> "BenchmarkPosition":
        """Split capital evenly between token X (bought at ``price``) and token Y."""
        if price <= ZERO:
            raise ValidationError(f"Benchmark price must be positive, got {price}")
        half_capital = capital / 2
        return cls(
            total_value=capital,
            token_x_amount=half_capital / price,
            token_y_amount=half_capital,
        )

    def revalue(self, price: float) -> None:
        """Mark the held tokens to ``price``."""
        self.total_value = self.token_x_amount * price + self.token_y_amount
