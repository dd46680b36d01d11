"""
Strategy action log models.
"""

from dataclasses import dataclass, field
from datetime import datetime

from dlmm_backtest.core.enums import StrategyActionType
from dlmm_backtest.core.exceptions.backtest import ValidationError


@dataclass
class ActionCosts:
    """Costs charged for executing an action, in USD."""

    gas: float = 0.0
    slippage: float = 0.0
    fees: float = 0.0

    def __post_init__(self) -> None:
        if self.gas < 0 or self.slippage < 0 or self.fees < 0:
            raise ValidationError(
                f"Action costs must be non-negative, got gas={self.gas}, "
                f"slippage={self.slippage}, fees={self.fees}"
            )

    @property
    def total(self) -> float:
        return self.gas + self.slippage + self.fees


@dataclass
class ActionResult:
    """Outcome of an executed action."""

    success: bool
    new_position_value: float


@dataclass
class StrategyAction:
    """One entry of the append-only action log."""

    timestamp: datetime
    type: StrategyActionType
    parameters: dict[str, str] = field(default_factory=dict)
    costs: ActionCosts = field(default_factory=ActionCosts)
    result: ActionResult = field(default_factory=lambda: ActionResult(True, 0.0))

    @property
    def reason(self) -> str:
        return self.parameters.get("reason", "")

    def to_dict(self) -> dict:
        """Convert action to dictionary."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "type": self.type.value,
            "parameters": dict(self.parameters),
            "costs": {
                "gas": self.costs.gas,
                "slippage": self.costs.slippage,
                "fees": self.costs.fees,
            },
            "result": {
                "success": self.result.success,
                "new_position_value": self.result.new_position_value,
            },
        }
