"""
Strategy evaluator interface definition.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from dlmm_backtest.core.models import HistoricalData, PositionSnapshot, PricePoint, StrategyConfig


@dataclass(frozen=True)
class StrategyRecommendation:
    """Structured recommendation returned by a strategy evaluator."""

    action: str  # "rebalance", "add_liquidity" or "remove_liquidity"
    reasoning: str
    estimated_profit: float  # Fraction of position value
    confidence: float  # 0-1


class IStrategyEvaluator(ABC):
    """Abstract interface for strategy evaluators.

    Implementations must be deterministic for identical inputs.
    """

    @abstractmethod
    async def evaluate(
        self,
        position: PositionSnapshot,
        market_point: PricePoint,
        strategy_config: StrategyConfig,
        history: HistoricalData,
    ) -> StrategyRecommendation | None:
        """Return a recommendation for this tick, or None to do nothing."""
        pass
