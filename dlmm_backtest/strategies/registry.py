"""
Strategy registry.

Maps strategy ids to evaluators. The engine resolves a configuration's id
once, before the simulation starts.
"""

from collections.abc import Iterator

from loguru import logger

from dlmm_backtest.core.exceptions.backtest import ConfigurationError
from dlmm_backtest.core.interfaces.strategy import IStrategyEvaluator

from .evaluators import HoldEvaluator, PriceDeviationRebalancer


class StrategyRegistry:
    """Closed mapping of strategy id to evaluator."""

    def __init__(self, evaluators: dict[str, IStrategyEvaluator] | None = None) -> None:
        self._evaluators: dict[str, IStrategyEvaluator] = dict(evaluators or {})

    def register(self, strategy_id: str, evaluator: IStrategyEvaluator) -> None:
        """Register an evaluator, replacing any previous one with the same id."""
        if not strategy_id or not strategy_id.strip():
            raise ValueError("Strategy ID is required")
        if strategy_id in self._evaluators:
            logger.warning(f"Replacing evaluator registered for strategy {strategy_id}")
        self._evaluators[strategy_id] = evaluator

    def resolve(self, strategy_id: str) -> IStrategyEvaluator:
        """Evaluator for ``strategy_id``.

        Raises:
            ConfigurationError: If no evaluator is registered for the id
        """
        try:
            return self._evaluators[strategy_id]
        except KeyError:
            raise ConfigurationError(f"Unknown strategy: {strategy_id}") from None

    def ids(self) -> list[str]:
        return sorted(self._evaluators)

    def __contains__(self, strategy_id: object) -> bool:
        return strategy_id in self._evaluators

    def __iter__(self) -> Iterator[str]:
        return iter(self.ids())

    def __len__(self) -> int:
        return len(self._evaluators)


def default_registry() -> StrategyRegistry:
    """Registry with the built-in reference strategies."""
    return StrategyRegistry(
        {
            "conservative-hold": HoldEvaluator(),
            "aggressive-rebalancing": PriceDeviationRebalancer(rebalance_threshold=0.02),
            "conservative-rebalancing": PriceDeviationRebalancer(rebalance_threshold=0.10),
            "mean-reversion": PriceDeviationRebalancer(rebalance_threshold=0.05),
        }
    )
