"""
Reference strategy evaluators.

Evaluators are stateless and deterministic: the same position, market point
and configuration always produce the same recommendation.
"""

from dlmm_backtest.core.exceptions.backtest import StrategyEvaluationError, ValidationError
from dlmm_backtest.core.interfaces.strategy import IStrategyEvaluator, StrategyRecommendation
from dlmm_backtest.core.models import HistoricalData, PositionSnapshot, PricePoint, StrategyConfig
from dlmm_backtest.core.types.financial import bin_id_to_price, price_to_bin_id, to_float
from dlmm_backtest.core.utils.validation import validate_fraction, validate_positive

# Share of the price deviation a re-centred position is expected to recapture
DEVIATION_PROFIT_CAPTURE = 0.5


class HoldEvaluator(IStrategyEvaluator):
    """Never acts; the position keeps its initial bin window."""

    async def evaluate(
        self,
        position: PositionSnapshot,
        market_point: PricePoint,
        strategy_config: StrategyConfig,
        history: HistoricalData,
    ) -> StrategyRecommendation | None:
        return None


class PriceDeviationRebalancer(IStrategyEvaluator):
    """Re-centre the position when price drifts away from its bin window.

    Deviation is the relative price move between the centre bin of the
    position and the active bin of the current close. A
    ``rebalance_threshold`` entry in the strategy parameters overrides the
    constructor default.

    Args:
        rebalance_threshold: Fractional deviation that triggers a rebalance
        confidence: Confidence attached to every recommendation (0-1)
    """

    def __init__(self, rebalance_threshold: float, confidence: float = 0.8) -> None:
        self.rebalance_threshold = validate_positive(rebalance_threshold, "rebalance_threshold")
        self.confidence = validate_fraction(confidence, "confidence")

    def threshold_for(self, strategy_config: StrategyConfig) -> float:
        override = strategy_config.parameters.get("rebalance_threshold")
        if override is None:
            return self.rebalance_threshold
        try:
            return validate_positive(to_float(override), "rebalance_threshold")
        except (TypeError, ValueError, ValidationError) as e:
            raise StrategyEvaluationError(
                strategy_config.id, f"invalid rebalance_threshold {override!r}"
            ) from e

    async def evaluate(
        self,
        position: PositionSnapshot,
        market_point: PricePoint,
        strategy_config: StrategyConfig,
        history: HistoricalData,
    ) -> StrategyRecommendation | None:
        center_bin_id = position.center_bin_id
        if center_bin_id is None or position.total_value <= 0:
            return None

        active_bin_id = price_to_bin_id(market_point.close)
        deviation = abs(bin_id_to_price(active_bin_id) / bin_id_to_price(center_bin_id) - 1)
        threshold = self.threshold_for(strategy_config)
        if deviation <= threshold:
            return None

        return StrategyRecommendation(
            action="rebalance",
            reasoning=(
                f"Price moved {deviation:.2%} away from position centre "
                f"(threshold {threshold:.2%})"
            ),
            estimated_profit=deviation * DEVIATION_PROFIT_CAPTURE,
            confidence=self.confidence,
        )
