"""
Unit tests for strategy evaluators and the strategy registry.
"""

from datetime import timedelta

import pytest

from dlmm_backtest.core.enums import Interval
from dlmm_backtest.core.exceptions.backtest import (
    ConfigurationError,
    StrategyEvaluationError,
    ValidationError,
)
from dlmm_backtest.core.models import HistoricalData, StrategyConfig, TimeRange
from dlmm_backtest.strategies import (
    HoldEvaluator,
    PriceDeviationRebalancer,
    StrategyRegistry,
    default_registry,
)


@pytest.fixture
def history(start_date) -> HistoricalData:
    return HistoricalData(
        pool_address="test-pool",
        time_range=TimeRange(start_date, start_date + timedelta(hours=24), Interval.H1),
        price_data=[],
    )


class TestHoldEvaluator:
    """Test suite for HoldEvaluator."""

    @pytest.mark.asyncio
    async def test_should_never_recommend(self, make_position, make_price_point, history) -> None:
        """Test that holding ignores price moves."""
        evaluator = HoldEvaluator()

        recommendation = await evaluator.evaluate(
            make_position(), make_price_point(close=500.0), StrategyConfig(id="hold"), history
        )

        assert recommendation is None


class TestPriceDeviationRebalancer:
    """Test suite for PriceDeviationRebalancer."""

    @pytest.fixture
    def evaluator(self) -> PriceDeviationRebalancer:
        return PriceDeviationRebalancer(rebalance_threshold=0.02)

    @pytest.mark.asyncio
    async def test_should_not_act_within_threshold(
        self, evaluator, make_position, make_price_point, history
    ) -> None:
        """Test that small moves are ignored."""
        recommendation = await evaluator.evaluate(
            make_position(center_price=100.0),
            make_price_point(close=101.5),
            StrategyConfig(id="aggressive-rebalancing"),
            history,
        )

        assert recommendation is None

    @pytest.mark.asyncio
    async def test_should_rebalance_beyond_threshold(
        self, evaluator, make_position, make_price_point, history
    ) -> None:
        """Test recommendation for a large move."""
        recommendation = await evaluator.evaluate(
            make_position(center_price=100.0),
            make_price_point(close=110.0),
            StrategyConfig(id="aggressive-rebalancing"),
            history,
        )

        assert recommendation is not None
        assert recommendation.action == "rebalance"
        assert recommendation.estimated_profit == pytest.approx(0.10 * 0.5, rel=0.02)
        assert recommendation.confidence == 0.8
        assert "threshold" in recommendation.reasoning

    @pytest.mark.asyncio
    async def test_should_rebalance_pools_priced_below_one(
        self, evaluator, make_position, make_price_point, history
    ) -> None:
        """Test that sub-unit prices still resolve to distinct bins."""
        position = make_position(center_price=0.05)
        config = StrategyConfig(id="aggressive-rebalancing")

        small_move = await evaluator.evaluate(
            position, make_price_point(close=0.0505), config, history
        )
        large_move = await evaluator.evaluate(
            position, make_price_point(close=0.06), config, history
        )

        assert small_move is None
        assert large_move is not None
        assert large_move.estimated_profit == pytest.approx(0.20 * 0.5, rel=0.02)

    @pytest.mark.asyncio
    async def test_should_honour_threshold_override(
        self, evaluator, make_position, make_price_point, history
    ) -> None:
        """Test the rebalance_threshold parameter."""
        config = StrategyConfig(id="custom", parameters={"rebalance_threshold": 0.5})

        recommendation = await evaluator.evaluate(
            make_position(center_price=100.0), make_price_point(close=110.0), config, history
        )

        assert recommendation is None

    @pytest.mark.asyncio
    async def test_should_reject_invalid_override(
        self, evaluator, make_position, make_price_point, history
    ) -> None:
        """Test a malformed rebalance_threshold parameter."""
        config = StrategyConfig(id="custom", parameters={"rebalance_threshold": "wide"})

        with pytest.raises(StrategyEvaluationError, match="custom"):
            await evaluator.evaluate(make_position(), make_price_point(), config, history)

    @pytest.mark.asyncio
    async def test_should_skip_empty_position(
        self, evaluator, make_position, make_price_point, history
    ) -> None:
        """Test that a worthless position is left alone."""
        recommendation = await evaluator.evaluate(
            make_position(total_value=0.0),
            make_price_point(close=200.0),
            StrategyConfig(id="aggressive-rebalancing"),
            history,
        )

        assert recommendation is None

    @pytest.mark.asyncio
    async def test_should_be_deterministic(
        self, evaluator, make_position, make_price_point, history
    ) -> None:
        """Test identical inputs produce identical recommendations."""
        position = make_position()
        point = make_price_point(close=120.0)
        config = StrategyConfig(id="aggressive-rebalancing")

        first = await evaluator.evaluate(position, point, config, history)
        second = await evaluator.evaluate(position, point, config, history)

        assert first == second

    def test_should_reject_invalid_construction(self) -> None:
        """Test constructor validation."""
        with pytest.raises(ValidationError):
            PriceDeviationRebalancer(rebalance_threshold=0.0)
        with pytest.raises(ValidationError):
            PriceDeviationRebalancer(rebalance_threshold=0.1, confidence=1.5)


class TestStrategyRegistry:
    """Test suite for StrategyRegistry."""

    def test_should_list_builtin_strategies(self) -> None:
        """Test default registry contents."""
        registry = default_registry()

        assert registry.ids() == [
            "aggressive-rebalancing",
            "conservative-hold",
            "conservative-rebalancing",
            "mean-reversion",
        ]
        assert "conservative-hold" in registry
        assert len(registry) == 4

    def test_should_resolve_known_strategy(self) -> None:
        """Test lookup."""
        registry = default_registry()

        assert isinstance(registry.resolve("conservative-hold"), HoldEvaluator)
        assert registry.resolve("conservative-rebalancing").rebalance_threshold == 0.10

    def test_should_reject_unknown_strategy(self) -> None:
        """Test lookup failure."""
        with pytest.raises(ConfigurationError, match="Unknown strategy: nope"):
            default_registry().resolve("nope")

    def test_should_register_and_replace(self) -> None:
        """Test custom registration."""
        registry = StrategyRegistry()
        first, second = HoldEvaluator(), HoldEvaluator()

        registry.register("custom", first)
        registry.register("custom", second)

        assert registry.resolve("custom") is second
        assert list(registry) == ["custom"]

    def test_should_reject_blank_id(self) -> None:
        """Test registration validation."""
        with pytest.raises(ValueError):
            StrategyRegistry().register("  ", HoldEvaluator())
