"""
Unit tests for enum types.
Testing all enum methods and properties.
"""

import pytest

from dlmm_backtest.core.enums import (
    BacktestPhase,
    BacktestStatus,
    DataSource,
    Interval,
    MarketRegime,
    StrategyActionType,
)


class TestIntervalEnum:
    """Tests for Interval enum."""

    def test_should_have_correct_values(self) -> None:
        """Test that Interval enum has correct values."""
        assert Interval.M1.value == "1m"
        assert Interval.M5.value == "5m"
        assert Interval.M15.value == "15m"
        assert Interval.H1.value == "1h"
        assert Interval.H4.value == "4h"
        assert Interval.D1.value == "1d"

    def test_should_convert_to_seconds(self) -> None:
        """Test conversion of intervals to seconds."""
        assert Interval.to_seconds(Interval.M1) == 60
        assert Interval.to_seconds(Interval.M15) == 900
        assert Interval.to_seconds(Interval.H1) == 3600
        assert Interval.to_seconds(Interval.D1) == 86400

    def test_should_convert_to_milliseconds(self) -> None:
        """Test conversion of intervals to milliseconds."""
        assert Interval.to_milliseconds(Interval.H1) == 3_600_000

    def test_should_count_periods_per_day(self) -> None:
        """Test samples per day for each interval."""
        assert Interval.periods_per_day(Interval.M1) == 1440
        assert Interval.periods_per_day(Interval.M5) == 288
        assert Interval.periods_per_day(Interval.M15) == 96
        assert Interval.periods_per_day(Interval.H1) == 24
        assert Interval.periods_per_day(Interval.H4) == 6
        assert Interval.periods_per_day(Interval.D1) == 1

    def test_should_convert_from_string_case_insensitive(self) -> None:
        """Test from_string with various inputs."""
        assert Interval.from_string("1h") == Interval.H1
        assert Interval.from_string("1H") == Interval.H1
        assert Interval.from_string(Interval.D1) == Interval.D1

    def test_should_raise_error_for_invalid_interval(self) -> None:
        """Test that from_string raises error for unsupported intervals."""
        with pytest.raises(ValueError, match="Unsupported interval"):
            Interval.from_string("1w")

    def test_should_identify_intraday_intervals(self) -> None:
        """Test is_intraday property."""
        assert Interval.H4.is_intraday
        assert not Interval.D1.is_intraday


class TestStrategyActionTypeEnum:
    """Tests for StrategyActionType enum."""

    def test_should_map_known_recommendations(self) -> None:
        """Test mapping of evaluator action strings."""
        assert StrategyActionType.from_recommendation("rebalance") == StrategyActionType.REBALANCE
        assert (
            StrategyActionType.from_recommendation("add_liquidity")
            == StrategyActionType.ADD_LIQUIDITY
        )
        assert (
            StrategyActionType.from_recommendation("remove_liquidity")
            == StrategyActionType.REMOVE_LIQUIDITY
        )

    def test_should_map_unknown_recommendation_to_rebalance(self) -> None:
        """Test that unknown and reserved strings fall back to rebalance."""
        assert StrategyActionType.from_recommendation("hedge") == StrategyActionType.REBALANCE
        assert StrategyActionType.from_recommendation("initialize") == StrategyActionType.REBALANCE

    def test_should_only_count_rebalance_as_trade(self) -> None:
        """Test is_trade property."""
        assert StrategyActionType.REBALANCE.is_trade
        assert not StrategyActionType.INITIALIZE.is_trade
        assert not StrategyActionType.ADD_LIQUIDITY.is_trade


class TestMarketEnums:
    """Tests for MarketRegime and DataSource enums."""

    def test_should_define_three_regimes(self) -> None:
        """Test regime members."""
        assert {regime.value for regime in MarketRegime} == {"trending", "ranging", "volatile"}

    def test_should_give_volatile_regime_highest_volume_factor(self) -> None:
        """Test volume factor ordering across regimes."""
        volatile = MarketRegime.VOLATILE.volume_factor_range[0]
        trending = MarketRegime.TRENDING.volume_factor_range[0]
        ranging = MarketRegime.RANGING.volume_factor_range[0]
        assert volatile > trending > ranging

    def test_should_have_data_source_values(self) -> None:
        """Test DataSource values."""
        assert DataSource.REAL.value == "real"
        assert DataSource.MOCK.value == "mock"


class TestStatusEnums:
    """Tests for BacktestStatus and BacktestPhase enums."""

    def test_should_identify_terminal_status(self) -> None:
        """Test is_terminal property."""
        assert not BacktestStatus.RUNNING.is_terminal
        assert BacktestStatus.COMPLETED.is_terminal
        assert BacktestStatus.ERROR.is_terminal

    def test_should_list_phases_in_execution_order(self) -> None:
        """Test phase declaration order."""
        assert list(BacktestPhase)[:5] == [
            BacktestPhase.INITIALIZING,
            BacktestPhase.FETCHING_DATA,
            BacktestPhase.SIMULATING,
            BacktestPhase.CALCULATING_METRICS,
            BacktestPhase.COMPLETED,
        ]
