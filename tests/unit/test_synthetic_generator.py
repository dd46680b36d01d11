"""
Unit tests for the synthetic historical data generator.
"""

from datetime import UTC, datetime, timedelta

import numpy as np
import pytest

from dlmm_backtest.core.constants import ACTIVE_BIN_WINDOW
from dlmm_backtest.core.enums import DataSource, Interval, MarketRegime
from dlmm_backtest.core.exceptions.backtest import ValidationError
from dlmm_backtest.core.types.financial import price_to_bin_id
from dlmm_backtest.infrastructure.data import SyntheticDataGenerator

START = datetime(2025, 1, 1, tzinfo=UTC)


class TestSyntheticDataGenerator:
    """Test suite for SyntheticDataGenerator."""

    def test_should_generate_one_point_per_interval(self) -> None:
        """Test 24 hourly points for a one day range."""
        data = SyntheticDataGenerator(seed=1).generate(
            "pool", START, START + timedelta(hours=24), Interval.H1
        )

        assert len(data.price_data) == 24
        assert data.price_data[0].timestamp == START
        assert data.price_data[-1].timestamp == START + timedelta(hours=23)
        assert data.metadata.data_points == 24
        assert data.metadata.source == DataSource.MOCK
        assert data.metadata.coverage == 1.0

    def test_should_space_points_by_interval(self) -> None:
        """Test timestamp spacing."""
        data = SyntheticDataGenerator(seed=1).generate(
            "pool", START, START + timedelta(hours=2), Interval.M15
        )

        timestamps = [point.timestamp for point in data.price_data]
        assert len(timestamps) == 8
        assert all(b - a == timedelta(minutes=15) for a, b in zip(timestamps, timestamps[1:]))

    def test_should_reproduce_series_for_same_seed(self) -> None:
        """Test seeded reproducibility."""
        end = START + timedelta(days=3)
        first = SyntheticDataGenerator(seed=42).generate("pool", START, end, Interval.H1)
        second = SyntheticDataGenerator(seed=42).generate("pool", START, end, Interval.H1)

        assert [p.close for p in first.price_data] == [p.close for p in second.price_data]
        assert [p.volume for p in first.price_data] == [p.volume for p in second.price_data]

    def test_should_differ_for_different_seeds(self) -> None:
        """Test that seeds change the series."""
        end = START + timedelta(days=1)
        first = SyntheticDataGenerator(seed=1).generate("pool", START, end, Interval.H1)
        second = SyntheticDataGenerator(seed=2).generate("pool", START, end, Interval.H1)

        assert [p.close for p in first.price_data] != [p.close for p in second.price_data]

    def test_should_accept_injected_rng(self) -> None:
        """Test that an injected Generator drives the series."""
        end = START + timedelta(hours=12)
        first = SyntheticDataGenerator(rng=np.random.default_rng(5)).generate("p", START, end)
        second = SyntheticDataGenerator(seed=5).generate("p", START, end)

        assert [p.close for p in first.price_data] == [p.close for p in second.price_data]

    def test_should_keep_ohlc_consistent(self) -> None:
        """Test OHLC invariants over a long series."""
        data = SyntheticDataGenerator(seed=3).generate(
            "pool", START, START + timedelta(days=30), Interval.H1
        )

        for previous, point in zip(data.price_data, data.price_data[1:]):
            assert point.low <= min(point.open, point.close)
            assert point.high >= max(point.open, point.close)
            assert point.low > 0
            assert point.volume > 0
            assert point.open == previous.close

    def test_should_split_volume_between_tokens(self) -> None:
        """Test volume_x / volume_y split."""
        data = SyntheticDataGenerator(seed=3).generate("pool", START, START + timedelta(hours=3))

        for point in data.price_data:
            assert point.volume_x + point.volume_y == pytest.approx(point.volume)

    def test_should_generate_liquidity_around_active_bin(self) -> None:
        """Test bin liquidity layout per sample."""
        generator = SyntheticDataGenerator(seed=9, bin_range=5)
        data = generator.generate("pool", START, START + timedelta(hours=2), Interval.H1)

        assert len(data.liquidity_data) == 2 * 11
        first_point = data.price_data[0]
        bins = data.liquidity_at(first_point.timestamp)
        active_bin_id = price_to_bin_id(first_point.close)

        assert sorted(b.bin_id for b in bins) == list(range(active_bin_id - 5, active_bin_id + 6))
        for liquidity in bins:
            distance = abs(liquidity.bin_id - active_bin_id)
            assert liquidity.is_active == (distance <= ACTIVE_BIN_WINDOW)
            assert liquidity.total_liquidity > 0
            assert liquidity.fee_rate > 0

    def test_should_produce_at_least_one_point(self) -> None:
        """Test ranges shorter than one interval."""
        data = SyntheticDataGenerator(seed=1).generate(
            "pool", START, START + timedelta(minutes=30), Interval.H1
        )

        assert len(data.price_data) == 1

    def test_should_reject_inverted_range(self) -> None:
        """Test range validation."""
        with pytest.raises(ValidationError):
            SyntheticDataGenerator(seed=1).generate("pool", START, START, Interval.H1)

    def test_should_reject_negative_bin_range(self) -> None:
        """Test constructor validation."""
        with pytest.raises(ValueError):
            SyntheticDataGenerator(bin_range=-1)


class TestRegimeDynamics:
    """Test suite for per-tick price moves under each market regime."""

    DRAWS = 500

    def moves(
        self,
        regime: MarketRegime,
        seed: int = 13,
        volatility: float = 0.02,
        strength: float = 0.8,
        trend_direction: float = 1.0,
        current_price: float = 100.0,
    ) -> np.ndarray:
        generator = SyntheticDataGenerator(seed=seed)
        return np.array(
            [
                generator._price_change(
                    regime, strength, volatility, trend_direction, 100.0, current_price
                )
                for _ in range(self.DRAWS)
            ]
        )

    def test_should_pull_ranging_price_back_to_base(self) -> None:
        """Test mean reversion toward the base price without noise."""
        above = self.moves(MarketRegime.RANGING, volatility=0.0, current_price=120.0)
        below = self.moves(MarketRegime.RANGING, volatility=0.0, current_price=80.0)

        assert (above < 0).all()
        assert (below > 0).all()
        assert above[0] == pytest.approx((100.0 - 120.0) / 120.0 * 0.1 * 0.8)

    def test_should_move_more_in_volatile_regime(self) -> None:
        """Test that volatile moves exceed ranging moves for the same draws."""
        ranging = self.moves(MarketRegime.RANGING)
        volatile = self.moves(MarketRegime.VOLATILE)

        assert (np.abs(volatile) >= np.abs(ranging)).all()
        assert np.abs(volatile).mean() > 2 * np.abs(ranging).mean()

    def test_should_drift_in_trend_direction(self) -> None:
        """Test that trending moves are skewed toward the trend."""
        up = self.moves(MarketRegime.TRENDING, trend_direction=1.0)
        down = self.moves(MarketRegime.TRENDING, trend_direction=-1.0)

        assert up.mean() > 0
        assert down.mean() < 0
        assert up.mean() == pytest.approx(0.2 * 0.02 * 0.8, rel=0.25)
