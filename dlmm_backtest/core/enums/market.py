"""
Market and data-source enumerations.
"""

from enum import StrEnum


class MarketRegime(StrEnum):
    """
    Latent market-behaviour states used by the synthetic data generator.
    """

    TRENDING = "trending"  # Persistent directional drift
    RANGING = "ranging"  # Mean reversion toward a base price
    VOLATILE = "volatile"  # Amplified noise, no direction

    @property
    def volume_factor_range(self) -> tuple[float, float]:
        """Base volume multiplier and its regime-strength scale."""
        factors = {
            MarketRegime.TRENDING: (1.2, 0.3),
            MarketRegime.VOLATILE: (1.5, 0.8),
            MarketRegime.RANGING: (0.8, 0.2),
        }
        return factors[self]


class DataSource(StrEnum):
    """Origin of a historical dataset."""

    REAL = "real"
    MOCK = "mock"
