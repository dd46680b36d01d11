"""
Strategy action type enumerations.

This module defines the actions a simulated liquidity position can take.
"""

from enum import StrEnum


class StrategyActionType(StrEnum):
    """
    Allowed strategy actions.

    INITIALIZE is recorded once at the first tick of every run; the remaining
    types come from accepted strategy recommendations.
    """

    INITIALIZE = "initialize"
    REBALANCE = "rebalance"
    ADD_LIQUIDITY = "add_liquidity"
    REMOVE_LIQUIDITY = "remove_liquidity"

    @classmethod
    def from_recommendation(cls, action: str) -> "StrategyActionType":
        """
        Map an evaluator action string to an action type.

        Unknown strings (and "initialize", which evaluators may not emit)
        are treated as a rebalance.
        """
        for action_type in (cls.REBALANCE, cls.ADD_LIQUIDITY, cls.REMOVE_LIQUIDITY):
            if action_type.value == action:
                return action_type
        return cls.REBALANCE

    @property
    def is_trade(self) -> bool:
        """Check if the action counts as a trade for trading metrics."""
        return self == self.REBALANCE


class RebalanceFrequency(StrEnum):
    """How often a strategy is allowed to rebalance."""

    IMMEDIATE = "immediate"
    HOURLY = "hourly"
    DAILY = "daily"
