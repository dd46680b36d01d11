"""
Strategy evaluators and the registry the engine resolves them from.
"""

from .evaluators import HoldEvaluator, PriceDeviationRebalancer
from .registry import StrategyRegistry, default_registry

__all__ = [
    "HoldEvaluator",
    "PriceDeviationRebalancer",
    "StrategyRegistry",
    "default_registry",
]
