"""
Backtest lifecycle enumerations.
"""

from enum import StrEnum


class BacktestStatus(StrEnum):
    """Terminal and non-terminal states of a backtest result."""

    RUNNING = "running"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        """Check if no further state changes are expected."""
        return self != self.RUNNING


class BacktestPhase(StrEnum):
    """
    Phases of a backtest run.

    Phases advance strictly in declaration order; ERROR is absorbing and may
    be entered from any phase.
    """

    INITIALIZING = "initializing"
    FETCHING_DATA = "fetching_data"
    SIMULATING = "simulating"
    CALCULATING_METRICS = "calculating_metrics"
    COMPLETED = "completed"
    ERROR = "error"
