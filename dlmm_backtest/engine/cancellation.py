"""
Cooperative cancellation for backtest runs.
"""

import threading

from dlmm_backtest.core.exceptions.backtest import CancellationError


class CancellationToken:
    """Signal checked by the simulation loop once per tick.

    Safe to cancel from another thread or task than the one running the
    backtest. A token cannot be reset; use a new token per run.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        """Raise CancellationError if cancel() has been called."""
        if self._event.is_set():
            raise CancellationError()
