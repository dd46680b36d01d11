"""
Backtest API endpoints.
"""

import math
from typing import Any

from fastapi import APIRouter, Depends
from loguru import logger

from dlmm_backtest.core.utils.validation import validate_backtest_config
from dlmm_backtest.engine import BacktestEngine
from dlmm_backtest.strategies import StrategyRegistry

from ..dependencies import get_engine, get_registry
from ..schemas.api_models import (
    BacktestRequest,
    CancelResponse,
    StatusResponse,
    ValidationResponse,
)

router = APIRouter()


def json_safe(value: Any) -> Any:
    """Replace NaN and infinities (e.g. a Sortino ratio without losses) with None."""
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {k: json_safe(v) for k, v in value.items()}
    if isinstance(value, list):
        return [json_safe(v) for v in value]
    return value


@router.post("/validate", response_model=ValidationResponse)
async def validate_backtest(
    request: BacktestRequest, registry: StrategyRegistry = Depends(get_registry)
) -> ValidationResponse:
    """Check a configuration without running it."""
    validation = validate_backtest_config(request.to_config())
    errors = list(validation.errors)
    if request.strategy_id and request.strategy_id not in registry:
        errors.append(f"Unknown strategy: {request.strategy_id}")
    return ValidationResponse(is_valid=not errors, errors=errors)


@router.post("/")
async def run_backtest(
    request: BacktestRequest, engine: BacktestEngine = Depends(get_engine)
) -> dict[str, Any]:
    """Run a backtest and return its result.

    Failed and cancelled runs are returned as results with status "error".
    """
    result = await engine.run(request.to_config())
    if result.error is not None:
        logger.warning(
            f"Backtest request '{request.name}' ended with error: {result.error.message}"
        )
    return json_safe(result.to_dict())


@router.post("/cancel", response_model=CancelResponse)
async def cancel_backtest(engine: BacktestEngine = Depends(get_engine)) -> CancelResponse:
    """Cancel running backtests."""
    if not engine.is_running():
        return CancelResponse(cancelled=False, message="No backtest is running")
    engine.cancel()
    return CancelResponse(cancelled=True, message="Cancellation requested")


@router.get("/status", response_model=StatusResponse)
async def backtest_status(engine: BacktestEngine = Depends(get_engine)) -> StatusResponse:
    return StatusResponse(running=engine.is_running())
