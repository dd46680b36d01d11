"""
Data API endpoints.
"""

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, Query

from dlmm_backtest.core.enums import Interval
from dlmm_backtest.infrastructure.data import HistoricalDataService
from dlmm_backtest.strategies import StrategyRegistry

from ..dependencies import get_data_service, get_registry
from ..schemas.api_models import ErrorResponse, HistoricalDataResponse, StrategiesResponse

router = APIRouter()


@router.get("/strategies", response_model=StrategiesResponse)
async def get_available_strategies(
    registry: StrategyRegistry = Depends(get_registry),
) -> StrategiesResponse:
    """Get list of registered strategy ids."""
    return StrategiesResponse(strategies=registry.ids())


@router.get(
    "/history",
    response_model=HistoricalDataResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def get_historical_data(
    pool_address: str = Query(..., min_length=1),
    start_date: datetime = Query(...),
    end_date: datetime = Query(...),
    interval: Interval = Query(Interval.H1),
    data_service: HistoricalDataService = Depends(get_data_service),
) -> HistoricalDataResponse:
    """Get historical price data for charting."""
    history = await data_service.fetch(pool_address, start_date, end_date, interval)
    return HistoricalDataResponse(
        pool_address=history.pool_address,
        interval=history.time_range.interval,
        source=history.metadata.source.value,
        data_points=history.metadata.data_points,
        coverage=history.metadata.coverage,
        data=[point.to_dict() for point in history.price_data],
    )


@router.get("/cache")
async def get_cache_stats(
    data_service: HistoricalDataService = Depends(get_data_service),
) -> dict[str, Any]:
    """Historical data cache statistics."""
    return data_service.get_cache_stats()
