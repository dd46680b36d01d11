"""
Dependency providers for API routes.

Collaborators live on ``app.state`` so tests can install their own engine
and data service before issuing requests.
"""

from fastapi import Request

from dlmm_backtest.engine import BacktestEngine
from dlmm_backtest.infrastructure.data import HistoricalDataService
from dlmm_backtest.strategies import StrategyRegistry


def get_engine(request: Request) -> BacktestEngine:
    return request.app.state.engine


def get_data_service(request: Request) -> HistoricalDataService:
    return request.app.state.data_service


def get_registry(request: Request) -> StrategyRegistry:
    return request.app.state.engine.registry
