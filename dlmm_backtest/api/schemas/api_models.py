"""
Pydantic schemas for API request/response models.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from dlmm_backtest.core.enums import Interval
from dlmm_backtest.core.models import (
    BacktestConfig,
    CapitalConfig,
    CostConfig,
    MarketConfig,
    StrategyConfig,
    TimeframeConfig,
)


class BacktestRequest(BaseModel):
    """Request model for backtest submission and validation.

    Value ranges are checked by the domain validator so the validate
    endpoint can report every problem at once.
    """

    name: str = Field(default="API backtest", description="Human readable run name")
    pool_address: str = Field(..., min_length=1, description="Pool identifier")
    token_x_symbol: str = Field(default="X", description="Base token symbol")
    token_y_symbol: str = Field(default="Y", description="Quote token symbol")
    start_date: datetime = Field(..., description="Backtest start date")
    end_date: datetime = Field(..., description="Backtest end date")
    interval: Interval = Field(default=Interval.H1, description="Sampling interval")
    initial_capital: float = Field(default=1000.0, description="Starting capital (USD)")
    strategy_id: str = Field(..., description="Registered strategy identifier")
    strategy_parameters: dict[str, Any] = Field(
        default_factory=dict,
        description="Evaluator parameters, e.g. min_profit_threshold (percent)",
    )
    gas_price: float = Field(default=0.001, description="Gas cost per action (USD)")
    slippage: float = Field(default=0.005, description="Slippage as a fraction (0-1)")
    transaction_fee: float = Field(default=0.25, description="Fee per action (USD)")

    @field_validator("strategy_id")
    @classmethod
    def strip_strategy_id(cls, v: str) -> str:
        return v.strip()

    def to_config(self) -> BacktestConfig:
        """Convert the request into a domain configuration."""
        return BacktestConfig(
            name=self.name,
            market=MarketConfig(
                pool_address=self.pool_address,
                token_x_symbol=self.token_x_symbol,
                token_y_symbol=self.token_y_symbol,
            ),
            timeframe=TimeframeConfig(
                start_date=self.start_date, end_date=self.end_date, interval=self.interval
            ),
            capital=CapitalConfig(initial_amount=self.initial_capital),
            strategy=StrategyConfig(id=self.strategy_id, parameters=dict(self.strategy_parameters)),
            costs=CostConfig(
                gas_price=self.gas_price,
                slippage=self.slippage,
                transaction_fee=self.transaction_fee,
            ),
        )


class ValidationResponse(BaseModel):
    """Response model for configuration validation."""

    is_valid: bool
    errors: list[str]


class CancelResponse(BaseModel):
    cancelled: bool
    message: str


class StatusResponse(BaseModel):
    running: bool


class StrategiesResponse(BaseModel):
    """Response model for available strategies."""

    strategies: list[str]


class HistoricalDataResponse(BaseModel):
    """Response model for historical data."""

    pool_address: str
    interval: Interval
    source: str
    data_points: int
    coverage: float
    data: list[dict]


class ErrorResponse(BaseModel):
    """Response model for errors."""

    error: str
    message: str
    details: dict | None = None
