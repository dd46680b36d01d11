"""
FastAPI main application for the DLMM backtesting service.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dlmm_backtest.core.exceptions.backtest import BacktestException
from dlmm_backtest.engine import BacktestEngine
from dlmm_backtest.infrastructure.data import HistoricalDataService

from .errors import backtest_error_handler
from .routers import backtest, data

API_VERSION = "1.0.0"


def create_app(
    engine: BacktestEngine | None = None,
    data_service: HistoricalDataService | None = None,
) -> FastAPI:
    """Build the application around one shared data service and engine."""
    data_service = data_service or (engine.data_service if engine else HistoricalDataService())
    engine = engine or BacktestEngine(data_service=data_service)

    app = FastAPI(
        title="DLMM Backtesting API",
        version=API_VERSION,
        description="API for backtesting DLMM liquidity provision strategies",
    )
    app.state.engine = engine
    app.state.data_service = data_service

    app.add_exception_handler(BacktestException, backtest_error_handler)

    # For development, use environment-specific origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:3000",  # Development frontend
            "http://localhost:8080",  # Alternative development port
        ],
        allow_credentials=False,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", "Accept", "Origin", "X-Requested-With"],
    )

    app.include_router(backtest.router, prefix="/api/backtest", tags=["backtest"])
    app.include_router(data.router, prefix="/api/data", tags=["data"])

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint returning API information."""
        return {"message": "DLMM Backtesting API", "version": API_VERSION, "status": "running"}

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


# Module-level app for uvicorn (`uvicorn dlmm_backtest.api.main:app`)
app = create_app()
