"""
Mapping of domain exceptions to HTTP responses.
"""

from fastapi import Request
from fastapi.responses import JSONResponse

from dlmm_backtest.core.exceptions.backtest import (
    BacktestException,
    ConfigurationError,
    DataUnavailableError,
    ValidationError,
)


def status_for(exc: BacktestException) -> int:
    if isinstance(exc, ConfigurationError | ValidationError):
        return 422
    if isinstance(exc, DataUnavailableError):
        return 404
    return 500


async def backtest_error_handler(request: Request, exc: BacktestException) -> JSONResponse:
    body = {"error": type(exc).__name__, "message": str(exc)}
    if isinstance(exc, ConfigurationError):
        body["details"] = {"errors": exc.errors}
    return JSONResponse(status_code=status_for(exc), content=body)
