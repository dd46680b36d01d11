"""
Integration tests for the HTTP API.

Each test builds its own application around a seeded engine so runs are
reproducible and state does not leak between tests.
"""

import pytest
from fastapi.testclient import TestClient

from dlmm_backtest.api.main import create_app
from dlmm_backtest.engine import BacktestEngine
from dlmm_backtest.infrastructure.data import HistoricalDataConfig, HistoricalDataService

START = "2025-01-01T00:00:00Z"
END = "2025-01-02T00:00:00Z"


def backtest_payload(**overrides) -> dict:
    payload = {
        "name": "api test",
        "pool_address": "test-pool",
        "token_x_symbol": "SOL",
        "token_y_symbol": "USDC",
        "start_date": START,
        "end_date": END,
        "interval": "1h",
        "initial_capital": 1000.0,
        "strategy_id": "aggressive-rebalancing",
    }
    payload.update(overrides)
    return payload


class TestBacktestAPI:
    """Test suite for backtest endpoints."""

    @pytest.fixture
    def client(self) -> TestClient:
        data_service = HistoricalDataService(config=HistoricalDataConfig(seed=5))
        engine = BacktestEngine(data_service=data_service, seed=5)
        return TestClient(create_app(engine=engine))

    def test_should_report_service_info(self, client) -> None:
        """Test root and health endpoints."""
        root = client.get("/")
        health = client.get("/health")

        assert root.status_code == 200
        assert root.json()["message"] == "DLMM Backtesting API"
        assert health.json() == {"status": "healthy"}

    def test_should_run_backtest(self, client) -> None:
        """Test a complete run over HTTP."""
        response = client.post("/api/backtest/", json=backtest_payload())

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "completed"
        assert body["progress"] == 1.0
        assert len(body["time_series_data"]) == 24
        assert body["actions"][0]["type"] == "initialize"
        assert body["config"]["strategy"]["id"] == "aggressive-rebalancing"
        assert body["error"] is None

    def test_should_return_failed_run_as_result(self, client) -> None:
        """Test that run failures are results, not HTTP errors."""
        response = client.post("/api/backtest/", json=backtest_payload(strategy_id="missing"))

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "error"
        assert body["error"]["kind"] == "configuration"
        assert body["error"]["message"] == "Unknown strategy: missing"

    def test_should_validate_configuration(self, client) -> None:
        """Test the validate endpoint for good and bad input."""
        valid = client.post("/api/backtest/validate", json=backtest_payload())
        invalid = client.post(
            "/api/backtest/validate",
            json=backtest_payload(
                start_date=END, end_date=START, initial_capital=0.0, strategy_id="missing"
            ),
        )

        assert valid.json() == {"is_valid": True, "errors": []}
        assert invalid.status_code == 200
        assert invalid.json()["is_valid"] is False
        assert invalid.json()["errors"] == [
            "Start date must be before end date",
            "Initial capital must be positive",
            "Unknown strategy: missing",
        ]

    def test_should_reject_malformed_request(self, client) -> None:
        """Test schema validation."""
        response = client.post("/api/backtest/", json={"pool_address": "test-pool"})

        assert response.status_code == 422

    def test_should_report_idle_status(self, client) -> None:
        """Test status and cancel without a running backtest."""
        status = client.get("/api/backtest/status")
        cancel = client.post("/api/backtest/cancel")

        assert status.json() == {"running": False}
        assert cancel.json() == {"cancelled": False, "message": "No backtest is running"}


class TestDataAPI:
    """Test suite for data endpoints."""

    @pytest.fixture
    def client(self) -> TestClient:
        data_service = HistoricalDataService(config=HistoricalDataConfig(seed=9))
        return TestClient(create_app(data_service=data_service))

    def test_should_list_strategies(self, client) -> None:
        """Test registered strategy ids."""
        response = client.get("/api/data/strategies")

        assert response.status_code == 200
        assert "conservative-hold" in response.json()["strategies"]

    def test_should_return_history_and_cache_it(self, client) -> None:
        """Test historical data endpoint and cache statistics."""
        params = {"pool_address": "test-pool", "start_date": START, "end_date": END}

        first = client.get("/api/data/history", params=params)
        client.get("/api/data/history", params=params)
        stats = client.get("/api/data/cache").json()

        assert first.status_code == 200
        body = first.json()
        assert body["source"] == "mock"
        assert body["interval"] == "1h"
        assert body["data_points"] == 24
        assert len(body["data"]) == 24
        assert stats["size"] == 1
        assert stats["hits"] >= 1

    def test_should_map_invalid_range_to_422(self, client) -> None:
        """Test domain validation errors over HTTP."""
        params = {"pool_address": "test-pool", "start_date": END, "end_date": START}

        response = client.get("/api/data/history", params=params)

        assert response.status_code == 422
        assert response.json()["error"] == "ValidationError"

    def test_should_map_unavailable_data_to_404(self) -> None:
        """Test missing data without synthetic fallback."""
        service = HistoricalDataService(config=HistoricalDataConfig(fallback_to_synthetic=False))
        client = TestClient(create_app(data_service=service))
        params = {"pool_address": "test-pool", "start_date": START, "end_date": END}

        response = client.get("/api/data/history", params=params)

        assert response.status_code == 404
        assert response.json()["error"] == "DataUnavailableError"
