"""Tests for the dashboard web app."""

import logging

import pytest
from fastapi.testclient import TestClient

from src.apps.dashboard import DashboardLogHandler, create_app
from src.core.models import ActivityKind
from src.monitoring.dashboard import CSV_HEADER
from src.monitoring.monitor import PerformanceMonitor


@pytest.fixture
def monitor(clock, probe):
    """Monitor for USDC and SOL."""
    return PerformanceMonitor(["USDC", "SOL"], clock=clock, system_probe=probe)


@pytest.fixture
def log_handler():
    """Dashboard log handler attached to a test logger."""
    handler = DashboardLogHandler(capacity=3)
    test_logger = logging.getLogger("dashboard-test")
    test_logger.addHandler(handler)
    test_logger.setLevel(logging.INFO)
    yield handler
    test_logger.removeHandler(handler)


@pytest.fixture
def client(monitor, log_handler):
    """Test client for the dashboard app."""
    return TestClient(create_app(monitor, log_handler=log_handler, update_interval=0.05))


def test_index(client):
    """Test the HTML page is served."""
    response = client.get("/")
    assert response.status_code == 200
    assert "Solana Indexer Dashboard" in response.text


def test_metrics(client, monitor):
    """Test the metrics endpoint."""
    monitor.record_database_operation(40)
    data = client.get("/api/metrics").json()
    assert data["database_operations"] == 1
    assert set(data["token_metrics"]) == {"USDC", "SOL"}


def test_health(client):
    """Test the health endpoint."""
    data = client.get("/api/health").json()
    assert data["overall"] == "healthy"
    assert data["services"]["database"] == "healthy"


def test_health_critical(client, clock):
    """Test the health endpoint reflects stream silence."""
    clock.advance(45)
    data = client.get("/api/health").json()
    assert data["services"]["stream"] == "critical"
    assert "Stream silent for 45s" in data["issues"]


def test_metrics_csv(client):
    """Test CSV export."""
    response = client.get("/api/metrics.csv")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert response.text.splitlines()[0] == CSV_HEADER


def test_report(client):
    """Test the plain text report."""
    assert "PERFORMANCE DASHBOARD" in client.get("/api/report").text


def test_token(client, monitor):
    """Test per-token details; symbols are case-insensitive."""
    for _ in range(5):
        monitor.record_token_activity("SOL", ActivityKind.ACCOUNT)
    data = client.get("/api/tokens/sol").json()
    assert data["account_updates"] == 5
    assert data["transactions"] == 0


def test_token_untracked(client):
    """Test untracked tokens return 404."""
    assert client.get("/api/tokens/BONK").status_code == 404


def test_summary_and_degradation(client):
    """Test summary and degradation endpoints."""
    assert client.get("/api/summary").json()["status"] == "healthy"
    degradation = client.get("/api/degradation").json()
    assert degradation["degraded"] is True
    assert "Very low message throughput" in degradation["issues"]


def test_logs(client):
    """Test recent log lines are buffered and capped."""
    test_logger = logging.getLogger("dashboard-test")
    for i in range(5):
        test_logger.info(f"line {i}")
    test_logger.info("whale seen", extra={"token": "SOL"})

    logs = client.get("/api/logs").json()
    assert len(logs) == 3
    assert logs[-1]["message"] == "[SOL] whale seen"
    assert logs[-1]["level"] == "INFO"


def test_websocket_pushes_metrics(client):
    """Test the WebSocket sends a metrics update."""
    with client.websocket_connect("/ws") as websocket:
        message = websocket.receive_json()
    assert message["type"] == "update"
    assert "messages_per_second" in message["data"]
