"""Tests for dashboard views over the monitor."""

import json

import pytest

from src.core.models import ActivityKind, TokenMetrics
from src.monitoring.dashboard import CSV_HEADER, PerformanceDashboard, calculate_activity_rate
from src.monitoring.monitor import PerformanceMonitor


@pytest.fixture
def monitor(clock, probe):
    """Monitor for USDC and SOL without periodic reports."""
    return PerformanceMonitor(["USDC", "SOL"], clock=clock, system_probe=probe)


@pytest.fixture
def dashboard(monitor):
    """Dashboard over the monitor."""
    return PerformanceDashboard(monitor)


def test_activity_rate(clock):
    """Test transactions per elapsed minute."""
    token = TokenMetrics(symbol="SOL", transactions=10, last_activity=clock.now)
    clock.advance(120)
    assert calculate_activity_rate(token, clock.now) == pytest.approx(5.0)


def test_activity_rate_no_elapsed_time(clock):
    """Test zero elapsed time gives a zero rate."""
    token = TokenMetrics(symbol="SOL", transactions=10, last_activity=clock.now)
    assert calculate_activity_rate(token, clock.now) == 0.0


def test_metrics_json_is_serializable(dashboard, monitor):
    """Test the metrics view can be dumped as JSON."""
    monitor.record_token_activity("USDC", ActivityKind.TRANSACTION, 250.0)
    data = dashboard.metrics_json()
    encoded = json.loads(json.dumps(data))
    assert encoded["token_metrics"]["USDC"]["largest_transaction"] == 250.0
    assert encoded["memory_usage"]["rss"] == 100 * 1024 * 1024
    assert "timestamp" in encoded


def test_health_json(dashboard):
    """Test the health view uses plain string verdicts."""
    data = dashboard.health_json()
    assert data["overall"] == "healthy"
    assert data["services"]["alert_system"] == "healthy"
    assert data["issues"] == []


def test_export_csv(dashboard, monitor):
    """Test CSV export has the header and one matching row."""
    monitor.record_stream_error()
    header, row = dashboard.export_csv().split("\n")
    assert header == CSV_HEADER
    fields = row.split(",")
    assert len(fields) == len(CSV_HEADER.split(","))
    assert fields[5] == "100"
    assert fields[7] == "1"


def test_token_details(dashboard, monitor):
    """Test per-token details for five SOL account updates."""
    for _ in range(5):
        monitor.record_token_activity("SOL", ActivityKind.ACCOUNT)
    details = dashboard.token_details("SOL")
    assert details["account_updates"] == 5
    assert details["transactions"] == 0
    assert details["activity_rate"] == 0.0


def test_token_details_untracked(dashboard):
    """Test untracked symbols have no details."""
    assert dashboard.token_details("BONK") is None


def test_formatted_metrics(dashboard, monitor):
    """Test console summary lists health and active tokens."""
    monitor.record_token_activity("SOL", ActivityKind.ACCOUNT)
    text = dashboard.formatted_metrics()
    assert "Health Status: HEALTHY" in text
    assert "SOL: 1 accounts, 0 txs" in text
    assert "No issues detected" in text


def test_formatted_metrics_lists_issues(dashboard, clock):
    """Test console summary lists health issues."""
    clock.advance(40)
    text = dashboard.formatted_metrics()
    assert "Health Status: CRITICAL" in text
    assert "   - Stream silent for 40s" in text


def test_performance_summary(dashboard, clock):
    """Test the alerting summary message and metrics."""
    clock.advance(600)
    summary = dashboard.performance_summary()
    assert summary["status"] == "critical"
    assert summary["message"] == "System critical: Stream silent for 600s"
    assert summary["metrics"]["uptime_minutes"] == 10
    assert summary["metrics"]["memory_usage_mb"] == 100


def test_performance_summary_healthy(dashboard):
    """Test a healthy summary has no issue suffix."""
    assert dashboard.performance_summary()["message"] == "System healthy"


def test_check_degradation_low_throughput(dashboard):
    """Test an idle monitor reports low throughput."""
    result = dashboard.check_degradation()
    assert result["degraded"] is True
    assert "Very low message throughput" in result["issues"]


def test_check_degradation_healthy(dashboard, monitor, clock):
    """Test a busy healthy monitor is not degraded."""
    clock.advance(10)
    for _ in range(100):
        monitor.record_message_processed()
    result = dashboard.check_degradation()
    assert result == {"degraded": False, "issues": []}
