"""Tests for metrics collection."""

import threading

import pytest

from src.core.models import ActivityKind
from src.monitoring.metrics import MetricsCollector


@pytest.fixture
def collector(clock, probe):
    """Collector tracking USDC and SOL on a fake clock."""
    return MetricsCollector(["USDC", "SOL"], clock=clock, system_probe=probe)


def test_initial_state(collector, clock):
    """Test a fresh collector starts at zero."""
    snapshot = collector.get_snapshot()
    assert snapshot.total_messages_processed == 0
    assert snapshot.messages_per_second == 0.0
    assert snapshot.database_operations == 0
    assert snapshot.last_message_time == clock.now
    assert set(snapshot.token_metrics) == {"USDC", "SOL"}


def test_database_latency_is_mean_of_successes(collector):
    """Test average latency equals the arithmetic mean."""
    for latency in (100, 200, 300):
        collector.record_database_operation(latency, success=True)
    snapshot = collector.get_snapshot()
    assert snapshot.database_latency_ms == pytest.approx(200.0)
    assert snapshot.database_operations == 3
    assert snapshot.failed_database_operations == 0


def test_database_latency_order_independent(clock, probe):
    """Test call order does not change the average."""
    latencies = [12.5, 700, 3, 48, 91.25]
    forward = MetricsCollector([], clock=clock, system_probe=probe)
    backward = MetricsCollector([], clock=clock, system_probe=probe)
    for latency in latencies:
        forward.record_database_operation(latency)
    for latency in reversed(latencies):
        backward.record_database_operation(latency)
    expected = sum(latencies) / len(latencies)
    assert forward.get_snapshot().database_latency_ms == pytest.approx(expected)
    assert backward.get_snapshot().database_latency_ms == pytest.approx(expected)


def test_failed_database_operations_skip_latency(collector):
    """Test failures only bump the failure counter."""
    collector.record_database_operation(100, success=True)
    collector.record_database_operation(9999, success=False)
    snapshot = collector.get_snapshot()
    assert snapshot.database_latency_ms == pytest.approx(100.0)
    assert snapshot.database_operations == 1
    assert snapshot.failed_database_operations == 1


def test_processing_time_average(collector):
    """Test processing time is averaged over its own samples."""
    collector.record_processing_time(10)
    collector.record_processing_time(30)
    assert collector.get_snapshot().average_processing_time_ms == pytest.approx(20.0)


def test_messages_per_second(collector, clock):
    """Test message rate is a lifetime average over uptime."""
    clock.advance(10)
    for _ in range(50):
        collector.record_message_processed()
    snapshot = collector.get_snapshot()
    assert snapshot.total_messages_processed == 50
    assert snapshot.messages_per_second == pytest.approx(5.0)
    assert snapshot.last_message_time == clock.now


def test_messages_per_second_zero_uptime(collector):
    """Test no division happens before any time has elapsed."""
    collector.record_message_processed()
    snapshot = collector.get_snapshot()
    assert snapshot.total_messages_processed == 1
    assert snapshot.messages_per_second == 0.0


def test_token_largest_and_average(collector):
    """Test largest and average transaction size per token."""
    for amount in (5.0, 20.0, 11.0):
        collector.record_token_activity("USDC", ActivityKind.TRANSACTION, amount)
    token = collector.get_token_metrics("USDC")
    assert token.transactions == 3
    assert token.largest_transaction == pytest.approx(20.0)
    assert token.average_transaction_size == pytest.approx(12.0)


def test_token_average_ignores_empty_amounts(collector):
    """Test transactions without an amount do not dilute the average."""
    collector.record_token_activity("USDC", "transaction", 10.0)
    collector.record_token_activity("USDC", "transaction")
    collector.record_token_activity("USDC", "transaction", 30.0)
    token = collector.get_token_metrics("USDC")
    assert token.transactions == 3
    assert token.average_transaction_size == pytest.approx(20.0)


def test_sol_account_updates(collector):
    """Test five SOL account updates are counted."""
    for _ in range(5):
        collector.record_token_activity("SOL", ActivityKind.ACCOUNT)
    token = collector.get_token_metrics("SOL")
    assert token.account_updates == 5
    assert token.transactions == 0


def test_token_activity_updates_last_activity(collector, clock):
    """Test last_activity moves with the clock."""
    clock.advance(42)
    collector.record_token_activity("SOL", ActivityKind.ACCOUNT)
    assert collector.get_token_metrics("SOL").last_activity == clock.now


def test_unknown_token_is_ignored(collector):
    """Test activity for an untracked symbol changes nothing."""
    before = collector.get_snapshot().token_metrics
    collector.record_token_activity("BONK", ActivityKind.TRANSACTION, 1_000_000)
    after = collector.get_snapshot().token_metrics
    assert after == before
    assert "BONK" not in after
    assert collector.get_token_metrics("BONK") is None


def test_invalid_activity_kind_is_ignored(collector):
    """Test an unrecognised activity kind is dropped."""
    collector.record_token_activity("SOL", "swap", 5)
    token = collector.get_token_metrics("SOL")
    assert token.account_updates == 0
    assert token.transactions == 0


def test_snapshot_is_independent_copy(collector):
    """Test mutating a snapshot does not touch live state."""
    snapshot = collector.get_snapshot()
    snapshot.token_metrics["SOL"].account_updates = 99
    snapshot.token_metrics.pop("USDC")
    fresh = collector.get_snapshot()
    assert fresh.token_metrics["SOL"].account_updates == 0
    assert "USDC" in fresh.token_metrics


def test_snapshot_not_affected_by_later_records(collector):
    """Test a snapshot keeps its values after more recording."""
    snapshot = collector.get_snapshot()
    collector.record_stream_error()
    collector.record_token_activity("SOL", ActivityKind.ACCOUNT)
    assert snapshot.stream_errors == 0
    assert snapshot.token_metrics["SOL"].account_updates == 0


def test_counters(collector):
    """Test stream, reconnection and alert counters."""
    collector.record_stream_error()
    collector.record_stream_error()
    collector.record_reconnection()
    collector.record_alert_sent(True)
    collector.record_alert_sent(False)
    collector.record_alert_sent()
    snapshot = collector.get_snapshot()
    assert snapshot.stream_errors == 2
    assert snapshot.reconnection_count == 1
    assert snapshot.alerts_sent == 2
    assert snapshot.alerts_failed == 1


def test_system_metrics_from_probe(collector, clock):
    """Test memory, CPU and uptime come from the probe and clock."""
    clock.advance(3600)
    snapshot = collector.get_snapshot()
    assert snapshot.memory_mb == 100
    assert snapshot.cpu_usage_seconds == pytest.approx(1.5)
    assert snapshot.connection_uptime_ms == pytest.approx(3_600_000)
    assert snapshot.uptime_hours == pytest.approx(1.0)


def test_concurrent_recording(collector):
    """Test counters stay exact under concurrent writers."""

    def worker():
        for _ in range(1000):
            collector.record_database_operation(10)
            collector.record_token_activity("USDC", ActivityKind.ACCOUNT)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    snapshot = collector.get_snapshot()
    assert snapshot.database_operations == 4000
    assert snapshot.database_latency_ms == pytest.approx(10.0)
    assert snapshot.token_metrics["USDC"].account_updates == 4000
