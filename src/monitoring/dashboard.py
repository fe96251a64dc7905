"""Dashboard views over the performance monitor.

Read-only formatting of snapshots for consoles, CSV export, per-token
queries and alerting summaries.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from src.core.constants import (
    DEGRADED_MAX_DATABASE_LATENCY_MS,
    DEGRADED_MAX_MEMORY_MB,
    DEGRADED_MAX_PROCESSING_TIME_MS,
    DEGRADED_MIN_MESSAGES_PER_SECOND,
)
from src.core.models import HealthLevel, TokenMetrics
from src.monitoring.monitor import PerformanceMonitor

CSV_HEADER = (
    "timestamp,messages_per_second,total_messages,avg_processing_time,"
    "db_latency,memory_mb,alerts_sent,stream_errors"
)


def calculate_activity_rate(token: TokenMetrics, now: datetime) -> float:
    """Transactions per minute elapsed since the token's last activity.

    Returns 0.0 when no time has elapsed.
    """
    minutes = (now - token.last_activity).total_seconds() / 60.0
    if minutes <= 0:
        return 0.0
    return token.transactions / minutes


class PerformanceDashboard:
    """Formats monitor state for dashboards and exports."""

    def __init__(self, monitor: PerformanceMonitor):
        self.monitor = monitor

    def metrics_json(self) -> Dict[str, Any]:
        """Snapshot as a JSON-ready dict."""
        snapshot = self.monitor.get_snapshot()
        return {
            "timestamp": snapshot.timestamp.isoformat(),
            "messages_per_second": snapshot.messages_per_second,
            "total_messages_processed": snapshot.total_messages_processed,
            "average_processing_time_ms": snapshot.average_processing_time_ms,
            "database_latency_ms": snapshot.database_latency_ms,
            "database_operations": snapshot.database_operations,
            "failed_database_operations": snapshot.failed_database_operations,
            "memory_usage": snapshot.memory_usage.model_dump(),
            "cpu_usage_seconds": snapshot.cpu_usage_seconds,
            "connection_uptime_ms": snapshot.connection_uptime_ms,
            "last_message_time": snapshot.last_message_time.isoformat(),
            "stream_errors": snapshot.stream_errors,
            "reconnection_count": snapshot.reconnection_count,
            "alerts_sent": snapshot.alerts_sent,
            "alerts_failed": snapshot.alerts_failed,
            "token_metrics": {
                symbol: token.model_dump(mode="json")
                for symbol, token in snapshot.token_metrics.items()
            },
        }

    def health_json(self) -> Dict[str, Any]:
        return self.monitor.get_health_status().model_dump(mode="json")

    def formatted_metrics(self) -> str:
        """Multi-line summary for console display."""
        snapshot = self.monitor.get_snapshot()
        health = self.monitor.classifier.classify(snapshot)
        uptime_minutes = snapshot.connection_uptime_ms / (1000 * 60)

        lines = [
            "PERFORMANCE DASHBOARD",
            "========================",
            "",
            f"Health Status: {health.overall.value.upper()}",
            f"Messages/sec: {snapshot.messages_per_second:.2f}",
            f"Avg Processing: {snapshot.average_processing_time_ms:.2f}ms",
            f"Database Latency: {snapshot.database_latency_ms:.2f}ms",
            f"Memory Usage: {snapshot.memory_mb}MB",
            f"Uptime: {uptime_minutes:.2f} minutes",
            f"Total Messages: {snapshot.total_messages_processed}",
            f"Alerts Sent: {snapshot.alerts_sent}",
            f"Stream Errors: {snapshot.stream_errors}",
            "",
            "Token Activity:",
        ]
        for token in snapshot.token_metrics.values():
            if token.account_updates > 0 or token.transactions > 0:
                lines.append(f"   {token.symbol}: {token.account_updates} accounts, {token.transactions} txs")
        lines.append("")
        if health.issues:
            lines.append("Issues:")
            lines.extend(f"   - {issue}" for issue in health.issues)
        else:
            lines.append("No issues detected")
        return "\n".join(lines)

    def export_csv(self) -> str:
        """Header plus a single CSV row of headline metrics."""
        snapshot = self.monitor.get_snapshot()
        row = ",".join(
            str(value)
            for value in (
                snapshot.timestamp.isoformat(),
                snapshot.messages_per_second,
                snapshot.total_messages_processed,
                snapshot.average_processing_time_ms,
                snapshot.database_latency_ms,
                snapshot.memory_mb,
                snapshot.alerts_sent,
                snapshot.stream_errors,
            )
        )
        return f"{CSV_HEADER}\n{row}"

    def token_details(self, symbol: str) -> Optional[Dict[str, Any]]:
        """Metrics of one token plus its activity rate; None if untracked."""
        snapshot = self.monitor.get_snapshot()
        token = snapshot.token_metrics.get(symbol)
        if token is None:
            return None
        return {
            "symbol": token.symbol,
            "account_updates": token.account_updates,
            "transactions": token.transactions,
            "average_transaction_size": token.average_transaction_size,
            "largest_transaction": token.largest_transaction,
            "last_activity": token.last_activity.isoformat(),
            "activity_rate": calculate_activity_rate(token, snapshot.timestamp),
        }

    def performance_summary(self) -> Dict[str, Any]:
        """Status, one-line message and headline metrics for alerting."""
        snapshot = self.monitor.get_snapshot()
        health = self.monitor.classifier.classify(snapshot)

        message = f"System {health.overall.value}"
        if health.issues:
            message += f": {', '.join(health.issues)}"

        return {
            "status": health.overall.value,
            "message": message,
            "metrics": {
                "messages_per_second": snapshot.messages_per_second,
                "database_latency_ms": snapshot.database_latency_ms,
                "memory_usage_mb": snapshot.memory_mb,
                "uptime_minutes": round(snapshot.connection_uptime_ms / (1000 * 60)),
                "total_messages": snapshot.total_messages_processed,
            },
        }

    def check_degradation(self) -> Dict[str, Any]:
        """Health issues plus coarse throughput and latency checks."""
        snapshot = self.monitor.get_snapshot()
        health = self.monitor.classifier.classify(snapshot)

        issues = []
        if snapshot.messages_per_second < DEGRADED_MIN_MESSAGES_PER_SECOND:
            issues.append("Very low message throughput")
        if snapshot.average_processing_time_ms > DEGRADED_MAX_PROCESSING_TIME_MS:
            issues.append("High processing latency")
        if snapshot.database_latency_ms > DEGRADED_MAX_DATABASE_LATENCY_MS:
            issues.append("High database latency")
        if snapshot.memory_usage.used / 1024 / 1024 > DEGRADED_MAX_MEMORY_MB:
            issues.append("High memory usage")

        return {
            "degraded": health.overall is HealthLevel.CRITICAL or bool(issues),
            "issues": health.issues + issues,
        }
