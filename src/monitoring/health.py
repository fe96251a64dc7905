"""Health classification.

This module turns a metrics snapshot into health verdicts:
- Database: error rate (critical) and latency (warning)
- Stream: silence (critical) and accumulated errors (warning)
- Memory: process memory (warning only)
- Alert system: delivery failure rate (warning / critical)

The classifier is a pure function of the snapshot, the thresholds and
the reference time; nothing is cached between calls.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from src.core.config import PerformanceThresholds
from src.core.constants import ALERT_FAILURE_CRITICAL_RATE, ALERT_FAILURE_WARNING_RATE
from src.core.models import HealthLevel
from src.monitoring.metrics import MetricsSnapshot


CheckResult = tuple[HealthLevel, Optional[str]]


class ServiceHealth(BaseModel):
    """Per-subsystem verdicts."""

    database: HealthLevel = HealthLevel.HEALTHY
    stream: HealthLevel = HealthLevel.HEALTHY
    memory: HealthLevel = HealthLevel.HEALTHY
    alert_system: HealthLevel = HealthLevel.HEALTHY


class HealthStatus(BaseModel):
    """Overall health verdict with per-subsystem detail."""

    overall: HealthLevel = Field(..., description="Worst subsystem verdict")
    services: ServiceHealth = Field(..., description="Per-subsystem verdicts")
    issues: List[str] = Field(default_factory=list, description="Human-readable issues")
    uptime_ms: float = Field(0.0, description="Uptime in milliseconds")

    @property
    def is_healthy(self) -> bool:
        return self.overall is HealthLevel.HEALTHY


def worst(levels: List[HealthLevel]) -> HealthLevel:
    """Pick the most severe verdict."""
    return max(levels, key=lambda level: level.severity, default=HealthLevel.HEALTHY)


class HealthClassifier:
    """Derives health verdicts from metrics snapshots."""

    def __init__(self, thresholds: Optional[PerformanceThresholds] = None):
        """Initialize health classifier.

        Args:
            thresholds: Threshold table (defaults when omitted)
        """
        self.thresholds = thresholds or PerformanceThresholds()

    def check_database(self, snapshot: MetricsSnapshot) -> CheckResult:
        """Check database error rate and latency.

        Args:
            snapshot: Metrics snapshot

        Returns:
            Tuple of (verdict, issue)
        """
        total = snapshot.database_operations + snapshot.failed_database_operations
        if total > 0:
            error_rate = snapshot.failed_database_operations / total
            if error_rate > self.thresholds.max_error_rate:
                return (
                    HealthLevel.CRITICAL,
                    f"High database error rate: {error_rate * 100:.2f}%",
                )

        if snapshot.database_latency_ms > self.thresholds.max_database_latency_ms:
            return (
                HealthLevel.WARNING,
                f"High database latency: {snapshot.database_latency_ms:.2f}ms",
            )
        return (HealthLevel.HEALTHY, None)

    def check_stream(self, snapshot: MetricsSnapshot, now: datetime) -> CheckResult:
        """Check stream silence and error count.

        Args:
            snapshot: Metrics snapshot
            now: Reference time for the silence check

        Returns:
            Tuple of (verdict, issue)
        """
        silence_ms = (now - snapshot.last_message_time).total_seconds() * 1000.0
        if silence_ms > self.thresholds.max_stream_silence_ms:
            return (
                HealthLevel.CRITICAL,
                f"Stream silent for {round(silence_ms / 1000)}s",
            )

        if snapshot.stream_errors > self.thresholds.max_stream_errors:
            return (
                HealthLevel.WARNING,
                f"Multiple stream errors: {snapshot.stream_errors}",
            )
        return (HealthLevel.HEALTHY, None)

    def check_memory(self, snapshot: MetricsSnapshot) -> CheckResult:
        """Check process memory. Memory pressure never goes past warning."""
        if snapshot.memory_usage.used > self.thresholds.max_memory_bytes:
            return (
                HealthLevel.WARNING,
                f"High memory usage: {snapshot.memory_usage.used_mb}MB",
            )
        return (HealthLevel.HEALTHY, None)

    def check_alert_system(self, snapshot: MetricsSnapshot) -> CheckResult:
        """Check alert delivery failure rate."""
        total = snapshot.alerts_sent + snapshot.alerts_failed
        if total == 0:
            return (HealthLevel.HEALTHY, None)

        failure_rate = snapshot.alerts_failed / total
        if failure_rate > ALERT_FAILURE_CRITICAL_RATE:
            return (
                HealthLevel.CRITICAL,
                f"High alert failure rate: {failure_rate * 100:.2f}%",
            )
        if failure_rate > ALERT_FAILURE_WARNING_RATE:
            return (
                HealthLevel.WARNING,
                f"Some alert failures: {failure_rate * 100:.2f}%",
            )
        return (HealthLevel.HEALTHY, None)

    def classify(self, snapshot: MetricsSnapshot, now: Optional[datetime] = None) -> HealthStatus:
        """Classify a snapshot.

        Args:
            snapshot: Metrics snapshot
            now: Reference time (defaults to the snapshot timestamp)

        Returns:
            Health status with issues in database, stream, memory, alert order
        """
        now = now or snapshot.timestamp

        database, db_issue = self.check_database(snapshot)
        stream, stream_issue = self.check_stream(snapshot, now)
        memory, memory_issue = self.check_memory(snapshot)
        alert_system, alert_issue = self.check_alert_system(snapshot)

        issues = [
            issue
            for issue in (db_issue, stream_issue, memory_issue, alert_issue)
            if issue is not None
        ]

        return HealthStatus(
            overall=worst([database, stream, memory, alert_system]),
            services=ServiceHealth(
                database=database,
                stream=stream,
                memory=memory,
                alert_system=alert_system,
            ),
            issues=issues,
            uptime_ms=snapshot.connection_uptime_ms,
        )
