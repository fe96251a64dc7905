"""Monitoring module for stream telemetry and system health."""

from src.monitoring.timers import TimerRegistry
from src.monitoring.metrics import (
    MetricsSnapshot,
    MetricsCollector,
    read_process_usage,
)
from src.monitoring.health import (
    HealthClassifier,
    HealthStatus,
    ServiceHealth,
)
from src.monitoring.reporter import PerformanceReporter, format_report
from src.monitoring.monitor import PerformanceMonitor
from src.monitoring.dashboard import PerformanceDashboard

__all__ = [
    "TimerRegistry",
    "MetricsSnapshot",
    "MetricsCollector",
    "read_process_usage",
    "HealthClassifier",
    "HealthStatus",
    "ServiceHealth",
    "PerformanceReporter",
    "format_report",
    "PerformanceMonitor",
    "PerformanceDashboard",
]
