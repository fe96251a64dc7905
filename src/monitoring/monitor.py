"""Performance monitor.

Bundles the timer registry, metrics collector, health classifier and
reporter behind one object. Build one per process and pass it to the
components that record into it; the process wiring owns start/stop.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, Optional, Union

from rich.console import Console

from src.core.config import MonitoringConfig, Settings
from src.core.models import ActivityKind, TokenMetrics, utcnow
from src.core.tokens import get_enabled_tokens
from src.monitoring.health import HealthClassifier, HealthStatus
from src.monitoring.metrics import Clock, MetricsCollector, MetricsSnapshot, SystemProbe, read_process_usage
from src.monitoring.reporter import PerformanceReporter
from src.monitoring.timers import TimerRegistry

logger = logging.getLogger(__name__)


@dataclass
class TimedOperation:
    operation_id: str
    operation: str
    duration_ms: float = 0.0


class PerformanceMonitor:
    """Records stream processing telemetry and answers health queries."""

    def __init__(
        self,
        token_symbols: Iterable[str],
        config: Optional[MonitoringConfig] = None,
        clock: Clock = utcnow,
        system_probe: SystemProbe = read_process_usage,
        on_report: Optional[Callable[[str], None]] = None,
        console: Optional[Console] = None,
    ):
        """Initialize performance monitor.

        Args:
            token_symbols: Symbols to track
            config: Monitoring configuration
            clock: Source of the current time
            system_probe: Reads process memory and CPU
            on_report: Receives periodic report text (console when omitted)
            console: Rich console for printed reports
        """
        self.config = config or MonitoringConfig()
        self.timers = TimerRegistry()
        self.collector = MetricsCollector(token_symbols, clock=clock, system_probe=system_probe)
        self.classifier = HealthClassifier(self.config.thresholds)
        self.reporter = PerformanceReporter(
            self.collector,
            self.classifier,
            interval_seconds=self.config.report_interval_seconds,
            on_report=on_report,
            console=console,
        )

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "PerformanceMonitor":
        """Build a monitor for the supported tokens and thresholds in settings.

        Symbols with no registry entry are left out.
        """
        tokens = [t.symbol for t in get_enabled_tokens(settings.tracked_tokens)]
        return cls(tokens, config=settings.monitoring, **kwargs)

    # Lifecycle

    def start(self) -> None:
        """Start periodic reporting (needs a running event loop)."""
        if self.config.enable_periodic_reports:
            self.reporter.start()

    def stop(self) -> None:
        """Stop periodic reporting. Recorded metrics are kept."""
        self.reporter.stop()

    @property
    def is_running(self) -> bool:
        return self.reporter.is_running

    # Timers

    def start_timer(self, operation_id: str, operation: str) -> None:
        self.timers.start(operation_id, operation)

    def stop_timer(self, operation_id: str) -> float:
        """Stop a timer; returns elapsed ms, 0.0 for unknown ids."""
        return self.timers.stop(operation_id)

    @contextmanager
    def track(self, operation_id: str, operation: str) -> Iterator[TimedOperation]:
        """Time the enclosed block; duration is set on the yielded object on exit."""
        timed = TimedOperation(operation_id=operation_id, operation=operation)
        self.timers.start(operation_id, operation)
        try:
            yield timed
        finally:
            timed.duration_ms = self.timers.stop(operation_id)

    # Recording

    def record_message_processed(self) -> None:
        self.collector.record_message_processed()

    def record_processing_time(self, duration_ms: float) -> None:
        self.collector.record_processing_time(duration_ms)

    def record_database_operation(self, latency_ms: float, success: bool = True) -> None:
        self.collector.record_database_operation(latency_ms, success)

    def record_token_activity(
        self,
        symbol: str,
        kind: Union[ActivityKind, str],
        amount: Optional[float] = None,
    ) -> None:
        self.collector.record_token_activity(symbol, kind, amount)

    def record_stream_error(self) -> None:
        self.collector.record_stream_error()

    def record_reconnection(self) -> None:
        self.collector.record_reconnection()

    def record_alert_sent(self, success: bool = True) -> None:
        self.collector.record_alert_sent(success)

    # Queries

    def get_snapshot(self) -> MetricsSnapshot:
        return self.collector.get_snapshot()

    def get_token_metrics(self, symbol: str) -> Optional[TokenMetrics]:
        return self.collector.get_token_metrics(symbol)

    def get_health_status(self) -> HealthStatus:
        return self.classifier.classify(self.collector.get_snapshot())

    def report(self) -> str:
        """Formatted report text, taken now."""
        return self.reporter.report()

    def print_report(self) -> None:
        self.reporter.print_report()
