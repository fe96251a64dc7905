"""Periodic and on-demand performance reports."""

import asyncio
import logging
from typing import Callable, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from src.core.models import HealthLevel
from src.monitoring.health import HealthClassifier, HealthStatus
from src.monitoring.metrics import MetricsCollector, MetricsSnapshot

logger = logging.getLogger(__name__)

HEALTH_STYLES = {
    HealthLevel.HEALTHY: "green",
    HealthLevel.WARNING: "yellow",
    HealthLevel.CRITICAL: "red",
}


def format_report(snapshot: MetricsSnapshot, health: HealthStatus) -> str:
    """Render a plain-text performance report."""
    lines = ["=" * 60, "PERFORMANCE REPORT", "=" * 60]
    lines.append(f"Overall Health: {health.overall.value.upper()}")
    if health.issues:
        lines.append("Issues:")
        lines.extend(f"   - {issue}" for issue in health.issues)

    lines.append("")
    lines.append("Performance:")
    lines.append(f"   Messages/sec: {snapshot.messages_per_second:.2f}")
    lines.append(f"   Avg processing: {snapshot.average_processing_time_ms:.2f}ms")
    lines.append(f"   DB latency: {snapshot.database_latency_ms:.2f}ms")
    lines.append(f"   Memory: {snapshot.memory_mb}MB")

    lines.append("")
    lines.append("Token Activity:")
    for token in snapshot.token_metrics.values():
        if token.account_updates > 0 or token.transactions > 0:
            lines.append(f"   {token.symbol}: {token.account_updates} accounts, {token.transactions} txs")

    lines.append("")
    lines.append(f"Uptime: {snapshot.uptime_hours:.2f} hours")
    lines.append("=" * 60)
    return "\n".join(lines)


class PerformanceReporter:
    """Emits a report on a fixed interval and on demand.

    The reporter only reads: each report takes a fresh snapshot from the
    collector and classifies it. Stopping cancels future reports and
    leaves recorded metrics untouched.
    """

    def __init__(
        self,
        collector: MetricsCollector,
        classifier: HealthClassifier,
        interval_seconds: float = 60.0,
        on_report: Optional[Callable[[str], None]] = None,
        console: Optional[Console] = None,
    ):
        """Initialize reporter.

        Args:
            collector: Metrics source
            classifier: Health classifier
            interval_seconds: Seconds between periodic reports
            on_report: Receives the text of each periodic report; when
                omitted reports are printed to the console
            console: Rich console for printed reports
        """
        self.collector = collector
        self.classifier = classifier
        self.interval_seconds = interval_seconds
        self.on_report = on_report
        self.console = console or Console()
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def collect(self) -> tuple[MetricsSnapshot, HealthStatus]:
        """Take a snapshot and classify it."""
        snapshot = self.collector.get_snapshot()
        return snapshot, self.classifier.classify(snapshot)

    def report(self) -> str:
        """Build a report now, without waiting for the next tick."""
        snapshot, health = self.collect()
        return format_report(snapshot, health)

    def print_report(self) -> None:
        """Print a colored report to the console."""
        snapshot, health = self.collect()
        style = HEALTH_STYLES[health.overall]

        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="magenta")
        table.add_row("Messages/sec", f"{snapshot.messages_per_second:.2f}")
        table.add_row("Total messages", str(snapshot.total_messages_processed))
        table.add_row("Avg processing", f"{snapshot.average_processing_time_ms:.2f}ms")
        table.add_row("DB latency", f"{snapshot.database_latency_ms:.2f}ms")
        table.add_row("Memory", f"{snapshot.memory_mb}MB")
        table.add_row("Uptime", f"{snapshot.uptime_hours:.2f} hours")
        for token in snapshot.token_metrics.values():
            if token.account_updates > 0 or token.transactions > 0:
                table.add_row(token.symbol, f"{token.account_updates} accounts, {token.transactions} txs")

        self.console.print(
            Panel.fit(
                f"[bold {style}]Overall Health: {health.overall.value.upper()}[/bold {style}]",
                title="Performance Report",
            )
        )
        for issue in health.issues:
            self.console.print(f"[red]  - {issue}[/red]")
        self.console.print(table)

    def _emit(self) -> None:
        if self.on_report is not None:
            self.on_report(self.report())
        else:
            self.print_report()

    async def _report_loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                self._emit()
            except Exception as e:
                logger.error(f"Error emitting performance report: {e}", exc_info=True)

    def start(self) -> None:
        """Start periodic reporting on the running event loop."""
        if self.is_running:
            return
        self._task = asyncio.get_running_loop().create_task(self._report_loop())
        logger.info(f"Periodic performance reports every {self.interval_seconds:g}s")

    def stop(self) -> None:
        """Cancel periodic reporting. Safe to call more than once."""
        if self._task is not None:
            self._task.cancel()
            self._task = None
            logger.info("Periodic performance reports stopped")
