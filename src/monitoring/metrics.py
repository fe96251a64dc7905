"""Metrics collection and snapshot management.

This module keeps running aggregates of stream processing: message rate,
processing and database latency averages, failure counters, alert outcomes
and per-token activity. No samples are retained; every average is folded
in place so memory stays bounded by the number of tracked tokens.
"""

import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, Iterable, Optional, Tuple, Union

import psutil

from src.core.models import ActivityKind, MemoryUsage, TokenMetrics, utcnow


Clock = Callable[[], datetime]
SystemProbe = Callable[[], Tuple[MemoryUsage, float]]


def read_process_usage() -> Tuple[MemoryUsage, float]:
    """Read memory and CPU time of the current process.

    Returns:
        Tuple of (memory usage, user+system CPU seconds)
    """
    process = psutil.Process()
    mem = process.memory_info()
    cpu = process.cpu_times()
    return MemoryUsage(rss=mem.rss, vms=mem.vms), cpu.user + cpu.system


def _fold_average(average: float, count: int, value: float) -> float:
    """Fold value into an average that already covers count - 1 samples."""
    return (average * (count - 1) + value) / count


@dataclass(frozen=True)
class MetricsSnapshot:
    """Point-in-time copy of all aggregate metrics."""

    timestamp: datetime

    # Data processing
    messages_per_second: float
    total_messages_processed: int
    average_processing_time_ms: float

    # Database
    database_latency_ms: float
    database_operations: int
    failed_database_operations: int

    # System
    memory_usage: MemoryUsage
    cpu_usage_seconds: float

    # Stream health
    connection_uptime_ms: float
    last_message_time: datetime
    stream_errors: int
    reconnection_count: int

    # Alerts
    alerts_sent: int
    alerts_failed: int

    # Per token
    token_metrics: Dict[str, TokenMetrics] = field(default_factory=dict)

    @property
    def memory_mb(self) -> int:
        return self.memory_usage.used_mb

    @property
    def uptime_hours(self) -> float:
        return self.connection_uptime_ms / (1000 * 60 * 60)


class MetricsCollector:
    """Collects and aggregates stream processing metrics.

    All mutation happens under one lock, so the collector may be shared by
    several workers. Readers only ever receive copies.
    """

    def __init__(
        self,
        token_symbols: Iterable[str],
        clock: Clock = utcnow,
        system_probe: SystemProbe = read_process_usage,
    ):
        """Initialize metrics collector.

        Args:
            token_symbols: Symbols to track; activity for any other symbol is dropped
            clock: Source of the current time (timezone-aware)
            system_probe: Reads process memory and CPU figures
        """
        self._clock = clock
        self._system_probe = system_probe
        self._lock = threading.Lock()

        self.start_time = clock()
        self.messages_per_second = 0.0
        self.total_messages_processed = 0
        self.average_processing_time_ms = 0.0
        self.processing_samples = 0
        self.database_latency_ms = 0.0
        self.database_operations = 0
        self.failed_database_operations = 0
        self.memory_usage = MemoryUsage()
        self.cpu_usage_seconds = 0.0
        self.connection_uptime_ms = 0.0
        self.last_message_time = self.start_time
        self.stream_errors = 0
        self.reconnection_count = 0
        self.alerts_sent = 0
        self.alerts_failed = 0
        self.token_metrics: Dict[str, TokenMetrics] = {
            symbol: TokenMetrics(symbol=symbol, last_activity=self.start_time)
            for symbol in token_symbols
        }

    @property
    def tracked_symbols(self) -> list[str]:
        return list(self.token_metrics)

    def _uptime_seconds(self, now: datetime) -> float:
        return (now - self.start_time).total_seconds()

    def record_message_processed(self) -> None:
        """Record one fully processed stream message."""
        with self._lock:
            now = self._clock()
            self.total_messages_processed += 1
            self.last_message_time = now
            uptime = self._uptime_seconds(now)
            if uptime > 0:
                self.messages_per_second = self.total_messages_processed / uptime

    def record_processing_time(self, duration_ms: float) -> None:
        """Fold a completed processing duration into the average.

        Args:
            duration_ms: Duration in milliseconds
        """
        with self._lock:
            self.processing_samples += 1
            self.average_processing_time_ms = _fold_average(
                self.average_processing_time_ms, self.processing_samples, duration_ms
            )

    def record_database_operation(self, latency_ms: float, success: bool = True) -> None:
        """Record a database operation outcome.

        Failures only bump the failure counter; they never enter the
        latency average.

        Args:
            latency_ms: Operation latency in milliseconds
            success: Whether the operation succeeded
        """
        with self._lock:
            if success:
                self.database_operations += 1
                self.database_latency_ms = _fold_average(
                    self.database_latency_ms, self.database_operations, latency_ms
                )
            else:
                self.failed_database_operations += 1

    def record_token_activity(
        self,
        symbol: str,
        kind: Union[ActivityKind, str],
        amount: Optional[float] = None,
    ) -> None:
        """Record account or transaction activity for a tracked token.

        Args:
            symbol: Token symbol; unknown symbols are ignored
            kind: "account" or "transaction"
            amount: Transaction amount in token units (transactions only)
        """
        try:
            kind = ActivityKind(kind)
        except ValueError:
            return

        with self._lock:
            token = self.token_metrics.get(symbol)
            if token is None:
                return

            token.last_activity = self._clock()

            if kind is ActivityKind.ACCOUNT:
                token.account_updates += 1
                return

            token.transactions += 1
            if amount:
                amount = float(amount)
                token.sized_transactions += 1
                token.average_transaction_size = _fold_average(
                    token.average_transaction_size, token.sized_transactions, amount
                )
                if amount > token.largest_transaction:
                    token.largest_transaction = amount

    def record_stream_error(self) -> None:
        with self._lock:
            self.stream_errors += 1

    def record_reconnection(self) -> None:
        with self._lock:
            self.reconnection_count += 1

    def record_alert_sent(self, success: bool = True) -> None:
        """Record an alert delivery attempt."""
        with self._lock:
            if success:
                self.alerts_sent += 1
            else:
                self.alerts_failed += 1

    def update_system_metrics(self) -> None:
        """Refresh memory, CPU and uptime figures."""
        memory, cpu_seconds = self._system_probe()
        with self._lock:
            self.memory_usage = memory
            self.cpu_usage_seconds = cpu_seconds
            self.connection_uptime_ms = self._uptime_seconds(self._clock()) * 1000.0

    def get_snapshot(self) -> MetricsSnapshot:
        """Refresh system metrics and return an independent copy of all state."""
        self.update_system_metrics()
        with self._lock:
            return MetricsSnapshot(
                timestamp=self._clock(),
                messages_per_second=self.messages_per_second,
                total_messages_processed=self.total_messages_processed,
                average_processing_time_ms=self.average_processing_time_ms,
                database_latency_ms=self.database_latency_ms,
                database_operations=self.database_operations,
                failed_database_operations=self.failed_database_operations,
                memory_usage=self.memory_usage.model_copy(),
                cpu_usage_seconds=self.cpu_usage_seconds,
                connection_uptime_ms=self.connection_uptime_ms,
                last_message_time=self.last_message_time,
                stream_errors=self.stream_errors,
                reconnection_count=self.reconnection_count,
                alerts_sent=self.alerts_sent,
                alerts_failed=self.alerts_failed,
                token_metrics={
                    symbol: token.model_copy() for symbol, token in self.token_metrics.items()
                },
            )

    def get_token_metrics(self, symbol: str) -> Optional[TokenMetrics]:
        """Copy of one token's metrics, None if the symbol is not tracked."""
        with self._lock:
            token = self.token_metrics.get(symbol)
            return token.model_copy() if token else None
