"""In-flight operation timers."""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict

logger = logging.getLogger(__name__)


@dataclass
class TimerEntry:
    start: float
    operation: str


class TimerRegistry:
    """Tracks start times of named operations keyed by a caller-supplied id.

    The registry only measures; it does not know what a duration means.
    Callers hand the elapsed value to the metrics collector themselves.
    """

    def __init__(self, clock: Callable[[], float] = time.perf_counter):
        self._clock = clock
        self._timers: Dict[str, TimerEntry] = {}
        self._lock = threading.Lock()

    def start(self, operation_id: str, operation: str) -> None:
        """Start (or restart) the timer for operation_id."""
        with self._lock:
            self._timers[operation_id] = TimerEntry(start=self._clock(), operation=operation)

    def stop(self, operation_id: str) -> float:
        """Stop a timer and return the elapsed milliseconds.

        Returns 0.0 for an id that was never started (or already stopped).
        """
        with self._lock:
            entry = self._timers.pop(operation_id, None)
        if entry is None:
            logger.debug(f"No running timer for {operation_id}")
            return 0.0
        elapsed_ms = (self._clock() - entry.start) * 1000.0
        logger.debug(f"{entry.operation} took {elapsed_ms:.2f}ms")
        return elapsed_ms

    def pending(self) -> int:
        """Number of timers started but not stopped."""
        with self._lock:
            return len(self._timers)

    def __contains__(self, operation_id: str) -> bool:
        with self._lock:
            return operation_id in self._timers
