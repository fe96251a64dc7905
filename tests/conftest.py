"""Shared fixtures: controllable clock and system probe."""

from datetime import datetime, timedelta, timezone

import pytest

from src.core.models import MemoryUsage


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime = datetime(2024, 1, 1, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FakeProbe:
    """System probe returning fixed memory and CPU figures."""

    def __init__(self, rss_mb: int = 100, cpu_seconds: float = 1.5):
        self.rss_mb = rss_mb
        self.cpu_seconds = cpu_seconds

    def __call__(self):
        rss = self.rss_mb * 1024 * 1024
        return MemoryUsage(rss=rss, vms=rss * 2), self.cpu_seconds


@pytest.fixture
def clock():
    """Fake clock starting at 2024-01-01 UTC."""
    return FakeClock()


@pytest.fixture
def probe():
    """Fake system probe reporting 100MB RSS."""
    return FakeProbe()


@pytest.fixture
def high_memory_probe():
    """Fake system probe reporting 600MB RSS."""
    return FakeProbe(rss_mb=600)
