"""Tests for core module."""

import pytest
from pydantic import ValidationError

from src.core.config import AlertConfig, DiscordConfig, MonitoringConfig, PerformanceThresholds, Settings
from src.core.constants import (
    DEFAULT_MAX_DATABASE_LATENCY_MS,
    DEFAULT_MAX_ERROR_RATE,
    DEFAULT_MAX_MEMORY_BYTES,
    DEFAULT_MAX_STREAM_SILENCE_MS,
    DEFAULT_TRACKED_TOKENS,
)
from src.core.exceptions import AlertDeliveryError, IndexerError
from src.core.models import HealthLevel, MemoryUsage, TokenMetrics


@pytest.fixture
def clean_env(monkeypatch):
    """Remove indexer env vars so defaults apply."""
    for name in ("TRACKED_TOKENS", "RPC_WS_URL", "ENDPOINT", "DISCORD_WEBHOOK_ENABLED", "DISCORD_WEBHOOK_URL"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_settings_creation(clean_env):
    """Test Settings creation."""
    settings = Settings.from_env()
    assert settings.tracked_tokens == list(DEFAULT_TRACKED_TOKENS)
    assert settings.monitoring is not None
    assert settings.rpc_ws_url.startswith("wss://")


def test_tracked_tokens_from_env(clean_env):
    """Test comma-separated token list parsing."""
    clean_env.setenv("TRACKED_TOKENS", "usdc, sol,,bonk")
    assert Settings.from_env().tracked_tokens == ["USDC", "SOL", "BONK"]


def test_endpoint_alias(clean_env):
    """Test ENDPOINT is accepted for the stream URL."""
    clean_env.setenv("ENDPOINT", "wss://example.invalid")
    assert Settings.from_env().rpc_ws_url == "wss://example.invalid"


def test_alert_config_from_env(clean_env):
    """Test flat alert env vars map onto channel configs."""
    clean_env.setenv("DISCORD_WEBHOOK_ENABLED", "true")
    clean_env.setenv("DISCORD_WEBHOOK_URL", "https://discord.invalid/hook")
    alerts = Settings.from_env().alerts
    assert alerts.discord.enabled is True
    assert alerts.discord.webhook_url == "https://discord.invalid/hook"
    assert alerts.enabled_channels == ["Discord"]


def test_threshold_defaults():
    """Test PerformanceThresholds defaults."""
    thresholds = PerformanceThresholds()
    assert thresholds.max_database_latency_ms == DEFAULT_MAX_DATABASE_LATENCY_MS
    assert thresholds.max_memory_bytes == DEFAULT_MAX_MEMORY_BYTES == 512 * 1024 * 1024
    assert thresholds.max_stream_silence_ms == DEFAULT_MAX_STREAM_SILENCE_MS == 30000
    assert thresholds.max_error_rate == DEFAULT_MAX_ERROR_RATE == 0.05


def test_thresholds_are_frozen():
    """Test thresholds cannot change after construction."""
    thresholds = PerformanceThresholds()
    with pytest.raises(ValidationError):
        thresholds.max_error_rate = 0.5


def test_monitoring_config_defaults():
    """Test MonitoringConfig defaults."""
    config = MonitoringConfig()
    assert config.report_interval_seconds == 60
    assert config.enable_periodic_reports is True


def test_enabled_channels_empty():
    """Test no channels are enabled by default."""
    assert AlertConfig().enabled_channels == []
    assert AlertConfig(discord=DiscordConfig(enabled=True)).enabled_channels == ["Discord"]


def test_health_level_severity():
    """Test verdict ordering."""
    assert HealthLevel.HEALTHY.severity < HealthLevel.WARNING.severity < HealthLevel.CRITICAL.severity
    assert HealthLevel("critical") is HealthLevel.CRITICAL


def test_memory_usage():
    """Test memory figures in megabytes."""
    usage = MemoryUsage(rss=256 * 1024 * 1024, vms=1024 * 1024 * 1024)
    assert usage.used == usage.rss
    assert usage.used_mb == 256


def test_token_metrics_defaults():
    """Test TokenMetrics starts empty."""
    token = TokenMetrics(symbol="SOL")
    assert token.account_updates == 0
    assert token.transactions == 0
    assert token.largest_transaction == 0.0
    assert token.last_activity.tzinfo is not None


def test_alert_delivery_error():
    """Test AlertDeliveryError carries the channel."""
    error = AlertDeliveryError("discord", "HTTP 500")
    assert isinstance(error, IndexerError)
    assert error.channel == "discord"
    assert "HTTP 500" in str(error)
