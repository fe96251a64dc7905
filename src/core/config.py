"""Configuration management using Pydantic Settings.

This module handles loading configuration from environment variables
and provides type-safe configuration objects.
"""

from typing import Annotated, Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from src.core.constants import (
    DEFAULT_MAX_DATABASE_LATENCY_MS,
    DEFAULT_MAX_ERROR_RATE,
    DEFAULT_MAX_MEMORY_BYTES,
    DEFAULT_MAX_PROCESSING_TIME_MS,
    DEFAULT_MAX_STREAM_ERRORS,
    DEFAULT_MAX_STREAM_SILENCE_MS,
    DEFAULT_MIN_MESSAGES_PER_MINUTE,
    DEFAULT_REPORT_INTERVAL_SECONDS,
    DEFAULT_SLOW_PROCESSING_WARN_MS,
    DEFAULT_TRACKED_TOKENS,
    SOLANA_MAINNET_WS_URL,
)


class PerformanceThresholds(BaseModel):
    """Threshold table used by the health classifier.

    Frozen: thresholds are read once at start-up and never change.
    """

    model_config = ConfigDict(frozen=True)

    max_processing_time_ms: float = Field(DEFAULT_MAX_PROCESSING_TIME_MS, description="Max average processing time (ms)")
    max_database_latency_ms: float = Field(DEFAULT_MAX_DATABASE_LATENCY_MS, description="Max average database latency (ms)")
    max_memory_bytes: int = Field(DEFAULT_MAX_MEMORY_BYTES, description="Max process memory in bytes")
    min_messages_per_minute: int = Field(DEFAULT_MIN_MESSAGES_PER_MINUTE, description="Min expected message rate")
    max_stream_silence_ms: float = Field(DEFAULT_MAX_STREAM_SILENCE_MS, description="Max time without messages (ms)")
    max_error_rate: float = Field(DEFAULT_MAX_ERROR_RATE, description="Max database error rate (0-1)")
    max_stream_errors: int = Field(DEFAULT_MAX_STREAM_ERRORS, description="Stream errors tolerated before warning")


class MonitoringConfig(BaseModel):
    """Performance monitor parameters."""

    report_interval_seconds: float = Field(DEFAULT_REPORT_INTERVAL_SECONDS, description="Periodic report interval in seconds")
    enable_periodic_reports: bool = Field(True, description="Emit a report every interval")
    slow_processing_warn_ms: float = Field(DEFAULT_SLOW_PROCESSING_WARN_MS, description="Log a warning for slower updates (ms)")
    thresholds: PerformanceThresholds = Field(default_factory=PerformanceThresholds)


class DiscordConfig(BaseModel):
    """Discord webhook channel."""

    enabled: bool = Field(False, description="Send alerts to Discord")
    webhook_url: str = Field("", description="Discord webhook URL")


class TelegramConfig(BaseModel):
    """Telegram bot channel."""

    enabled: bool = Field(False, description="Send alerts to Telegram")
    bot_token: str = Field("", description="Telegram bot token")
    chat_id: str = Field("", description="Telegram chat ID")


class CustomWebhookConfig(BaseModel):
    """Generic JSON webhook channel."""

    enabled: bool = Field(False, description="Send alerts to a custom webhook")
    webhook_url: str = Field("", description="Custom webhook URL")


class AlertConfig(BaseModel):
    """Alert channel configuration."""

    discord: DiscordConfig = Field(default_factory=DiscordConfig)
    telegram: TelegramConfig = Field(default_factory=TelegramConfig)
    custom: CustomWebhookConfig = Field(default_factory=CustomWebhookConfig)

    @property
    def enabled_channels(self) -> list[str]:
        """Names of channels that are switched on."""
        channels = []
        if self.discord.enabled:
            channels.append("Discord")
        if self.telegram.enabled:
            channels.append("Telegram")
        if self.custom.enabled:
            channels.append("Custom Webhook")
        return channels


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Environment
    environment: str = Field("dev", description="Environment (dev/staging/prod)")

    # Stream endpoint (ENDPOINT is kept for existing deployments)
    rpc_ws_url: str = Field(
        SOLANA_MAINNET_WS_URL,
        validation_alias=AliasChoices("rpc_ws_url", "endpoint"),
        description="Solana RPC websocket URL",
    )
    commitment: str = Field("confirmed", description="Commitment level for subscriptions")

    # Tracked tokens (comma-separated in env)
    tracked_tokens: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_TRACKED_TOKENS),
        description="Token symbols to track (TRACKED_TOKENS=USDC,SOL)",
    )

    @field_validator("tracked_tokens", mode="before")
    @classmethod
    def parse_tracked_tokens(cls, v):
        """Parse token symbols from string or list."""
        if isinstance(v, str):
            return [s.strip().upper() for s in v.split(",") if s.strip()]
        return v

    # Alert channels (flat env vars, mapped in the alerts property)
    discord_webhook_enabled: bool = Field(False, description="DISCORD_WEBHOOK_ENABLED")
    discord_webhook_url: str = Field("", description="DISCORD_WEBHOOK_URL")
    telegram_enabled: bool = Field(False, description="TELEGRAM_ENABLED")
    telegram_bot_token: str = Field("", description="TELEGRAM_BOT_TOKEN")
    telegram_chat_id: str = Field("", description="TELEGRAM_CHAT_ID")
    custom_webhook_enabled: bool = Field(False, description="CUSTOM_WEBHOOK_ENABLED")
    custom_webhook_url: str = Field("", description="CUSTOM_WEBHOOK_URL")

    @property
    def alerts(self) -> AlertConfig:
        """Get alert channel configuration."""
        return AlertConfig(
            discord=DiscordConfig(
                enabled=self.discord_webhook_enabled,
                webhook_url=self.discord_webhook_url,
            ),
            telegram=TelegramConfig(
                enabled=self.telegram_enabled,
                bot_token=self.telegram_bot_token,
                chat_id=self.telegram_chat_id,
            ),
            custom=CustomWebhookConfig(
                enabled=self.custom_webhook_enabled,
                webhook_url=self.custom_webhook_url,
            ),
        )

    # Monitoring configuration
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)

    # Storage
    data_dir: str = Field("runs", description="Directory for event journals")

    # Logging
    log_level: str = Field("INFO", description="Logging level")
    log_file: Optional[str] = Field(None, description="Log file path")

    # Dashboard
    dashboard_host: str = Field("127.0.0.1", description="Dashboard bind host")
    dashboard_port: int = Field(8000, description="Dashboard port")

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables."""
        return cls()
