"""Core module for the Solana indexer.

This module contains domain models, configuration, the token registry and constants.
"""

from src.core.config import (
    Settings,
    MonitoringConfig,
    PerformanceThresholds,
    AlertConfig,
)
from src.core.models import (
    ActivityKind,
    HealthLevel,
    TokenMetrics,
    MemoryUsage,
    AccountUpdate,
    TransactionUpdate,
    SlotUpdate,
    BlockUpdate,
    StreamUpdate,
)
from src.core.tokens import (
    TokenConfig,
    SUPPORTED_TOKENS,
    get_token_by_mint,
    get_enabled_tokens,
)
from src.core.exceptions import (
    IndexerError,
    StreamError,
    StorageError,
    AlertDeliveryError,
)

__all__ = [
    "Settings",
    "MonitoringConfig",
    "PerformanceThresholds",
    "AlertConfig",
    "ActivityKind",
    "HealthLevel",
    "TokenMetrics",
    "MemoryUsage",
    "AccountUpdate",
    "TransactionUpdate",
    "SlotUpdate",
    "BlockUpdate",
    "StreamUpdate",
    "TokenConfig",
    "SUPPORTED_TOKENS",
    "get_token_by_mint",
    "get_enabled_tokens",
    "IndexerError",
    "StreamError",
    "StorageError",
    "AlertDeliveryError",
]
