"""Constants and default values for the Solana indexer."""

# Health check thresholds
DEFAULT_MAX_PROCESSING_TIME_MS = 1000.0  # 1 second
DEFAULT_MAX_DATABASE_LATENCY_MS = 500.0
DEFAULT_MAX_MEMORY_BYTES = 512 * 1024 * 1024  # 512MB
DEFAULT_MIN_MESSAGES_PER_MINUTE = 60  # At least 1 msg/sec
DEFAULT_MAX_STREAM_SILENCE_MS = 30_000.0  # 30 seconds without messages
DEFAULT_MAX_ERROR_RATE = 0.05  # 5% error rate
DEFAULT_MAX_STREAM_ERRORS = 5

# Alert system failure-rate tiers
ALERT_FAILURE_WARNING_RATE = 0.10
ALERT_FAILURE_CRITICAL_RATE = 0.50

# Degradation checks used by the dashboard summary
DEGRADED_MIN_MESSAGES_PER_SECOND = 0.5
DEGRADED_MAX_PROCESSING_TIME_MS = 2000.0
DEGRADED_MAX_DATABASE_LATENCY_MS = 1000.0
DEGRADED_MAX_MEMORY_MB = 1024

# Reporting
DEFAULT_REPORT_INTERVAL_SECONDS = 60.0
DEFAULT_SLOW_PROCESSING_WARN_MS = 1000.0

# Timer operation labels
OP_MESSAGE_PROCESSING = "message_processing"
OP_DB_ACCOUNT_INSERT = "database_account_insert"
OP_DB_TRANSACTION_INSERT = "database_transaction_insert"
OP_DB_SLOT_INSERT = "database_slot_insert"
OP_DB_BLOCK_INSERT = "database_block_insert"

# Solana endpoints
SOLANA_MAINNET_WS_URL = "wss://api.mainnet-beta.solana.com"
SOLANA_EXPLORER_TX_URL = "https://explorer.solana.com/tx/"
TELEGRAM_API_URL = "https://api.telegram.org"

# Default tracked tokens
DEFAULT_TRACKED_TOKENS = ["USDC", "USDT", "SOL", "BONK", "JUP"]
