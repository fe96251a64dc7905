"""Domain models for the Solana indexer.

All models use Pydantic for validation.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Union
from pydantic import BaseModel, Field


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


class ActivityKind(str, Enum):
    """Kind of token activity."""

    ACCOUNT = "account"
    TRANSACTION = "transaction"


class HealthLevel(str, Enum):
    """Health verdict, ordered from best to worst."""

    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"

    @property
    def severity(self) -> int:
        """Numeric rank used to pick the worst verdict."""
        return _SEVERITY[self]


_SEVERITY = {
    HealthLevel.HEALTHY: 0,
    HealthLevel.WARNING: 1,
    HealthLevel.CRITICAL: 2,
}


class TokenMetrics(BaseModel):
    """Per-token activity rollup."""

    symbol: str = Field(..., description="Token symbol (e.g., USDC)")
    account_updates: int = Field(0, description="Account updates seen")
    transactions: int = Field(0, description="Transactions seen")
    sized_transactions: int = Field(0, description="Transactions that carried an amount")
    average_transaction_size: float = Field(0.0, description="Running average transaction amount")
    largest_transaction: float = Field(0.0, description="Largest transaction amount seen")
    last_activity: datetime = Field(default_factory=utcnow, description="Last activity timestamp")


class MemoryUsage(BaseModel):
    """Process memory figures in bytes."""

    rss: int = Field(0, description="Resident set size")
    vms: int = Field(0, description="Virtual memory size")

    @property
    def used(self) -> int:
        """Bytes counted against the memory threshold."""
        return self.rss

    @property
    def used_mb(self) -> int:
        """Used memory rounded to whole megabytes."""
        return round(self.rss / 1024 / 1024)


class AccountUpdate(BaseModel):
    """Account change notification."""

    pubkey: str = Field(..., description="Account address (base58)")
    owner: str = Field("", description="Owner program address")
    lamports: int = Field(0, description="Account balance in lamports / raw token units")
    executable: bool = Field(False, description="Executable flag")
    rent_epoch: int = Field(0, description="Rent epoch")
    data_length: int = Field(0, description="Length of the account data")
    mint: Optional[str] = Field(None, description="Token mint when the account is a token account")
    slot: int = Field(0, description="Slot of the update")


class TransactionUpdate(BaseModel):
    """Transaction notification."""

    signature: str = Field(..., description="Transaction signature (base58)")
    slot: int = Field(0, description="Slot of the transaction")
    success: bool = Field(True, description="Whether the transaction succeeded")
    mint: Optional[str] = Field(None, description="Token mint involved, if known")
    amount: Optional[int] = Field(None, description="Raw token amount moved, if known")


class SlotUpdate(BaseModel):
    """Slot progress notification."""

    slot: int = Field(..., description="Slot number")
    parent: int = Field(0, description="Parent slot")
    root: Optional[int] = Field(None, description="Current root slot")


class BlockUpdate(BaseModel):
    """Block notification."""

    slot: int = Field(..., description="Slot of the block")
    blockhash: str = Field("", description="Block hash")
    parent_slot: int = Field(0, description="Parent slot")
    block_time: Optional[int] = Field(None, description="Unix block time")
    transaction_count: int = Field(0, description="Number of transactions in the block")


StreamUpdate = Union[AccountUpdate, TransactionUpdate, SlotUpdate, BlockUpdate]
