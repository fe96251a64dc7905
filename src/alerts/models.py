"""Alert payload models."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field

from src.core.models import utcnow


class AlertType(str, Enum):
    """Alert type enumeration."""

    LARGE_TRANSACTION = "large_transaction"
    WHALE_MOVEMENT = "whale_movement"
    NEW_TOKEN_ACTIVITY = "new_token_activity"

    @property
    def title(self) -> str:
        """Display title, e.g. "WHALE MOVEMENT"."""
        return self.value.replace("_", " ").upper()


class AlertToken(BaseModel):
    """Token identity carried in an alert."""

    symbol: str = Field(..., description="Token symbol")
    name: str = Field(..., description="Token name")
    mint_address: str = Field(..., description="Mint address")


class AlertData(BaseModel):
    """A single alert about on-chain activity."""

    type: AlertType = Field(..., description="Alert type")
    token: AlertToken = Field(..., description="Token involved")
    amount: Decimal = Field(..., description="Amount in token units")
    formatted_amount: str = Field(..., description="Display amount, e.g. '12,500 USDC'")
    transaction_signature: Optional[str] = Field(None, description="Transaction signature")
    account_address: Optional[str] = Field(None, description="Account address")
    timestamp: datetime = Field(default_factory=utcnow, description="Alert timestamp")
    slot: int = Field(0, description="Slot of the triggering event")
