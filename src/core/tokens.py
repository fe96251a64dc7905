"""Token registry and amount helpers."""

from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field


class TokenConfig(BaseModel):
    """Token metadata."""

    model_config = ConfigDict(frozen=True)

    mint_address: str = Field(..., description="Mint address (base58)")
    symbol: str = Field(..., description="Token symbol")
    name: str = Field(..., description="Human-readable name")
    decimals: int = Field(..., description="Decimal places of raw amounts")
    enabled: bool = Field(True, description="Track this token")
    alert_threshold: Optional[Decimal] = Field(None, description="Alert on amounts at or above this (token units)")


SUPPORTED_TOKENS: Dict[str, TokenConfig] = {
    # Stablecoins
    "USDC": TokenConfig(
        mint_address="EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",
        symbol="USDC",
        name="USD Coin",
        decimals=6,
        alert_threshold=Decimal("10000"),  # $10k+
    ),
    "USDT": TokenConfig(
        mint_address="Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB",
        symbol="USDT",
        name="Tether USD",
        decimals=6,
        alert_threshold=Decimal("10000"),
    ),
    # Wrapped SOL
    "SOL": TokenConfig(
        mint_address="So11111111111111111111111111111111111111112",
        symbol="SOL",
        name="Solana",
        decimals=9,
        alert_threshold=Decimal("100"),
    ),
    "BONK": TokenConfig(
        mint_address="DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263",
        symbol="BONK",
        name="Bonk",
        decimals=5,
        alert_threshold=Decimal("1000000"),
    ),
    "JUP": TokenConfig(
        mint_address="JUPyiwrYJFskUPiHa7hkeR8VUtAeFoSYbKedZNsDvCN",
        symbol="JUP",
        name="Jupiter",
        decimals=6,
        alert_threshold=Decimal("10000"),
    ),
}


def get_token_by_mint(mint_address: str) -> Optional[TokenConfig]:
    """Look up a token by its mint address."""
    for token in SUPPORTED_TOKENS.values():
        if token.mint_address == mint_address:
            return token
    return None


def get_token_by_symbol(symbol: str) -> Optional[TokenConfig]:
    """Look up a token by symbol (case-insensitive)."""
    return SUPPORTED_TOKENS.get(symbol.upper())


def get_enabled_tokens(symbols: Optional[Iterable[str]] = None) -> List[TokenConfig]:
    """Get enabled tokens, optionally restricted to the given symbols.

    Unknown symbols are ignored.
    """
    tokens = [t for t in SUPPORTED_TOKENS.values() if t.enabled]
    if symbols is None:
        return tokens
    wanted = {s.upper() for s in symbols}
    return [t for t in tokens if t.symbol in wanted]


def get_all_token_mints(symbols: Optional[Iterable[str]] = None) -> List[str]:
    """Mint addresses of enabled tokens."""
    return [t.mint_address for t in get_enabled_tokens(symbols)]


def format_token_amount(amount: Union[int, str], token: TokenConfig) -> Decimal:
    """Convert a raw integer amount into token units.

    Args:
        amount: Raw amount (lamports / base units), int or decimal string
        token: Token metadata

    Returns:
        Amount in token units
    """
    return Decimal(int(amount)) / (Decimal(10) ** token.decimals)


def should_alert(amount: Union[int, str], token: TokenConfig) -> bool:
    """Check whether a raw amount reaches the token's alert threshold."""
    if not token.alert_threshold:
        return False
    return format_token_amount(amount, token) >= token.alert_threshold
