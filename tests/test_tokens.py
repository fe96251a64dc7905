"""Tests for the token registry."""

from decimal import Decimal

from src.core.tokens import (
    SUPPORTED_TOKENS,
    format_token_amount,
    get_all_token_mints,
    get_enabled_tokens,
    get_token_by_mint,
    get_token_by_symbol,
    should_alert,
)


def test_lookup_by_mint():
    """Test mint address lookup."""
    token = get_token_by_mint("So11111111111111111111111111111111111111112")
    assert token.symbol == "SOL"
    assert token.decimals == 9
    assert get_token_by_mint("unknown") is None


def test_lookup_by_symbol_is_case_insensitive():
    """Test symbol lookup ignores case."""
    assert get_token_by_symbol("usdc") is SUPPORTED_TOKENS["USDC"]
    assert get_token_by_symbol("DOGE") is None


def test_enabled_tokens_filter():
    """Test restricting enabled tokens to given symbols."""
    symbols = [t.symbol for t in get_enabled_tokens(["sol", "usdc", "DOGE"])]
    assert symbols == ["USDC", "SOL"]
    assert len(get_enabled_tokens()) == len(SUPPORTED_TOKENS)


def test_all_token_mints():
    """Test mint list follows the symbol filter."""
    assert get_all_token_mints(["JUP"]) == ["JUPyiwrYJFskUPiHa7hkeR8VUtAeFoSYbKedZNsDvCN"]


def test_format_token_amount():
    """Test raw amounts are scaled by decimals."""
    assert format_token_amount(1_500_000, SUPPORTED_TOKENS["USDC"]) == Decimal("1.5")
    assert format_token_amount("2000000000", SUPPORTED_TOKENS["SOL"]) == Decimal("2")


def test_should_alert_threshold():
    """Test alerts fire at or above the threshold."""
    sol = SUPPORTED_TOKENS["SOL"]
    assert should_alert(100 * 10**9, sol) is True
    assert should_alert(99 * 10**9, sol) is False


def test_should_alert_without_threshold():
    """Test tokens without a threshold never alert."""
    token = SUPPORTED_TOKENS["USDC"].model_copy(update={"alert_threshold": None})
    assert should_alert(10**18, token) is False
