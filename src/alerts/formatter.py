"""Channel-specific alert formatting."""

from typing import Any, Dict

from src.alerts.models import AlertData, AlertType
from src.core.constants import SOLANA_EXPLORER_TX_URL

TOKEN_EMOJI = {
    "USDC": "🟢",
    "USDT": "🟡",
    "SOL": "🔵",
    "BONK": "🐕",
    "JUP": "🪐",
}
DEFAULT_TOKEN_EMOJI = "🪙"

ALERT_COLORS = {
    AlertType.LARGE_TRANSACTION: 0xFF6B35,  # orange
    AlertType.WHALE_MOVEMENT: 0xFF0000,  # red
    AlertType.NEW_TOKEN_ACTIVITY: 0x00FF00,  # green
}
DEFAULT_ALERT_COLOR = 0x0099FF


def token_emoji(symbol: str) -> str:
    return TOKEN_EMOJI.get(symbol, DEFAULT_TOKEN_EMOJI)


def explorer_url(signature: str) -> str:
    return f"{SOLANA_EXPLORER_TX_URL}{signature}"


class AlertFormatter:
    """Builds payloads for each alert channel."""

    @staticmethod
    def format_discord(alert: AlertData) -> Dict[str, Any]:
        """Discord webhook body with a single embed."""
        signature_value = (
            f"[View on Explorer]({explorer_url(alert.transaction_signature)})"
            if alert.transaction_signature
            else "N/A"
        )
        return {
            "embeds": [
                {
                    "title": f"🚨 {alert.type.title} Alert",
                    "color": ALERT_COLORS.get(alert.type, DEFAULT_ALERT_COLOR),
                    "fields": [
                        {
                            "name": f"{token_emoji(alert.token.symbol)} Token",
                            "value": f"{alert.token.symbol} ({alert.token.name})",
                            "inline": True,
                        },
                        {"name": "💰 Amount", "value": alert.formatted_amount, "inline": True},
                        {
                            "name": "⏰ Time",
                            "value": f"<t:{int(alert.timestamp.timestamp())}:f>",
                            "inline": True,
                        },
                        {"name": "🔗 Signature", "value": signature_value, "inline": False},
                    ],
                    "footer": {"text": f"Slot: {alert.slot} | Solana Indexer Alert"},
                    "timestamp": alert.timestamp.isoformat(),
                }
            ]
        }

    @staticmethod
    def format_telegram(alert: AlertData) -> str:
        """Telegram Markdown message text."""
        lines = [
            f"🚨 *{alert.type.title} ALERT*",
            "",
            f"{token_emoji(alert.token.symbol)} *Token:* {alert.token.symbol} ({alert.token.name})",
            f"💰 *Amount:* {alert.formatted_amount}",
            f"⏰ *Time:* {alert.timestamp.strftime('%Y-%m-%d %H:%M:%S %Z')}",
            f"🔗 *Slot:* {alert.slot}",
        ]
        if alert.transaction_signature:
            lines.append("")
            lines.append(f"[View Transaction]({explorer_url(alert.transaction_signature)})")
        return "\n".join(lines)

    @staticmethod
    def format_custom(alert: AlertData) -> Dict[str, Any]:
        """Flat JSON body for custom webhooks."""
        return {
            "alert_type": alert.type.value,
            "token": alert.token.model_dump(),
            "amount": str(alert.amount),
            "formatted_amount": alert.formatted_amount,
            "transaction_signature": alert.transaction_signature,
            "account_address": alert.account_address,
            "timestamp": alert.timestamp.isoformat(),
            "slot": alert.slot,
        }
