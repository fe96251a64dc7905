"""Data module for the Solana indexer.

This module handles the Solana pubsub WebSocket stream.
"""

from src.data.websocket import SolanaWebSocketClient, Subscription, parse_notification

__all__ = [
    "SolanaWebSocketClient",
    "Subscription",
    "parse_notification",
]
