"""WebSocket client for Solana JSON-RPC pubsub streams.

This module subscribes to slot, account, logs and block notifications,
decodes them into stream updates and hands them to a callback one at a
time. Reconnections and stream errors are reported to the monitor.
"""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

import websockets
from websockets.asyncio.client import ClientConnection, connect

from src.core.exceptions import StreamError
from src.core.models import AccountUpdate, BlockUpdate, SlotUpdate, StreamUpdate, TransactionUpdate
from src.monitoring.monitor import PerformanceMonitor

logger = logging.getLogger(__name__)


@dataclass
class Subscription:
    """A pubsub subscription request and what its notifications mean."""

    method: str
    params: List[Any] = field(default_factory=list)
    key: Optional[str] = None  # account pubkey or mint the subscription is about


def parse_notification(message: dict, subscription: Subscription) -> Optional[StreamUpdate]:
    """Decode a pubsub notification into a stream update.

    Args:
        message: Decoded JSON-RPC notification
        subscription: Subscription the notification belongs to

    Returns:
        Stream update, or None for notifications that carry nothing to index

    Raises:
        StreamError: If the payload is malformed
    """
    try:
        result = message["params"]["result"]
        method = message["method"]

        if method == "slotNotification":
            return SlotUpdate(slot=result["slot"], parent=result.get("parent", 0), root=result.get("root"))

        slot = result.get("context", {}).get("slot", 0)
        value = result["value"]

        if method == "accountNotification":
            data = value.get("data")
            mint = None
            if isinstance(data, dict):
                info = data.get("parsed", {}).get("info", {})
                mint = info.get("mint")
            return AccountUpdate(
                pubkey=subscription.key or "",
                owner=value.get("owner", ""),
                lamports=value.get("lamports", 0),
                executable=value.get("executable", False),
                rent_epoch=value.get("rentEpoch") or 0,
                data_length=value.get("space", 0),
                mint=mint,
                slot=slot,
            )

        if method == "logsNotification":
            return TransactionUpdate(
                signature=value["signature"],
                slot=slot,
                success=value.get("err") is None,
                mint=subscription.key,
            )

        if method == "blockNotification":
            block = value.get("block")
            if not block:
                return None
            return BlockUpdate(
                slot=value.get("slot", slot),
                blockhash=block.get("blockhash", ""),
                parent_slot=block.get("parentSlot", 0),
                block_time=block.get("blockTime"),
                transaction_count=len(block.get("transactions") or block.get("signatures") or []),
            )
    except (KeyError, TypeError, ValueError) as e:
        raise StreamError(f"Malformed notification: {e}") from e

    logger.debug(f"Ignoring notification method {message.get('method')}")
    return None


class SolanaWebSocketClient:
    """WebSocket client for Solana pubsub streams."""

    def __init__(
        self,
        ws_url: str,
        on_update: Callable[[StreamUpdate], Awaitable[None]],
        monitor: Optional[PerformanceMonitor] = None,
        commitment: str = "confirmed",
        reconnect_interval: float = 5,
        max_reconnect_attempts: int = 10,
        receive_timeout: float = 60.0,
    ):
        """Initialize WebSocket client.

        Args:
            ws_url: WebSocket URL
            on_update: Awaited for every decoded update, in arrival order
            monitor: Receives reconnection and stream error counts
            commitment: Commitment level for subscriptions
            reconnect_interval: Seconds between reconnect attempts
            max_reconnect_attempts: Consecutive failed attempts before giving up
            receive_timeout: Seconds without a message before pinging
        """
        self.ws_url = ws_url
        self.on_update = on_update
        self.monitor = monitor
        self.commitment = commitment
        self.reconnect_interval = reconnect_interval
        self.max_reconnect_attempts = max_reconnect_attempts
        self.receive_timeout = receive_timeout

        self.ws: Optional[ClientConnection] = None
        self.running = False
        self.subscriptions: List[Subscription] = []
        self._next_id = 1
        self._pending: Dict[int, Subscription] = {}
        self._active: Dict[int, Subscription] = {}

    # Subscription builders

    def subscribe_slots(self) -> None:
        self.subscriptions.append(Subscription(method="slotSubscribe"))

    def subscribe_account(self, pubkey: str) -> None:
        self.subscriptions.append(Subscription(
            method="accountSubscribe",
            params=[pubkey, {"encoding": "jsonParsed", "commitment": self.commitment}],
            key=pubkey,
        ))

    def subscribe_logs(self, mint: str) -> None:
        """Subscribe to transactions that mention the given mint."""
        self.subscriptions.append(Subscription(
            method="logsSubscribe",
            params=[{"mentions": [mint]}, {"commitment": self.commitment}],
            key=mint,
        ))

    def subscribe_blocks(self) -> None:
        """Subscribe to full blocks (not every RPC provider enables this)."""
        self.subscriptions.append(Subscription(
            method="blockSubscribe",
            params=["all", {"commitment": self.commitment, "transactionDetails": "signatures"}],
        ))

    def build_request(self, subscription: Subscription) -> dict:
        """JSON-RPC request for a subscription; remembers it until acknowledged."""
        request_id = self._next_id
        self._next_id += 1
        self._pending[request_id] = subscription
        request = {"jsonrpc": "2.0", "id": request_id, "method": subscription.method}
        if subscription.params:
            request["params"] = subscription.params
        return request

    # Connection

    async def _open(self) -> None:
        self.ws = await connect(self.ws_url, ping_interval=20, ping_timeout=10)
        self._pending.clear()
        self._active.clear()
        for subscription in self.subscriptions:
            await self.ws.send(json.dumps(self.build_request(subscription)))
        logger.info(f"Sent {len(self.subscriptions)} subscription requests")

    async def connect(self) -> None:
        """Connect, subscribe and process messages until disconnect()."""
        logger.info(f"Connecting to WebSocket: {self.ws_url}")
        try:
            await self._open()
        except Exception as e:
            logger.error(f"WebSocket connection error: {e}")
            self._record_error()
            self.ws = None
            raise StreamError(f"Could not connect to {self.ws_url}: {e}") from e

        self.running = True
        logger.info("WebSocket connected successfully")
        await self._receive_loop()

    def _record_error(self) -> None:
        if self.monitor:
            self.monitor.record_stream_error()

    async def _reconnect(self, attempt: int) -> bool:
        logger.warning(
            f"WebSocket disconnected. Reconnecting (attempt {attempt}/{self.max_reconnect_attempts})..."
        )
        await asyncio.sleep(self.reconnect_interval)
        try:
            await self._open()
        except Exception as e:
            logger.error(f"Reconnection failed: {e}")
            self._record_error()
            self.ws = None
            return False
        logger.info("WebSocket reconnected successfully")
        if self.monitor:
            self.monitor.record_reconnection()
        return True

    async def _receive_loop(self) -> None:
        """Receive messages with automatic reconnection."""
        reconnect_attempts = 0

        while self.running:
            if not self.ws:
                if reconnect_attempts >= self.max_reconnect_attempts:
                    logger.error(f"Max reconnect attempts ({self.max_reconnect_attempts}) reached. Stopping.")
                    self.running = False
                    break
                reconnect_attempts += 1
                if await self._reconnect(reconnect_attempts):
                    reconnect_attempts = 0
                continue

            try:
                raw = await asyncio.wait_for(self.ws.recv(), timeout=self.receive_timeout)
            except asyncio.TimeoutError:
                logger.warning("WebSocket receive timeout. Sending ping...")
                try:
                    await self.ws.ping()
                except Exception:
                    self.ws = None
                continue
            except websockets.exceptions.ConnectionClosed:
                logger.warning("WebSocket connection closed")
                self.ws = None
                continue

            try:
                await self._dispatch(json.loads(raw))
            except (json.JSONDecodeError, StreamError) as e:
                logger.error(f"Bad stream message: {e}")
                self._record_error()

    async def _dispatch(self, message: dict) -> None:
        # Subscription acknowledgement
        if "id" in message and "result" in message:
            subscription = self._pending.pop(message["id"], None)
            if subscription is not None:
                self._active[message["result"]] = subscription
                logger.debug(f"{subscription.method} active as subscription {message['result']}")
            return

        if "error" in message:
            # Rejected subscription requests are never retried on this connection
            subscription = self._pending.pop(message.get("id"), None)
            if subscription is not None:
                raise StreamError(f"{subscription.method} rejected: {message['error']}")
            raise StreamError(f"RPC error: {message['error']}")

        params = message.get("params")
        if not isinstance(params, dict):
            return
        subscription = self._active.get(params.get("subscription"))
        if subscription is None:
            logger.debug(f"Notification for unknown subscription {params.get('subscription')}")
            return

        update = parse_notification(message, subscription)
        if update is not None:
            await self.on_update(update)

    async def disconnect(self) -> None:
        """Disconnect from WebSocket."""
        self.running = False
        if self.ws:
            await self.ws.close()
            self.ws = None
        logger.info("WebSocket disconnected")

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.disconnect()
