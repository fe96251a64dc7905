"""Webhook alert delivery.

Sends alerts to every enabled channel concurrently and reports each
channel's outcome to the performance monitor.
"""

import asyncio
import logging
from typing import Any, Coroutine, Dict, Optional

import httpx

from src.alerts.formatter import AlertFormatter
from src.alerts.models import AlertData
from src.core.config import AlertConfig
from src.core.constants import TELEGRAM_API_URL
from src.core.exceptions import AlertDeliveryError
from src.monitoring.monitor import PerformanceMonitor

logger = logging.getLogger(__name__)


class AlertSender:
    """Posts alerts to Discord, Telegram and custom webhooks."""

    def __init__(
        self,
        config: AlertConfig,
        monitor: Optional[PerformanceMonitor] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize alert sender.

        Args:
            config: Alert channel configuration
            monitor: Receives one delivery outcome per channel
            client: HTTP client (a new one is created when omitted)
        """
        self.config = config
        self.monitor = monitor
        self.client = client or httpx.AsyncClient(timeout=httpx.Timeout(10.0))

    def _channels(self, alert: AlertData) -> Dict[str, Coroutine[Any, Any, None]]:
        channels = {}
        if self.config.discord.enabled and self.config.discord.webhook_url:
            channels["discord"] = self._send_discord(alert)
        if (
            self.config.telegram.enabled
            and self.config.telegram.bot_token
            and self.config.telegram.chat_id
        ):
            channels["telegram"] = self._send_telegram(alert)
        if self.config.custom.enabled and self.config.custom.webhook_url:
            channels["custom"] = self._send_custom(alert)
        return channels

    async def send_alert(self, alert: AlertData) -> Dict[str, bool]:
        """Send an alert to all configured channels.

        Delivery failures are logged and recorded, never raised.

        Args:
            alert: Alert to send

        Returns:
            Mapping of channel name to delivery success
        """
        channels = self._channels(alert)
        if not channels:
            logger.debug("No alert channels configured, alert dropped")
            return {}

        results = await asyncio.gather(*channels.values(), return_exceptions=True)

        outcome: Dict[str, bool] = {}
        for name, result in zip(channels, results):
            success = not isinstance(result, BaseException)
            outcome[name] = success
            if not success:
                logger.error(f"Failed to send {name} alert: {result}")
            if self.monitor:
                self.monitor.record_alert_sent(success)

        if any(outcome.values()):
            logger.info(
                f"Alert sent for {alert.token.symbol} {alert.type.value}",
                extra={"token": alert.token.symbol},
            )
        return outcome

    async def _post(self, channel: str, url: str, **kwargs) -> None:
        try:
            response = await self.client.post(url, **kwargs)
        except httpx.HTTPError as e:
            raise AlertDeliveryError(channel, str(e)) from e
        if response.is_error:
            raise AlertDeliveryError(channel, f"HTTP {response.status_code}")

    async def _send_discord(self, alert: AlertData) -> None:
        await self._post(
            "discord",
            self.config.discord.webhook_url,
            json=AlertFormatter.format_discord(alert),
        )

    async def _send_telegram(self, alert: AlertData) -> None:
        url = f"{TELEGRAM_API_URL}/bot{self.config.telegram.bot_token}/sendMessage"
        await self._post(
            "telegram",
            url,
            json={
                "chat_id": self.config.telegram.chat_id,
                "text": AlertFormatter.format_telegram(alert),
                "parse_mode": "Markdown",
                "disable_web_page_preview": True,
            },
        )

    async def _send_custom(self, alert: AlertData) -> None:
        await self._post(
            "custom",
            self.config.custom.webhook_url,
            json=AlertFormatter.format_custom(alert),
        )

    async def close(self) -> None:
        """Close HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
