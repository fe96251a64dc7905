"""Alert payloads, formatting and webhook delivery."""

from src.alerts.models import AlertType, AlertToken, AlertData
from src.alerts.formatter import AlertFormatter
from src.alerts.sender import AlertSender

__all__ = [
    "AlertType",
    "AlertToken",
    "AlertData",
    "AlertFormatter",
    "AlertSender",
]
