"""Stream update processing."""

from src.processing.handler import EventProcessor

__all__ = [
    "EventProcessor",
]
