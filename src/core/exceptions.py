"""Exceptions raised by the indexer's I/O collaborators.

The monitoring core never raises these; they surface from storage,
stream and alert delivery and are turned into metrics at the boundary.
"""


class IndexerError(Exception):
    """Base class for indexer errors."""


class StreamError(IndexerError):
    """Stream connection or decoding failure."""


class StorageError(IndexerError):
    """Failed to persist an event row."""


class AlertDeliveryError(IndexerError):
    """An alert channel rejected or failed to receive an alert."""

    def __init__(self, channel: str, message: str):
        super().__init__(f"{channel}: {message}")
        self.channel = channel
