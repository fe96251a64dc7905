"""Event storage."""

from src.storage.base import IEventStore
from src.storage.journal import EventJournal, JournalConfig

__all__ = [
    "IEventStore",
    "EventJournal",
    "JournalConfig",
]
