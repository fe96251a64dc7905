"""Event store interface.

Implemented by the CSV journal; the processor only depends on this.
"""

from abc import ABC, abstractmethod
from src.core.models import AccountUpdate, BlockUpdate, SlotUpdate, TransactionUpdate


class IEventStore(ABC):
    """Interface for event row persistence."""

    @abstractmethod
    def insert_account(self, update: AccountUpdate) -> None:
        """Persist an account update row."""
        pass

    @abstractmethod
    def insert_transaction(self, update: TransactionUpdate) -> None:
        """Persist a transaction row."""
        pass

    @abstractmethod
    def insert_slot(self, update: SlotUpdate) -> None:
        """Persist a slot row."""
        pass

    @abstractmethod
    def insert_block(self, update: BlockUpdate) -> None:
        """Persist a block row."""
        pass

    def close(self) -> None:
        """Release resources."""
        pass
