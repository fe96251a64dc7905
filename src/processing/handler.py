"""Stream update processing.

Persists each update, attributes token activity, applies the alert
policy and reports timings and outcomes to the performance monitor.
"""

import logging
import uuid
from typing import Callable, Dict, Iterable, Optional

from src.alerts.models import AlertData, AlertToken, AlertType
from src.alerts.sender import AlertSender
from src.core.constants import (
    DEFAULT_SLOW_PROCESSING_WARN_MS,
    OP_DB_ACCOUNT_INSERT,
    OP_DB_BLOCK_INSERT,
    OP_DB_SLOT_INSERT,
    OP_DB_TRANSACTION_INSERT,
    OP_MESSAGE_PROCESSING,
)
from src.core.exceptions import StorageError
from src.core.models import (
    AccountUpdate,
    ActivityKind,
    BlockUpdate,
    SlotUpdate,
    StreamUpdate,
    TransactionUpdate,
)
from src.core.tokens import TokenConfig, format_token_amount, should_alert
from src.monitoring.monitor import PerformanceMonitor
from src.storage.base import IEventStore

logger = logging.getLogger(__name__)


class EventProcessor:
    """Handles decoded stream updates one at a time."""

    def __init__(
        self,
        monitor: PerformanceMonitor,
        store: IEventStore,
        tokens: Iterable[TokenConfig],
        alert_sender: Optional[AlertSender] = None,
        slow_processing_warn_ms: float = DEFAULT_SLOW_PROCESSING_WARN_MS,
    ):
        """Initialize event processor.

        Args:
            monitor: Performance monitor to record into
            store: Row persistence
            tokens: Tracked tokens (matched by mint address)
            alert_sender: Alert delivery; alerts are skipped when omitted
            slow_processing_warn_ms: Warn when one update takes longer
        """
        self.monitor = monitor
        self.store = store
        self.tokens_by_mint: Dict[str, TokenConfig] = {t.mint_address: t for t in tokens}
        self.alert_sender = alert_sender
        self.slow_processing_warn_ms = slow_processing_warn_ms

    def _token_for(self, mint: Optional[str]) -> Optional[TokenConfig]:
        if not mint:
            return None
        return self.tokens_by_mint.get(mint)

    async def handle(self, update: StreamUpdate) -> None:
        """Process one update.

        Errors are logged and counted as stream errors, never raised.
        """
        operation_id = f"msg-{uuid.uuid4().hex}"
        self.monitor.start_timer(operation_id, OP_MESSAGE_PROCESSING)
        try:
            if isinstance(update, AccountUpdate):
                await self.handle_account(update)
            elif isinstance(update, TransactionUpdate):
                await self.handle_transaction(update)
            elif isinstance(update, SlotUpdate):
                self.handle_slot(update)
            elif isinstance(update, BlockUpdate):
                self.handle_block(update)
            else:
                logger.warning(f"Unknown update type: {type(update).__name__}")
                return
            self.monitor.record_message_processed()
        except Exception as e:
            logger.error(f"Error processing {type(update).__name__}: {e}", exc_info=True)
            self.monitor.record_stream_error()
        finally:
            duration = self.monitor.stop_timer(operation_id)
            self.monitor.record_processing_time(duration)
            if duration > self.slow_processing_warn_ms:
                logger.warning(f"Slow processing: {duration:.2f}ms")

    def _timed_insert(self, operation: str, insert: Callable[[], None]) -> None:
        """Run a store write and report its latency and outcome."""
        operation_id = f"db-{operation}-{uuid.uuid4().hex}"
        self.monitor.start_timer(operation_id, operation)
        try:
            insert()
        except Exception as e:
            self.monitor.record_database_operation(self.monitor.stop_timer(operation_id), success=False)
            if isinstance(e, StorageError):
                raise
            raise StorageError(f"{operation} failed: {e}") from e
        self.monitor.record_database_operation(self.monitor.stop_timer(operation_id), success=True)

    async def handle_account(self, update: AccountUpdate) -> None:
        self._timed_insert(OP_DB_ACCOUNT_INSERT, lambda: self.store.insert_account(update))

        token = self._token_for(update.mint or update.pubkey)
        if token is None:
            return

        self.monitor.record_token_activity(token.symbol, ActivityKind.ACCOUNT)
        logger.info(f"{token.symbol} account update: {update.pubkey}", extra={"token": token.symbol})

        if update.lamports and should_alert(update.lamports, token):
            await self._send_alert(
                AlertType.WHALE_MOVEMENT,
                token,
                update.lamports,
                slot=update.slot,
                account_address=update.pubkey,
            )

    async def handle_transaction(self, update: TransactionUpdate) -> None:
        self._timed_insert(OP_DB_TRANSACTION_INSERT, lambda: self.store.insert_transaction(update))
        logger.debug(f"Transaction {update.signature[:20]}... success={update.success}")

        token = self._token_for(update.mint)
        if token is None:
            return

        amount = format_token_amount(update.amount, token) if update.amount else None
        self.monitor.record_token_activity(
            token.symbol,
            ActivityKind.TRANSACTION,
            float(amount) if amount is not None else None,
        )

        if update.amount and should_alert(update.amount, token):
            await self._send_alert(
                AlertType.LARGE_TRANSACTION,
                token,
                update.amount,
                slot=update.slot,
                transaction_signature=update.signature,
            )

    def handle_slot(self, update: SlotUpdate) -> None:
        self._timed_insert(OP_DB_SLOT_INSERT, lambda: self.store.insert_slot(update))
        logger.debug(f"Slot update: {update.slot}")

    def handle_block(self, update: BlockUpdate) -> None:
        self._timed_insert(OP_DB_BLOCK_INSERT, lambda: self.store.insert_block(update))
        logger.debug(f"Block update: {update.slot} ({update.transaction_count} txs)")

    async def _send_alert(
        self,
        alert_type: AlertType,
        token: TokenConfig,
        raw_amount: int,
        slot: int,
        transaction_signature: Optional[str] = None,
        account_address: Optional[str] = None,
    ) -> None:
        if self.alert_sender is None:
            return
        amount = format_token_amount(raw_amount, token)
        alert = AlertData(
            type=alert_type,
            token=AlertToken(symbol=token.symbol, name=token.name, mint_address=token.mint_address),
            amount=amount,
            formatted_amount=f"{amount.normalize():,f} {token.symbol}",
            transaction_signature=transaction_signature,
            account_address=account_address,
            slot=slot,
        )
        await self.alert_sender.send_alert(alert)
