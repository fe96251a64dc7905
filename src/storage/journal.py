"""Event journaling.

Appends account, transaction, slot and block rows to per-kind CSV files
in a run directory.
"""

from __future__ import annotations

import csv
import json
import os
from dataclasses import dataclass
from typing import Dict, List

from src.core.exceptions import StorageError
from src.storage.base import IEventStore
from src.core.models import AccountUpdate, BlockUpdate, SlotUpdate, TransactionUpdate, utcnow


ACCOUNT_COLUMNS = ["recorded_at", "pubkey", "owner", "lamports", "executable", "rent_epoch", "slot", "data_length"]
TRANSACTION_COLUMNS = ["recorded_at", "signature", "slot", "success"]
SLOT_COLUMNS = ["recorded_at", "slot", "parent"]
BLOCK_COLUMNS = ["recorded_at", "slot", "blockhash", "parent_slot", "block_time", "transaction_count"]


@dataclass
class JournalConfig:
    run_dir: str  # directory to store artifacts


class EventJournal(IEventStore):
    """CSV-backed event store, one file per event kind."""

    def __init__(self, config: JournalConfig) -> None:
        self.config = config
        os.makedirs(self.config.run_dir, exist_ok=True)
        self.files: Dict[str, str] = {
            "accounts": os.path.join(self.config.run_dir, "accounts.csv"),
            "transactions": os.path.join(self.config.run_dir, "transactions.csv"),
            "slots": os.path.join(self.config.run_dir, "slots.csv"),
            "blocks": os.path.join(self.config.run_dir, "blocks.csv"),
        }
        self.state_json = os.path.join(self.config.run_dir, "state.json")
        self.row_counts: Dict[str, int] = {kind: 0 for kind in self.files}
        self._init_csv("accounts", ACCOUNT_COLUMNS)
        self._init_csv("transactions", TRANSACTION_COLUMNS)
        self._init_csv("slots", SLOT_COLUMNS)
        self._init_csv("blocks", BLOCK_COLUMNS)
        self._save_state({"started_at": utcnow().isoformat()})

    def _init_csv(self, kind: str, columns: List[str]) -> None:
        path = self.files[kind]
        if not os.path.exists(path):
            with open(path, "w", newline="", encoding="utf-8") as f:
                csv.writer(f).writerow(columns)

    def _save_state(self, state: Dict) -> None:
        with open(self.state_json, "w", encoding="utf-8") as f:
            json.dump(state, f, indent=2)

    def _append(self, kind: str, row: list) -> None:
        try:
            with open(self.files[kind], "a", newline="", encoding="utf-8") as f:
                csv.writer(f).writerow(row)
        except OSError as e:
            raise StorageError(f"Failed to append {kind} row: {e}") from e
        self.row_counts[kind] += 1

    def insert_account(self, update: AccountUpdate) -> None:
        self._append("accounts", [
            utcnow().isoformat(),
            update.pubkey,
            update.owner,
            update.lamports,
            update.executable,
            update.rent_epoch,
            update.slot,
            update.data_length,
        ])

    def insert_transaction(self, update: TransactionUpdate) -> None:
        self._append("transactions", [utcnow().isoformat(), update.signature, update.slot, update.success])

    def insert_slot(self, update: SlotUpdate) -> None:
        self._append("slots", [utcnow().isoformat(), update.slot, update.parent])

    def insert_block(self, update: BlockUpdate) -> None:
        self._append("blocks", [
            utcnow().isoformat(),
            update.slot,
            update.blockhash,
            update.parent_slot,
            update.block_time if update.block_time is not None else "",
            update.transaction_count,
        ])

    def close(self) -> None:
        """Write final row counts next to the CSV files."""
        self._save_state({"closed_at": utcnow().isoformat(), "rows": self.row_counts})
