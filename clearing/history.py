"""
history.py - Transaction History Store

Keeps every applied deposit and withdrawal, keyed by transaction id, together
with its dispute status. This is the only place a dispute, resolve or
chargeback can find out what amount it refers to.

Dispute-type records are never stored here: they reference history, they are
not history themselves.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional

from .core import (
    Money, TransactionKind, TransactionRecord,
    DuplicateTransaction, UnknownTransaction,
)


@dataclass(slots=True)
class HistoryEntry:
    """
    A stored deposit or withdrawal and its current dispute status.

    Attributes:
        record: The original deposit or withdrawal record.
        disputed: True between a dispute and the following resolve/chargeback.
        chargebacks: Number of chargebacks applied to this entry (at most one
            unless the engine policy lets charged back transactions be reopened).
    """
    record: TransactionRecord
    disputed: bool = False
    chargebacks: int = 0

    @property
    def charged_back(self) -> bool:
        return self.chargebacks > 0

    @property
    def tx(self) -> int:
        return self.record.tx

    @property
    def client(self) -> int:
        return self.record.client

    @property
    def amount(self) -> Money:
        return self.record.amount

    @property
    def kind(self) -> TransactionKind:
        return self.record.kind


class TransactionHistory:
    """
    Mapping from transaction id to HistoryEntry.

    Entries are created once and never removed; iteration follows insertion
    order, which is the order the records were applied.
    """

    def __init__(self):
        self._entries: Dict[int, HistoryEntry] = {}

    def __contains__(self, tx: int) -> bool:
        return tx in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(self._entries.values())

    def record(self, record: TransactionRecord) -> HistoryEntry:
        """
        Insert a new deposit or withdrawal.

        Raises:
            ValueError: If the record is not a deposit or withdrawal
            DuplicateTransaction: If the transaction id is already present
        """
        if not record.kind.carries_amount:
            raise ValueError(f"only deposits and withdrawals are stored, got {record.kind.value}")
        if record.tx in self._entries:
            raise DuplicateTransaction(f"transaction {record.tx} already recorded")
        entry = HistoryEntry(record)
        self._entries[record.tx] = entry
        return entry

    def lookup(self, tx: int) -> Optional[HistoryEntry]:
        """Return the entry for a transaction id, or None if it was never recorded."""
        return self._entries.get(tx)

    def _require(self, tx: int) -> HistoryEntry:
        entry = self._entries.get(tx)
        if entry is None:
            raise UnknownTransaction(f"transaction {tx} not in history")
        return entry

    def mark_disputed(self, tx: int) -> None:
        self._require(tx).disputed = True

    def mark_resolved(self, tx: int) -> None:
        self._require(tx).disputed = False

    def mark_chargedback(self, tx: int) -> None:
        """Close the dispute and retire the entry."""
        entry = self._require(tx)
        entry.disputed = False
        entry.chargebacks += 1

    def disputed_entries(self, client: Optional[int] = None) -> List[HistoryEntry]:
        """All entries currently under dispute, optionally for one client."""
        return [
            e for e in self._entries.values()
            if e.disputed and (client is None or e.client == client)
        ]
