"""
engine.py - Ledger Engine

The LedgerEngine is the state machine that replays transaction records against
client accounts. It is the only module that mutates account and history state.

Key responsibilities:
    - Applies each record fully before the next one is considered
    - Creates accounts lazily on first reference
    - Records deposits and withdrawals in the history store
    - Moves disputed amounts between available and held balances
    - Ignores business-rule violations (and counts them) instead of failing
    - Lets malformed input and money overflow propagate to the caller
"""

from __future__ import annotations
from collections import Counter
from enum import Enum
import sys
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .core import (
    # Types
    Money, TransactionKind, TransactionRecord,
    # Exceptions
    InsufficientFunds,
)
from .accounts import Account, AccountStore
from .config import EnginePolicy, DEFAULT_POLICY
from .history import HistoryEntry, TransactionHistory


class ExecuteResult(Enum):
    """
    Outcome of applying one record.

    APPLIED: The record changed ledger state.
    REJECTED: The record broke a business rule and was ignored.
    """
    APPLIED = "applied"
    REJECTED = "rejected"


class RejectReason(Enum):
    """Why a record was ignored."""
    DUPLICATE_TRANSACTION = "duplicate transaction id"
    INSUFFICIENT_FUNDS = "insufficient funds"
    ACCOUNT_LOCKED = "account locked"
    UNKNOWN_TRANSACTION = "unknown transaction"
    CLIENT_MISMATCH = "client does not own transaction"
    NOT_DISPUTABLE = "transaction kind not disputable"
    ALREADY_DISPUTED = "already disputed"
    NOT_DISPUTED = "not disputed"
    CHARGED_BACK = "already charged back"


class LedgerEngine:
    """
    Sequential transaction replay engine.

    Processing is a fold over an ordered stream: apply() consumes one record
    and leaves both stores consistent before returning. No record is buffered
    and no record is applied twice.

    Thread Safety:
        Not thread-safe. Each stream should be replayed by its own engine.

    Example:
        engine = LedgerEngine()
        engine.process([
            deposit(1, 1, "2.0"),
            withdraw(1, 2, "1.0"),
            dispute(1, 1),
            chargeback(1, 1),
        ])
        engine.accounts.get(1).available   # Money(-1.0000)
    """

    def __init__(self, policy: Optional[EnginePolicy] = None, verbose: bool = False):
        """
        Create an engine with empty stores.

        Args:
            policy: Business-rule switches (default: DEFAULT_POLICY)
            verbose: Print one status line per record to stderr (default: False)
        """
        self.policy = policy or DEFAULT_POLICY
        self.verbose = verbose
        self.accounts = AccountStore()
        self.history = TransactionHistory()
        self.records_seen: int = 0
        self.rejections: Counter = Counter()

    # ========================================================================
    # READ-ONLY ACCESS
    # ========================================================================

    def get_account(self, client: int) -> Optional[Account]:
        return self.accounts.get(client)

    def snapshot_all(self) -> List[Account]:
        """Final account state, sorted by client id."""
        return self.accounts.snapshot_all()

    @property
    def applied_count(self) -> int:
        return self.records_seen - sum(self.rejections.values())

    @property
    def rejected_count(self) -> int:
        return sum(self.rejections.values())

    # ========================================================================
    # PROCESSING (Mutating)
    # ========================================================================

    def process(self, records: Iterable[TransactionRecord]) -> LedgerEngine:
        """
        Apply every record of an ordered stream.

        The iterable is consumed lazily, one record at a time. Errors raised
        while producing or applying a record (malformed input, overflow)
        propagate and stop processing.

        Returns:
            self, for chaining
        """
        for record in records:
            self.apply(record)
        return self

    def apply(self, record: TransactionRecord) -> ExecuteResult:
        """
        Apply a single record.

        The referenced account is created first, even when the record is
        then rejected.

        Args:
            record: The next record of the stream

        Returns:
            ExecuteResult.APPLIED if state changed
            ExecuteResult.REJECTED if a business rule was violated

        Raises:
            MoneyOverflow: If a balance would leave the supported range
        """
        self.records_seen += 1
        account = self.accounts.get_or_create(record.client)

        handler = self._HANDLERS[record.kind]
        reason = handler(self, record, account)

        if reason is not None:
            self.rejections[reason] += 1
            if self.verbose:
                self._print_result(record, f"REJECTED: {reason.value}", "✗")
            return ExecuteResult.REJECTED

        if self.verbose:
            self._print_result(record, "APPLIED", "✓")
        return ExecuteResult.APPLIED

    def _print_result(self, record: TransactionRecord, result: str, icon: str) -> None:
        print(f"{icon} #{self.records_seen} {record!r}: {result}", file=sys.stderr)

    # ------------------------------------------------------------------------
    # Per-kind rules. Each returns None when applied, or the reason the record
    # was ignored. A rejected record leaves both stores untouched.
    # ------------------------------------------------------------------------

    def _apply_deposit(self, record: TransactionRecord, account: Account) -> Optional[RejectReason]:
        if record.tx in self.history:
            return RejectReason.DUPLICATE_TRANSACTION
        if account.locked and self.policy.reject_deposits_when_locked:
            return RejectReason.ACCOUNT_LOCKED
        account.deposit(record.amount)
        self.history.record(record)
        return None

    def _apply_withdraw(self, record: TransactionRecord, account: Account) -> Optional[RejectReason]:
        if record.tx in self.history:
            return RejectReason.DUPLICATE_TRANSACTION
        if account.locked and self.policy.reject_withdrawals_when_locked:
            return RejectReason.ACCOUNT_LOCKED
        try:
            account.withdraw(record.amount)
        except InsufficientFunds:
            return RejectReason.INSUFFICIENT_FUNDS
        self.history.record(record)
        return None

    def _find_entry(
        self, record: TransactionRecord
    ) -> Tuple[Optional[HistoryEntry], Optional[RejectReason]]:
        """Look up the entry a dispute-type record refers to."""
        entry = self.history.lookup(record.tx)
        if entry is None:
            return None, RejectReason.UNKNOWN_TRANSACTION
        if self.policy.validate_client and entry.client != record.client:
            return None, RejectReason.CLIENT_MISMATCH
        return entry, None

    def _apply_dispute(self, record: TransactionRecord, account: Account) -> Optional[RejectReason]:
        entry, reason = self._find_entry(record)
        if reason is not None:
            return reason
        if entry.kind is TransactionKind.WITHDRAW and not self.policy.dispute_withdrawals:
            return RejectReason.NOT_DISPUTABLE
        if entry.disputed:
            return RejectReason.ALREADY_DISPUTED
        if entry.charged_back and self.policy.chargeback_retires_transaction:
            return RejectReason.CHARGED_BACK
        self._owner(entry, account).hold(entry.amount)
        self.history.mark_disputed(entry.tx)
        return None

    def _apply_resolve(self, record: TransactionRecord, account: Account) -> Optional[RejectReason]:
        entry, reason = self._find_entry(record)
        if reason is not None:
            return reason
        if not entry.disputed:
            return RejectReason.NOT_DISPUTED
        self._owner(entry, account).release(entry.amount)
        self.history.mark_resolved(entry.tx)
        return None

    def _apply_chargeback(self, record: TransactionRecord, account: Account) -> Optional[RejectReason]:
        entry, reason = self._find_entry(record)
        if reason is not None:
            return reason
        if not entry.disputed:
            return RejectReason.NOT_DISPUTED
        self._owner(entry, account).charge_back(entry.amount)
        self.history.mark_chargedback(entry.tx)
        return None

    def _owner(self, entry: HistoryEntry, account: Account) -> Account:
        # With client validation off, balances still move on the account that
        # owns the disputed transaction.
        if entry.client == account.client:
            return account
        return self.accounts.get_or_create(entry.client)

    _HANDLERS = {
        TransactionKind.DEPOSIT: _apply_deposit,
        TransactionKind.WITHDRAW: _apply_withdraw,
        TransactionKind.DISPUTE: _apply_dispute,
        TransactionKind.RESOLVE: _apply_resolve,
        TransactionKind.CHARGEBACK: _apply_chargeback,
    }

    # ========================================================================
    # VERIFICATION
    # ========================================================================

    def verify_holds(self) -> Dict[str, Any]:
        """
        Check that every held balance equals the sum of its open disputes.

        Returns:
            Dict with keys:
            - 'valid': bool - True if every account matches
            - 'discrepancies': List[Dict] - client, expected, actual
        """
        expected: Dict[int, Money] = {}
        for entry in self.history.disputed_entries():
            expected[entry.client] = expected.get(entry.client, Money.zero()) + entry.amount

        discrepancies = []
        for account in self.accounts.snapshot_all():
            want = expected.get(account.client, Money.zero())
            if account.held != want:
                discrepancies.append({
                    'client': account.client,
                    'expected': want,
                    'actual': account.held,
                })
        return {
            'valid': len(discrepancies) == 0,
            'discrepancies': discrepancies,
        }

    def verify_conservation(self) -> Dict[str, Any]:
        """
        Check that every total balance is explained by history.

        For each client:
            total == deposits - withdrawals - charged back amounts

        A transaction charged back more than once (possible only when the
        policy does not retire it) counts once per chargeback.

        Returns:
            Dict with keys:
            - 'valid': bool - True if every account balances
            - 'totals': Dict[int, Money] - expected total per client
            - 'discrepancies': List[Dict] - client, expected, actual
        """
        totals: Dict[int, Money] = {}
        for entry in self.history:
            net = totals.get(entry.client, Money.zero())
            if entry.kind is TransactionKind.DEPOSIT:
                net = net + entry.amount
            else:
                net = net - entry.amount
            for _ in range(entry.chargebacks):
                net = net - entry.amount
            totals[entry.client] = net

        discrepancies = []
        for account in self.accounts.snapshot_all():
            want = totals.get(account.client, Money.zero())
            if account.total != want:
                discrepancies.append({
                    'client': account.client,
                    'expected': want,
                    'actual': account.total,
                })
        return {
            'valid': len(discrepancies) == 0,
            'totals': totals,
            'discrepancies': discrepancies,
        }
