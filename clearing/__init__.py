"""
clearing - Transaction Replay Ledger

Replays an ordered stream of deposits, withdrawals, disputes, resolutions and
chargebacks against client accounts and reports the resulting balances.

Usage:
    from clearing import LedgerEngine, deposit, withdraw, dispute, chargeback

    engine = LedgerEngine()
    engine.process([
        deposit(1, 1, "2.0"),
        withdraw(1, 2, "1.0"),
        dispute(1, 1),
        chargeback(1, 1),
    ])
    account = engine.get_account(1)
    # account.available == Money.parse("-1"), account.locked is True

    # Or straight from a CSV file
    from clearing import run
    rows = run("transactions.csv")
"""

# Core types
from .core import (
    Money,
    TransactionKind,
    TransactionRecord,
    deposit,
    withdraw,
    dispute,
    resolve,
    chargeback,
    LedgerError,
    MalformedRecord,
    MoneyOverflow,
    InsufficientFunds,
    DuplicateTransaction,
    UnknownTransaction,
    PRECISION,
    MONEY_MAX,
    MONEY_MIN,
    ID_MAX,
)

# Stores
from .history import HistoryEntry, TransactionHistory
from .accounts import Account, AccountStore

# Engine
from .config import EnginePolicy, DEFAULT_POLICY, PolicyValidationError, load_policy
from .engine import LedgerEngine, ExecuteResult, RejectReason

# Output
from .snapshot import AccountRow, snapshot_rows, OUTPUT_COLUMNS

# Adapters
from .csv_io import read_transactions, open_transactions, write_accounts
from .cli import run, main

__all__ = [
    # Core
    'Money', 'TransactionKind', 'TransactionRecord',
    'deposit', 'withdraw', 'dispute', 'resolve', 'chargeback',
    'LedgerError', 'MalformedRecord', 'MoneyOverflow', 'InsufficientFunds',
    'DuplicateTransaction', 'UnknownTransaction',
    'PRECISION', 'MONEY_MAX', 'MONEY_MIN', 'ID_MAX',
    # Stores
    'HistoryEntry', 'TransactionHistory', 'Account', 'AccountStore',
    # Engine
    'EnginePolicy', 'DEFAULT_POLICY', 'PolicyValidationError', 'load_policy',
    'LedgerEngine', 'ExecuteResult', 'RejectReason',
    # Output
    'AccountRow', 'snapshot_rows', 'OUTPUT_COLUMNS',
    # Adapters
    'read_transactions', 'open_transactions', 'write_accounts',
    'run', 'main',
]

__version__ = '1.0.0'
