"""
helpers.py - Assertion and replay helpers shared by the test suites.
"""

from typing import Iterable, Optional

from clearing import LedgerEngine, EnginePolicy, Money, TransactionRecord, Account


def m(text: str) -> Money:
    """Shorthand for Money.parse in assertions."""
    return Money.parse(text)


def replay(records: Iterable[TransactionRecord], policy: Optional[EnginePolicy] = None) -> LedgerEngine:
    """Run records through a new engine and return it."""
    return LedgerEngine(policy=policy).process(records)


def assert_account(
    account: Account,
    available: str,
    held: str,
    total: str,
    locked: bool = False,
) -> None:
    """Compare an account against expected balances given as decimal strings."""
    assert account is not None
    assert account.available == m(available), f"available {account.available} != {available}"
    assert account.held == m(held), f"held {account.held} != {held}"
    assert account.total == m(total), f"total {account.total} != {total}"
    assert account.locked is locked
