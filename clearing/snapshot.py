"""
snapshot.py - Snapshot Exporter

Converts the final Account Store into an ordered sequence of immutable rows
for output adapters. Rows are sorted by client id so that identical input
always renders identical output.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Tuple

from .core import Money
from .accounts import Account, AccountStore


OUTPUT_COLUMNS = ("client", "available", "held", "total", "locked")


@dataclass(frozen=True, slots=True)
class AccountRow:
    """
    Point-in-time copy of one account.

    Attributes:
        client: Client id.
        available: Available balance.
        held: Held balance.
        total: available + held at the time of the snapshot.
        locked: Whether the account has been charged back.
    """
    client: int
    available: Money
    held: Money
    total: Money
    locked: bool

    @classmethod
    def from_account(cls, account: Account) -> AccountRow:
        return cls(
            client=account.client,
            available=account.available,
            held=account.held,
            total=account.total,
            locked=account.locked,
        )

    def as_strings(self) -> Tuple[str, str, str, str, str]:
        """Render in OUTPUT_COLUMNS order: money at fixed precision, locked as true/false."""
        return (
            str(self.client),
            str(self.available),
            str(self.held),
            str(self.total),
            "true" if self.locked else "false",
        )


def snapshot_rows(accounts: AccountStore) -> List[AccountRow]:
    """One row per known client, sorted by client id."""
    return [AccountRow.from_account(a) for a in accounts.snapshot_all()]
