"""
accounts.py - Client accounts and the Account Store

An Account holds the available and held balances of one client plus its
locked flag. The total balance is derived from the other two and never stored,
so total == available + held holds by construction.

Accounts are created lazily by AccountStore.get_or_create() and are never
deleted. Only the LedgerEngine mutates them.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from .core import Money, InsufficientFunds


@dataclass(slots=True)
class Account:
    """
    Mutable balance state of one client.

    Attributes:
        client: Client id.
        available: Funds the client may withdraw immediately.
        held: Funds frozen pending dispute resolution.
        locked: True once a chargeback has been applied.
    """
    client: int
    available: Money = field(default_factory=Money.zero)
    held: Money = field(default_factory=Money.zero)
    locked: bool = False

    @property
    def total(self) -> Money:
        return self.available + self.held

    def deposit(self, amount: Money) -> None:
        self.available = self.available + amount

    def withdraw(self, amount: Money) -> None:
        """
        Remove funds from the available balance.

        Raises:
            InsufficientFunds: If amount exceeds the available balance.
                               The account is left unchanged.
        """
        if self.available < amount:
            raise InsufficientFunds(
                f"client {self.client}: available {self.available} < {amount}"
            )
        self.available = self.available - amount

    def hold(self, amount: Money) -> None:
        """Move funds from available to held. Available may go negative."""
        available = self.available - amount
        held = self.held + amount
        self.available, self.held = available, held

    def release(self, amount: Money) -> None:
        """Move funds from held back to available."""
        held = self.held - amount
        available = self.available + amount
        self.available, self.held = available, held

    def charge_back(self, amount: Money) -> None:
        """Remove held funds from the account entirely and lock it."""
        self.held = self.held - amount
        self.locked = True

    def __repr__(self) -> str:
        lock = " locked" if self.locked else ""
        return (
            f"Account({self.client}: available={self.available}, "
            f"held={self.held}, total={self.total}{lock})"
        )


class AccountStore:
    """
    Mapping from client id to Account.

    get_or_create() is the only way an account comes into existence.
    """

    def __init__(self):
        self._accounts: Dict[int, Account] = {}

    def __contains__(self, client: int) -> bool:
        return client in self._accounts

    def __len__(self) -> int:
        return len(self._accounts)

    def __iter__(self) -> Iterator[Account]:
        return iter(self.snapshot_all())

    def get(self, client: int) -> Optional[Account]:
        return self._accounts.get(client)

    def get_or_create(self, client: int) -> Account:
        account = self._accounts.get(client)
        if account is None:
            account = Account(client)
            self._accounts[client] = account
        return account

    def snapshot_all(self) -> List[Account]:
        """All accounts, sorted by client id for deterministic output."""
        return [self._accounts[c] for c in sorted(self._accounts)]
