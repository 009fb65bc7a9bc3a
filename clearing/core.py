"""
Core types for the transaction replay ledger.

This module provides the foundational data structures used by every other module:
1. Money: fixed-point currency amount stored as an integer count of 1/10000 units
2. Immutable records: TransactionRecord and its TransactionKind
3. Exceptions: LedgerError and domain-specific error types
4. Constants: precision, id bounds and money bounds

Nothing in this module holds or mutates ledger state.
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional, Union


# ============================================================================
# CONSTANTS
# ============================================================================

# Number of fractional digits carried by every amount in the system.
PRECISION = 4

# Number of sub-units in one currency unit.
UNITS_PER_WHOLE = 10 ** PRECISION

# Money is bounded to a signed 64-bit count of sub-units.
MONEY_MAX = 2 ** 63 - 1
MONEY_MIN = -(2 ** 63)

# Client and transaction ids are unsigned 32-bit integers.
ID_MIN = 0
ID_MAX = 2 ** 32 - 1


# ============================================================================
# EXCEPTIONS
# ============================================================================

class LedgerError(Exception):
    """Base exception for all ledger-related errors."""
    pass


class MalformedRecord(LedgerError):
    """Raised when an input record cannot be turned into a valid TransactionRecord."""

    def __init__(self, message: str, line: Optional[int] = None):
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class MoneyOverflow(LedgerError, ArithmeticError):
    """Raised when a Money operation leaves the supported range."""
    pass


class InsufficientFunds(LedgerError):
    """Raised when a withdrawal exceeds the available balance of an account."""
    pass


class DuplicateTransaction(LedgerError):
    """Raised when a deposit or withdrawal reuses a transaction id already in history."""
    pass


class UnknownTransaction(LedgerError):
    """Raised when a history mutation references a transaction id that was never recorded."""
    pass


# ============================================================================
# MONEY
# ============================================================================

def _checked(units: int) -> int:
    if units > MONEY_MAX or units < MONEY_MIN:
        raise MoneyOverflow(f"amount of {units} sub-units is outside the supported range")
    return units


@dataclass(frozen=True, slots=True, order=True)
class Money:
    """
    Fixed-point currency amount.

    Stored as an integer count of 1/10000 currency units so that addition,
    subtraction and comparison are exact. Values may be negative (a chargeback
    can drive an available balance below zero).

    Attributes:
        units: Signed count of sub-units (1 unit = 0.0001).
    """
    units: int = 0

    def __post_init__(self):
        if isinstance(self.units, bool) or not isinstance(self.units, int):
            raise TypeError(f"Money units must be int, got {type(self.units)}")
        _checked(self.units)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def zero(cls) -> Money:
        return cls(0)

    @classmethod
    def from_decimal(cls, value: Decimal) -> Money:
        """
        Convert a Decimal to Money without rounding.

        Raises:
            ValueError: If the value is not finite or carries more than
                        PRECISION significant fractional digits.
            MoneyOverflow: If the value is outside the supported range.
        """
        if not isinstance(value, Decimal):
            raise TypeError(f"expected Decimal, got {type(value)}")
        if not value.is_finite():
            raise ValueError(f"amount must be finite, got {value}")
        # Integer arithmetic on the digit tuple so that the context precision
        # never rounds the value.
        sign, digits, exponent = value.as_tuple()
        coefficient = int("".join(map(str, digits)))
        shift = exponent + PRECISION
        if coefficient and shift > 20:
            raise MoneyOverflow(f"amount {value} is outside the supported range")
        if shift >= 0:
            units = coefficient * 10 ** shift
        else:
            units, remainder = divmod(coefficient, 10 ** -shift)
            if remainder:
                raise ValueError(
                    f"amount {value} has more than {PRECISION} fractional digits"
                )
        return cls(_checked(-units if sign else units))

    @classmethod
    def parse(cls, text: str) -> Money:
        """
        Parse a decimal string such as "1", "1.5", "0.0001" or "2.50000".

        Trailing zeros past the fourth fractional digit are accepted; any other
        digit past the fourth is an error, since it cannot be stored exactly.

        Raises:
            ValueError: If the text is not a plain decimal number.
            MoneyOverflow: If the value is outside the supported range.
        """
        stripped = text.strip()
        if not stripped:
            raise ValueError("amount is empty")
        # Decimal also accepts "NaN", "Infinity" and exponents; money does not.
        if any(c not in "0123456789.+-" for c in stripped):
            raise ValueError(f"invalid amount: {text!r}")
        try:
            value = Decimal(stripped)
        except InvalidOperation:
            raise ValueError(f"invalid amount: {text!r}") from None
        return cls.from_decimal(value)

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def __add__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        return Money(_checked(self.units + other.units))

    def __sub__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        return Money(_checked(self.units - other.units))

    def __neg__(self) -> Money:
        return Money(_checked(-self.units))

    def is_negative(self) -> bool:
        return self.units < 0

    def is_positive(self) -> bool:
        return self.units > 0

    def is_zero(self) -> bool:
        return self.units == 0

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def to_decimal(self) -> Decimal:
        """Exact Decimal value with PRECISION fractional digits."""
        return Decimal(str(self))

    def __str__(self) -> str:
        sign = "-" if self.units < 0 else ""
        whole, frac = divmod(abs(self.units), UNITS_PER_WHOLE)
        return f"{sign}{whole}.{frac:0{PRECISION}d}"

    def __repr__(self) -> str:
        return f"Money({self})"


# ============================================================================
# TRANSACTION RECORDS
# ============================================================================

class TransactionKind(Enum):
    """
    Type of a historical event.

    DEPOSIT and WITHDRAW carry an amount and their own transaction id.
    DISPUTE, RESOLVE and CHARGEBACK reference the id of an earlier
    deposit or withdrawal and carry no amount.
    """
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @property
    def carries_amount(self) -> bool:
        return self in (TransactionKind.DEPOSIT, TransactionKind.WITHDRAW)

    @classmethod
    def parse(cls, text: str) -> TransactionKind:
        """
        Parse a type string, case-insensitive and whitespace tolerant.

        "withdrawal" is accepted as an alias of "withdraw".

        Raises:
            MalformedRecord: If the text names no known kind.
        """
        key = text.strip().lower()
        kind = _KIND_ALIASES.get(key)
        if kind is None:
            raise MalformedRecord(f"unknown transaction type: {text!r}")
        return kind


_KIND_ALIASES = {kind.value: kind for kind in TransactionKind}
_KIND_ALIASES["withdrawal"] = TransactionKind.WITHDRAW


def _check_id(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedRecord(f"{name} must be an integer, got {value!r}")
    if not ID_MIN <= value <= ID_MAX:
        raise MalformedRecord(f"{name} {value} outside range {ID_MIN}..{ID_MAX}")


@dataclass(frozen=True, slots=True)
class TransactionRecord:
    """
    An immutable description of one historical event.

    Attributes:
        kind: What happened (deposit, withdraw, dispute, resolve, chargeback).
        client: Id of the owning client account.
        tx: For deposit/withdraw, the unique id of this record. For the other
            kinds, the id of the deposit/withdraw being referenced.
        amount: Strictly positive amount for deposit/withdraw, None otherwise.

    All fields are validated in __post_init__; an invalid combination raises
    MalformedRecord.
    """
    kind: TransactionKind
    client: int
    tx: int
    amount: Optional[Money] = None

    def __post_init__(self):
        if not isinstance(self.kind, TransactionKind):
            raise MalformedRecord(f"kind must be TransactionKind, got {self.kind!r}")
        _check_id("client", self.client)
        _check_id("tx", self.tx)
        if self.kind.carries_amount:
            if self.amount is None:
                raise MalformedRecord(f"{self.kind.value} {self.tx} is missing an amount")
            if not isinstance(self.amount, Money):
                raise MalformedRecord(f"amount must be Money, got {type(self.amount)}")
            if not self.amount.is_positive():
                raise MalformedRecord(
                    f"{self.kind.value} {self.tx} amount must be positive, got {self.amount}"
                )
        elif self.amount is not None:
            raise MalformedRecord(f"{self.kind.value} {self.tx} must not carry an amount")

    def __repr__(self) -> str:
        amount = f", {self.amount}" if self.amount is not None else ""
        return f"{self.kind.value}(client={self.client}, tx={self.tx}{amount})"


def deposit(client: int, tx: int, amount: Union[str, Money]) -> TransactionRecord:
    """Build a deposit record; a string amount is parsed with Money.parse."""
    return TransactionRecord(TransactionKind.DEPOSIT, client, tx, _as_money(amount))


def withdraw(client: int, tx: int, amount: Union[str, Money]) -> TransactionRecord:
    """Build a withdrawal record; a string amount is parsed with Money.parse."""
    return TransactionRecord(TransactionKind.WITHDRAW, client, tx, _as_money(amount))


def dispute(client: int, tx: int) -> TransactionRecord:
    return TransactionRecord(TransactionKind.DISPUTE, client, tx)


def resolve(client: int, tx: int) -> TransactionRecord:
    return TransactionRecord(TransactionKind.RESOLVE, client, tx)


def chargeback(client: int, tx: int) -> TransactionRecord:
    return TransactionRecord(TransactionKind.CHARGEBACK, client, tx)


def _as_money(amount: Union[str, Money]) -> Money:
    if isinstance(amount, Money):
        return amount
    try:
        return Money.parse(amount)
    except ValueError as e:
        raise MalformedRecord(str(e)) from None
