"""
CSV input and output adapters.

read_transactions() turns a delimited-text stream into a lazy sequence of
TransactionRecord; write_accounts() renders snapshot rows. Neither keeps any
state of its own.

Input columns: type, client, tx, amount (header required, any order).
Output columns: client, available, held, total, locked.
"""
from __future__ import annotations

import csv
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, TextIO, Union

from .core import MalformedRecord, Money, MoneyOverflow, TransactionKind, TransactionRecord
from .snapshot import OUTPUT_COLUMNS, AccountRow


REQUIRED_COLUMNS = ("type", "client", "tx")
AMOUNT_COLUMN = "amount"


def _parse_header(row: List[str], line: int) -> Dict[str, int]:
    columns = {name.strip().lower(): idx for idx, name in enumerate(row) if name.strip()}
    missing = [c for c in REQUIRED_COLUMNS if c not in columns]
    if missing:
        raise MalformedRecord(f"header is missing columns: {', '.join(missing)}", line)
    return columns


def _field(row: List[str], idx: Optional[int]) -> str:
    if idx is None or idx >= len(row):
        return ""
    return row[idx].strip()


def _parse_id(name: str, text: str, line: int) -> int:
    if not (text.isascii() and text.isdigit()):
        raise MalformedRecord(f"{name} must be a non-negative integer, got {text!r}", line)
    return int(text)


def parse_row(row: List[str], columns: Dict[str, int], line: Optional[int] = None) -> TransactionRecord:
    """
    Build a TransactionRecord from one CSV row.

    Raises:
        MalformedRecord: On any invalid field, tagged with the line number.
    """
    known = set(columns.values())
    for idx, value in enumerate(row):
        if idx not in known and value.strip():
            raise MalformedRecord(f"unexpected value in column {idx + 1}: {value!r}", line)

    try:
        kind = TransactionKind.parse(_field(row, columns["type"]))
        client = _parse_id("client", _field(row, columns["client"]), line)
        tx = _parse_id("tx", _field(row, columns["tx"]), line)

        amount_text = _field(row, columns.get(AMOUNT_COLUMN))
        amount = None
        if amount_text:
            try:
                amount = Money.parse(amount_text)
            except (ValueError, MoneyOverflow) as e:
                raise MalformedRecord(str(e), line) from None
        return TransactionRecord(kind, client, tx, amount)
    except MalformedRecord as e:
        if e.line is None and line is not None:
            raise MalformedRecord(str(e), line) from None
        raise


def read_transactions(stream: TextIO) -> Iterator[TransactionRecord]:
    """
    Lazily parse transaction records from an open text stream.

    Blank lines are skipped. The stream is read forward only, one row at a
    time, so records can be applied as they are produced.

    Raises:
        MalformedRecord: On a missing header, the first invalid row, or text
            that cannot be decoded or split into fields.
    """
    reader = csv.reader(stream)
    columns: Optional[Dict[str, int]] = None
    try:
        for row in reader:
            if not any(value.strip() for value in row):
                continue
            if columns is None:
                columns = _parse_header(row, reader.line_num)
                continue
            yield parse_row(row, columns, reader.line_num)
    except UnicodeDecodeError as e:
        # Decoding runs ahead of the reader in chunks, so no line number.
        raise MalformedRecord(f"input is not valid UTF-8: {e}") from None
    except csv.Error as e:
        raise MalformedRecord(str(e), reader.line_num) from None


@contextmanager
def open_transactions(path: Union[str, Path]) -> Iterator[Iterator[TransactionRecord]]:
    """Open a CSV file and yield its lazy record iterator; the file closes on exit."""
    # utf-8-sig drops a leading byte order mark.
    with open(path, "r", newline="", encoding="utf-8-sig") as f:
        yield read_transactions(f)


def write_accounts(rows: Iterable[AccountRow], stream: TextIO) -> None:
    """Write a header and one line per account row."""
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(OUTPUT_COLUMNS)
    for row in rows:
        writer.writerow(row.as_strings())
