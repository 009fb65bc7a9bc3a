from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Union

from .config import EnginePolicy, PolicyValidationError, load_policy
from .core import LedgerError
from .csv_io import open_transactions, write_accounts
from .engine import LedgerEngine
from .snapshot import AccountRow, snapshot_rows


def run(
    input_path: Union[str, Path],
    policy: Optional[EnginePolicy] = None,
    verbose: bool = False,
) -> List[AccountRow]:
    """
    Replay a CSV file of transactions and return the final account rows.

    Raises:
        MalformedRecord: On the first invalid input row
        MoneyOverflow: If a balance leaves the supported range
    """
    engine = LedgerEngine(policy=policy, verbose=verbose)
    with open_transactions(input_path) as records:
        engine.process(records)
    if verbose:
        print(
            f"{engine.records_seen} records: {engine.applied_count} applied, "
            f"{engine.rejected_count} rejected",
            file=sys.stderr,
        )
    return snapshot_rows(engine.accounts)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="clearing",
        description="Replay a CSV transaction log and print the resulting account balances",
    )
    parser.add_argument("input", help="Path to the transactions CSV file")
    parser.add_argument("--config", help="Optional YAML file with engine policy switches")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Print one status line per record to stderr"
    )
    args = parser.parse_args(argv)

    try:
        policy = load_policy(args.config) if args.config else None
        rows = run(args.input, policy=policy, verbose=args.verbose)
    except (LedgerError, PolicyValidationError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    write_accounts(rows, sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
