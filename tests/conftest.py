"""
conftest.py - Shared pytest fixtures for clearing tests

Provides common fixtures used across unit, conformance and functional tests:
- Fresh engines (default policy, lenient policy)
- A CSV writer for file-based tests

Assertion helpers live in tests/helpers.py.
"""

import textwrap

import pytest

from clearing import LedgerEngine, EnginePolicy


@pytest.fixture
def engine():
    """Engine with the default policy."""
    return LedgerEngine()


@pytest.fixture
def lenient_engine():
    """Engine that trusts the client field of dispute records and allows re-disputes."""
    return LedgerEngine(policy=EnginePolicy(
        chargeback_retires_transaction=False,
        validate_client=False,
    ))


@pytest.fixture
def write_csv(tmp_path):
    """Write dedented CSV text to a file and return its path."""
    def _write(content: str, name: str = "transactions.csv"):
        path = tmp_path / name
        path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")
        return path
    return _write
