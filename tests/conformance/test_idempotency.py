"""
Idempotency Conformance Tests

INVARIANT: Resolve and chargeback on a transaction that is not currently
disputed are no-ops.

    ∀ tx not disputed:
        state after resolve(tx) = state before
        state after chargeback(tx) = state before

Repeating a dispute on an already disputed transaction is a no-op as well.
"""

from hypothesis import HealthCheck, given, settings, assume
from hypothesis import strategies as st

from clearing import (
    LedgerEngine, ExecuteResult, snapshot_rows,
    deposit, dispute, resolve, chargeback,
)
from tests.conformance.test_balance_invariants import record_streams


def _state(engine):
    return (
        snapshot_rows(engine.accounts),
        [(e.tx, e.disputed, e.charged_back) for e in engine.history],
    )


class TestIdempotencyProperties:

    @given(record_streams, st.integers(min_value=1, max_value=12), st.sampled_from([resolve, chargeback]))
    @settings(max_examples=200, suppress_health_check=[HealthCheck.filter_too_much])
    def test_close_on_undisputed_is_noop(self, records, tx, close):
        """
        PROPERTY: Closing a dispute that is not open changes nothing.
        """
        engine = LedgerEngine()
        engine.process(records)
        entry = engine.history.lookup(tx)
        assume(entry is not None and not entry.disputed)
        # Make sure the account exists so account creation is not a state change.
        engine.accounts.get_or_create(entry.client)
        before = _state(engine)
        assert engine.apply(close(entry.client, tx)) == ExecuteResult.REJECTED
        assert _state(engine) == before

    @given(st.integers(min_value=1, max_value=5))
    @settings(max_examples=20)
    def test_repeated_dispute_applies_once(self, repeats):
        engine = LedgerEngine()
        engine.process([deposit(1, 1, "10"), deposit(1, 2, "1")])
        results = [engine.apply(dispute(1, 1)) for _ in range(repeats + 1)]
        assert results[0] == ExecuteResult.APPLIED
        assert all(r == ExecuteResult.REJECTED for r in results[1:])
        account = engine.get_account(1)
        assert account.held == deposit(1, 1, "10").amount
        assert account.available == deposit(1, 2, "1").amount

    @given(st.integers(min_value=1, max_value=5))
    @settings(max_examples=20)
    def test_repeated_chargeback_applies_once(self, repeats):
        engine = LedgerEngine()
        engine.process([deposit(1, 1, "10"), deposit(1, 2, "1"), dispute(1, 1)])
        results = [engine.apply(chargeback(1, 1)) for _ in range(repeats + 1)]
        assert results[0] == ExecuteResult.APPLIED
        assert all(r == ExecuteResult.REJECTED for r in results[1:])
        assert engine.get_account(1).total == deposit(1, 2, "1").amount
