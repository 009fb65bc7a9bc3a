"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the replay engine.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. test_balance_invariants.py - total == available + held, held matches open disputes
2. test_idempotency.py - resolve/chargeback on undisputed ids change nothing
3. test_replay_determinism.py - identical input yields identical output

These tests use hypothesis for property-based testing.
"""
