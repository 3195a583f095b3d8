"""
Balance invariants checked against arbitrary transaction sequences.

INVARIANTS:
    available + held == total for every client at every step.
    With only deposits and withdrawals, total == sum(deposits) - sum(accepted withdrawals).
    dispute followed by resolve restores available and held exactly.
    dispute followed by chargeback locks the account and drops the amount from held.
"""

import sys
import os
from decimal import Decimal

from hypothesis import given, settings, strategies as st

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from account_store import AccountStore
from errors import RejectionReason
from ledger import TransactionLedger
from models import Transaction, TransactionType
from processor import TransactionProcessor


amounts = st.decimals(
    min_value=Decimal("0.0001"),
    max_value=Decimal("100000"),
    places=4,
    allow_nan=False,
    allow_infinity=False,
)

funds_movements = st.lists(
    st.tuples(st.sampled_from([TransactionType.DEPOSIT, TransactionType.WITHDRAWAL]), amounts),
    max_size=50,
)


def new_processor():
    ledger = TransactionLedger()
    accounts = AccountStore()
    return TransactionProcessor(ledger, accounts), accounts


@given(funds_movements)
def test_total_matches_accepted_movements(movements):
    processor, accounts = new_processor()
    expected = Decimal("0")

    for transaction_id, (transaction_type, amount) in enumerate(movements, start=1):
        result = processor.process_transaction(Transaction(transaction_type, 1, transaction_id, amount))
        if result.succeeded:
            expected += amount if transaction_type == TransactionType.DEPOSIT else -amount
        else:
            assert result.error.reason == RejectionReason.INSUFFICIENT_FUNDS

        account = accounts.get(1)
        assert account.available + account.held == account.total
        assert account.available >= 0

    assert accounts.get(1).total == expected
    assert accounts.get(1).held == Decimal("0")


@given(st.lists(amounts, min_size=1, max_size=20), st.data())
def test_dispute_then_resolve_restores_balances(deposits, data):
    processor, accounts = new_processor()
    for transaction_id, amount in enumerate(deposits, start=1):
        processor.process_transaction(Transaction(TransactionType.DEPOSIT, 1, transaction_id, amount))

    target = data.draw(st.integers(min_value=1, max_value=len(deposits)))
    account = accounts.get(1)
    before = (account.available, account.held)

    assert processor.process_transaction(Transaction(TransactionType.DISPUTE, 1, target)).succeeded
    assert account.held == before[1] + deposits[target - 1]
    assert processor.process_transaction(Transaction(TransactionType.RESOLVE, 1, target)).succeeded

    assert (account.available, account.held) == before
    assert account.locked is False


@given(st.lists(amounts, min_size=1, max_size=20), st.data())
def test_dispute_then_chargeback_removes_amount(deposits, data):
    processor, accounts = new_processor()
    for transaction_id, amount in enumerate(deposits, start=1):
        processor.process_transaction(Transaction(TransactionType.DEPOSIT, 1, transaction_id, amount))

    target = data.draw(st.integers(min_value=1, max_value=len(deposits)))
    account = accounts.get(1)
    before_available = account.available
    before_total = account.total

    processor.process_transaction(Transaction(TransactionType.DISPUTE, 1, target))
    assert processor.process_transaction(Transaction(TransactionType.CHARGEBACK, 1, target)).succeeded

    disputed = deposits[target - 1]
    assert account.locked is True
    assert account.held == Decimal("0")
    assert account.available == before_available - disputed
    assert account.total == before_total - disputed


commands = st.lists(
    st.tuples(
        st.sampled_from(list(TransactionType)),
        st.integers(min_value=1, max_value=3),
        st.integers(min_value=1, max_value=15),
        amounts,
    ),
    max_size=80,
)


@settings(max_examples=200)
@given(commands)
def test_rejected_commands_never_change_state(stream):
    processor, accounts = new_processor()

    for transaction_type, client_id, transaction_id, amount in stream:
        transaction = Transaction(
            transaction_type,
            client_id,
            transaction_id,
            amount if transaction_type.carries_amount else None,
        )
        existing = accounts.get(client_id)
        before = None if existing is None else (existing.available, existing.held, existing.locked)

        result = processor.process_transaction(transaction)

        account = accounts.get(client_id)
        if not result.succeeded and before is not None:
            assert (account.available, account.held, account.locked) == before
        assert account.held >= 0
        assert account.available + account.held == account.total
