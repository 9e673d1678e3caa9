import datetime as dt
from decimal import Decimal
from uuid import uuid4

import pytest

from app.core.errors import ForbiddenError, NotFoundError
from app.models.enums import AccountKind, PaymentChannel, TransactionKind
from app.models.transaction import Transaction
from app.services.transactions import TransactionSnapshot, affects_balance

TODAY = dt.date(2026, 1, 10)


@pytest.fixture
def bank(make_account):
    return make_account("Banco", balance="1000.00")


@pytest.fixture
def new_tx(user_id):
    def factory(amount="100.00", date=TODAY, channel=PaymentChannel.debit, kind=TransactionKind.expense, **extra):
        return Transaction(
            user_id=user_id,
            kind=kind,
            amount=Decimal(amount),
            date=date,
            channel=channel,
            **extra,
        )

    return factory


def test_affects_balance_predicate(new_tx):
    assert affects_balance(new_tx(account_id=1), TODAY)
    assert not affects_balance(new_tx(account_id=None), TODAY)
    assert not affects_balance(new_tx(account_id=1, channel=PaymentChannel.credit), TODAY)
    assert not affects_balance(new_tx(account_id=1, date=dt.date(2026, 2, 1)), TODAY)
    assert affects_balance(new_tx(account_id=1, date=dt.date(2026, 2, 1), is_paid=True), TODAY)
    assert not affects_balance(
        new_tx(account_id=1, date=dt.date(2026, 1, 5), payment_date=dt.date(2026, 1, 20)), TODAY
    )


def test_created_debit_is_applied_once(services, bank, new_tx):
    tx = new_tx(account_id=bank.id)

    changes = services.transactions.record_created(tx)

    assert tx.id is not None
    assert tx.balance_applied
    assert bank.balance == Decimal("900.00")
    assert [c.delta for c in changes] == [Decimal("-100.00")]


def test_future_transaction_waits_for_due_date(services, user_id, bank, new_tx):
    tx = new_tx(account_id=bank.id, date=dt.date(2026, 2, 1))

    services.transactions.record_created(tx)
    assert not tx.balance_applied
    assert bank.balance == Decimal("1000.00")

    assert services.transactions.apply_due(user_id, today=dt.date(2026, 1, 31)) == []
    applied = services.transactions.apply_due(user_id, today=dt.date(2026, 2, 1))

    assert applied == [tx]
    assert bank.balance == Decimal("900.00")
    assert services.transactions.apply_due(user_id, today=dt.date(2026, 2, 2)) == []
    assert bank.balance == Decimal("900.00")


def test_credit_transaction_does_not_touch_balance(services, bank, new_tx):
    tx = new_tx(account_id=bank.id, channel=PaymentChannel.credit)

    assert services.transactions.record_created(tx) == []
    assert bank.balance == Decimal("1000.00")


def test_set_paid_applies_and_reverts_future_transaction(services, user_id, bank, new_tx):
    tx = new_tx(account_id=bank.id, date=dt.date(2026, 3, 1))
    services.transactions.record_created(tx)

    services.transactions.set_paid(tx.id, user_id, True)
    assert bank.balance == Decimal("900.00")

    services.transactions.set_paid(tx.id, user_id, True)
    assert bank.balance == Decimal("900.00")

    services.transactions.set_paid(tx.id, user_id, False)
    assert bank.balance == Decimal("1000.00")
    assert not tx.balance_applied


def test_update_amount_applies_difference(services, bank, new_tx):
    tx = new_tx(account_id=bank.id)
    services.transactions.record_created(tx)
    prior = TransactionSnapshot.of(tx)

    tx.amount = Decimal("150.00")
    services.transactions.record_updated(tx, prior)

    assert bank.balance == Decimal("850.00")


def test_update_account_moves_effect(services, bank, make_account, new_tx):
    other = make_account("Otro", balance="200.00")
    tx = new_tx(account_id=bank.id)
    services.transactions.record_created(tx)
    prior = TransactionSnapshot.of(tx)

    tx.account_id = other.id
    services.transactions.record_updated(tx, prior)

    assert bank.balance == Decimal("1000.00")
    assert other.balance == Decimal("100.00")


def test_update_kind_reverses_with_previous_kind(services, bank, new_tx):
    tx = new_tx(account_id=bank.id)
    services.transactions.record_created(tx)
    prior = TransactionSnapshot.of(tx)

    tx.kind = TransactionKind.receipt
    services.transactions.record_updated(tx, prior)

    assert bank.balance == Decimal("1100.00")


def test_update_to_credit_removes_effect(services, bank, new_tx):
    tx = new_tx(account_id=bank.id)
    services.transactions.record_created(tx)
    prior = TransactionSnapshot.of(tx)

    tx.channel = PaymentChannel.credit
    services.transactions.record_updated(tx, prior)

    assert bank.balance == Decimal("1000.00")
    assert not tx.balance_applied


def test_delete_reverts_applied_effect(services, bank, new_tx):
    tx = new_tx(account_id=bank.id)
    services.transactions.record_created(tx)

    services.transactions.record_deleted(tx)

    assert bank.balance == Decimal("1000.00")


def test_delete_of_unapplied_transaction_leaves_balance(services, bank, new_tx):
    tx = new_tx(account_id=bank.id, date=dt.date(2026, 5, 1))
    services.transactions.record_created(tx)

    services.transactions.record_deleted(tx)

    assert bank.balance == Decimal("1000.00")


def test_credit_mutation_refreshes_open_statement(services, user_id, make_account, new_tx):
    card = make_account("Tarjeta", kind=AccountKind.credit)
    statement = services.statements.create_statement(user_id, 15, 5, account_id=card.id, year=2026, month=1)

    tx = new_tx("75.00", date=dt.date(2026, 1, 5), account_id=card.id, channel=PaymentChannel.credit)
    services.transactions.record_created(tx)
    assert statement.total_amount == Decimal("75.00")

    prior = TransactionSnapshot.of(tx)
    tx.amount = Decimal("60.00")
    services.transactions.record_updated(tx, prior)
    assert statement.total_amount == Decimal("60.00")

    services.transactions.record_deleted(tx)
    assert statement.total_amount == Decimal("0.00")


def test_get_owned_checks_owner(services, new_tx, bank):
    tx = new_tx(account_id=bank.id)
    services.transactions.record_created(tx)

    with pytest.raises(ForbiddenError):
        services.transactions.get_owned(tx.id, uuid4())
    with pytest.raises(NotFoundError):
        services.transactions.get_owned(9999, tx.user_id)
