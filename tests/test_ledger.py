from decimal import Decimal

import pytest

from app.core.errors import InvalidArgumentError, NotFoundError
from app.models.enums import BalanceOperation, TransactionKind


def test_create_then_delete_restores_balance(services, make_account):
    bank = make_account(balance="1000.00")

    services.ledger.apply_effect(bank.id, "250.35", TransactionKind.expense, BalanceOperation.create)
    assert bank.balance == Decimal("749.65")

    services.ledger.apply_effect(bank.id, "250.35", TransactionKind.expense, BalanceOperation.delete)
    assert bank.balance == Decimal("1000.00")


def test_receipt_adds_to_balance(services, make_account):
    bank = make_account(balance="10.00")

    changes = services.ledger.apply_effect(bank.id, "5.25", TransactionKind.receipt, BalanceOperation.create)

    assert bank.balance == Decimal("15.25")
    assert changes[0].delta == Decimal("5.25")
    assert changes[0].balance == Decimal("15.25")


def test_update_on_same_account_applies_difference(services, make_account):
    bank = make_account(balance="900.00")

    services.ledger.apply_effect(
        bank.id,
        "150.00",
        TransactionKind.expense,
        BalanceOperation.update,
        prior_amount="100.00",
        prior_account_id=bank.id,
    )

    assert bank.balance == Decimal("850.00")


def test_update_with_account_change_moves_effect(services, make_account):
    first = make_account("Uno", balance="900.00")
    second = make_account("Dos", balance="1000.00")

    changes = services.ledger.apply_effect(
        second.id,
        "100.00",
        TransactionKind.expense,
        BalanceOperation.update,
        prior_amount="100.00",
        prior_account_id=first.id,
    )

    assert first.balance == Decimal("1000.00")
    assert second.balance == Decimal("900.00")
    assert [c.account_id for c in changes] == [first.id, second.id]


def test_no_account_is_a_no_op(services):
    assert services.ledger.apply_effect(None, "10.00", TransactionKind.expense, BalanceOperation.create) == []


def test_unknown_account_raises(services):
    with pytest.raises(NotFoundError):
        services.ledger.apply_effect(999, "10.00", TransactionKind.expense, BalanceOperation.create)


def test_negative_amount_is_rejected(services, make_account):
    bank = make_account(balance="10.00")

    with pytest.raises(InvalidArgumentError):
        services.ledger.apply_effect(bank.id, "-1.00", TransactionKind.expense, BalanceOperation.create)
    assert bank.balance == Decimal("10.00")


def test_float_amounts_are_refused(services, make_account):
    bank = make_account(balance="10.00")

    with pytest.raises(TypeError):
        services.ledger.apply_effect(bank.id, 0.1, TransactionKind.expense, BalanceOperation.create)


def test_effect_applies_on_committed_balance(services, other_services, user_id, make_account, session):
    account = make_account(balance="100.00")
    other_services.accounts.get_account(account.id, user_id)

    services.ledger.apply_effect(account.id, "30.00", TransactionKind.expense, BalanceOperation.create)
    session.commit()
    other_services.accounts.apply_effect(
        account.id, user_id, "20.00", TransactionKind.expense, BalanceOperation.create
    )

    session.refresh(account)
    assert account.balance == Decimal("50.00")
