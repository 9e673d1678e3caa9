from decimal import Decimal
from uuid import uuid4

import pytest

from app.core.errors import ForbiddenError, NotFoundError
from app.models.enums import AccountKind, BalanceOperation, TransactionKind


def test_only_one_primary_account(services, user_id):
    first = services.accounts.create_account(user_id, "Nómina", is_primary=True)
    second = services.accounts.create_account(user_id, "Gastos", is_primary=True)

    assert not first.is_primary
    assert second.is_primary

    services.accounts.set_primary(first.id, user_id)

    primaries = [a.name for a in services.accounts.list_accounts(user_id) if a.is_primary]
    assert primaries == ["Nómina"]


def test_primary_account_listed_first(services, user_id):
    services.accounts.create_account(user_id, "Gastos")
    services.accounts.create_account(user_id, "Nómina", is_primary=True)

    assert services.accounts.list_accounts(user_id)[0].name == "Nómina"


def test_total_balance_excludes_savings(services, user_id):
    services.accounts.create_account(user_id, "Banco", balance="1200.10")
    services.accounts.create_account(user_id, "Efectivo", balance="35.45")
    services.accounts.create_account(user_id, "Ahorro", kind=AccountKind.savings, balance="5000.00")

    assert services.accounts.total_balance(user_id) == Decimal("1235.55")


def test_set_balance_overrides_value(services, user_id):
    account = services.accounts.create_account(user_id, "Banco", balance="10.00")

    services.accounts.set_balance(account.id, user_id, "742.129")

    assert account.balance == Decimal("742.13")


def test_get_account_checks_owner(services, user_id, make_account):
    foreign = make_account("Ajena", owner=uuid4())

    with pytest.raises(ForbiddenError):
        services.accounts.get_account(foreign.id, user_id)
    with pytest.raises(NotFoundError):
        services.accounts.get_account(12345, user_id)


def test_apply_effect_commits_balance(services, user_id, session):
    account = services.accounts.create_account(user_id, "Banco", balance="100.00")

    changes = services.accounts.apply_effect(
        account.id, user_id, "40.00", TransactionKind.expense, BalanceOperation.create
    )
    session.expire_all()

    assert changes[0].balance == Decimal("60.00")
    assert services.accounts.get_account(account.id, user_id).balance == Decimal("60.00")


def test_apply_effect_rejects_foreign_prior_account(services, user_id, make_account):
    account = services.accounts.create_account(user_id, "Banco", balance="100.00")
    foreign = make_account("Ajena", balance="100.00", owner=uuid4())

    with pytest.raises(ForbiddenError):
        services.accounts.apply_effect(
            account.id,
            user_id,
            "40.00",
            TransactionKind.expense,
            BalanceOperation.update,
            prior_amount="40.00",
            prior_account_id=foreign.id,
        )
    assert foreign.balance == Decimal("100.00")
