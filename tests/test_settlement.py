from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from app.core.errors import ForbiddenError, InvalidArgumentError
from app.models.enums import AccountKind
from app.services.settlement import SplitPayment


@pytest.fixture
def card(make_account):
    return make_account("Tarjeta", kind=AccountKind.credit)


@pytest.fixture
def bank(make_account):
    return make_account("Banco", balance="1000.00")


@pytest.fixture
def savings_bank(make_account):
    return make_account("Banco 2", balance="500.00")


@pytest.fixture
def statement(services, user_id, card, make_transaction):
    make_transaction("120.00", date(2026, 1, 3), account_id=card.id)
    make_transaction("30.50", date(2026, 1, 10), account_id=card.id)
    return services.statements.create_statement(user_id, 15, 5, account_id=card.id, year=2026, month=1)


def test_pay_with_one_account(services, user_id, statement, bank):
    paid = services.settlement.mark_paid(statement.id, user_id, bank.id)

    assert paid.is_paid
    assert paid.paid_account_id == bank.id
    assert paid.paid_at is not None
    assert bank.balance == Decimal("849.50")
    assert [p.amount for p in services.settlement.payments(statement.id, user_id)] == [Decimal("150.50")]


def test_mark_unpaid_reverses_payment_once(services, user_id, statement, bank):
    services.settlement.mark_paid(statement.id, user_id, bank.id)

    unpaid = services.settlement.mark_unpaid(statement.id, user_id)

    assert not unpaid.is_paid
    assert unpaid.paid_account_id is None
    assert bank.balance == Decimal("1000.00")
    assert services.settlement.payments(statement.id, user_id) == []
    with pytest.raises(InvalidArgumentError):
        services.settlement.mark_unpaid(statement.id, user_id)
    assert bank.balance == Decimal("1000.00")


def test_paying_twice_is_rejected(services, user_id, statement, bank):
    services.settlement.mark_paid(statement.id, user_id, bank.id)

    with pytest.raises(InvalidArgumentError):
        services.settlement.mark_paid(statement.id, user_id, bank.id)
    assert bank.balance == Decimal("849.50")


def test_split_within_tolerance_is_accepted(services, user_id, statement, bank, savings_bank):
    split = [SplitPayment(bank.id, "100.00"), SplitPayment(savings_bank.id, "50.49")]

    paid = services.settlement.mark_paid(statement.id, user_id, split)

    assert paid.is_paid
    assert paid.paid_account_id is None
    assert bank.balance == Decimal("900.00")
    assert savings_bank.balance == Decimal("449.51")
    assert len(services.settlement.payments(statement.id, user_id)) == 2


def test_split_outside_tolerance_changes_nothing(services, user_id, statement, bank, savings_bank):
    split = [SplitPayment(bank.id, "100.00"), SplitPayment(savings_bank.id, "50.48")]

    with pytest.raises(InvalidArgumentError):
        services.settlement.mark_paid(statement.id, user_id, split)

    assert bank.balance == Decimal("1000.00")
    assert savings_bank.balance == Decimal("500.00")
    assert not services.statements.get_owned(statement.id, user_id).is_paid
    assert services.settlement.payments(statement.id, user_id) == []


def test_split_then_unpaid_restores_every_account(services, user_id, statement, bank, savings_bank):
    split = [SplitPayment(bank.id, "75.25"), SplitPayment(savings_bank.id, "75.25")]
    services.settlement.mark_paid(statement.id, user_id, split)

    services.settlement.mark_unpaid(statement.id, user_id)

    assert bank.balance == Decimal("1000.00")
    assert savings_bank.balance == Decimal("500.00")


def test_empty_split_is_rejected(services, user_id, statement):
    with pytest.raises(InvalidArgumentError):
        services.settlement.mark_paid(statement.id, user_id, [])


def test_without_account_uses_statement_account(services, user_id, statement, card):
    services.settlement.mark_paid(statement.id, user_id)

    assert card.balance == Decimal("-150.50")


def test_unassigned_statement_paid_without_balance_change(services, user_id, bank, make_transaction):
    make_transaction("20.00", date(2026, 1, 4))
    statement = services.statements.create_statement(user_id, 15, 5, year=2026, month=1)

    paid = services.settlement.mark_paid(statement.id, user_id)

    assert paid.is_paid
    assert bank.balance == Decimal("1000.00")
    assert services.settlement.payments(statement.id, user_id) == []


def test_foreign_account_cannot_pay(services, user_id, statement, make_account, bank):
    foreign = make_account("Ajena", balance="5000.00", owner=uuid4())

    with pytest.raises(ForbiddenError):
        services.settlement.mark_paid(
            statement.id, user_id, [SplitPayment(bank.id, "50.50"), SplitPayment(foreign.id, "100.00")]
        )
    assert bank.balance == Decimal("1000.00")
    assert foreign.balance == Decimal("5000.00")


def test_paid_statement_keeps_settled_total(services, user_id, statement, bank, card, make_transaction):
    services.settlement.mark_paid(statement.id, user_id, bank.id)
    make_transaction("9.99", date(2026, 1, 12), account_id=card.id)

    view = services.statements.get_statement(statement.id, user_id)

    assert view.statement.total_amount == Decimal("150.50")


def test_paid_statement_cannot_be_deleted_or_moved(services, user_id, statement, bank):
    services.settlement.mark_paid(statement.id, user_id, bank.id)

    with pytest.raises(InvalidArgumentError):
        services.statements.delete_statement(statement.id, user_id)
    with pytest.raises(InvalidArgumentError):
        services.statements.update_statement(statement.id, user_id, closing_day=20)

    services.statements.update_statement(statement.id, user_id, notes="pagado en sucursal")


def test_stale_copy_cannot_pay_twice(services, other_services, user_id, statement, bank, session):
    # La otra sesión carga el extracto antes de que se pague
    other_services.statements.get_owned(statement.id, user_id)

    services.settlement.mark_paid(statement.id, user_id, bank.id)
    with pytest.raises(InvalidArgumentError):
        other_services.settlement.mark_paid(statement.id, user_id, bank.id)

    session.refresh(bank)
    assert bank.balance == Decimal("849.50")


def test_stale_copy_cannot_unpay_twice(services, other_services, user_id, statement, bank, session):
    services.settlement.mark_paid(statement.id, user_id, bank.id)
    other_services.statements.get_owned(statement.id, user_id)

    services.settlement.mark_unpaid(statement.id, user_id)
    with pytest.raises(InvalidArgumentError):
        other_services.settlement.mark_unpaid(statement.id, user_id)

    session.refresh(bank)
    assert bank.balance == Decimal("1000.00")


def test_failed_split_part_rolls_back_earlier_parts(
    services, user_id, statement, bank, savings_bank, monkeypatch
):
    apply_effect = services.ledger.apply_effect
    calls = []

    def fail_on_second_part(account_id, *args, **kwargs):
        calls.append(account_id)
        if len(calls) == 2:
            raise RuntimeError("cuenta bloqueada")
        return apply_effect(account_id, *args, **kwargs)

    monkeypatch.setattr(services.ledger, "apply_effect", fail_on_second_part)
    split = [SplitPayment(bank.id, "100.00"), SplitPayment(savings_bank.id, "50.50")]

    with pytest.raises(RuntimeError):
        services.settlement.mark_paid(statement.id, user_id, split)

    assert calls == [bank.id, savings_bank.id]
    assert bank.balance == Decimal("1000.00")
    assert savings_bank.balance == Decimal("500.00")
    assert not services.statements.get_owned(statement.id, user_id).is_paid
    assert services.settlement.payments(statement.id, user_id) == []
