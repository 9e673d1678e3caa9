"""
Fixtures compartidas.

Cada test recibe una base SQLite en memoria (StaticPool para que todas las
conexiones vean la misma base) y un juego de servicios con el reloj fijo
en TODAY.
"""

import datetime as dt
from decimal import Decimal
from typing import Optional
from uuid import UUID

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

import app.models  # noqa: F401  registra las tablas
from app.core.locks import KeyedLocks
from app.models.account import Account
from app.models.enums import AccountKind, PaymentChannel, TransactionKind
from app.models.transaction import Transaction
from app.models.user import User
from app.services.composition import build_engine

TODAY = dt.date(2026, 1, 10)


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(db_engine):
    with Session(db_engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
def user_id(session) -> UUID:
    user = User(email="ana@example.com")
    session.add(user)
    session.commit()
    return user.id


@pytest.fixture
def services(session):
    return build_engine(session, clock=lambda: TODAY, locks=KeyedLocks(timeout=1))


@pytest.fixture
def other_services(db_engine):
    """Servicios sobre una segunda sesión, como otro request en paralelo."""
    with Session(db_engine, expire_on_commit=False) as other:
        yield build_engine(other, clock=lambda: TODAY, locks=KeyedLocks(timeout=1))


@pytest.fixture
def make_account(session, user_id):
    def factory(
        name: str = "Banco",
        kind: AccountKind = AccountKind.ordinary,
        balance: str = "0.00",
        owner: Optional[UUID] = None,
        is_primary: bool = False,
    ) -> Account:
        account = Account(
            user_id=owner or user_id,
            name=name,
            kind=kind,
            balance=Decimal(balance),
            is_primary=is_primary,
        )
        session.add(account)
        session.commit()
        return account

    return factory


@pytest.fixture
def make_transaction(session, user_id):
    """Guarda una transacción directamente, sin pasar por los efectos de saldo."""

    def factory(
        amount: str,
        date: dt.date,
        account_id: Optional[int] = None,
        channel: PaymentChannel = PaymentChannel.credit,
        kind: TransactionKind = TransactionKind.expense,
        description: Optional[str] = None,
        **extra,
    ) -> Transaction:
        tx = Transaction(
            user_id=user_id,
            kind=kind,
            amount=Decimal(amount),
            description=description,
            date=date,
            channel=channel,
            account_id=account_id,
            **extra,
        )
        session.add(tx)
        session.commit()
        return tx

    return factory
