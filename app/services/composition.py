"""
Cableado de los servicios sobre una sesión.

Cada request arma su propio juego de servicios; la sesión hace de unidad
de trabajo (commit / rollback) y los repositorios viven sobre ella.
"""

from dataclasses import dataclass
from datetime import date
from typing import Callable

from fastapi import Depends
from sqlmodel import Session

from app.core.locks import KeyedLocks, engine_locks
from app.database import get_session
from app.repositories import (
    AccountRepository,
    SavingsEntryRepository,
    StatementRepository,
    TransactionRepository,
)
from app.services.accounts import AccountService
from app.services.ledger import BalanceLedger
from app.services.savings import SavingsService
from app.services.settlement import SettlementService
from app.services.statements import FutureStatementGenerator, StatementAssembler, StatementService
from app.services.transactions import TransactionEffects


@dataclass
class Engine:
    session: Session
    ledger: BalanceLedger
    assembler: StatementAssembler
    generator: FutureStatementGenerator
    statements: StatementService
    settlement: SettlementService
    accounts: AccountService
    savings: SavingsService
    transactions: TransactionEffects


def build_engine(
    session: Session,
    clock: Callable[[], date] = date.today,
    locks: KeyedLocks = engine_locks,
) -> Engine:
    account_repo = AccountRepository(session)
    statement_repo = StatementRepository(session)
    transaction_repo = TransactionRepository(session)
    savings_repo = SavingsEntryRepository(session)

    ledger = BalanceLedger(account_repo)
    assembler = StatementAssembler(transaction_repo)
    generator = FutureStatementGenerator(assembler, statement_repo, session, locks=locks, clock=clock)
    statements = StatementService(
        statement_repo, account_repo, assembler, generator, session, locks=locks, clock=clock
    )
    return Engine(
        session=session,
        ledger=ledger,
        assembler=assembler,
        generator=generator,
        statements=statements,
        settlement=SettlementService(statement_repo, account_repo, ledger, statements, session, locks=locks),
        accounts=AccountService(account_repo, ledger, session),
        savings=SavingsService(account_repo, savings_repo, session, locks=locks, clock=clock),
        transactions=TransactionEffects(transaction_repo, ledger, statements, session, clock=clock),
    )


def get_engine(session: Session = Depends(get_session)) -> Engine:
    return build_engine(session)
