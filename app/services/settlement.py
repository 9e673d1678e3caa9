import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Sequence, Union
from uuid import UUID

from app.core.config import SETTLEMENT_TOLERANCE
from app.core.errors import InvalidArgumentError, NotFoundError
from app.core.locks import KeyedLocks, engine_locks
from app.models.enums import BalanceOperation, TransactionKind
from app.models.statement import Statement, StatementPayment
from app.services.interfaces import AccountStore, StatementStore, UnitOfWork
from app.services.ledger import BalanceLedger
from app.services.statements import StatementService
from app.utils.account_helpers import get_owned_account
from app.utils.money import Number, money_sum, to_money

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SplitPayment:
    account_id: int
    amount: Number


Settlement = Union[int, Sequence[SplitPayment], None]


class SettlementService:
    """Marca extractos como pagados / no pagados y mueve los saldos una sola vez."""

    def __init__(
        self,
        statements: StatementStore,
        accounts: AccountStore,
        ledger: BalanceLedger,
        statement_service: StatementService,
        uow: UnitOfWork,
        locks: KeyedLocks = engine_locks,
        tolerance: Decimal = SETTLEMENT_TOLERANCE,
    ):
        self.statements = statements
        self.accounts = accounts
        self.ledger = ledger
        self.statement_service = statement_service
        self.uow = uow
        self.locks = locks
        self.tolerance = tolerance

    def _reload(self, statement_id: int) -> Statement:
        # El estado de pago se decide con la fila releída y bloqueada, no con la copia de la sesión
        statement = self.statements.get_for_update(statement_id)
        if not statement:
            raise NotFoundError("Extracto no encontrado")
        return statement

    def _plan(self, statement: Statement, user_id: UUID, settlement: Settlement) -> List[SplitPayment]:
        total = to_money(statement.total_amount)

        if settlement is None:
            # Sin cuenta indicada se usa la del extracto; si no tiene, no se toca ningún saldo
            if statement.account_id is None:
                return []
            settlement = statement.account_id

        if isinstance(settlement, int):
            parts = [SplitPayment(account_id=settlement, amount=total)]
        else:
            parts = [SplitPayment(p.account_id, to_money(p.amount)) for p in settlement]
            if not parts:
                raise InvalidArgumentError("Debes indicar al menos un pago.")
            if any(p.amount <= 0 for p in parts):
                raise InvalidArgumentError("Cada pago debe ser mayor a cero.")
            paid = money_sum(p.amount for p in parts)
            if abs(paid - total) > self.tolerance:
                raise InvalidArgumentError(
                    f"La suma de los pagos ({paid}) no coincide con el total del extracto ({total})."
                )

        for part in parts:
            get_owned_account(self.accounts, part.account_id, user_id)
        return parts

    def mark_paid(self, statement_id: int, user_id: UUID, settlement: Settlement = None) -> Statement:
        self.statement_service.get_owned(statement_id, user_id)

        with self.locks.hold(("settlement", statement_id)):
            statement = self._reload(statement_id)
            if statement.is_paid:
                raise InvalidArgumentError("El extracto ya está pagado.")

            try:
                # El total se recalcula antes de pagar; desde aquí queda congelado
                self.statement_service.recompute(statement)
                parts = self._plan(statement, user_id, settlement)

                for part in parts:
                    self.ledger.apply_effect(
                        part.account_id, part.amount, TransactionKind.expense, BalanceOperation.create
                    )
                self.statements.add_payments(
                    [
                        StatementPayment(statement_id=statement.id, account_id=p.account_id, amount=p.amount)
                        for p in parts
                    ]
                )
                statement.is_paid = True
                statement.paid_account_id = parts[0].account_id if len(parts) == 1 else None
                statement.paid_at = datetime.utcnow()
                self.statements.save(statement)
                self.uow.commit()
            except Exception:
                self.uow.rollback()
                raise

        logger.info("Extracto %s pagado con %d pago(s)", statement_id, len(parts))
        return statement

    def mark_unpaid(self, statement_id: int, user_id: UUID) -> Statement:
        self.statement_service.get_owned(statement_id, user_id)

        with self.locks.hold(("settlement", statement_id)):
            statement = self._reload(statement_id)
            if not statement.is_paid:
                raise InvalidArgumentError("El extracto no está pagado.")

            try:
                for payment in self.statements.payments(statement.id):
                    self.ledger.apply_effect(
                        payment.account_id, payment.amount, TransactionKind.expense, BalanceOperation.delete
                    )
                self.statements.clear_payments(statement.id)
                statement.is_paid = False
                statement.paid_account_id = None
                statement.paid_at = None
                self.statements.save(statement)
                self.uow.commit()
            except Exception:
                self.uow.rollback()
                raise

        logger.info("Extracto %s marcado como no pagado", statement_id)
        return statement

    def payments(self, statement_id: int, user_id: UUID) -> List[StatementPayment]:
        self.statement_service.get_owned(statement_id, user_id)
        return self.statements.payments(statement_id)
