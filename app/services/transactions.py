"""
Efectos de las mutaciones de transacciones.

El flujo de captura (externo) crea, edita y borra transacciones y avisa
aquí. Estos ganchos deciden qué efecto de saldo aplicar usando el flag
balance_applied, de modo que reintentar una llamada nunca cuenta dos veces,
y refrescan los extractos cuando la transacción es de crédito.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Callable, List, Optional
from uuid import UUID

from app.core.errors import ForbiddenError, NotFoundError
from app.models.enums import BalanceOperation, PaymentChannel, TransactionKind
from app.models.transaction import Transaction
from app.services.interfaces import TransactionStore, UnitOfWork
from app.services.ledger import BalanceChange, BalanceLedger
from app.services.statements import StatementService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransactionSnapshot:
    """Valores de una transacción antes de editarla."""

    amount: Decimal
    kind: TransactionKind
    account_id: Optional[int]
    channel: PaymentChannel
    balance_applied: bool

    @classmethod
    def of(cls, tx: Transaction) -> "TransactionSnapshot":
        return cls(
            amount=Decimal(tx.amount),
            kind=TransactionKind(tx.kind),
            account_id=tx.account_id,
            channel=PaymentChannel(tx.channel),
            balance_applied=tx.balance_applied,
        )


def affects_balance(tx: Transaction, today: date) -> bool:
    """El crédito solo mueve saldo al pagar el extracto; lo futuro, al vencer o pagarse."""
    if tx.channel == PaymentChannel.credit or tx.account_id is None:
        return False
    return tx.is_paid or tx.effective_date <= today


class TransactionEffects:
    def __init__(
        self,
        transactions: TransactionStore,
        ledger: BalanceLedger,
        statements: StatementService,
        uow: UnitOfWork,
        clock: Callable[[], date] = date.today,
    ):
        self.transactions = transactions
        self.ledger = ledger
        self.statements = statements
        self.uow = uow
        self.clock = clock

    def get_owned(self, transaction_id: int, user_id: UUID) -> Transaction:
        tx = self.transactions.get(transaction_id)
        if not tx:
            raise NotFoundError("Transacción no encontrada")
        if tx.user_id != user_id:
            raise ForbiddenError("La transacción no pertenece al usuario")
        return tx

    def record_created(self, tx: Transaction) -> List[BalanceChange]:
        changes: List[BalanceChange] = []
        try:
            if affects_balance(tx, self.clock()):
                changes = self.ledger.apply_effect(tx.account_id, tx.amount, tx.kind, BalanceOperation.create)
                tx.balance_applied = True
            self.transactions.save(tx)
            self.uow.commit()
        except Exception:
            self.uow.rollback()
            raise
        self._refresh_statements(tx.user_id, tx, None)
        return changes

    def record_updated(self, tx: Transaction, prior: TransactionSnapshot) -> List[BalanceChange]:
        changes: List[BalanceChange] = []
        eligible = affects_balance(tx, self.clock())
        applied = prior.balance_applied
        try:
            if applied and prior.kind != tx.kind:
                # Cambio de tipo: revertir con el tipo anterior y aplicar de cero con el nuevo
                changes += self.ledger.apply_effect(
                    prior.account_id, prior.amount, prior.kind, BalanceOperation.delete
                )
                applied = False

            if applied and eligible:
                changes += self.ledger.apply_effect(
                    tx.account_id,
                    tx.amount,
                    tx.kind,
                    BalanceOperation.update,
                    prior_amount=prior.amount,
                    prior_account_id=prior.account_id,
                )
            elif applied:
                changes += self.ledger.apply_effect(
                    prior.account_id, prior.amount, tx.kind, BalanceOperation.delete
                )
            elif eligible:
                changes += self.ledger.apply_effect(tx.account_id, tx.amount, tx.kind, BalanceOperation.create)
            tx.balance_applied = eligible
            self.transactions.save(tx)
            self.uow.commit()
        except Exception:
            self.uow.rollback()
            raise
        self._refresh_statements(tx.user_id, tx, prior)
        return changes

    def record_deleted(self, tx: Transaction) -> List[BalanceChange]:
        """Revierte el efecto si estaba aplicado y borra la transacción."""
        changes: List[BalanceChange] = []
        user_id, prior = tx.user_id, TransactionSnapshot.of(tx)
        try:
            if tx.balance_applied:
                changes = self.ledger.apply_effect(tx.account_id, tx.amount, tx.kind, BalanceOperation.delete)
            self.transactions.delete(tx)
            self.uow.commit()
        except Exception:
            self.uow.rollback()
            raise
        if prior.channel == PaymentChannel.credit:
            self.statements.refresh_account(user_id, prior.account_id)
        return changes

    def set_paid(self, transaction_id: int, user_id: UUID, is_paid: bool) -> Transaction:
        tx = self.get_owned(transaction_id, user_id)
        prior = TransactionSnapshot.of(tx)
        tx.is_paid = is_paid
        self.record_updated(tx, prior)
        return tx

    def apply_due(self, user_id: UUID, today: Optional[date] = None) -> List[Transaction]:
        """Aplica al saldo las transacciones cuya fecha de pago ya llegó y aún no se reflejan."""
        today = today or self.clock()
        applied = []
        try:
            for tx in self.transactions.unapplied_due(user_id, today):
                self.ledger.apply_effect(tx.account_id, tx.amount, tx.kind, BalanceOperation.create)
                tx.balance_applied = True
                self.transactions.save(tx)
                applied.append(tx)
            self.uow.commit()
        except Exception:
            self.uow.rollback()
            raise
        if applied:
            logger.info("Aplicadas %d transacciones vencidas del usuario %s", len(applied), user_id)
        return applied

    def _refresh_statements(
        self, user_id: UUID, tx: Transaction, prior: Optional[TransactionSnapshot]
    ) -> None:
        accounts = set()
        if tx.channel == PaymentChannel.credit:
            accounts.add(tx.account_id)
        if prior is not None and prior.channel == PaymentChannel.credit:
            accounts.add(prior.account_id)
        for account_id in accounts:
            self.statements.refresh_account(user_id, account_id)
